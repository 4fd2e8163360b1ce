"""Filter predicates and statements shared by the repositories."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, and_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def owned_by(column: Any, user_id: str) -> ColumnElement[bool]:
    return column == user_id


def newer_than(column: Any, timestamp: datetime) -> ColumnElement[bool]:
    return column > timestamp


def older_than(column: Any, timestamp: datetime) -> ColumnElement[bool]:
    return column < timestamp


def created_since(column: Any, timestamp: datetime) -> ColumnElement[bool]:
    """Half-open window: ``timestamp`` itself is included."""
    return column >= timestamp


def id_in(column: Any, ids: Sequence[str]) -> ColumnElement[bool]:
    # An empty IN list would silently match nothing; callers guard against it.
    if not ids:
        raise ValueError("id_in() needs at least one id")
    return column.in_(ids)


def where_all(*predicates: ColumnElement[bool] | None) -> ColumnElement[bool]:
    """AND together the given predicates, skipping ``None`` entries."""
    clauses = [p for p in predicates if p is not None]
    if not clauses:
        raise ValueError("where_all() needs at least one predicate")
    return and_(*clauses)


def upsert(session: AsyncSession, model: type) -> Any:
    """Return a dialect-specific INSERT that supports ``on_conflict_do_update``."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported on {dialect!r}")
