"""Generic async CRUD repository base."""

import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, ParamSpec, TypeVar

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.core.crypto import mask_url
from manualchat.core.exceptions import PersistenceError
from manualchat.db.session import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
P = ParamSpec("P")
R = TypeVar("R")


def persistence_errors(
    action: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Log driver failures and re-raise them as PersistenceError.

    Typed manualchat errors (NotFoundError, DatabaseNotConfiguredError, ...)
    pass through untouched.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except (SQLAlchemyError, OSError) as exc:
                logger.error("Failed to %s: %s", action, mask_url(str(exc)))
                raise PersistenceError(f"Failed to {action}") from exc

        return wrapper

    return decorator


class Repository(Generic[ModelT]):
    """Base repository providing standard CRUD operations."""

    def __init__(self, model: type[ModelT], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    async def get(self, id: Any) -> ModelT | None:
        return await self.session.get(self.model, id)

    async def create(self, **kwargs: Any) -> ModelT:
        obj = self.model(**kwargs)
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def add_all(self, objs: Sequence[Any]) -> None:
        self.session.add_all(objs)
        await self.session.flush()

    async def scalars(self, stmt: Select[Any]) -> list[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
