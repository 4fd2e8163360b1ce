"""User repository, including ephemeral guest identities."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from manualchat.config import get_settings
from manualchat.core.crypto import hash_password, verify_password
from manualchat.db.repository import Repository, persistence_errors
from manualchat.models.base import new_uuid
from manualchat.models.user import User


@dataclass(frozen=True)
class GuestUser:
    """Request-scoped identity; never written to the users table."""

    id: str
    email: str


class UserRepository(Repository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)

    @persistence_errors("get user from database")
    async def get_users_by_email(self, email: str) -> list[User]:
        return await self.scalars(select(User).where(User.email == email))

    @persistence_errors("create user in database")
    async def create_user(self, email: str, password: str) -> User:
        return await self.create(email=email, password=hash_password(password))

    @persistence_errors("authenticate user")
    async def authenticate(self, email: str, password: str) -> User | None:
        for user in await self.get_users_by_email(email):
            if user.password and verify_password(password, user.password):
                return user
        return None

    def create_guest_user(self) -> GuestUser:
        guest_id = new_uuid()
        return GuestUser(id=guest_id, email=f"guest-{guest_id}@{get_settings().guest_email_domain}")
