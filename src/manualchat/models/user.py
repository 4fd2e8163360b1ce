"""User model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from manualchat.db.session import Base
from manualchat.models.base import new_uuid


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str | None] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<User {self.id!r} email={self.email!r}>"
