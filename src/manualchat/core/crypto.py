"""Password hashing and credential masking helpers."""

from __future__ import annotations

import re

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_URL_CREDENTIALS = re.compile(
    r"(?P<scheme>[A-Za-z][\w+.-]*://)(?P<user>[^:@/\s]+)(?::(?P<password>[^@/\s]*))?@"
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def mask_url(text: str) -> str:
    """Hide user and password of every URL found in ``text``.

    Examples:
        mask_url("postgres://bob:pw@db:5432/app") → "postgres://[USER]:[PASSWORD]@db:5432/app"
        mask_url("could not connect to db") → unchanged
    """
    return _URL_CREDENTIALS.sub(r"\g<scheme>[USER]:[PASSWORD]@", text)

