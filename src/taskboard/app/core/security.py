"""Credential hashing and signed session tokens.

Passwords are stored as bcrypt hashes. A session is a JWT whose ``sub``
claim is the user id; nothing else about the user travels in the token, so
deactivating an account takes effect on the next request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return _hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _hasher.verify(plain_password, hashed_password)


@dataclass(slots=True)
class SessionToken:
    token: str
    expires_at: datetime
    jti: str = field(default="")

    @property
    def expires_in(self) -> int:
        """Whole seconds left before the token stops being accepted."""
        return max(int((self.expires_at - datetime.now(timezone.utc)).total_seconds()), 0)


def _lifetime(settings: Settings, override: timedelta | None) -> timedelta:
    if override is not None:
        return override
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_session_token(
    *,
    subject: str | int,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> SessionToken:
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + _lifetime(settings, expires_delta)
    token_id = uuid4().hex
    claims: dict[str, Any] = {"sub": str(subject), "iat": issued_at, "exp": expires_at, "jti": token_id}
    signed = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return SessionToken(token=signed, expires_at=expires_at, jti=token_id)


def decode_session_token(token: str, settings: Settings) -> dict[str, Any]:
    """Return the verified claims of ``token``; raises ``JWTError`` otherwise."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


__all__ = [
    "JWTError",
    "SessionToken",
    "create_session_token",
    "decode_session_token",
    "get_password_hash",
    "verify_password",
]
