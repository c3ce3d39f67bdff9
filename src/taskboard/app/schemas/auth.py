"""Signup, login and session payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..core.security import SessionToken
from .common import CleanStr

# bcrypt ignores everything past 72 bytes.
PASSWORD_MAX_LENGTH = 72


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=PASSWORD_MAX_LENGTH)
    name: CleanStr | None = Field(default=None, max_length=255)


class UserPublic(BaseModel):
    """The account fields any signed-in user may see about themselves."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    name: str | None = None
    image: str | None = None


class AuthTokens(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_in: int

    @classmethod
    def from_session(cls, session_token: SessionToken) -> "AuthTokens":
        return cls(access_token=session_token.token, expires_in=session_token.expires_in)


class AuthResponse(BaseModel):
    user: UserPublic
    tokens: AuthTokens

    @classmethod
    def issue(cls, user: Any, session_token: SessionToken) -> "AuthResponse":
        """Pair a persisted user with the token just signed for them."""
        return cls(user=UserPublic.model_validate(user), tokens=AuthTokens.from_session(session_token))


class TokenPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sub: str
    iat: datetime
    exp: datetime
    jti: str


__all__ = ["PASSWORD_MAX_LENGTH", "AuthResponse", "AuthTokens", "SignupRequest", "TokenPayload", "UserPublic"]
