"""Pydantic schemas for authentication endpoints."""
from pydantic import BaseModel

from .base import WireModel
from .user import User


class LoginRequest(BaseModel):
    """Body of ``POST /auth/login``."""

    email: str
    password: str


class LoginResponse(WireModel):
    """
    Response of ``POST /auth/login``.

    Both fields are optional here so a malformed success response can be
    reported as such instead of as a schema error.
    """

    token: str | None = None
    user: User | None = None


class Session(BaseModel):
    """Who is logged in. ``user`` is None when unauthenticated."""

    user: User | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
