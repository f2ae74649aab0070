"""Pydantic schemas for staff users (``/employees`` endpoints)."""
import re
from datetime import datetime
from enum import StrEnum

from pydantic import Field, field_validator

from .base import WireModel, id_field

# Same pattern the web forms use for immediate feedback
EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

MIN_PASSWORD_LENGTH = 6


class UserRole(StrEnum):
    """Staff role. Admins can manage clients; employees cannot."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


def validate_email(value: str) -> str:
    """Trim and validate an email address."""
    email = value.strip()
    if not email:
        raise ValueError("Email is required")
    if not EMAIL_PATTERN.match(email):
        raise ValueError(f"Invalid email address: '{email}'")
    return email


def validate_name(value: str) -> str:
    """Trim a display name and reject blanks."""
    name = value.strip()
    if not name:
        raise ValueError("Name is required")
    return name


class User(WireModel):
    """A staff user as returned by the backend."""

    id: str = id_field()
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserCreate(WireModel):
    """Schema for creating a staff user."""

    name: str
    email: str
    password: str
    role: UserRole = UserRole.EMPLOYEE

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Passwords must be at least MIN_PASSWORD_LENGTH characters."""
        if not v:
            raise ValueError("Password is required")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v


class UserUpdate(WireModel):
    """Schema for updating a staff user. Omitted fields are left unchanged."""

    name: str | None = None
    email: str | None = None
    role: UserRole | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        return None if v is None else validate_name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return None if v is None else validate_email(v)


class RoleUpdate(WireModel):
    """Body of ``PUT /employees/:id/role``."""

    role: UserRole = Field(...)
