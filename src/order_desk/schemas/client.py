"""Pydantic schemas for client (customer) endpoints."""
import re
from datetime import datetime

from pydantic import Field, field_validator, model_validator

from .base import WireModel, id_field

# Egyptian mobile numbers: operator prefix followed by eight digits
PHONE_PATTERN = re.compile(r"^(010|011|012|015)\d{8}$")


def validate_phone(phone: str) -> str:
    """
    Validate a single phone number.

    Raises:
        ValueError: If the number does not match PHONE_PATTERN.
    """
    if not PHONE_PATTERN.match(phone):
        raise ValueError(
            f"Invalid phone number: '{phone}'. "
            "Must start with 010, 011, 012 or 015 and be 11 digits long.",
        )
    return phone


def normalize_entries(values: list[str]) -> list[str]:
    """Trim entries and drop blanks, preserving order."""
    return [v.strip() for v in values if v and v.strip()]


def with_default_address(default_address: str, addresses: list[str]) -> list[str]:
    """Return ``addresses`` with ``default_address`` first and no duplicates."""
    result = [default_address]
    for address in addresses:
        if address not in result:
            result.append(address)
    return result


class Client(WireModel):
    """
    A client as returned by the backend.

    ``default_address`` is expected to appear in ``addresses`` but records
    created outside this package may not honour that, so it is not enforced
    on read.
    """

    id: str = id_field()
    name: str
    default_address: str = ""
    governorate: str | None = None
    phone_numbers: list[str] = []
    addresses: list[str] = []
    rating: float = 0
    created_at: datetime | None = None


class ClientCreate(WireModel):
    """Schema for creating a client."""

    name: str
    default_address: str
    governorate: str | None = None
    phone_numbers: list[str] = Field(default_factory=list)
    addresses: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("Client name is required")
        return name

    @field_validator("default_address")
    @classmethod
    def validate_default_address(cls, v: str) -> str:
        address = v.strip()
        if not address:
            raise ValueError("Default address is required")
        return address

    @field_validator("phone_numbers")
    @classmethod
    def validate_phone_numbers(cls, v: list[str]) -> list[str]:
        phones = normalize_entries(v)
        if not phones:
            raise ValueError("At least one phone number is required")
        return [validate_phone(p) for p in phones]

    @field_validator("addresses")
    @classmethod
    def validate_addresses(cls, v: list[str]) -> list[str]:
        return normalize_entries(v)

    @model_validator(mode="after")
    def include_default_address(self) -> "ClientCreate":
        """Keep the default address first in the address list."""
        self.addresses = with_default_address(self.default_address, self.addresses)
        return self


class ClientUpdate(WireModel):
    """Schema for updating a client. Omitted fields are left unchanged."""

    name: str | None = None
    default_address: str | None = None
    governorate: str | None = None
    phone_numbers: list[str] | None = None
    addresses: list[str] | None = None
    rating: float | None = Field(default=None, ge=0, le=5)

    @field_validator("name", "default_address")
    @classmethod
    def validate_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        if not stripped:
            raise ValueError("Value cannot be empty")
        return stripped

    @field_validator("phone_numbers")
    @classmethod
    def validate_phone_numbers(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        phones = normalize_entries(v)
        if not phones:
            raise ValueError("At least one phone number is required")
        return [validate_phone(p) for p in phones]

    @field_validator("addresses")
    @classmethod
    def validate_addresses(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else normalize_entries(v)

    @model_validator(mode="after")
    def include_default_address(self) -> "ClientUpdate":
        """When both are sent, keep the default address first in the address list."""
        if self.default_address is not None and self.addresses is not None:
            self.addresses = with_default_address(self.default_address, self.addresses)
        return self
