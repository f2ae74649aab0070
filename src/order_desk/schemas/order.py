"""Pydantic schemas for order endpoints."""
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BeforeValidator, Field, field_validator, model_validator

from .base import WireModel, id_field
from .client import Client
from .refs import EmbeddedRef, IdRef, coerce_ref
from .user import User

ClientRef = Annotated[IdRef | EmbeddedRef[Client], BeforeValidator(coerce_ref)]
UserRef = Annotated[IdRef | EmbeddedRef[User], BeforeValidator(coerce_ref)]

MIN_RATING = 1
MAX_RATING = 5


class OrderStatus(StrEnum):
    """Lifecycle status of an order."""

    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


# Orders in these states only accept notes and rating edits
CLOSED_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED})


class OrderItem(WireModel):
    """A line item on an order."""

    name: str
    quantity: int = 1
    price: float = 0
    size: str | None = None


class OrderItemInput(OrderItem):
    """A line item submitted from a form."""

    quantity: int = Field(default=1, ge=1)
    price: float = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("Item name is required")
        return name

    @field_validator("size")
    @classmethod
    def normalize_size(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


def order_total(items: Iterable[Any], delivery_fees: float = 0) -> float:
    """
    Compute an order's total: sum of ``price * quantity`` plus delivery fees.

    Accepts OrderItem instances or mappings with ``price`` and ``quantity``.
    """
    items_total = 0.0
    for item in items:
        if isinstance(item, dict):
            price, quantity = item.get("price", 0), item.get("quantity", 0)
        else:
            price, quantity = item.price, item.quantity
        items_total += price * quantity
    return items_total + (delivery_fees or 0)


def _drop_blank_items(value: Any) -> Any:
    """Rows left empty in the form (no item name) are not submitted."""
    if not isinstance(value, list):
        return value
    kept = []
    for item in value:
        name = item.get("name") if isinstance(item, dict) else getattr(item, "name", None)
        if isinstance(name, str) and not name.strip():
            continue
        kept.append(item)
    return kept


def _validate_rating(v: int | None) -> int | None:
    if v is None or v == 0:
        return None
    if not MIN_RATING <= v <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return v


class Order(WireModel):
    """An order as returned by the backend."""

    id: str = id_field()
    order_id: str = ""
    track_id: str = ""
    client_id: ClientRef
    items: list[OrderItem] = []
    delivery_fees: float = 0
    profit: float | None = None
    total: float = 0
    status: OrderStatus = OrderStatus.PENDING
    notes: str | None = None
    rating: int | None = None
    client_phone: str | None = None
    client_address: str | None = None
    created_by: UserRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_closed(self) -> bool:
        """Delivered and returned orders only allow notes and rating edits."""
        return self.status in CLOSED_STATUSES


class OrderCreate(WireModel):
    """
    Schema for creating an order.

    ``total`` is always computed from the items and delivery fees; any value
    passed in is replaced.
    """

    client_id: str
    track_id: str = ""
    items: list[OrderItemInput]
    delivery_fees: float = Field(default=0, ge=0)
    profit: float = 0
    notes: str = ""
    client_phone: str | None = None
    client_address: str | None = None
    total: float = 0

    @field_validator("client_id")
    @classmethod
    def validate_client_id(cls, v: str) -> str:
        client_id = v.strip()
        if not client_id:
            raise ValueError("A client must be selected")
        return client_id

    @field_validator("items", mode="before")
    @classmethod
    def drop_blank_items(cls, v: Any) -> Any:
        return _drop_blank_items(v)

    @field_validator("items")
    @classmethod
    def validate_items(cls, v: list[OrderItemInput]) -> list[OrderItemInput]:
        if not v:
            raise ValueError("At least one item is required")
        return v

    @field_validator("track_id", "notes")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def compute_total(self) -> "OrderCreate":
        self.total = order_total(self.items, self.delivery_fees)
        return self


class OrderUpdate(WireModel):
    """
    Schema for updating an order. Omitted fields are left unchanged.

    When both ``items`` and ``delivery_fees`` are sent, ``total`` is
    recomputed from them.
    """

    track_id: str | None = None
    items: list[OrderItemInput] | None = None
    delivery_fees: float | None = Field(default=None, ge=0)
    profit: float | None = None
    status: OrderStatus | None = None
    notes: str | None = None
    rating: int | None = None
    total: float | None = None

    @field_validator("items", mode="before")
    @classmethod
    def drop_blank_items(cls, v: Any) -> Any:
        return _drop_blank_items(v)

    @field_validator("items")
    @classmethod
    def validate_items(cls, v: list[OrderItemInput] | None) -> list[OrderItemInput] | None:
        if v is not None and not v:
            raise ValueError("At least one item is required")
        return v

    @field_validator("track_id", "notes")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return None if v is None else v.strip()

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v: int | None) -> int | None:
        return _validate_rating(v)

    @model_validator(mode="after")
    def compute_total(self) -> "OrderUpdate":
        if self.items is not None and self.delivery_fees is not None:
            self.total = order_total(self.items, self.delivery_fees)
        return self
