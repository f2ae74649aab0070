"""
Client-side form validation and payload building.

Validation failures are raised as FormValidationError and never reach the
cache or API layers. Builders return the schema objects the API client
serializes.
"""
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

from ..schemas import (
    ClientCreate,
    ClientUpdate,
    Order,
    OrderCreate,
    OrderUpdate,
    UserCreate,
    UserRole,
    UserUpdate,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Fields that stay editable once an order is delivered or returned
QUICK_EDIT_FIELDS = frozenset({"notes", "rating"})


class FormValidationError(Exception):
    """
    Raised when form input fails client-side validation.

    Attributes:
        errors: Field path (e.g. ``"items.0.name"``) to message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        summary = "; ".join(f"{field}: {msg}" for field, msg in errors.items())
        super().__init__(f"Invalid form input: {summary}")


def _field_path(loc: tuple[Any, ...]) -> str:
    parts = [to_snake(p) if isinstance(p, str) else str(p) for p in loc]
    return ".".join(parts) or "__root__"


def _clean_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def _validate(model: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """Validate ``data`` against ``model``, translating pydantic errors."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            errors.setdefault(_field_path(err["loc"]), _clean_message(err["msg"]))
        raise FormValidationError(errors) from e


def build_client_payload(
    name: str,
    default_address: str,
    phone_numbers: Iterable[str],
    addresses: Iterable[str] = (),
    governorate: str | None = None,
) -> ClientCreate:
    """Validate a new-client form. The default address is kept first in ``addresses``."""
    return _validate(
        ClientCreate,
        {
            "name": name,
            "default_address": default_address,
            "phone_numbers": list(phone_numbers),
            "addresses": list(addresses),
            "governorate": governorate,
        },
    )


def build_client_update(**changes: Any) -> ClientUpdate:
    """Validate an edit-client form. Only the given fields are sent."""
    return _validate(ClientUpdate, changes)


def build_order_payload(
    client_id: str,
    items: Iterable[Mapping[str, Any]],
    delivery_fees: float = 0,
    track_id: str = "",
    notes: str = "",
    profit: float = 0,
    client_phone: str | None = None,
    client_address: str | None = None,
) -> OrderCreate:
    """
    Validate a new-order form.

    Item rows without a name are dropped. ``total`` is computed as the sum of
    ``price * quantity`` plus ``delivery_fees``.
    """
    return _validate(
        OrderCreate,
        {
            "client_id": client_id,
            "items": [dict(item) for item in items],
            "delivery_fees": delivery_fees or 0,
            "track_id": track_id,
            "notes": notes,
            "profit": profit or 0,
            "client_phone": (client_phone or "").strip() or None,
            "client_address": (client_address or "").strip() or None,
        },
    )


def build_order_update(order: Order, **changes: Any) -> OrderUpdate:
    """
    Validate an edit-order form against the order being edited.

    Delivered and returned orders only accept notes and rating. When items or
    delivery fees change, the other is taken from ``order`` so the total can
    be recomputed.
    """
    if order.is_closed:
        locked = sorted(set(changes) - QUICK_EDIT_FIELDS)
        if locked:
            raise FormValidationError(
                {field: f"Cannot change {field} on a {order.status} order" for field in locked},
            )
    data = dict(changes)
    if "items" in data or "delivery_fees" in data:
        data.setdefault("items", [item.model_dump() for item in order.items])
        data.setdefault("delivery_fees", order.delivery_fees)
    return _validate(OrderUpdate, data)


def build_quick_edit_payload(notes: str = "", rating: int | None = None) -> OrderUpdate:
    """Notes and rating edit for delivered/returned orders. A rating of 0 is left out."""
    return _validate(OrderUpdate, {"notes": notes, "rating": rating})


def build_user_payload(
    name: str,
    email: str,
    password: str,
    role: UserRole | str = UserRole.EMPLOYEE,
) -> UserCreate:
    """Validate a new-user form."""
    return _validate(
        UserCreate,
        {"name": name, "email": email, "password": password, "role": role},
    )


def build_user_update(**changes: Any) -> UserUpdate:
    """Validate an edit-user form."""
    return _validate(UserUpdate, changes)
