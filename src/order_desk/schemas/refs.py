"""
References to related records.

The backend returns foreign keys such as ``order.clientId`` and
``order.createdBy`` either as a bare identifier or as the populated object.
Both shapes are parsed into a tagged union so callers never type-check at
runtime:

    IdRef(kind="id", id="c1")
    EmbeddedRef(kind="embedded", value=Client(...))
"""
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class IdRef(BaseModel):
    """Reference holding only the related record's identifier."""

    kind: Literal["id"] = "id"
    id: str


class EmbeddedRef(BaseModel, Generic[T]):
    """Reference holding the fully populated related record."""

    kind: Literal["embedded"] = "embedded"
    value: T

    @property
    def id(self) -> str:
        return self.value.id  # type: ignore[attr-defined]


def coerce_ref(value: Any) -> Any:
    """Wrap wire shapes (string or object) into the tagged form."""
    if isinstance(value, str):
        return {"kind": "id", "id": value}
    if isinstance(value, dict) and "kind" not in value:
        return {"kind": "embedded", "value": value}
    return value


def ref_id(ref: IdRef | EmbeddedRef[Any] | None) -> str | None:
    """Identifier of the referenced record, whichever shape it arrived in."""
    if ref is None:
        return None
    return ref.id


def ref_label(ref: IdRef | EmbeddedRef[Any] | None, attr: str = "name") -> str:
    """
    Display label for a reference.

    Embedded records use ``attr`` (the name by default); bare identifiers fall
    back to the identifier itself, matching how the order tables render them.
    """
    if ref is None:
        return ""
    if isinstance(ref, EmbeddedRef):
        return str(getattr(ref.value, attr, ref.id))
    return ref.id
