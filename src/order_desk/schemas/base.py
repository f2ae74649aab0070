"""Shared base for models exchanged with the REST backend."""
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Base for backend payloads.

    The backend speaks camelCase JSON; attributes here are snake_case. Models
    accept either spelling on input and emit camelCase with ``by_alias=True``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def id_field() -> Any:
    """Identifier field: the backend sends ``_id``; ``id`` is accepted too."""
    return Field(
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )
