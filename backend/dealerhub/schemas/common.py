"""
Shared Pydantic building blocks.

Records use snake_case attributes internally and travel over the API with
camelCase aliases, so every schema derives from ``CamelModel``.
"""

from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
# additive adjustment, negative for options cheaper than the default
SignedMoney = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema with camelCase aliases that also accepts field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
        protected_namespaces=(),
    )


class Record(CamelModel):
    """Stored record with its generated identifier."""

    id: str = Field(..., description="Record identifier")


class ListResponse(CamelModel, Generic[T]):
    """List envelope used by every collection endpoint."""

    items: list[T]
    total: int = Field(..., ge=0)


class MessageResponse(CamelModel):
    message: str
