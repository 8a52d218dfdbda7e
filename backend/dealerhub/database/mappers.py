"""
Conversion between stored rows and domain records.

Row attribute names match record field names; the legacy column names live
only in the ORM models. The mappers handle the three places where the shapes
differ: JSON columns that must hold JSON-safe values, enum members stored as
plain strings, and the order checklist stored as flat columns but exposed as
a nested ``details`` record.
"""

from enum import Enum
from typing import Any, Generic, Iterable

from pydantic_core import to_jsonable_python

from dealerhub.database.base import Base
from dealerhub.database.models.order import ORDER_DETAIL_COLUMNS
from dealerhub.repositories.base import RecordT


class RowMapper(Generic[RecordT]):
    """Maps one ORM row class to one record schema."""

    def __init__(
        self,
        row_cls: type[Base],
        record_cls: type[RecordT],
        json_fields: Iterable[str] = (),
    ):
        self.row_cls = row_cls
        self.record_cls = record_cls
        self.json_fields = frozenset(json_fields)
        self.columns = frozenset(attr.key for attr in row_cls.__mapper__.column_attrs)

    def row_values(self, row: Base) -> dict[str, Any]:
        return {key: getattr(row, key) for key in self.columns}

    def to_record(self, row: Base) -> RecordT:
        return self.record_cls.model_validate(self.row_values(row))

    def to_values(self, data: dict[str, Any]) -> dict[str, Any]:
        """Turn record field values into column values, dropping unknown keys."""
        values = {}
        for key, value in data.items():
            if key not in self.columns:
                continue
            if key in self.json_fields and value is not None:
                value = to_jsonable_python(value)
            elif isinstance(value, Enum):
                value = value.value
            values[key] = value
        return values


class OrderRowMapper(RowMapper[RecordT]):
    """Folds the flat checklist columns into ``details`` and back."""

    def to_record(self, row: Base) -> RecordT:
        values = self.row_values(row)
        values["details"] = {key: values.pop(key) for key in ORDER_DETAIL_COLUMNS}
        return self.record_cls.model_validate(values)

    def to_values(self, data: dict[str, Any]) -> dict[str, Any]:
        flat = dict(data)
        details = flat.pop("details", None)
        if details is not None:
            if hasattr(details, "model_dump"):
                details = details.model_dump()
            flat.update({key: details[key] for key in ORDER_DETAIL_COLUMNS if key in details})
        return super().to_values(flat)
