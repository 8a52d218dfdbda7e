"""
In-memory record store used for demo and offline mode.

Tables are plain dicts keyed by record id, shared process-wide through
``get_memory_store``. Records are copied on the way in and out so callers
never mutate stored state by accident.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional

from dealerhub.core.config import get_settings
from dealerhub.core.logging import get_logger
from dealerhub.database.base import generate_id
from dealerhub.repositories.base import RecordNotFoundError, RecordT
from dealerhub.repositories.seed import seed_memory_store

logger = get_logger(__name__)


class MemoryStore:
    """Named tables of records, keyed by id in insertion order."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, Any]] = {}

    def table(self, name: str) -> dict[str, Any]:
        return self.tables.setdefault(name, {})

    def clear(self) -> None:
        self.tables.clear()


class InMemoryRepository(Generic[RecordT]):
    """Dict-backed implementation of the repository contract."""

    def __init__(
        self,
        store: MemoryStore,
        table: str,
        record_cls: type[RecordT],
        entity: Optional[str] = None,
    ):
        self.store = store
        self.table_name = table
        self.record_cls = record_cls
        self.entity = entity or record_cls.__name__

    @property
    def _rows(self) -> dict[str, RecordT]:
        return self.store.table(self.table_name)

    def _has_field(self, name: str) -> bool:
        return name in self.record_cls.model_fields

    async def get_all(self) -> list[RecordT]:
        return [record.model_copy(deep=True) for record in reversed(self._rows.values())]

    async def get_by_id(self, record_id: str) -> RecordT:
        record = self._rows.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.entity, record_id)
        return record.model_copy(deep=True)

    async def find_by(self, **filters: Any) -> list[RecordT]:
        return [
            record
            for record in await self.get_all()
            if all(getattr(record, key) == value for key, value in filters.items())
        ]

    async def create(self, data: dict[str, Any]) -> RecordT:
        values = dict(data)
        values["id"] = values.get("id") or generate_id()
        now = datetime.now(timezone.utc)
        for stamp in ("created_at", "updated_at"):
            if self._has_field(stamp) and values.get(stamp) is None:
                values[stamp] = now

        record = self.record_cls.model_validate(values)
        self._rows[record.id] = record

        logger.debug("Record created", entity=self.entity, record_id=record.id)
        return record.model_copy(deep=True)

    async def update(self, record_id: str, changes: dict[str, Any]) -> RecordT:
        current = self._rows.get(record_id)
        if current is None:
            raise RecordNotFoundError(self.entity, record_id)

        values = current.model_dump()
        values.update(changes)
        values["id"] = record_id
        if self._has_field("updated_at"):
            values["updated_at"] = datetime.now(timezone.utc)

        record = self.record_cls.model_validate(values)
        self._rows[record_id] = record

        logger.debug(
            "Record updated",
            entity=self.entity,
            record_id=record_id,
            fields=sorted(changes),
        )
        return record.model_copy(deep=True)

    async def delete(self, record_id: str) -> None:
        if record_id not in self._rows:
            raise RecordNotFoundError(self.entity, record_id)
        del self._rows[record_id]
        logger.debug("Record deleted", entity=self.entity, record_id=record_id)


_store: Optional[MemoryStore] = None


def get_memory_store() -> MemoryStore:
    """
    Get the process-wide memory store, seeding it on first use.

    Sample records are loaded only when ``seed_demo_data`` is enabled.
    """
    global _store

    if _store is None:
        _store = MemoryStore()
        if get_settings().seed_demo_data:
            seed_memory_store(_store)

    return _store


def reset_memory_store() -> None:
    """Drop the memory store so the next access starts from scratch."""
    global _store
    _store = None
