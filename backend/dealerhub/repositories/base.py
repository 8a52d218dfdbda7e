"""
Record store contract shared by every backend.

Repositories speak in domain records (pydantic models) and plain dicts of
field values. Creating returns the stored record with its generated id,
updating merges the given fields into the stored record, and a missing id
is reported with ``RecordNotFoundError`` on get, update and delete.
"""

from typing import Any, Protocol, TypeVar

from dealerhub.schemas.common import Record

RecordT = TypeVar("RecordT", bound=Record)


class RepositoryError(Exception):
    """Base exception for record store errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class RecordNotFoundError(RepositoryError):
    """Raised when no record exists for the requested id."""

    def __init__(self, entity: str, record_id: str):
        super().__init__(
            f"{entity} not found: {record_id}",
            entity=entity,
            record_id=record_id,
        )
        self.entity = entity
        self.record_id = record_id


class Repository(Protocol[RecordT]):
    """Generic CRUD boundary implemented by the memory and SQL backends."""

    entity: str

    async def get_all(self) -> list[RecordT]: ...

    async def get_by_id(self, record_id: str) -> RecordT: ...

    async def find_by(self, **filters: Any) -> list[RecordT]: ...

    async def create(self, data: dict[str, Any]) -> RecordT: ...

    async def update(self, record_id: str, changes: dict[str, Any]) -> RecordT: ...

    async def delete(self, record_id: str) -> None: ...
