"""
SQLAlchemy implementation of the repository contract.

Every repository built for a request shares that request's session, so
writes made by one service call commit or roll back together when the
session closes. Database failures surface as ``RepositoryError``.
"""

from typing import Any, Generic

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub.core.logging import get_logger
from dealerhub.database.base import Base
from dealerhub.database.mappers import RowMapper
from dealerhub.repositories.base import RecordNotFoundError, RecordT, RepositoryError

logger = get_logger(__name__)


class SqlRepository(Generic[RecordT]):
    """Row-backed repository for one table."""

    def __init__(self, session: AsyncSession, mapper: RowMapper[RecordT], entity: str):
        self.session = session
        self.mapper = mapper
        self.entity = entity

    @property
    def row_cls(self) -> type[Base]:
        return self.mapper.row_cls

    def _database_error(self, action: str, error: SQLAlchemyError, **context: Any) -> RepositoryError:
        logger.error(
            f"{self.entity} {action} failed",
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
        reason = "data integrity violation" if isinstance(error, IntegrityError) else "database error"
        return RepositoryError(
            f"{self.entity} {action} failed due to {reason}: {error}",
            entity=self.entity,
            **context,
        )

    async def _get_row(self, record_id: str) -> Base:
        row = await self.session.get(self.row_cls, record_id)
        if row is None:
            raise RecordNotFoundError(self.entity, record_id)
        return row

    async def get_all(self) -> list[RecordT]:
        try:
            result = await self.session.execute(
                select(self.row_cls).order_by(self.row_cls.created_at.desc())
            )
        except SQLAlchemyError as e:
            raise self._database_error("listing", e) from e
        return [self.mapper.to_record(row) for row in result.scalars().all()]

    async def get_by_id(self, record_id: str) -> RecordT:
        try:
            row = await self._get_row(record_id)
        except SQLAlchemyError as e:
            raise self._database_error("lookup", e, record_id=record_id) from e
        return self.mapper.to_record(row)

    async def find_by(self, **filters: Any) -> list[RecordT]:
        query = select(self.row_cls).order_by(self.row_cls.created_at.desc())
        for key, value in self.mapper.to_values(filters).items():
            query = query.where(getattr(self.row_cls, key) == value)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("search", e, filters=sorted(filters)) from e
        return [self.mapper.to_record(row) for row in result.scalars().all()]

    async def create(self, data: dict[str, Any]) -> RecordT:
        row = self.row_cls(**self.mapper.to_values(data))
        try:
            self.session.add(row)
            await self.session.flush()
            await self.session.refresh(row)
        except SQLAlchemyError as e:
            raise self._database_error("creation", e) from e

        logger.debug("Record created", entity=self.entity, record_id=row.id)
        return self.mapper.to_record(row)

    async def update(self, record_id: str, changes: dict[str, Any]) -> RecordT:
        try:
            row = await self._get_row(record_id)
            for key, value in self.mapper.to_values(changes).items():
                setattr(row, key, value)
            await self.session.flush()
            await self.session.refresh(row)
        except SQLAlchemyError as e:
            raise self._database_error("update", e, record_id=record_id) from e

        logger.debug("Record updated", entity=self.entity, record_id=record_id)
        return self.mapper.to_record(row)

    async def delete(self, record_id: str) -> None:
        try:
            row = await self._get_row(record_id)
            await self.session.delete(row)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise self._database_error("deletion", e, record_id=record_id) from e

        logger.debug("Record deleted", entity=self.entity, record_id=record_id)
