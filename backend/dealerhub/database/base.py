"""
Declarative base for the record store tables.

Every table has a string UUID ``id`` and database-managed ``created_at`` /
``updated_at`` columns; repositories list records newest first by
``created_at``.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def generate_id() -> str:
    return str(uuid.uuid4())


class Base(AsyncAttrs, DeclarativeBase):
    __abstract__ = True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)!r}>"


class IdMixin:
    """String UUID primary key; ids travel as ``str`` through the services."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(
            Uuid(as_uuid=False),
            primary_key=True,
            default=generate_id,
        )


class TimestampMixin:
    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), nullable=False, server_default=func.now()
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


class RecordRow(Base, IdMixin, TimestampMixin):
    """
    Base for every table of the record store.

    Example:
        class DealerRow(RecordRow):
            __tablename__ = "dealers"

            company_name: Mapped[str] = mapped_column("companyname", String(255))
    """

    __abstract__ = True
