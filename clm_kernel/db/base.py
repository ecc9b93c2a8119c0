"""
Module: clm_kernel.db.base
Responsibility: The declarative base shared by the contracts,
    confirmation_terms and users tables, and the bridge from an ORM row to
    the plain column mapping the domain mapping functions consume.
Architecture position: Kernel > DB.  Imported by models/, selectors/ and
    services/; imports nothing from the kernel itself.

Invariants enforced:
    - Every row has a uuid4 primary key, persisted as 36-char text so the
      same schema runs on PostgreSQL and SQLite.
    - Amount columns are Numeric(18, 2) read back as Decimal; no float ever
      reaches the engines.
    - Audit columns (created_at, updated_at, created_by) are written by the
      store, never by callers.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Numeric, String, func, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """A UUID persisted as its canonical 36-character text."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` plus the project's column type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(18, 2, asdecimal=True),
        datetime: DateTime(timezone=True),
        date: Date(),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)

    def to_row(self) -> dict[str, Any]:
        """Column values keyed by store column name (``contrato``, not ``contract_number``)."""
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in inspect(type(self)).column_attrs
        }


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TrackedBase(Base):
    """
    Abstract base adding audit columns.

    created_at is fixed at insert; updated_at moves on every UPDATE;
    created_by holds the creating user's email when the write had a session.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )
    created_by: Mapped[str | None] = mapped_column(String(255))
