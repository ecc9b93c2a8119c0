"""
Module: clm_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    are the read side of the record store: list, get-by-id and get-by-filter
    for each entity type, returning frozen domain records.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - Record return convention: Selectors return frozen domain records built
      through ``clm_kernel.domain.mapping``, NOT raw ORM model instances.
    - Session ownership: Selectors do NOT create or manage their own sessions.

Failure modes:
    - ValueError from ``order_clause`` when the ordering string names a field
      the model does not have.
    - ValueError from ``find_by`` for unknown filter fields.
"""

from __future__ import annotations

from abc import ABC
from enum import Enum
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from clm_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


def order_clause(model: type[Base], order_by: str):
    """
    Translate an ordering string into an ORDER BY clause.

    ``"-created_at"`` sorts descending, ``"created_at"`` ascending.

    Raises:
        ValueError: If the field is not a mapped column of ``model``.
    """
    descending = order_by.startswith("-")
    field = order_by.lstrip("-")
    column = getattr(model, field, None)
    if column is None or field not in model.__mapper__.column_attrs:
        raise ValueError(f"Cannot order {model.__name__} by {order_by!r}")
    return column.desc() if descending else column.asc()


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Subclasses set ``model`` and implement ``_to_dto``.  The generic
        list / find_by queries are shared.

    Guarantees:
        - No commit, flush, add, or delete operations are performed.
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session

    def _to_dto(self, row: ModelType) -> Any:
        raise NotImplementedError

    def _select(self, order_by: str | None, limit: int | None) -> Select:
        stmt = select(self.model)
        if order_by:
            stmt = stmt.order_by(order_clause(self.model, order_by), self.model.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    def list(self, order_by: str | None = "-created_at", limit: int | None = None) -> list:
        """All records, ordered by ``order_by`` (``"-field"`` for descending)."""
        rows = self.session.execute(self._select(order_by, limit)).scalars().all()
        return [self._to_dto(r) for r in rows]

    def find_by(self, order_by: str | None = "-created_at", **criteria: Any) -> list:
        """
        Records whose attributes equal every given criterion.

        Raises:
            ValueError: If a criterion names an unknown field.
        """
        stmt = self._select(order_by, None)
        for field, value in criteria.items():
            if field not in self.model.__mapper__.column_attrs:
                raise ValueError(f"Unknown {self.model.__name__} field: {field}")
            if isinstance(value, Enum):
                value = value.value
            stmt = stmt.where(getattr(self.model, field) == value)
        rows = self.session.execute(stmt).scalars().all()
        return [self._to_dto(r) for r in rows]
