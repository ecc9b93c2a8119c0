"""
Service layer for confirmation terms (TCs).

Plain CRUD: every field stays editable, the term number is required.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping
from uuid import UUID

from sqlalchemy import delete

from clm_kernel.domain.contract import ConfirmationTermRecord
from clm_kernel.domain.mapping import TERM_COLUMNS, term_from_row
from clm_kernel.domain.session import SessionContext
from clm_kernel.domain.values import to_amount, to_date, to_text
from clm_kernel.exceptions import ConfirmationTermNotFoundError, InvalidContractError
from clm_kernel.logging_config import get_logger
from clm_kernel.models.confirmation_term import ConfirmationTerm
from clm_kernel.services.base import BaseService

logger = get_logger("services.confirmation_term")

_DATE_FIELDS = ("validity_start", "validity_end")


def _coerce(field: str, value: Any) -> Any:
    if field == "total_value":
        return to_amount(value)
    if field in _DATE_FIELDS:
        return to_date(value)
    return to_text(value)


class ConfirmationTermService(BaseService[ConfirmationTerm]):
    """Service for managing confirmation terms."""

    def _to_dto(self, term: ConfirmationTerm) -> ConfirmationTermRecord:
        """Convert ORM ConfirmationTerm to ConfirmationTermRecord."""
        return term_from_row(term.to_row())

    def _get_by_id(self, term_id: UUID) -> ConfirmationTerm:
        term = self.session.get(ConfirmationTerm, term_id)
        if term is None:
            raise ConfirmationTermNotFoundError(str(term_id))
        return term

    def get_by_id(self, term_id: UUID) -> ConfirmationTermRecord:
        """
        Raises:
            ConfirmationTermNotFoundError: If the term doesn't exist.
        """
        return self._to_dto(self._get_by_id(term_id))

    def _new_model(self, record: ConfirmationTermRecord, created_by: str | None) -> ConfirmationTerm:
        if not (record.term_number or "").strip():
            raise InvalidContractError("term_number", "required")
        values = {field: getattr(record, field) for field in TERM_COLUMNS}
        values["created_by"] = created_by
        return ConfirmationTerm(**values)

    def create(
        self,
        record: ConfirmationTermRecord,
        ctx: SessionContext | None = None,
    ) -> ConfirmationTermRecord:
        """
        Create a confirmation term.

        Raises:
            InvalidContractError: If the term number is blank.
        """
        term = self._new_model(record, ctx.email if ctx else record.created_by)
        self.session.add(term)
        self.session.flush()
        logger.info(
            "confirmation_term_created",
            extra={"term_id": str(term.id), "term_number": term.term_number},
        )
        return self._to_dto(term)

    def bulk_create(
        self,
        records: Iterable[ConfirmationTermRecord],
        ctx: SessionContext | None = None,
    ) -> list[ConfirmationTermRecord]:
        created_by = ctx.email if ctx else None
        terms = [self._new_model(r, created_by or r.created_by) for r in records]
        self.session.add_all(terms)
        self.session.flush()
        logger.info("confirmation_terms_bulk_created", extra={"count": len(terms)})
        return [self._to_dto(t) for t in terms]

    def update(self, term_id: UUID, changes: Mapping[str, Any]) -> ConfirmationTermRecord:
        """
        Apply field changes to a confirmation term.

        Raises:
            ConfirmationTermNotFoundError: Unknown id.
            InvalidContractError: Unknown field, or term number blanked.
        """
        term = self._get_by_id(term_id)
        for field, value in changes.items():
            if field not in TERM_COLUMNS or field == "created_by":
                raise InvalidContractError(field, "unknown field")
            coerced = _coerce(field, value)
            if field == "term_number" and coerced is None:
                raise InvalidContractError("term_number", "required")
            setattr(term, field, coerced)
        self.session.flush()
        logger.info(
            "confirmation_term_updated",
            extra={"term_id": str(term_id), "fields": sorted(changes)},
        )
        return self._to_dto(term)

    def delete(self, term_id: UUID) -> None:
        term = self._get_by_id(term_id)
        self.session.delete(term)
        self.session.flush()
        logger.info("confirmation_term_deleted", extra={"term_id": str(term_id)})

    def clear(self) -> int:
        result = self.session.execute(delete(ConfirmationTerm))
        self.session.flush()
        logger.warning("confirmation_terms_cleared", extra={"count": result.rowcount})
        return result.rowcount
