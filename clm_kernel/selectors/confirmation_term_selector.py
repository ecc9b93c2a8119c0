"""Read-only queries over confirmation terms."""

from __future__ import annotations

from uuid import UUID

from clm_kernel.domain.contract import ConfirmationTermRecord
from clm_kernel.domain.mapping import term_from_row
from clm_kernel.exceptions import ConfirmationTermNotFoundError
from clm_kernel.models.confirmation_term import ConfirmationTerm
from clm_kernel.selectors.base import BaseSelector


class ConfirmationTermSelector(BaseSelector[ConfirmationTerm]):
    """Read access to confirmation terms."""

    model = ConfirmationTerm

    def _to_dto(self, row: ConfirmationTerm) -> ConfirmationTermRecord:
        return term_from_row(row.to_row())

    def get(self, term_id: UUID) -> ConfirmationTermRecord:
        """
        Raises:
            ConfirmationTermNotFoundError: If no term has this id.
        """
        row = self.session.get(ConfirmationTerm, term_id)
        if row is None:
            raise ConfirmationTermNotFoundError(str(term_id))
        return self._to_dto(row)
