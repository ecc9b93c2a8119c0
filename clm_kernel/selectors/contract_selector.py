"""
Module: clm_kernel.selectors.contract_selector
Responsibility: Read-only queries over stored contracts, returning
    ``ContractRecord`` objects built through the mapping boundary.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Every record passes through ``contract_from_row``, so amounts are
      Decimal (never NULL) and unknown status strings map to None.
    - Session scoping applies the domain visibility rules in Python, so
      name comparisons use the same trimming and case folding everywhere.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from clm_kernel.domain.contract import ContractRecord
from clm_kernel.domain.mapping import contract_from_row
from clm_kernel.domain.session import SessionContext, visible_contracts
from clm_kernel.exceptions import AccessDeniedError, ContractNotFoundError
from clm_kernel.models.contract import Contract
from clm_kernel.selectors.base import BaseSelector


class ContractSelector(BaseSelector[Contract]):
    """Read access to contracts."""

    model = Contract

    def _to_dto(self, row: Contract) -> ContractRecord:
        return contract_from_row(row.to_row())

    def get(self, contract_id: UUID) -> ContractRecord:
        """
        Raises:
            ContractNotFoundError: If no contract has this id.
        """
        row = self.session.get(Contract, contract_id)
        if row is None:
            raise ContractNotFoundError(str(contract_id))
        return self._to_dto(row)

    def get_for_session(self, ctx: SessionContext, contract_id: UUID) -> ContractRecord:
        """
        A single contract, if it is within ``ctx``'s view.

        Raises:
            ContractNotFoundError: If no contract has this id.
            AccessDeniedError: The contract is outside the session's view.
        """
        record = self.get(contract_id)
        if not ctx.can_see(record):
            raise AccessDeniedError(ctx.role.value, "view this contract")
        return record

    def list_for_session(
        self,
        ctx: SessionContext,
        order_by: str | None = "-created_at",
    ) -> list[ContractRecord]:
        """Contracts visible to ``ctx``, in ``order_by`` order."""
        return visible_contracts(self.list(order_by=order_by), ctx)

    def count(self) -> int:
        return self.session.execute(select(func.count()).select_from(Contract)).scalar_one()
