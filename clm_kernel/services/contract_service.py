"""
Service layer for contract records.

Responsibility:
    Create, update, delete, bulk-create and clear stored contracts, with
    the write-side business rules: required identification fields, the
    post-creation edit lock, the negotiation-type stage reset, and stage
    validation against the negotiation type's stage table.

Architecture position:
    Kernel > Services.  Reads go through ``ContractSelector``; this
    service only mutates.

Invariants enforced:
    - contract_number, client_name and analyst_name are non-blank.
    - After creation only ``EDITABLE_FIELDS`` may change
      (``LockedFieldError`` otherwise).
    - Changing the negotiation type clears stage and amendment type unless
      the same update supplies them.
    - amendment_type is kept only for AMENDMENT negotiations.
    - A stage written through ``create``/``update`` must belong to the
      negotiation type's stage table.  ``bulk_create`` (imports) keeps the
      source stage text as-is.

Failure modes:
    - ContractNotFoundError for unknown ids.
    - InvalidContractError for blank required fields, unknown fields, or
      status / negotiation type values outside the closed sets.
    - LockedFieldError, InvalidStageError as above.
    - AccessDeniedError when a session context is given and its role may
      not perform the operation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping
from uuid import UUID

from sqlalchemy import delete

from clm_kernel.domain.contract import (
    ContractRecord,
    NegotiationType,
    UserRole,
)
from clm_kernel.domain.mapping import (
    CONTRACT_AMOUNT_FIELDS,
    CONTRACT_COLUMNS,
    CONTRACT_DATE_FIELDS,
    contract_from_row,
    parse_status,
)
from clm_kernel.domain.session import SessionContext, require_role
from clm_kernel.domain.stages import stage_options
from clm_kernel.domain.values import to_amount, to_date, to_text
from clm_kernel.exceptions import (
    AccessDeniedError,
    ContractNotFoundError,
    InvalidContractError,
    InvalidStageError,
    LockedFieldError,
)
from clm_kernel.logging_config import get_logger
from clm_kernel.models.contract import Contract
from clm_kernel.services.base import BaseService

logger = get_logger("services.contract")

EDITABLE_FIELDS: frozenset[str] = frozenset({
    "status",
    "negotiation_type",
    "amendment_type",
    "stage",
    *CONTRACT_AMOUNT_FIELDS,
    "client_contract_number",
    "previous_contract",
    "crm_number",
    "sei_number",
    "new_contract_number",
    "new_term_number",
    "observation",
})

REQUIRED_FIELDS: tuple[str, ...] = ("contract_number", "client_name", "analyst_name")

_WRITERS = (UserRole.MANAGER, UserRole.ANALYST)


def _strict_negotiation_type(value: Any) -> NegotiationType:
    if isinstance(value, NegotiationType):
        return value
    text = to_text(value)
    if text is None:
        return NegotiationType.NONE
    for kind in NegotiationType:
        if text.casefold() in (kind.value.casefold(), kind.name.casefold()):
            return kind
    raise InvalidContractError("negotiation_type", f"unknown negotiation type {text!r}")


def _coerce(field: str, value: Any) -> Any:
    """Coerce an incoming field value to its record type."""
    if field in CONTRACT_AMOUNT_FIELDS:
        return to_amount(value)
    if field in CONTRACT_DATE_FIELDS:
        return to_date(value)
    if field == "status":
        status = parse_status(value)
        if status is None:
            raise InvalidContractError("status", f"unknown status {value!r}")
        return status
    if field == "negotiation_type":
        return _strict_negotiation_type(value)
    return to_text(value)


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class ContractService(BaseService[Contract]):
    """
    Service for managing stored contracts.

    Contract:
        Accepts ``ContractRecord`` objects (create) or field-name keyed
        change mappings (update) and returns frozen ``ContractRecord``
        objects.  Mutations flush within the caller's transaction.

    Non-goals:
        - Does NOT compute derived fields; that is ``clm_engines``.
    """

    def _to_dto(self, contract: Contract) -> ContractRecord:
        """Convert ORM Contract to ContractRecord."""
        return contract_from_row(contract.to_row())

    def _get_by_id(self, contract_id: UUID) -> Contract:
        """Get contract by ID, raising if not found."""
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise ContractNotFoundError(str(contract_id))
        return contract

    def get_by_id(self, contract_id: UUID) -> ContractRecord:
        """
        Get contract by ID.

        Raises:
            ContractNotFoundError: If contract doesn't exist.
        """
        return self._to_dto(self._get_by_id(contract_id))

    def _validate_new(self, record: ContractRecord) -> None:
        for field in REQUIRED_FIELDS:
            if not (getattr(record, field) or "").strip():
                raise InvalidContractError(field, "required")
        if record.status is None:
            raise InvalidContractError("status", "unknown status")

    def _new_model(self, record: ContractRecord, created_by: str | None) -> Contract:
        values = {
            field: _column_value(getattr(record, field))
            for field in CONTRACT_COLUMNS
        }
        if record.negotiation_type != NegotiationType.AMENDMENT:
            values["amendment_type"] = None
        values["created_by"] = created_by
        if record.id is not None:
            values["id"] = record.id
        return Contract(**values)

    def create(
        self,
        record: ContractRecord,
        ctx: SessionContext | None = None,
    ) -> ContractRecord:
        """
        Create a contract.

        ``created_by`` is taken from ``ctx`` when given, else from the record.

        Args:
            record: The contract to store; ``id`` may be None.
            ctx: The acting session, if any.

        Returns:
            The stored ContractRecord (with id and audit timestamps).

        Raises:
            InvalidContractError: Required field blank or status unknown.
            InvalidStageError: Stage not in the negotiation type's table.
            AccessDeniedError: ``ctx`` role may not create contracts.
        """
        if ctx is not None:
            require_role(ctx, _WRITERS, "create contracts")
        self._validate_new(record)
        if record.stage is not None and record.stage not in stage_options(
            record.negotiation_type
        ):
            raise InvalidStageError(record.negotiation_type.value, record.stage)

        contract = self._new_model(record, ctx.email if ctx else record.created_by)
        self.session.add(contract)
        self.session.flush()

        logger.info(
            "contract_created",
            extra={
                "contract_id": str(contract.id),
                "contract_number": contract.contract_number,
                "created_by": contract.created_by,
            },
        )
        return self._to_dto(contract)

    def bulk_create(
        self,
        records: Iterable[ContractRecord],
        ctx: SessionContext | None = None,
    ) -> list[ContractRecord]:
        """
        Insert many contracts in one flush.

        Stage text is stored as given; imports carry historical stage
        labels that need not match the current tables.

        Raises:
            InvalidContractError: Any record fails the required-field check
                (nothing is flushed).
            AccessDeniedError: ``ctx`` is not a manager.
        """
        if ctx is not None:
            require_role(ctx, (UserRole.MANAGER,), "import contracts")
        records = list(records)
        for record in records:
            self._validate_new(record)

        created_by = ctx.email if ctx else None
        models = [self._new_model(r, created_by or r.created_by) for r in records]
        self.session.add_all(models)
        self.session.flush()

        logger.info("contracts_bulk_created", extra={"count": len(models)})
        return [self._to_dto(m) for m in models]

    def update(
        self,
        contract_id: UUID,
        changes: Mapping[str, Any],
        ctx: SessionContext | None = None,
    ) -> ContractRecord:
        """
        Apply field changes to an existing contract.

        ``changes`` is keyed by ``ContractRecord`` field names.  Locked
        fields may be present when their value is unchanged (full-form
        submissions); any actual change to them is rejected.

        Raises:
            ContractNotFoundError: Unknown id.
            InvalidContractError: Unknown field or invalid enum value.
            LockedFieldError: A locked field would change.
            InvalidStageError: Supplied stage not in the table.
            AccessDeniedError: ``ctx`` may not edit this contract.
        """
        contract = self._get_by_id(contract_id)
        current = self._to_dto(contract)

        if ctx is not None:
            require_role(ctx, _WRITERS, "update contracts")
            if not ctx.can_see(current):
                raise AccessDeniedError(ctx.role.value, "update this contract")

        for field in changes:
            if field not in CONTRACT_COLUMNS:
                raise InvalidContractError(field, "unknown field")

        coerced = {field: _coerce(field, value) for field, value in changes.items()}

        locked = sorted(
            field
            for field, value in coerced.items()
            if field not in EDITABLE_FIELDS and value != getattr(current, field)
        )
        if locked:
            raise LockedFieldError(str(contract_id), locked)

        new_type = coerced.get("negotiation_type", current.negotiation_type)
        if new_type != current.negotiation_type:
            coerced.setdefault("stage", None)
            coerced.setdefault("amendment_type", None)
        if new_type != NegotiationType.AMENDMENT:
            coerced["amendment_type"] = None

        stage = coerced.get("stage", current.stage)
        # Imported contracts may carry historical stage text; only a new
        # stage or a new negotiation type is checked against the table.
        stage_changed = stage != current.stage or new_type != current.negotiation_type
        if stage_changed and stage is not None and stage not in stage_options(new_type):
            raise InvalidStageError(new_type.value, stage)

        for field, value in coerced.items():
            setattr(contract, field, _column_value(value))
        self.session.flush()

        logger.info(
            "contract_updated",
            extra={
                "contract_id": str(contract_id),
                "fields": sorted(coerced),
            },
        )
        return self._to_dto(contract)

    def delete(self, contract_id: UUID, ctx: SessionContext | None = None) -> None:
        """
        Delete a contract.

        Raises:
            ContractNotFoundError: Unknown id.
            AccessDeniedError: ``ctx`` is not a manager.
        """
        if ctx is not None:
            require_role(ctx, (UserRole.MANAGER,), "delete contracts")
        contract = self._get_by_id(contract_id)
        self.session.delete(contract)
        self.session.flush()
        logger.info("contract_deleted", extra={"contract_id": str(contract_id)})

    def clear(self, ctx: SessionContext | None = None) -> int:
        """
        Delete every contract.

        Returns:
            Number of contracts removed.
        """
        if ctx is not None:
            require_role(ctx, (UserRole.MANAGER,), "clear contracts")
        result = self.session.execute(delete(Contract))
        self.session.flush()
        logger.warning("contracts_cleared", extra={"count": result.rowcount})
        return result.rowcount

