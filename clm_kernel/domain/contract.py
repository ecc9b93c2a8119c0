"""
Contract domain types (``clm_kernel.domain.contract``).

Responsibility
--------------
Frozen dataclass records and closed enumerations for the three entity
types the system manages: contracts, confirmation terms and users. These
are the only shapes the derivation engines consume; store-specific column
names stay behind ``clm_kernel.domain.mapping``.

Architecture position
---------------------
**Kernel > Domain** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All records are ``frozen=True``; the engines layer derived fields on
  top in separate objects and never mutate a record.
* All monetary fields are ``Decimal``, defaulting to ``0``.
* Enum values are the literal strings persisted by the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    ACTIVE = "Ativo"
    RENEWED = "Renovado"
    CLOSED = "Encerrado"
    EXPIRED = "Expirado"


class NegotiationType(str, Enum):
    """Contractual action currently in progress on a contract."""

    EXTENSION = "PRORROGAÇÃO"
    RENEWAL = "RENOVAÇÃO"
    AMENDMENT = "ADITAMENTO"
    CANCELLATION = "CANCELAMENTO"
    NONE = "SEM TRATATIVA"
    FINALIZED = "FINALIZADA"
    DISCONTINUITY = "DESCONTINUIDADE"


class UserRole(str, Enum):
    """Closed set of account roles."""

    MANAGER = "GESTOR"
    ANALYST = "ANALISTA"
    CLIENT = "CLIENTE"


@dataclass(frozen=True)
class ContractRecord:
    """
    One commercial agreement under management.

    ``status`` is ``None`` when the stored value is outside the closed set;
    such a contract is simply never Active.
    """

    id: UUID | None
    contract_number: str
    client_name: str | None
    analyst_name: str | None
    status: ContractStatus | None = ContractStatus.ACTIVE
    negotiation_type: NegotiationType = NegotiationType.NONE
    amendment_type: str | None = None
    stage: str | None = None
    client_group: str | None = None
    term_number: str | None = None
    responsible_section: str | None = None
    object_description: str | None = None
    observation: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress_deadline: date | None = None
    contract_value: Decimal = Decimal("0")
    billed_value: Decimal = Decimal("0")
    canceled_value: Decimal = Decimal("0")
    to_bill_value: Decimal = Decimal("0")
    new_contract_value: Decimal = Decimal("0")
    our_process_number: str | None = None
    client_process_number: str | None = None
    client_contract_number: str | None = None
    previous_contract: str | None = None
    crm_number: str | None = None
    sei_number: str | None = None
    new_contract_number: str | None = None
    new_term_number: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """True when the contract's status is Active."""
        return self.status == ContractStatus.ACTIVE


@dataclass(frozen=True)
class ConfirmationTermRecord:
    """A confirmation term (TC) issued under a contract."""

    id: UUID | None
    term_number: str
    associated_contract: str | None = None
    process_number: str | None = None
    validity_start: date | None = None
    validity_end: date | None = None
    total_value: Decimal = Decimal("0")
    object_description: str | None = None
    requesting_area: str | None = None
    contract_inspector: str | None = None
    contract_manager: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class UserRecord:
    """A user account. Never carries password material."""

    id: UUID | None
    email: str
    full_name: str
    role: UserRole
    client_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
