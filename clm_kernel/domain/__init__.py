"""
Kernel domain layer: typed records, value coercion, workflow stage tables,
the clock abstraction, and session context. The store mapping boundary
lives in ``clm_kernel.domain.mapping``.

Pure functional core with zero I/O.
"""

from clm_kernel.domain.clock import Clock, DeterministicClock, SystemClock, resolve_as_of
from clm_kernel.domain.contract import (
    ConfirmationTermRecord,
    ContractRecord,
    ContractStatus,
    NegotiationType,
    UserRecord,
    UserRole,
)
from clm_kernel.domain.session import SessionContext, require_role, visible_contracts
from clm_kernel.domain.stages import StageWindow, stage_options, stage_table
from clm_kernel.domain.values import ZERO, percentage, to_amount, to_date, to_text

__all__ = [
    "Clock",
    "ConfirmationTermRecord",
    "ContractRecord",
    "ContractStatus",
    "DeterministicClock",
    "NegotiationType",
    "SessionContext",
    "StageWindow",
    "SystemClock",
    "UserRecord",
    "UserRole",
    "ZERO",
    "percentage",
    "require_role",
    "resolve_as_of",
    "stage_options",
    "stage_table",
    "to_amount",
    "to_date",
    "to_text",
    "visible_contracts",
]
