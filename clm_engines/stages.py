"""
Module: clm_engines.stages
Responsibility:
    Stage conformance: derive the workflow stage a contract is expected
    to be in from its negotiation type and remaining days, and compare it
    with the recorded stage.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Stage tables live in
    ``clm_kernel.domain.stages`` so the record store validates against the
    same labels.

Invariants enforced:
    - Exactly one window of a table matches any day count; the terminal
      "Finalizado (0)" window covers every day count <= 0.
    - On-time means the recorded stage equals the expected label exactly.
    - Negotiation types without a stage table, and contracts without an
      end date, are NOT_APPLICABLE: no expected stage exists, and such
      contracts are neither on time nor late.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Sequence

from clm_kernel.domain.clock import resolve_as_of
from clm_kernel.domain.contract import ContractRecord, NegotiationType
from clm_kernel.domain.stages import stage_options, stage_table
from clm_kernel.logging_config import get_logger
from clm_engines.expiry import days_until_expiry
from clm_engines.tracer import traced_engine

logger = get_logger("engines.stages")

__all__ = [
    "StageCheck",
    "StageControlEntry",
    "StageControlSummary",
    "StageStatus",
    "check_stage",
    "expected_stage",
    "stage_options",
    "summarize_stage_control",
]


class StageStatus(str, Enum):
    ON_TIME = "on_time"
    LATE = "late"
    NOT_APPLICABLE = "not_applicable"


def expected_stage(
    negotiation_type: NegotiationType | None,
    days: int | None,
) -> str | None:
    """The label whose window contains ``days``, or None if no table applies."""
    if days is None:
        return None
    for window in stage_table(negotiation_type):
        if window.matches(days):
            return window.label
    return None


@dataclass(frozen=True)
class StageCheck:
    """Outcome of a stage conformance check."""

    status: StageStatus
    expected_stage: str | None
    current_stage: str | None
    days_until_expiry: int | None

    @property
    def is_on_time(self) -> bool | None:
        """True/False when applicable, None otherwise."""
        if self.status == StageStatus.NOT_APPLICABLE:
            return None
        return self.status == StageStatus.ON_TIME


def check_stage(
    contract: ContractRecord,
    as_of: date | datetime | None = None,
) -> StageCheck:
    """Compare a contract's recorded stage with its expected stage."""
    days = days_until_expiry(contract.end_date, resolve_as_of(as_of))
    expected = expected_stage(contract.negotiation_type, days)
    if expected is None:
        status = StageStatus.NOT_APPLICABLE
    elif contract.stage == expected:
        status = StageStatus.ON_TIME
    else:
        status = StageStatus.LATE
    return StageCheck(
        status=status,
        expected_stage=expected,
        current_stage=contract.stage,
        days_until_expiry=days,
    )


@dataclass(frozen=True)
class StageControlEntry:
    contract: ContractRecord
    check: StageCheck


@dataclass(frozen=True)
class StageControlSummary:
    """Active Extension/Renewal contracts split by conformance."""

    as_of: date
    on_time: tuple[StageControlEntry, ...] = field(default_factory=tuple)
    late: tuple[StageControlEntry, ...] = field(default_factory=tuple)
    not_applicable: int = 0

    @property
    def total(self) -> int:
        return len(self.on_time) + len(self.late)


@traced_engine("stage_control", "1.0", fingerprint_fields=("contracts", "as_of"))
def summarize_stage_control(
    contracts: Sequence[ContractRecord],
    as_of: date | datetime | None = None,
) -> StageControlSummary:
    """
    Split Active contracts with an applicable stage table into on-time and
    late lists, each ordered by ascending days until expiry.
    """
    ref = resolve_as_of(as_of)
    on_time: list[StageControlEntry] = []
    late: list[StageControlEntry] = []
    not_applicable = 0

    for contract in contracts:
        if not contract.is_active:
            continue
        check = check_stage(contract, ref)
        if check.status == StageStatus.ON_TIME:
            on_time.append(StageControlEntry(contract, check))
        elif check.status == StageStatus.LATE:
            late.append(StageControlEntry(contract, check))
        else:
            not_applicable += 1

    def order(e: StageControlEntry):
        return (e.check.days_until_expiry, e.contract.contract_number)

    summary = StageControlSummary(
        as_of=ref,
        on_time=tuple(sorted(on_time, key=order)),
        late=tuple(sorted(late, key=order)),
        not_applicable=not_applicable,
    )
    logger.info(
        "stage_control_summarized",
        extra={
            "on_time": len(summary.on_time),
            "late": len(summary.late),
            "not_applicable": not_applicable,
        },
    )
    return summary
