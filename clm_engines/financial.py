"""
Module: clm_engines.financial
Responsibility:
    Aggregate contract amounts: portfolio financial summary (totals and
    billing percentage) and the dashboard headline statistics.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic; amounts arrive already coerced by the
      mapping boundary, so a missing amount sums as 0.
    - Every ratio is 0 when its denominator is 0 (never NaN/Infinity).
    - No rounding; formatting is a presentation concern.

Failure modes:
    - None for well-typed records.  The engine does not re-validate
      amounts or statuses beyond the Active check.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Sequence

from clm_kernel.domain.clock import resolve_as_of
from clm_kernel.domain.contract import ContractRecord, ContractStatus
from clm_kernel.domain.values import ZERO, percentage
from clm_kernel.logging_config import get_logger
from clm_engines.expiry import (
    EXPIRING_SOON_WINDOW,
    URGENT_WINDOW,
    days_until_expiry,
    is_expiring_within,
)
from clm_engines.tracer import traced_engine

logger = get_logger("engines.financial")


def active_contracts(contracts: Iterable[ContractRecord]) -> list[ContractRecord]:
    """The Active subset, in input order."""
    return [c for c in contracts if c.is_active]


@dataclass(frozen=True)
class FinancialSummary:
    """Totals over a set of contracts."""

    contract_count: int
    total_contract_value: Decimal
    total_billed: Decimal
    total_to_bill: Decimal
    total_canceled: Decimal
    billing_percentage: Decimal

    @classmethod
    def empty(cls) -> FinancialSummary:
        return cls(0, ZERO, ZERO, ZERO, ZERO, ZERO)


@traced_engine("financial", "1.0", fingerprint_fields=("contracts", "active_only"))
def summarize_financials(
    contracts: Sequence[ContractRecord],
    active_only: bool = True,
) -> FinancialSummary:
    """
    Sum value, billed, to-bill and canceled amounts.

    ``billing_percentage`` = billed / value * 100, 0 when value is 0.
    """
    selected = active_contracts(contracts) if active_only else list(contracts)
    if not selected:
        return FinancialSummary.empty()

    total_value = sum((c.contract_value for c in selected), ZERO)
    total_billed = sum((c.billed_value for c in selected), ZERO)
    total_to_bill = sum((c.to_bill_value for c in selected), ZERO)
    total_canceled = sum((c.canceled_value for c in selected), ZERO)

    return FinancialSummary(
        contract_count=len(selected),
        total_contract_value=total_value,
        total_billed=total_billed,
        total_to_bill=total_to_bill,
        total_canceled=total_canceled,
        billing_percentage=percentage(total_billed, total_value),
    )


@dataclass(frozen=True)
class DashboardStats:
    """
    Headline dashboard numbers.

    Counts of expiring and urgent contracts consider Active contracts
    only; value totals span every contract regardless of status.
    """

    as_of: date
    total_contracts: int
    active_contracts: int
    expired_contracts: int
    expiring_soon: int
    urgent: int
    total_value: Decimal
    total_billed: Decimal
    billing_progress: Decimal


@traced_engine("dashboard", "1.0", fingerprint_fields=("contracts", "as_of"))
def summarize_dashboard(
    contracts: Sequence[ContractRecord],
    as_of: date | datetime | None = None,
    expiring_window: int = EXPIRING_SOON_WINDOW,
    urgent_window: int = URGENT_WINDOW,
) -> DashboardStats:
    """
    Compute the dashboard stat cards.

    Args:
        contracts: Every contract in the session's view.
        as_of: Reference date (None reads the system clock).
        expiring_window: Day window of the "expiring soon" card.
        urgent_window: Day window of the "urgent" card.
    """
    ref = resolve_as_of(as_of)
    active = active_contracts(contracts)
    active_days = [days_until_expiry(c.end_date, ref) for c in active]

    total_value = sum((c.contract_value for c in contracts), ZERO)
    total_billed = sum((c.billed_value for c in contracts), ZERO)

    stats = DashboardStats(
        as_of=ref,
        total_contracts=len(contracts),
        active_contracts=len(active),
        expired_contracts=sum(1 for c in contracts if c.status == ContractStatus.EXPIRED),
        expiring_soon=sum(1 for d in active_days if is_expiring_within(d, expiring_window)),
        urgent=sum(1 for d in active_days if is_expiring_within(d, urgent_window)),
        total_value=total_value,
        total_billed=total_billed,
        billing_progress=percentage(total_billed, total_value),
    )
    logger.debug(
        "dashboard_summarized",
        extra={
            "total_contracts": stats.total_contracts,
            "expiring_soon": stats.expiring_soon,
            "urgent": stats.urgent,
        },
    )
    return stats
