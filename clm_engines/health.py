"""
Module: clm_engines.health
Responsibility:
    Portfolio health indicators over Active contracts and their
    traffic-light rating.

    * profitability_rate -- see ``clm_engines.clients.profitability_rate``
    * billing_efficiency -- billed / value * 100
    * cancellation_rate  -- canceled / value * 100
    * risk_contracts     -- Active contracts expiring within 0..60 days

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Rates are 0 when the total contract value (or Active count) is 0.
    - Contracts without an end date never count as risk contracts but do
      count in the totals.
    - Rating boundaries are inclusive: a rate equal to ``good_rate`` is
      GOOD, a cancellation rate equal to ``good_cancellation`` is GOOD.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence

from clm_kernel.domain.clock import resolve_as_of
from clm_kernel.domain.contract import ContractRecord
from clm_kernel.domain.values import ZERO, percentage
from clm_kernel.logging_config import get_logger
from clm_engines.clients import PROFITABILITY_MULTIPLIER, is_profitable
from clm_engines.expiry import EXPIRING_SOON_WINDOW, days_until_expiry, is_expiring_within
from clm_engines.financial import active_contracts
from clm_engines.tracer import traced_engine

logger = get_logger("engines.health")


class HealthLevel(str, Enum):
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"


@dataclass(frozen=True)
class HealthThresholds:
    """
    Traffic-light limits.

    Guarantees:
        - warn_rate <= good_rate
        - good_cancellation <= warn_cancellation
        - good_risk_count <= warn_risk_count
    """

    good_rate: Decimal = Decimal("80")
    warn_rate: Decimal = Decimal("60")
    good_cancellation: Decimal = Decimal("10")
    warn_cancellation: Decimal = Decimal("20")
    good_risk_count: int = 0
    warn_risk_count: int = 3

    def __post_init__(self) -> None:
        if self.warn_rate > self.good_rate:
            raise ValueError("warn_rate must not exceed good_rate")
        if self.good_cancellation > self.warn_cancellation:
            raise ValueError("good_cancellation must not exceed warn_cancellation")
        if self.good_risk_count > self.warn_risk_count:
            raise ValueError("good_risk_count must not exceed warn_risk_count")


DEFAULT_HEALTH_THRESHOLDS = HealthThresholds()


@dataclass(frozen=True)
class HealthMetrics:
    """Health indicators of the Active portfolio."""

    as_of: date
    total_contracts: int
    profitable_contracts: int
    risk_contracts: int
    total_contract_value: Decimal
    total_billed: Decimal
    total_canceled: Decimal
    profitability_rate: Decimal
    billing_efficiency: Decimal
    cancellation_rate: Decimal


@dataclass(frozen=True)
class HealthRating:
    profitability: HealthLevel
    billing_efficiency: HealthLevel
    cancellation: HealthLevel
    risk: HealthLevel


@traced_engine("health", "1.0", fingerprint_fields=("contracts", "as_of"))
def compute_health(
    contracts: Sequence[ContractRecord],
    as_of: date | datetime | None = None,
    risk_window: int = EXPIRING_SOON_WINDOW,
    multiplier: Decimal = PROFITABILITY_MULTIPLIER,
) -> HealthMetrics:
    """
    Compute health indicators over the Active contracts in ``contracts``.

    Args:
        contracts: Contracts of any status.
        as_of: Reference date (None reads the system clock).
        risk_window: Upper day limit of the risk window (lower limit 0).
        multiplier: Profitability heuristic multiplier.
    """
    ref = resolve_as_of(as_of)
    active = active_contracts(contracts)

    total_value = sum((c.contract_value for c in active), ZERO)
    total_billed = sum((c.billed_value for c in active), ZERO)
    total_canceled = sum((c.canceled_value for c in active), ZERO)
    profitable = sum(1 for c in active if is_profitable(c, multiplier))
    risk = sum(
        1 for c in active
        if is_expiring_within(days_until_expiry(c.end_date, ref), risk_window)
    )

    metrics = HealthMetrics(
        as_of=ref,
        total_contracts=len(active),
        profitable_contracts=profitable,
        risk_contracts=risk,
        total_contract_value=total_value,
        total_billed=total_billed,
        total_canceled=total_canceled,
        profitability_rate=percentage(Decimal(profitable), Decimal(len(active))),
        billing_efficiency=percentage(total_billed, total_value),
        cancellation_rate=percentage(total_canceled, total_value),
    )
    logger.info(
        "health_computed",
        extra={
            "total_contracts": metrics.total_contracts,
            "risk_contracts": metrics.risk_contracts,
            "profitable_contracts": metrics.profitable_contracts,
        },
    )
    return metrics


def _rate_level(value: Decimal, t: HealthThresholds) -> HealthLevel:
    if value >= t.good_rate:
        return HealthLevel.GOOD
    if value >= t.warn_rate:
        return HealthLevel.WARN
    return HealthLevel.BAD


def rate_health(
    metrics: HealthMetrics,
    thresholds: HealthThresholds | None = None,
) -> HealthRating:
    """Traffic-light rating of each indicator."""
    t = thresholds or DEFAULT_HEALTH_THRESHOLDS

    if metrics.cancellation_rate <= t.good_cancellation:
        cancellation = HealthLevel.GOOD
    elif metrics.cancellation_rate <= t.warn_cancellation:
        cancellation = HealthLevel.WARN
    else:
        cancellation = HealthLevel.BAD

    if metrics.risk_contracts <= t.good_risk_count:
        risk = HealthLevel.GOOD
    elif metrics.risk_contracts <= t.warn_risk_count:
        risk = HealthLevel.WARN
    else:
        risk = HealthLevel.BAD

    return HealthRating(
        profitability=_rate_level(metrics.profitability_rate, t),
        billing_efficiency=_rate_level(metrics.billing_efficiency, t),
        cancellation=cancellation,
        risk=risk,
    )
