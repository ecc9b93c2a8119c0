"""
Module: clm_engines.expiry
Responsibility:
    Compute signed days-until-expiry for contracts and classify them into
    urgency buckets.  Two policies coexist:

    * Full classification (``classify_expiry``): <0 Overdue, <=30 Urgent,
      <=60 Attention, <=90 Warning, >90 Normal.
    * Window membership (``is_expiring_within``): 0 <= days <= window.
      Used for the dashboard "expiring soon" (60) and "urgent" (30)
      counts and for health-metric risk contracts (60).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import clm_kernel/domain (and sibling engine modules).

Invariants enforced:
    - Purity: the reference date is resolved once per call; the system
      clock is read only when the caller passes ``as_of=None``.
    - Boundary days (exactly 30, 60, 90) fall into the more urgent bucket
      (<= comparisons).
    - A contract without an end date has no bucket and is excluded from
      every bucket aggregate.

Failure modes:
    - ValueError from ``ExpiryThresholds`` when thresholds are not
      strictly increasing and non-negative.

Usage:
    from datetime import date
    from clm_engines.expiry import days_until_expiry, classify_expiry

    days = days_until_expiry(date(2024, 3, 1), as_of=date(2024, 1, 31))  # 30
    classify_expiry(days)  # ExpiryBucket.URGENT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Sequence

from clm_kernel.domain.clock import resolve_as_of
from clm_kernel.domain.contract import ContractRecord
from clm_kernel.logging_config import get_logger
from clm_engines.tracer import traced_engine

logger = get_logger("engines.expiry")

EXPIRING_SOON_WINDOW = 60
URGENT_WINDOW = 30


class ExpiryBucket(str, Enum):
    """Urgency classification of a contract's remaining days."""

    OVERDUE = "Vencido"
    URGENT = "Urgente"
    ATTENTION = "Atenção"
    WARNING = "Aviso"
    NORMAL = "Normal"


BUCKET_ORDER: tuple[ExpiryBucket, ...] = (
    ExpiryBucket.OVERDUE,
    ExpiryBucket.URGENT,
    ExpiryBucket.ATTENTION,
    ExpiryBucket.WARNING,
    ExpiryBucket.NORMAL,
)


@dataclass(frozen=True)
class ExpiryThresholds:
    """
    Upper (inclusive) day limits of the Urgent, Attention and Warning buckets.

    Guarantees:
        - 0 <= urgent_days < attention_days < warning_days.
    """

    urgent_days: int = 30
    attention_days: int = 60
    warning_days: int = 90

    def __post_init__(self) -> None:
        if not 0 <= self.urgent_days < self.attention_days < self.warning_days:
            raise ValueError(
                "Expiry thresholds must satisfy 0 <= urgent < attention < warning, got "
                f"{self.urgent_days}/{self.attention_days}/{self.warning_days}"
            )


DEFAULT_EXPIRY_THRESHOLDS = ExpiryThresholds()


def days_until_expiry(
    end_date: date | None,
    as_of: date | datetime | None = None,
) -> int | None:
    """
    Whole calendar days from ``as_of`` to ``end_date`` (negative once past).

    Time-of-day is ignored on both sides.  ``None`` when there is no end date.
    """
    if end_date is None:
        return None
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    return (end_date - resolve_as_of(as_of)).days


def classify_expiry(
    days: int | None,
    thresholds: ExpiryThresholds | None = None,
) -> ExpiryBucket | None:
    """Full urgency classification; ``None`` in gives ``None`` out."""
    if days is None:
        return None
    t = thresholds or DEFAULT_EXPIRY_THRESHOLDS
    if days < 0:
        return ExpiryBucket.OVERDUE
    if days <= t.urgent_days:
        return ExpiryBucket.URGENT
    if days <= t.attention_days:
        return ExpiryBucket.ATTENTION
    if days <= t.warning_days:
        return ExpiryBucket.WARNING
    return ExpiryBucket.NORMAL


def is_expiring_within(days: int | None, window: int = EXPIRING_SOON_WINDOW) -> bool:
    """True when ``0 <= days <= window``.  Overdue and undated contracts are not."""
    return days is not None and 0 <= days <= window


@dataclass(frozen=True)
class ExpiringContract:
    """A contract with its remaining days and bucket."""

    contract: ContractRecord
    days_until_expiry: int
    bucket: ExpiryBucket


@dataclass(frozen=True)
class ExpiryAnalysis:
    """
    Contracts grouped by expiry bucket.

    Every bucket key is present (possibly empty); each bucket is sorted by
    ascending days, ties broken by contract number.
    """

    as_of: date
    buckets: dict[ExpiryBucket, tuple[ExpiringContract, ...]] = field(default_factory=dict)
    without_end_date: int = 0

    def items(self, bucket: ExpiryBucket) -> tuple[ExpiringContract, ...]:
        return self.buckets.get(bucket, ())

    def count(self, bucket: ExpiryBucket) -> int:
        return len(self.items(bucket))

    @property
    def overdue(self) -> tuple[ExpiringContract, ...]:
        return self.items(ExpiryBucket.OVERDUE)

    @property
    def urgent(self) -> tuple[ExpiringContract, ...]:
        return self.items(ExpiryBucket.URGENT)

    @property
    def attention(self) -> tuple[ExpiringContract, ...]:
        return self.items(ExpiryBucket.ATTENTION)

    @property
    def warning(self) -> tuple[ExpiringContract, ...]:
        return self.items(ExpiryBucket.WARNING)

    @property
    def normal(self) -> tuple[ExpiringContract, ...]:
        return self.items(ExpiryBucket.NORMAL)

    @property
    def total_classified(self) -> int:
        return sum(len(v) for v in self.buckets.values())

    def counts(self) -> dict[str, int]:
        """Bucket label -> count, in urgency order."""
        return {b.value: self.count(b) for b in BUCKET_ORDER}


@traced_engine("expiry", "1.0", fingerprint_fields=("contracts", "as_of", "active_only"))
def analyze_expiry(
    contracts: Sequence[ContractRecord],
    as_of: date | datetime | None = None,
    active_only: bool = True,
    thresholds: ExpiryThresholds | None = None,
) -> ExpiryAnalysis:
    """
    Group contracts into expiry buckets.

    Args:
        contracts: Contracts to classify.
        as_of: Reference date (None reads the system clock).
        active_only: Consider only Active contracts (default).
        thresholds: Bucket limits; defaults to 30/60/90.

    Returns:
        ExpiryAnalysis with contracts lacking an end date counted in
        ``without_end_date`` and absent from every bucket.
    """
    ref = resolve_as_of(as_of)
    grouped: dict[ExpiryBucket, list[ExpiringContract]] = {b: [] for b in BUCKET_ORDER}
    without_end_date = 0

    for contract in contracts:
        if active_only and not contract.is_active:
            continue
        days = days_until_expiry(contract.end_date, ref)
        if days is None:
            without_end_date += 1
            continue
        bucket = classify_expiry(days, thresholds)
        grouped[bucket].append(ExpiringContract(contract, days, bucket))

    buckets = {
        b: tuple(sorted(items, key=lambda i: (i.days_until_expiry, i.contract.contract_number)))
        for b, items in grouped.items()
    }
    analysis = ExpiryAnalysis(as_of=ref, buckets=buckets, without_end_date=without_end_date)

    logger.info(
        "expiry_analyzed",
        extra={"as_of": ref, "counts": analysis.counts(), "without_end_date": without_end_date},
    )
    return analysis
