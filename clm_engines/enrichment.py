"""
Module: clm_engines.enrichment
Responsibility:
    Layer the transient derived fields (days until expiry, expiry bucket,
    stage check) on top of contract records for list and detail views.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Records are never mutated; enrichment wraps them.
    - Every contract in one ``enrich_contracts`` call shares one resolved
      reference date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

from clm_kernel.domain.clock import resolve_as_of
from clm_kernel.domain.contract import ContractRecord
from clm_engines.expiry import (
    ExpiryBucket,
    ExpiryThresholds,
    classify_expiry,
    days_until_expiry,
)
from clm_engines.stages import StageCheck, check_stage
from clm_engines.tracer import traced_engine


@dataclass(frozen=True)
class EnrichedContract:
    """A contract record plus its derived fields."""

    contract: ContractRecord
    days_until_expiry: int | None
    expiry_bucket: ExpiryBucket | None
    stage_check: StageCheck

    @property
    def expected_stage(self) -> str | None:
        return self.stage_check.expected_stage

    @property
    def is_on_time(self) -> bool | None:
        return self.stage_check.is_on_time


def enrich_contract(
    contract: ContractRecord,
    as_of: date | datetime | None = None,
    thresholds: ExpiryThresholds | None = None,
) -> EnrichedContract:
    ref = resolve_as_of(as_of)
    days = days_until_expiry(contract.end_date, ref)
    return EnrichedContract(
        contract=contract,
        days_until_expiry=days,
        expiry_bucket=classify_expiry(days, thresholds),
        stage_check=check_stage(contract, ref),
    )


@traced_engine("enrichment", "1.0", fingerprint_fields=("contracts", "as_of"))
def enrich_contracts(
    contracts: Sequence[ContractRecord],
    as_of: date | datetime | None = None,
    thresholds: ExpiryThresholds | None = None,
) -> tuple[EnrichedContract, ...]:
    """Enrich every contract against a single reference date, preserving order."""
    ref = resolve_as_of(as_of)
    return tuple(enrich_contract(c, ref, thresholds) for c in contracts)
