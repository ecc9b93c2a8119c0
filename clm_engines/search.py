"""
Module: clm_engines.search
Responsibility:
    Multi-criteria filtering of enriched contracts for the search view.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Unset criteria (None / blank) never exclude anything.
    - Text comparisons are trimmed and case-insensitive; the search term
      and client criteria match substrings, the analyst criterion matches
      the whole name.
    - A contract lacking the date a criterion inspects is excluded by that
      criterion only.
    - Input order is preserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from clm_kernel.domain.contract import ContractStatus, NegotiationType
from clm_engines.enrichment import EnrichedContract
from clm_engines.expiry import ExpiryBucket


def _fold(value: str | None) -> str:
    return (value or "").strip().casefold()


@dataclass(frozen=True)
class ContractFilter:
    """Search criteria; every field is optional."""

    search_term: str | None = None
    status: ContractStatus | None = None
    negotiation_type: NegotiationType | None = None
    client: str | None = None
    analyst: str | None = None
    expiry_bucket: ExpiryBucket | None = None
    value_min: Decimal | None = None
    value_max: Decimal | None = None
    start_from: date | None = None
    start_to: date | None = None
    end_from: date | None = None
    end_to: date | None = None

    def matches(self, item: EnrichedContract) -> bool:
        c = item.contract

        term = _fold(self.search_term)
        if term:
            haystack = (
                c.contract_number,
                c.client_name,
                c.client_group,
                c.analyst_name,
                c.object_description,
            )
            if not any(term in _fold(v) for v in haystack):
                return False

        if self.status is not None and c.status != self.status:
            return False
        if self.negotiation_type is not None and c.negotiation_type != self.negotiation_type:
            return False
        if _fold(self.client) and _fold(self.client) not in _fold(c.client_name):
            return False
        if _fold(self.analyst) and _fold(self.analyst) != _fold(c.analyst_name):
            return False
        if self.expiry_bucket is not None and item.expiry_bucket != self.expiry_bucket:
            return False

        if self.value_min is not None and c.contract_value < self.value_min:
            return False
        if self.value_max is not None and c.contract_value > self.value_max:
            return False

        if not _within(c.start_date, self.start_from, self.start_to):
            return False
        if not _within(c.end_date, self.end_from, self.end_to):
            return False
        return True


def _within(value: date | None, lower: date | None, upper: date | None) -> bool:
    if lower is None and upper is None:
        return True
    if value is None:
        return False
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


def filter_contracts(
    enriched: Iterable[EnrichedContract],
    criteria: ContractFilter,
) -> list[EnrichedContract]:
    """The enriched contracts matching every set criterion, in input order."""
    return [item for item in enriched if criteria.matches(item)]
