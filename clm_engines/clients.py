"""
Module: clm_engines.clients
Responsibility:
    Per-client rollups over Active contracts: value/billing totals
    (``rollup_by_client``) and profitability (``rollup_profitability``),
    plus the per-contract profitability heuristic and the portfolio
    profitability rate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Every Active contract lands in exactly one group; a missing or blank
      client name groups under ``NO_CLIENT_LABEL``.
    - average_value, billing_rate, margin and profitability_rate are 0
      when their denominators are 0.
    - Output order is total: client rollups by total value descending,
      profitability rollups by profit descending, ties by client name.
    - A contract is profitable when billed > multiplier * canceled
      (strict).  The 1.2 multiplier is a heuristic, configurable via
      ``RollupSettings.profitability_multiplier``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from clm_kernel.domain.contract import ContractRecord
from clm_kernel.domain.values import ZERO, percentage
from clm_kernel.logging_config import get_logger
from clm_engines.financial import active_contracts
from clm_engines.tracer import traced_engine

logger = get_logger("engines.clients")

NO_CLIENT_LABEL = "Sem Cliente"
PROFITABILITY_MULTIPLIER = Decimal("1.2")


def client_key(contract: ContractRecord, no_client_label: str = NO_CLIENT_LABEL) -> str:
    """The grouping key of a contract: its trimmed client name or the sentinel."""
    name = (contract.client_name or "").strip()
    return name or no_client_label


def _group(
    contracts: Sequence[ContractRecord],
    no_client_label: str,
) -> dict[str, list[ContractRecord]]:
    groups: dict[str, list[ContractRecord]] = {}
    for contract in active_contracts(contracts):
        groups.setdefault(client_key(contract, no_client_label), []).append(contract)
    return groups


@dataclass(frozen=True)
class ClientRollup:
    """Value and billing totals of one client's Active contracts."""

    client_name: str
    contract_count: int
    total_value: Decimal
    total_billed: Decimal
    average_value: Decimal
    billing_rate: Decimal


@traced_engine("client_rollup", "1.0", fingerprint_fields=("contracts", "top_n"))
def rollup_by_client(
    contracts: Sequence[ContractRecord],
    top_n: int | None = None,
    no_client_label: str = NO_CLIENT_LABEL,
) -> tuple[ClientRollup, ...]:
    """
    Group Active contracts by client.

    Args:
        contracts: Contracts of any status; only Active ones are grouped.
        top_n: Keep only the first N clients after sorting (None keeps all).
        no_client_label: Group name for contracts without a client.

    Returns:
        Rollups sorted by total value descending, then client name.
    """
    rollups = []
    for name, group in _group(contracts, no_client_label).items():
        total_value = sum((c.contract_value for c in group), ZERO)
        total_billed = sum((c.billed_value for c in group), ZERO)
        count = len(group)
        rollups.append(
            ClientRollup(
                client_name=name,
                contract_count=count,
                total_value=total_value,
                total_billed=total_billed,
                average_value=total_value / count if count else ZERO,
                billing_rate=percentage(total_billed, total_value),
            )
        )
    rollups.sort(key=lambda r: (-r.total_value, r.client_name))
    if top_n is not None:
        rollups = rollups[:top_n]
    return tuple(rollups)


def is_profitable(
    contract: ContractRecord,
    multiplier: Decimal = PROFITABILITY_MULTIPLIER,
) -> bool:
    """billed > multiplier * canceled (strict)."""
    return contract.billed_value > multiplier * contract.canceled_value


@dataclass(frozen=True)
class ProfitabilityRollup:
    """Profit and margin of one client's Active contracts."""

    client_name: str
    contract_count: int
    total_value: Decimal
    total_billed: Decimal
    total_canceled: Decimal
    profit: Decimal
    margin: Decimal
    profitable_contracts: int


@traced_engine("profitability_rollup", "1.0", fingerprint_fields=("contracts", "top_n"))
def rollup_profitability(
    contracts: Sequence[ContractRecord],
    top_n: int | None = None,
    no_client_label: str = NO_CLIENT_LABEL,
    multiplier: Decimal = PROFITABILITY_MULTIPLIER,
) -> tuple[ProfitabilityRollup, ...]:
    """
    Per-client profit (billed - canceled) and margin (profit / value * 100).

    Returns:
        Rollups sorted by profit descending, then client name.
    """
    rollups = []
    for name, group in _group(contracts, no_client_label).items():
        total_value = sum((c.contract_value for c in group), ZERO)
        total_billed = sum((c.billed_value for c in group), ZERO)
        total_canceled = sum((c.canceled_value for c in group), ZERO)
        profit = total_billed - total_canceled
        rollups.append(
            ProfitabilityRollup(
                client_name=name,
                contract_count=len(group),
                total_value=total_value,
                total_billed=total_billed,
                total_canceled=total_canceled,
                profit=profit,
                margin=percentage(profit, total_value),
                profitable_contracts=sum(1 for c in group if is_profitable(c, multiplier)),
            )
        )
    rollups.sort(key=lambda r: (-r.profit, r.client_name))
    if top_n is not None:
        rollups = rollups[:top_n]
    return tuple(rollups)


def profitability_rate(
    contracts: Sequence[ContractRecord],
    multiplier: Decimal = PROFITABILITY_MULTIPLIER,
) -> Decimal:
    """Profitable Active contracts / Active contracts * 100 (0 if none Active)."""
    active = active_contracts(contracts)
    profitable = sum(1 for c in active if is_profitable(c, multiplier))
    return percentage(Decimal(profitable), Decimal(len(active)))
