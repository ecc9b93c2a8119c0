"""
Tests for client and profitability rollups.

Covers:
- Grouping of Active contracts, the "Sem Cliente" sentinel
- Ordering and top-N truncation
- The strict billed > 1.2 * canceled profitability heuristic
- Zero denominators
"""

from decimal import Decimal

from clm_engines.clients import (
    NO_CLIENT_LABEL,
    is_profitable,
    profitability_rate,
    rollup_by_client,
    rollup_profitability,
)
from clm_kernel.domain.contract import ContractStatus


class TestRollupByClient:
    """Tests for rollup_by_client."""

    def test_groups_and_totals(self, make_contract):
        contracts = [
            make_contract("1", client="Alfa", value="1000", billed="500"),
            make_contract("2", client="Alfa", value="3000", billed="500"),
            make_contract("3", client="Beta", value="500", billed="500"),
        ]

        rollups = rollup_by_client(contracts)

        assert [r.client_name for r in rollups] == ["Alfa", "Beta"]
        alfa = rollups[0]
        assert alfa.contract_count == 2
        assert alfa.total_value == Decimal("4000")
        assert alfa.total_billed == Decimal("1000")
        assert alfa.average_value == Decimal("2000")
        assert alfa.billing_rate == Decimal("25")

    def test_every_active_contract_counted_once(self, make_contract):
        contracts = [
            make_contract("1", client="Alfa"),
            make_contract("2", client=" Alfa "),
            make_contract("3", client=None),
            make_contract("4", client="   "),
            make_contract("5", client="Beta", status=ContractStatus.CLOSED),
        ]

        rollups = rollup_by_client(contracts)

        assert sum(r.contract_count for r in rollups) == 4
        names = {r.client_name: r.contract_count for r in rollups}
        assert names == {"Alfa": 2, NO_CLIENT_LABEL: 2}

    def test_ties_broken_by_name(self, make_contract):
        contracts = [
            make_contract("1", client="Gama", value="100"),
            make_contract("2", client="Beta", value="100"),
        ]

        assert [r.client_name for r in rollup_by_client(contracts)] == ["Beta", "Gama"]

    def test_top_n(self, make_contract):
        contracts = [make_contract(str(i), client=f"C{i}", value=i * 100) for i in range(1, 8)]

        top = rollup_by_client(contracts, top_n=5)

        assert len(top) == 5
        assert top[0].client_name == "C7"

    def test_zero_value_client_has_zero_billing_rate(self, make_contract):
        rollups = rollup_by_client([make_contract("1", value="0", billed="10")])

        assert rollups[0].billing_rate == Decimal("0")

    def test_empty_input(self):
        assert rollup_by_client([]) == ()


class TestProfitability:
    """Tests for the profitability heuristic and rollup."""

    def test_billed_130_canceled_100_is_profitable(self, make_contract):
        assert is_profitable(make_contract(billed="130", canceled="100"))

    def test_billed_120_canceled_100_is_not_profitable(self, make_contract):
        """Equality with 1.2 * canceled is not enough."""
        assert not is_profitable(make_contract(billed="120", canceled="100"))

    def test_zero_amounts_not_profitable(self, make_contract):
        assert not is_profitable(make_contract())

    def test_custom_multiplier(self, make_contract):
        assert is_profitable(make_contract(billed="120", canceled="100"), Decimal("1.1"))

    def test_rollup_profit_and_margin(self, make_contract):
        contracts = [
            make_contract("1", client="Alfa", value="1000", billed="600", canceled="100"),
            make_contract("2", client="Alfa", value="1000", billed="100", canceled="100"),
            make_contract("3", client="Beta", value="1000", billed="900", canceled="0"),
        ]

        rollups = rollup_profitability(contracts)

        assert [r.client_name for r in rollups] == ["Beta", "Alfa"]
        alfa = rollups[1]
        assert alfa.profit == Decimal("500")
        assert alfa.margin == Decimal("25")
        assert alfa.profitable_contracts == 1
        assert alfa.total_canceled == Decimal("200")

    def test_rollup_top_n(self, make_contract):
        contracts = [make_contract(str(i), client=f"C{i}", billed=i) for i in range(10)]

        assert len(rollup_profitability(contracts, top_n=8)) == 8

    def test_profitability_rate(self, make_contract):
        contracts = [
            make_contract("1", billed="130", canceled="100"),
            make_contract("2", billed="120", canceled="100"),
            make_contract("3", billed="10", status=ContractStatus.EXPIRED),
        ]

        assert profitability_rate(contracts) == Decimal("50")

    def test_profitability_rate_without_active_contracts(self, make_contract):
        assert profitability_rate([make_contract(status=ContractStatus.CLOSED)]) == Decimal("0")
