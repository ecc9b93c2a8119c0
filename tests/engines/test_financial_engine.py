"""
Tests for the financial aggregator and dashboard stats.

Covers:
- Totals and billing percentage over Active contracts
- Zero denominators
- Dashboard counts: expiring/urgent windows over Active contracts,
  value totals over every contract
"""

from decimal import Decimal

from clm_engines.financial import (
    FinancialSummary,
    summarize_dashboard,
    summarize_financials,
)
from clm_kernel.domain.contract import ContractStatus


class TestSummarizeFinancials:
    """Tests for summarize_financials."""

    def test_three_contract_scenario(self, make_contract):
        """Values 1000/2000/0 billed 500/0/0 -> 3000, 500, 16.67%."""
        contracts = [
            make_contract("A", value="1000", billed="500"),
            make_contract("B", value="2000"),
            make_contract("C", value="0"),
        ]

        summary = summarize_financials(contracts)

        assert summary.contract_count == 3
        assert summary.total_contract_value == Decimal("3000")
        assert summary.total_billed == Decimal("500")
        assert round(summary.billing_percentage, 2) == Decimal("16.67")

    def test_only_active_contracts_count(self, make_contract):
        contracts = [
            make_contract("A", value="1000"),
            make_contract("B", value="5000", status=ContractStatus.EXPIRED),
        ]

        assert summarize_financials(contracts).total_contract_value == Decimal("1000")
        assert summarize_financials(contracts, active_only=False).total_contract_value == Decimal("6000")

    def test_to_bill_and_canceled_totals(self, make_contract):
        contracts = [
            make_contract("A", value="100", to_bill="40", canceled="10"),
            make_contract("B", value="100", to_bill="60", canceled="5"),
        ]

        summary = summarize_financials(contracts)

        assert summary.total_to_bill == Decimal("100")
        assert summary.total_canceled == Decimal("15")

    def test_zero_value_gives_zero_percentage(self, make_contract):
        summary = summarize_financials([make_contract("A", value="0", billed="50")])

        assert summary.billing_percentage == Decimal("0")

    def test_empty_input(self):
        assert summarize_financials([]) == FinancialSummary.empty()


class TestSummarizeDashboard:
    """Tests for the dashboard stat cards."""

    def test_window_counts(self, make_contract, as_of):
        contracts = [
            make_contract("A", end_in_days=0),
            make_contract("B", end_in_days=30),
            make_contract("C", end_in_days=31),
            make_contract("D", end_in_days=60),
            make_contract("E", end_in_days=61),
            make_contract("F", end_in_days=-1),
            make_contract("G"),
        ]

        stats = summarize_dashboard(contracts, as_of)

        assert stats.expiring_soon == 4
        assert stats.urgent == 2
        assert stats.active_contracts == 7

    def test_windows_ignore_inactive_contracts(self, make_contract, as_of):
        contracts = [
            make_contract("A", end_in_days=10, status=ContractStatus.RENEWED),
            make_contract("B", end_in_days=10),
        ]

        stats = summarize_dashboard(contracts, as_of)

        assert stats.expiring_soon == 1
        assert stats.urgent == 1

    def test_totals_span_all_statuses(self, make_contract, as_of):
        contracts = [
            make_contract("A", value="1000", billed="250"),
            make_contract("B", value="3000", billed="750", status=ContractStatus.EXPIRED),
        ]

        stats = summarize_dashboard(contracts, as_of)

        assert stats.total_contracts == 2
        assert stats.expired_contracts == 1
        assert stats.total_value == Decimal("4000")
        assert stats.total_billed == Decimal("1000")
        assert stats.billing_progress == Decimal("25")

    def test_custom_windows(self, make_contract, as_of):
        contracts = [make_contract("A", end_in_days=40)]

        stats = summarize_dashboard(contracts, as_of, expiring_window=45, urgent_window=40)

        assert stats.expiring_soon == 1
        assert stats.urgent == 1

    def test_empty_input(self, as_of):
        stats = summarize_dashboard([], as_of)

        assert stats.total_contracts == 0
        assert stats.total_value == Decimal("0")
        assert stats.billing_progress == Decimal("0")
