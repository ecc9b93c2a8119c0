"""
Tests for health metrics and their traffic-light rating.

Covers:
- Rates over Active contracts
- Risk window 0..60, contracts without end date never at risk
- Zero denominators
- Inclusive rating boundaries and threshold validation
"""

from decimal import Decimal

import pytest

from clm_engines.health import (
    HealthLevel,
    HealthThresholds,
    compute_health,
    rate_health,
)
from clm_kernel.domain.contract import ContractStatus


class TestComputeHealth:
    """Tests for compute_health."""

    def test_rates(self, make_contract, as_of):
        contracts = [
            make_contract("1", value="1000", billed="800", canceled="100", end_in_days=200),
            make_contract("2", value="1000", billed="100", canceled="100", end_in_days=200),
        ]

        metrics = compute_health(contracts, as_of)

        assert metrics.total_contracts == 2
        assert metrics.profitable_contracts == 1
        assert metrics.profitability_rate == Decimal("50")
        assert metrics.billing_efficiency == Decimal("45")
        assert metrics.cancellation_rate == Decimal("10")

    def test_risk_window(self, make_contract, as_of):
        contracts = [
            make_contract("1", end_in_days=0),
            make_contract("2", end_in_days=60),
            make_contract("3", end_in_days=61),
            make_contract("4", end_in_days=-1),
            make_contract("5", end_in_days=10, status=ContractStatus.CLOSED),
        ]

        assert compute_health(contracts, as_of).risk_contracts == 2

    def test_no_end_date_counts_in_totals_not_risk(self, make_contract, as_of):
        contracts = [make_contract("1", value="500")]

        metrics = compute_health(contracts, as_of)

        assert metrics.risk_contracts == 0
        assert metrics.total_contracts == 1
        assert metrics.total_contract_value == Decimal("500")

    def test_zero_denominators(self, as_of):
        metrics = compute_health([], as_of)

        assert metrics.profitability_rate == Decimal("0")
        assert metrics.billing_efficiency == Decimal("0")
        assert metrics.cancellation_rate == Decimal("0")


class TestRateHealth:
    """Tests for rate_health."""

    def _metrics(self, make_contract, as_of, **amounts):
        return compute_health([make_contract("1", **amounts)], as_of)

    def test_good_at_boundary(self, make_contract, as_of):
        metrics = self._metrics(make_contract, as_of, value="100", billed="80", canceled="10")

        rating = rate_health(metrics)

        assert rating.billing_efficiency == HealthLevel.GOOD
        assert rating.cancellation == HealthLevel.GOOD
        assert rating.profitability == HealthLevel.GOOD
        assert rating.risk == HealthLevel.GOOD

    def test_warn_band(self, make_contract, as_of):
        metrics = self._metrics(make_contract, as_of, value="100", billed="60", canceled="20")

        rating = rate_health(metrics)

        assert rating.billing_efficiency == HealthLevel.WARN
        assert rating.cancellation == HealthLevel.WARN

    def test_bad_band(self, make_contract, as_of):
        metrics = self._metrics(make_contract, as_of, value="100", billed="59", canceled="21")

        rating = rate_health(metrics)

        assert rating.billing_efficiency == HealthLevel.BAD
        assert rating.cancellation == HealthLevel.BAD

    def test_risk_bands(self, make_contract, as_of):
        few = [make_contract(str(i), end_in_days=5) for i in range(3)]
        many = [make_contract(str(i), end_in_days=5) for i in range(4)]

        assert rate_health(compute_health(few, as_of)).risk == HealthLevel.WARN
        assert rate_health(compute_health(many, as_of)).risk == HealthLevel.BAD

    def test_thresholds_validated(self):
        with pytest.raises(ValueError):
            HealthThresholds(good_rate=Decimal("50"), warn_rate=Decimal("60"))
