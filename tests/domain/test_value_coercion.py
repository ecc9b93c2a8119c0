"""
Tests for raw value coercion (amounts, dates, text) and guarded percentages.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from clm_kernel.domain.values import ZERO, percentage, to_amount, to_date, to_text


class TestToAmount:
    """Amounts are always finite Decimals."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("R$ 1.234,56", Decimal("1234.56")),
            ("1,234.56", Decimal("1234.56")),
            ("1234,5", Decimal("1234.5")),
            ("1.234.567", Decimal("1234567")),
            ("1234.56", Decimal("1234.56")),
            ("-10,00", Decimal("-10.00")),
            (1500, Decimal("1500")),
            (12.5, Decimal("12.5")),
            (Decimal("3.10"), Decimal("3.10")),
        ],
    )
    def test_formats(self, raw, expected):
        assert to_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "-", float("nan"), float("inf"), True])
    def test_garbage_is_zero(self, raw):
        assert to_amount(raw) == ZERO

    def test_never_returns_float(self):
        assert isinstance(to_amount(0.1), Decimal)
        assert to_amount(0.1) == Decimal("0.1")


class TestToDate:
    """Dates parse from ISO and day-first strings."""

    def test_iso(self):
        assert to_date("2026-03-01") == date(2026, 3, 1)

    def test_iso_with_time(self):
        assert to_date("2026-03-01T10:00:00Z") == date(2026, 3, 1)

    def test_day_first(self):
        assert to_date("01/03/2026") == date(2026, 3, 1)
        assert to_date("1-3-2026") == date(2026, 3, 1)

    def test_datetime_truncated(self):
        assert to_date(datetime(2026, 3, 1, 23, 0)) == date(2026, 3, 1)

    @pytest.mark.parametrize("raw", [None, "", "not a date", "31/02/2026", "2026/13/01"])
    def test_unparseable_is_none(self, raw):
        assert to_date(raw) is None


class TestToText:
    def test_strips(self):
        assert to_text("  abc ") == "abc"

    def test_blank_is_none(self):
        assert to_text("   ") is None
        assert to_text(None) is None


class TestPercentage:
    def test_ratio(self):
        assert percentage(Decimal("1"), Decimal("4")) == Decimal("25")

    def test_zero_denominator(self):
        assert percentage(Decimal("10"), ZERO) == ZERO
