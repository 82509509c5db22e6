from datetime import date
from decimal import Decimal

import pytest

from mortgage_sim.utils import (
    add_months,
    parse_amount,
    parse_date,
    parse_rate,
    to_decimal,
    whole_months_between,
)


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("150000", Decimal("150000")),
            ("150.000", Decimal("150000")),
            ("1.234.567", Decimal("1234567")),
            ("1.234,56", Decimal("1234.56")),
            ("10.000,5", Decimal("10000.5")),
            ("200000.50", Decimal("200000.50")),
            ("500k", Decimal("500000")),
            ("1.5m", Decimal("1500000")),
            (" 150.000 € ", Decimal("150000")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    def test_numbers_pass_through(self):
        assert parse_amount(1500) == Decimal("1500")
        assert parse_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("text", ["abc", "", "nan", "inf"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestParseRate:
    def test_decimal_comma(self):
        assert parse_rate("3,25") == Decimal("3.25")

    def test_percent_sign(self):
        assert parse_rate("2,451%") == Decimal("2.451")

    def test_float(self):
        assert parse_rate(3.5) == Decimal("3.5")


class TestToDecimal:
    def test_rejects_none_and_bool(self):
        with pytest.raises(ValueError):
            to_decimal(None)
        with pytest.raises(ValueError):
            to_decimal(True)


class TestDates:
    def test_parse_full_date(self):
        assert parse_date("2054-01-15") == date(2054, 1, 15)

    def test_parse_year_month(self):
        assert parse_date("2054-01") == date(2054, 1, 1)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_date("2054-13-01")

    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_whole_months(self):
        assert whole_months_between(date(2024, 1, 15), date(2054, 1, 15)) == 360

    def test_whole_months_day_not_reached(self):
        assert whole_months_between(date(2024, 1, 15), date(2024, 3, 14)) == 1
        assert whole_months_between(date(2024, 1, 31), date(2024, 2, 29)) == 0

    def test_whole_months_floored_at_zero(self):
        assert whole_months_between(date(2024, 5, 1), date(2023, 5, 1)) == 0
