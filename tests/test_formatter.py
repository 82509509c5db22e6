from datetime import date
from decimal import Decimal

import pytest

from mortgage_sim.data_models import LoanParameters, TermSpan
from mortgage_sim.engine import calculate
from mortgage_sim.formatter import (
    format_european,
    format_term,
    print_early_repayment,
    print_summary,
    result_to_dict,
)


class TestFormatEuropean:
    @pytest.mark.parametrize(
        "value, decimals, expected",
        [
            (1234.56, 2, "1.234,56"),
            (Decimal("1234567.891"), 2, "1.234.567,89"),
            (Decimal("843.2080"), 2, "843,21"),
            (0, 2, "0,00"),
            (Decimal("2.4505"), 3, "2,451"),
            (150000, 0, "150.000"),
        ],
    )
    def test_values(self, value, decimals, expected):
        assert format_european(value, decimals) == expected

    def test_none(self):
        assert format_european(None) == ""


class TestFormatTerm:
    def test_years_and_months(self):
        assert format_term(TermSpan(years=26, months=3)) == "26 years 3 months"

    def test_single_units(self):
        assert format_term(TermSpan(years=1, months=1)) == "1 year 1 month"

    def test_zero(self):
        assert format_term(TermSpan(years=0, months=0)) == "0 months"


class TestResultToDict:
    def test_keys(self, standard_loan):
        data = result_to_dict(calculate(standard_loan))
        assert data["monthlyPayment"] == 843.21
        assert data["termMonths"] == 360
        assert len(data["schedule"]) == 360
        assert data["schedule"][0] == {
            "month": 1,
            "payment": 843.21,
            "principal": 343.21,
            "interest": 500.0,
            "cumulativeInterest": 500.0,
            "remainingBalance": 199656.79,
        }
        assert "earlyRepayment" not in data
        assert "yearly" not in data

    def test_early_repayment(self, default_form_loan):
        data = result_to_dict(calculate(default_form_loan, prepayment_amount=10000))
        early = data["earlyRepayment"]
        assert early["prepaymentMonth"] == 12
        assert early["reduceTerm"]["originalTerm"] == {"years": 30, "months": 0}
        assert early["reducePayment"]["term"] == {"years": 30, "months": 0}
        assert early["reducePayment"]["newPayment"] < early["reducePayment"]["originalPayment"]

    def test_yearly(self, standard_loan):
        data = result_to_dict(calculate(standard_loan), include_yearly=True)
        assert len(data["yearly"]) == 30
        assert data["yearly"][0]["year"] == 1

    def test_yearly_ignores_display_cap(self):
        params = LoanParameters(Decimal("300000"), Decimal("4"), 480)
        data = result_to_dict(calculate(params), include_yearly=True)
        assert len(data["schedule"]) == 360
        assert len(data["yearly"]) == 40
        assert data["yearly"][-1]["ending_balance"] == 0.0

    def test_dates(self, default_form_loan):
        result = calculate(default_form_loan, prepayment_amount=10000, start_date=date(2024, 1, 15))
        data = result_to_dict(result)
        assert data["startDate"] == "2024-01-15"
        assert data["endDate"] == "2054-01-15"
        assert data["earlyRepayment"]["reduceTerm"]["endDate"] == result.reduce_term_end_date.isoformat()

    def test_error_is_reported(self, default_form_loan):
        data = result_to_dict(calculate(default_form_loan, prepayment_amount=500000))
        assert "earlyRepayment" not in data
        assert data["earlyRepaymentError"]


class TestPrinting:
    def test_summary(self, standard_loan, capsys):
        print_summary(calculate(standard_loan))
        out = capsys.readouterr().out
        assert "Monthly payment    : 843,21" in out
        assert "30 years" in out

    def test_summary_last_payment(self, standard_loan, capsys):
        print_summary(calculate(standard_loan, start_date=date(2024, 5, 2)))
        assert "Last payment       : 2054-05-02" in capsys.readouterr().out

    def test_early_repayment(self, default_form_loan, capsys):
        result = calculate(default_form_loan, prepayment_amount=10000)
        print_early_repayment(result.early_repayment)
        out = capsys.readouterr().out
        assert "Reduce term" in out
        assert "Reduce payment" in out
        assert "after month 12" in out
