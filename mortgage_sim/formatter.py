"""Output helpers for the mortgage simulator.

This module renders results as tab-separated text for the terminal and
converts them into JSON-serialisable dictionaries for file export and the web
API. Amounts are shown in European notation (``1.234,56``) because the
simulator targets euro mortgages.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional

from .data_models import (
    AmortizationRow,
    EarlyRepaymentResult,
    MortgageResult,
    TermSpan,
)


def format_european(value: object, decimals: int = 2) -> str:
    """Format a number with dots grouping thousands and a decimal comma.

    ``1234.56`` becomes ``"1.234,56"``. ``None`` is rendered as an empty
    string.
    """
    if value is None:
        return ""
    number = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    text = f"{number:,.{decimals}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_term(span: TermSpan) -> str:
    parts = []
    if span.years:
        parts.append(f"{span.years} year{'s' if span.years != 1 else ''}")
    if span.months or not parts:
        parts.append(f"{span.months} month{'s' if span.months != 1 else ''}")
    return " ".join(parts)


def _money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def print_summary(result: MortgageResult) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    params = result.parameters
    print("Summary")
    print("-" * 72)
    print(f"Principal          : {format_european(params.principal)}")
    print(f"Annual rate        : {format_european(params.annual_rate_percent)}%")
    print(f"Term               : {format_term(TermSpan.from_months(params.term_months))}")
    print(f"Monthly payment    : {format_european(result.monthly_payment)}")
    print(f"Total amount       : {format_european(result.total_amount)}")
    print(f"Total interest     : {format_european(result.total_interest)}")
    if result.end_date is not None:
        print(f"Last payment       : {result.end_date.isoformat()}")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationRow]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Month", "Payment", "Principal", "Interest", "CumInterest", "Balance"]
    print("\t".join(headers))
    for row in schedule:
        print(
            "\t".join(
                [
                    str(row.month),
                    format_european(row.payment),
                    format_european(row.principal),
                    format_european(row.interest),
                    format_european(row.cumulative_interest),
                    format_european(row.remaining_balance),
                ]
            )
        )


def print_early_repayment(early: EarlyRepaymentResult) -> None:
    """Print the reduce-term and reduce-payment strategies side by side."""
    term = early.reduce_term
    payment = early.reduce_payment
    print(
        f"Early repayment of {format_european(early.prepayment_amount)} "
        f"after month {early.prepayment_month}"
    )
    print("=" * 72)
    print(f"{'':24s} {'Reduce term':>22s} {'Reduce payment':>22s}")
    print(f"{'Monthly payment':24s} {format_european(term.monthly_payment):>22s} {format_european(payment.new_payment):>22s}")
    print(f"{'Payment reduction':24s} {'-':>22s} {format_european(payment.payment_reduction):>22s}")
    print(f"{'Term':24s} {format_term(term.new_term):>22s} {format_term(payment.term):>22s}")
    print(f"{'Term reduction':24s} {format_term(term.term_reduction):>22s} {'-':>22s}")
    print(f"{'Total interest':24s} {format_european(term.total_interest):>22s} {format_european(payment.total_interest):>22s}")
    print(f"{'Interest saved':24s} {format_european(term.savings):>22s} {format_european(payment.savings):>22s}")
    print(f"{'Saved (%)':24s} {format_european(term.savings_percentage):>22s} {format_european(payment.savings_percentage):>22s}")
    print("=" * 72)


def schedule_to_dicts(schedule: Iterable[AmortizationRow]) -> List[Dict[str, Any]]:
    """Convert schedule rows into JSON-serialisable dictionaries for charts."""
    serialized = []
    for row in schedule:
        serialized.append(
            {
                "month": row.month,
                "payment": _money(row.payment),
                "principal": _money(row.principal),
                "interest": _money(row.interest),
                "cumulativeInterest": _money(row.cumulative_interest),
                "remainingBalance": _money(row.remaining_balance),
            }
        )
    return serialized


def _span_to_dict(span: TermSpan) -> Dict[str, int]:
    return {"years": span.years, "months": span.months}


def early_repayment_to_dict(early: EarlyRepaymentResult) -> Dict[str, Any]:
    term = early.reduce_term
    payment = early.reduce_payment
    return {
        "prepaymentAmount": _money(early.prepayment_amount),
        "prepaymentMonth": early.prepayment_month,
        "baselineInterest": _money(early.baseline_interest),
        "reduceTerm": {
            "monthlyPayment": _money(term.monthly_payment),
            "originalTerm": _span_to_dict(term.original_term),
            "termReduction": _span_to_dict(term.term_reduction),
            "newTerm": _span_to_dict(term.new_term),
            "totalInterest": _money(term.total_interest),
            "savings": _money(term.savings),
            "savingsPercentage": _money(term.savings_percentage),
        },
        "reducePayment": {
            "term": _span_to_dict(payment.term),
            "originalPayment": _money(payment.original_payment),
            "newPayment": _money(payment.new_payment),
            "paymentReduction": _money(payment.payment_reduction),
            "totalInterest": _money(payment.total_interest),
            "savings": _money(payment.savings),
            "savingsPercentage": _money(payment.savings_percentage),
        },
    }


def result_to_dict(result: MortgageResult, include_yearly: bool = False) -> Dict[str, Any]:
    """Serialise a :class:`MortgageResult` with camelCase keys."""
    params = result.parameters
    data: Dict[str, Any] = {
        "principal": _money(params.principal),
        "annualInterestRatePercent": float(params.annual_rate_percent),
        "termMonths": params.term_months,
        "monthlyPayment": _money(result.monthly_payment),
        "totalAmount": _money(result.total_amount),
        "totalInterest": _money(result.total_interest),
        "startDate": _iso(result.start_date),
        "endDate": _iso(result.end_date),
        "schedule": schedule_to_dicts(result.schedule),
        "scheduleTruncated": result.schedule_truncated,
    }
    if result.early_repayment is not None:
        early = early_repayment_to_dict(result.early_repayment)
        early["reduceTerm"]["endDate"] = _iso(result.reduce_term_end_date)
        data["earlyRepayment"] = early
    if result.early_repayment_error:
        data["earlyRepaymentError"] = result.early_repayment_error
    if include_yearly:
        data["yearly"] = [
            {key: (_money(value) if isinstance(value, Decimal) else value) for key, value in year.items()}
            for year in result.yearly
        ]
    return data
