"""Closed-form annuity formulas.

The two functions here are inverses of each other: :func:`monthly_payment`
turns a principal, rate and payment count into a fixed installment, and
:func:`term_from_payment` recovers the number of installments needed to
repay a principal with a given installment.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal, getcontext

from .errors import InvalidParameter, NonAmortizingPayment

getcontext().prec = 28  # increase precision for financial calculations

# ln() results are rounded to this many places before taking the ceiling
_TERM_QUANTUM = Decimal("1e-9")


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert a nominal annual rate in percent to a monthly decimal rate."""
    return annual_rate_percent / Decimal(100) / Decimal(12)


def variable_rate(reference_rate: Decimal, differential: Decimal) -> Decimal:
    """Total rate of a variable loan: benchmark plus the bank's spread."""
    return reference_rate + differential


def monthly_payment(principal: Decimal, rate_per_month: Decimal, payment_count: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if payment_count <= 0:
        raise InvalidParameter("payment_count", "must be a positive number of months")
    if rate_per_month < 0:
        raise InvalidParameter("monthly_rate", "must not be negative")
    if rate_per_month == 0:
        return principal / Decimal(payment_count)
    factor = (1 + rate_per_month) ** payment_count
    return principal * (rate_per_month * factor) / (factor - 1)


def term_from_payment(principal: Decimal, rate_per_month: Decimal, payment: Decimal) -> int:
    """Return how many installments of ``payment`` repay ``principal``.

    The formula is:

        n = ceil(ln(A / (A - P * i)) / ln(1 + i))

    Raises
    ------
    NonAmortizingPayment
        If ``payment`` is not larger than the first month's interest
        ``P * i``; no finite term exists in that case.
    """
    if rate_per_month < 0:
        raise InvalidParameter("monthly_rate", "must not be negative")
    first_interest = principal * rate_per_month
    if payment <= first_interest:
        raise NonAmortizingPayment(principal, rate_per_month, payment)
    if rate_per_month == 0:
        raw = principal / payment
    else:
        raw = (payment / (payment - first_interest)).ln() / (1 + rate_per_month).ln()
    return int(raw.quantize(_TERM_QUANTUM).to_integral_value(rounding=ROUND_CEILING))
