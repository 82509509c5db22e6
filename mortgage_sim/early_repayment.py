"""Early-repayment evaluation.

A single lump sum is applied against the balance remaining after a given
month, and the rest of the loan is re-amortized two ways:

* **reduce term** keeps the original installment and finishes earlier;
* **reduce payment** keeps the original end date and lowers the installment.

Both scenarios are priced with full amortization tables and compared with
the interest of the untouched loan.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from .amortization import generate_table
from .data_models import (
    DEFAULT_PREPAYMENT_MONTH,
    EarlyRepaymentResult,
    ReducePaymentScenario,
    ReduceTermScenario,
)
from .errors import InvalidParameter, PrepaymentExceedsBalance
from .formulas import monthly_payment, term_from_payment

logger = logging.getLogger(__name__)


def _savings_percentage(savings: Decimal, baseline: Decimal) -> Decimal:
    if baseline == 0:
        return Decimal("0")
    return savings / baseline * Decimal(100)


def evaluate(
    prepayment_amount: Decimal,
    principal: Decimal,
    rate_per_month: Decimal,
    total_payment_count: int,
    prepayment_month: int = DEFAULT_PREPAYMENT_MONTH,
    payment: Optional[Decimal] = None,
) -> EarlyRepaymentResult:
    """Compare the reduce-term and reduce-payment strategies.

    Parameters
    ----------
    prepayment_amount: Decimal
        Lump sum applied after the regular payment of ``prepayment_month``.
        Callers skip the evaluation entirely when it is not positive.
    principal: Decimal
        Original loan amount.
    rate_per_month: Decimal
        Monthly interest rate as a decimal fraction.
    total_payment_count: int
        Original number of monthly payments.
    prepayment_month: int
        Month after which the lump sum is applied (defaults to 12).
    payment: Decimal, optional
        Original installment; computed from the other inputs when omitted.

    Raises
    ------
    InvalidParameter
        If ``prepayment_month`` is lower than 1.
    PrepaymentExceedsBalance
        If the lump sum clears the remaining balance, including the case of
        a month at or past the end of the term where that balance is zero.
    """
    if prepayment_month < 1:
        raise InvalidParameter("prepayment_month", "must be at least 1")
    if prepayment_month >= total_payment_count:
        raise PrepaymentExceedsBalance(Decimal("0"), prepayment_amount, prepayment_month)
    if payment is None:
        payment = monthly_payment(principal, rate_per_month, total_payment_count)

    original = generate_table(principal, rate_per_month, total_payment_count, payment)
    baseline_interest = original.total_interest
    if prepayment_month > len(original):
        raise PrepaymentExceedsBalance(Decimal("0"), prepayment_amount, prepayment_month)

    remaining_balance = original.balance_after(prepayment_month)
    new_principal = remaining_balance - prepayment_amount
    if new_principal <= 0:
        raise PrepaymentExceedsBalance(remaining_balance, prepayment_amount, prepayment_month)
    interest_before = original.interest_through(prepayment_month)

    # Reduce payment: same end date, smaller installment
    remaining_months = total_payment_count - prepayment_month
    new_payment = monthly_payment(new_principal, rate_per_month, remaining_months)
    payment_table = generate_table(new_principal, rate_per_month, remaining_months, new_payment)
    payment_interest = interest_before + payment_table.total_interest
    payment_savings = baseline_interest - payment_interest

    # Reduce term: same installment, fewer months
    new_remaining_months = term_from_payment(new_principal, rate_per_month, payment)
    term_table = generate_table(new_principal, rate_per_month, new_remaining_months, payment)
    term_interest = interest_before + term_table.total_interest
    term_savings = baseline_interest - term_interest

    logger.debug(
        "Prepayment %s at month %d: balance %s -> %s, term %d -> %d, payment %s -> %s",
        prepayment_amount,
        prepayment_month,
        remaining_balance,
        new_principal,
        total_payment_count,
        prepayment_month + new_remaining_months,
        payment,
        new_payment,
    )

    return EarlyRepaymentResult(
        prepayment_amount=prepayment_amount,
        prepayment_month=prepayment_month,
        baseline_interest=baseline_interest,
        interest_before_prepayment=interest_before,
        reduce_term=ReduceTermScenario(
            monthly_payment=payment,
            original_term_months=total_payment_count,
            new_term_months=prepayment_month + new_remaining_months,
            total_interest=term_interest,
            savings=term_savings,
            savings_percentage=_savings_percentage(term_savings, baseline_interest),
        ),
        reduce_payment=ReducePaymentScenario(
            term_months=total_payment_count,
            original_payment=payment,
            new_payment=new_payment,
            total_interest=payment_interest,
            savings=payment_savings,
            savings_percentage=_savings_percentage(payment_savings, baseline_interest),
        ),
        reduce_term_table=term_table,
        reduce_payment_table=payment_table,
    )
