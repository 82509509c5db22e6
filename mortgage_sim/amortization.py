"""Month-by-month amortization tables.

:func:`generate_table` always walks the full term so that ``total_interest``
is exact; truncating a schedule for display is left to the caller.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from .data_models import AmortizationRow, AmortizationTable
from .errors import InvalidParameter

logger = logging.getLogger(__name__)

# Balances below half a cent are treated as fully repaid
_RESIDUAL = Decimal("0.005")


def generate_table(
    principal: Decimal,
    rate_per_month: Decimal,
    payment_count: int,
    payment: Decimal,
) -> AmortizationTable:
    """Build the amortization table for a fixed payment.

    Parameters
    ----------
    principal: Decimal
        Balance at the start of month 1.
    rate_per_month: Decimal
        Monthly interest rate as a decimal fraction.
    payment_count: int
        Maximum number of rows to generate.
    payment: Decimal
        Installment paid every month.

    Returns
    -------
    AmortizationTable
        Rows for months ``1..payment_count``, or fewer when the balance is
        repaid early because the payment overshoots.
    """
    if payment_count <= 0:
        raise InvalidParameter("payment_count", "must be a positive number of months")

    balance = principal
    total_interest = Decimal("0")
    rows: List[AmortizationRow] = []
    for month in range(1, payment_count + 1):
        interest = balance * rate_per_month
        principal_portion = payment - interest
        balance -= principal_portion
        total_interest += interest
        # Round very small residuals down to zero to avoid phantom balances
        if balance < _RESIDUAL:
            balance = Decimal("0")
        rows.append(
            AmortizationRow(
                month=month,
                payment=payment,
                interest=interest,
                principal=principal_portion,
                remaining_balance=balance,
                cumulative_interest=total_interest,
            )
        )
        if balance <= 0:
            break

    logger.debug(
        "Generated %d of %d rows for principal %s (total interest %s)",
        len(rows),
        payment_count,
        principal,
        total_interest,
    )
    return AmortizationTable(rows=tuple(rows), total_interest=total_interest)


def yearly_summary(table: AmortizationTable) -> List[Dict[str, object]]:
    """Aggregate an amortization table by loan year.

    Returns a list of dicts with keys: year, payments, principal, interest,
    ending_balance, cumulative_interest, cumulative_principal. A trailing
    partial year is reported as its own entry.
    """
    yearly: List[Dict[str, object]] = []
    year_principal = Decimal("0")
    year_interest = Decimal("0")
    year_payments = Decimal("0")
    cumulative_principal = Decimal("0")

    for row in table.rows:
        year_principal += row.principal
        year_interest += row.interest
        year_payments += row.payment
        cumulative_principal += row.principal

        if row.month % 12 == 0 or row.month == len(table.rows):
            yearly.append({
                "year": (row.month - 1) // 12 + 1,
                "payments": year_payments,
                "principal": year_principal,
                "interest": year_interest,
                "ending_balance": row.remaining_balance,
                "cumulative_interest": row.cumulative_interest,
                "cumulative_principal": cumulative_principal,
            })
            year_principal = Decimal("0")
            year_interest = Decimal("0")
            year_payments = Decimal("0")

    return yearly
