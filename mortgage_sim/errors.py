"""Error taxonomy for the mortgage calculation engine.

Every condition is detected synchronously and raised straight to the caller.
All classes derive from ``ValueError`` so that code written against plain
``ValueError`` (as the CLI parsers are) keeps working.
"""

from __future__ import annotations

from decimal import Decimal


class MortgageError(ValueError):
    """Base class for every error raised by the engine."""


class InvalidParameter(MortgageError):
    """A loan parameter is missing, non-numeric or out of range."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class NonAmortizingPayment(MortgageError):
    """The payment does not cover the first month's interest."""

    def __init__(self, principal: Decimal, monthly_rate: Decimal, payment: Decimal) -> None:
        interest = principal * monthly_rate
        super().__init__(
            f"Payment {payment:.2f} does not exceed the monthly interest "
            f"{interest:.2f}; the loan never amortizes"
        )
        self.principal = principal
        self.monthly_rate = monthly_rate
        self.payment = payment


class PrepaymentExceedsBalance(MortgageError):
    """The lump sum pays off (or overshoots) the balance at the prepayment month."""

    def __init__(self, remaining_balance: Decimal, prepayment_amount: Decimal, month: int) -> None:
        super().__init__(
            f"Prepayment {prepayment_amount:.2f} at month {month} is not lower than "
            f"the remaining balance {remaining_balance:.2f}"
        )
        self.remaining_balance = remaining_balance
        self.prepayment_amount = prepayment_amount
        self.month = month
