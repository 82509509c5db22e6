"""Data models for the mortgage simulator.

This module defines dataclasses representing the entities used by the
engine: the normalized loan parameters, individual amortization rows and the
table they form, the two early-repayment scenarios and the final result
handed back to callers. Using dataclasses makes it easy to construct,
inspect and serialize these structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

DEFAULT_PREPAYMENT_MONTH = 12
SCHEDULE_DISPLAY_LIMIT = 360


@dataclass(frozen=True)
class LoanParameters:
    """Normalized numeric parameters of a fixed-rate loan.

    Attributes
    ----------
    principal: Decimal
        Amount borrowed, in currency units.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``3`` means 3 %).
    term_months: int
        Number of monthly payments.
    payment_frequency: str
        Only ``"monthly"`` is supported.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    term_months: int
    payment_frequency: str = "monthly"

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate_percent / Decimal(100) / Decimal(12)


@dataclass(frozen=True)
class AmortizationRow:
    """One month of an amortization schedule.

    ``interest + principal == payment`` holds for every row; the final row
    may carry a principal portion larger than the balance it clears, in which
    case ``remaining_balance`` is clamped to zero.
    """

    month: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_balance: Decimal
    cumulative_interest: Decimal


@dataclass(frozen=True)
class AmortizationTable:
    """An ordered, immutable sequence of rows plus the interest they add up to."""

    rows: Tuple[AmortizationRow, ...]
    total_interest: Decimal

    def __len__(self) -> int:
        return len(self.rows)

    def balance_after(self, month: int) -> Decimal:
        """Remaining balance immediately after the payment of ``month``."""
        if month < 1 or month > len(self.rows):
            raise IndexError(f"Month {month} is outside the schedule (1..{len(self.rows)})")
        return self.rows[month - 1].remaining_balance

    def interest_through(self, month: int) -> Decimal:
        """Interest paid in months ``1..month`` inclusive."""
        return sum((row.interest for row in self.rows[:month]), Decimal("0"))


@dataclass(frozen=True)
class TermSpan:
    years: int
    months: int

    @classmethod
    def from_months(cls, total: int) -> "TermSpan":
        return cls(years=total // 12, months=total % 12)

    @property
    def total_months(self) -> int:
        return self.years * 12 + self.months


@dataclass(frozen=True)
class ReduceTermScenario:
    """Keep the monthly payment, finish the loan earlier."""

    monthly_payment: Decimal
    original_term_months: int
    new_term_months: int
    total_interest: Decimal
    savings: Decimal
    savings_percentage: Decimal

    @property
    def term_reduction_months(self) -> int:
        return self.original_term_months - self.new_term_months

    @property
    def original_term(self) -> TermSpan:
        return TermSpan.from_months(self.original_term_months)

    @property
    def new_term(self) -> TermSpan:
        return TermSpan.from_months(self.new_term_months)

    @property
    def term_reduction(self) -> TermSpan:
        return TermSpan.from_months(self.term_reduction_months)


@dataclass(frozen=True)
class ReducePaymentScenario:
    """Keep the term, lower the monthly payment."""

    term_months: int
    original_payment: Decimal
    new_payment: Decimal
    total_interest: Decimal
    savings: Decimal
    savings_percentage: Decimal

    @property
    def payment_reduction(self) -> Decimal:
        return self.original_payment - self.new_payment

    @property
    def term(self) -> TermSpan:
        return TermSpan.from_months(self.term_months)


@dataclass(frozen=True)
class EarlyRepaymentResult:
    """Both repayment strategies evaluated for one lump-sum prepayment."""

    prepayment_amount: Decimal
    prepayment_month: int
    baseline_interest: Decimal
    interest_before_prepayment: Decimal
    reduce_term: ReduceTermScenario
    reduce_payment: ReducePaymentScenario
    reduce_term_table: AmortizationTable = field(repr=False)
    reduce_payment_table: AmortizationTable = field(repr=False)


@dataclass
class MortgageInput:
    """Raw input as collected by a form or the command line.

    Numeric fields may be strings in European notation (``"150.000"``,
    ``"3,5"``); :func:`mortgage_sim.engine.normalize_input` turns them into a
    :class:`LoanParameters`.
    """

    principal: object
    term: object
    term_type: str = "years"  # 'years', 'months' or 'end_date'
    interest_rate: object = None
    interest_type: str = "fixed"  # 'fixed' or 'variable'
    differential: object = None
    end_date: Optional[date] = None
    prepayment_amount: object = None
    prepayment_month: Optional[int] = DEFAULT_PREPAYMENT_MONTH  # None means the default
    payment_frequency: str = "monthly"


@dataclass(frozen=True)
class ReferenceRate:
    """A benchmark rate observation supplied by the rate service."""

    value: Decimal
    date: str
    raw_value: str = ""


@dataclass
class MortgageResult:
    """Everything a caller needs to render one calculation."""

    parameters: LoanParameters
    monthly_payment: Decimal
    total_amount: Decimal
    total_interest: Decimal
    schedule: Tuple[AmortizationRow, ...]
    schedule_interest: Decimal
    schedule_truncated: int = 0
    early_repayment: Optional[EarlyRepaymentResult] = None
    early_repayment_error: Optional[str] = None
    # per loan-year aggregates of the full schedule, not the display slice
    yearly: List[Dict[str, object]] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reduce_term_end_date: Optional[date] = None
