"""Core calculation engine for the mortgage simulator.

This module turns raw input into normalized :class:`LoanParameters`, prices
the loan with the annuity formula, builds the full amortization schedule and,
when a lump-sum prepayment is given, compares the reduce-term and
reduce-payment strategies. Every call is a pure function of its inputs.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from .amortization import generate_table, yearly_summary
from .data_models import (
    DEFAULT_PREPAYMENT_MONTH,
    SCHEDULE_DISPLAY_LIMIT,
    LoanParameters,
    MortgageInput,
    MortgageResult,
    ReferenceRate,
)
from .early_repayment import evaluate
from .errors import InvalidParameter, NonAmortizingPayment, PrepaymentExceedsBalance
from .formulas import monthly_payment, variable_rate
from .utils import add_months, parse_amount, parse_rate, whole_months_between

logger = logging.getLogger(__name__)

MAX_TERM_YEARS = 40
MAX_TERM_MONTHS = MAX_TERM_YEARS * 12
DEFAULT_DIFFERENTIAL = Decimal("1")

TERM_TYPES = ("years", "months", "end_date")
INTEREST_TYPES = ("fixed", "variable")


def _parse_field(field: str, value: object, parser) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidParameter(field, "is required")
    try:
        return parser(value)
    except ValueError as exc:
        raise InvalidParameter(field, str(exc)) from exc


def resolve_rate(
    data: MortgageInput, reference_rate: Optional[ReferenceRate] = None
) -> Decimal:
    """Return the annual rate in percent for ``data``.

    Variable loans are priced at ``reference + differential`` whenever a
    reference rate is available; without one the explicit rate is used, the
    same as for fixed loans.
    """
    interest_type = (data.interest_type or "fixed").lower()
    if interest_type not in INTEREST_TYPES:
        raise InvalidParameter("interest_type", f"must be one of {', '.join(INTEREST_TYPES)}")
    if interest_type == "variable" and reference_rate is not None:
        differential = DEFAULT_DIFFERENTIAL
        if data.differential is not None and str(data.differential).strip():
            differential = _parse_field("differential", data.differential, parse_rate)
        if differential <= 0:
            raise InvalidParameter("differential", "must be positive")
        return variable_rate(reference_rate.value, differential)
    return _parse_field("interest_rate", data.interest_rate, parse_rate)


def resolve_term_months(data: MortgageInput, today: Optional[date] = None) -> int:
    """Convert the term given in years, months or as an end date into months."""
    term_type = (data.term_type or "years").lower()
    if term_type not in TERM_TYPES:
        raise InvalidParameter("term_type", f"must be one of {', '.join(TERM_TYPES)}")

    if term_type == "end_date":
        if data.end_date is None:
            raise InvalidParameter("end_date", "is required when the term is given as an end date")
        months = whole_months_between(today or date.today(), data.end_date)
        if months < 1:
            raise InvalidParameter("end_date", "must be at least one month in the future")
    elif term_type == "years":
        years = _parse_field("term", data.term, parse_amount)
        if years < 1 or years > MAX_TERM_YEARS:
            raise InvalidParameter("term", f"must be between 1 and {MAX_TERM_YEARS} years")
        total = years * 12
        if total != total.to_integral_value():
            raise InvalidParameter("term", "must be a whole number of months")
        months = int(total)
    else:
        value = _parse_field("term", data.term, parse_amount)
        if value != value.to_integral_value():
            raise InvalidParameter("term", "must be a whole number of months")
        months = int(value)

    if months < 1 or months > MAX_TERM_MONTHS:
        raise InvalidParameter("term", f"must be between 1 and {MAX_TERM_MONTHS} months")
    return months


def normalize_input(
    data: MortgageInput,
    today: Optional[date] = None,
    reference_rate: Optional[ReferenceRate] = None,
) -> LoanParameters:
    """Validate raw input and build :class:`LoanParameters` from it."""
    principal = _parse_field("principal", data.principal, parse_amount)
    params = LoanParameters(
        principal=principal,
        annual_rate_percent=resolve_rate(data, reference_rate),
        term_months=resolve_term_months(data, today),
        payment_frequency=(data.payment_frequency or "monthly").lower(),
    )
    validate_parameters(params)
    return params


def validate_parameters(params: LoanParameters) -> None:
    if params.principal <= 0:
        raise InvalidParameter("principal", "must be positive")
    if params.annual_rate_percent <= 0:
        raise InvalidParameter("interest_rate", "must be positive")
    if params.term_months < 1:
        raise InvalidParameter("term", "must be at least one month")
    if params.payment_frequency != "monthly":
        raise InvalidParameter("payment_frequency", "only 'monthly' is supported")


def calculate(
    params: LoanParameters,
    prepayment_amount: object = 0,
    prepayment_month: int = DEFAULT_PREPAYMENT_MONTH,
    schedule_limit: int = SCHEDULE_DISPLAY_LIMIT,
    start_date: Optional[date] = None,
) -> MortgageResult:
    """Price the loan described by ``params``.

    Parameters
    ----------
    params: LoanParameters
        Normalized loan parameters.
    prepayment_amount: Decimal-like
        Optional lump sum; the early-repayment comparison is only computed
        when it is positive.
    prepayment_month: int
        Month after which the lump sum is applied. Months below 1 are
        rejected; a month at or past the end of the term leaves nothing to
        repay and is reported through ``early_repayment_error``.
    schedule_limit: int
        Maximum number of rows exposed in ``MortgageResult.schedule``. The
        interest totals and yearly aggregates always come from the full
        schedule.
    start_date: date, optional
        Signing date; payment ``k`` falls ``k`` months after it. Defaults to
        today.

    Returns
    -------
    MortgageResult
        Totals, the (possibly truncated) schedule and the optional
        early-repayment comparison. When the prepayment clears the balance
        the comparison is omitted and ``early_repayment_error`` says why.
    """
    validate_parameters(params)
    prepayment = _parse_field("prepayment_amount", prepayment_amount or 0, parse_amount)
    if prepayment < 0:
        raise InvalidParameter("prepayment_amount", "must not be negative")
    if prepayment > 0 and prepayment_month < 1:
        raise InvalidParameter("prepayment_month", "must be at least 1")

    start = start_date or date.today()
    rate = params.monthly_rate
    payment = monthly_payment(params.principal, rate, params.term_months)
    table = generate_table(params.principal, rate, params.term_months, payment)
    total_amount = payment * params.term_months
    logger.debug(
        "Calculated %s over %d months at %s%%: payment %s",
        params.principal,
        params.term_months,
        params.annual_rate_percent,
        payment,
    )

    early_repayment = None
    early_repayment_error = None
    if prepayment > 0:
        try:
            early_repayment = evaluate(
                prepayment,
                params.principal,
                rate,
                params.term_months,
                prepayment_month,
                payment,
            )
        except (PrepaymentExceedsBalance, NonAmortizingPayment) as exc:
            logger.info("Early repayment comparison skipped: %s", exc)
            early_repayment_error = str(exc)

    reduce_term_end_date = None
    if early_repayment is not None:
        reduce_term_end_date = add_months(start, early_repayment.reduce_term.new_term_months)

    schedule = table.rows[:schedule_limit]
    return MortgageResult(
        parameters=params,
        monthly_payment=payment,
        total_amount=total_amount,
        total_interest=total_amount - params.principal,
        schedule=schedule,
        schedule_interest=table.total_interest,
        schedule_truncated=len(table) - len(schedule),
        early_repayment=early_repayment,
        early_repayment_error=early_repayment_error,
        yearly=yearly_summary(table),
        start_date=start,
        end_date=add_months(start, params.term_months),
        reduce_term_end_date=reduce_term_end_date,
    )


def calculate_from_input(
    data: MortgageInput,
    today: Optional[date] = None,
    reference_rate: Optional[ReferenceRate] = None,
    schedule_limit: int = SCHEDULE_DISPLAY_LIMIT,
) -> MortgageResult:
    """Normalize raw input and calculate it in one step."""
    params = normalize_input(data, today=today, reference_rate=reference_rate)
    month = DEFAULT_PREPAYMENT_MONTH if data.prepayment_month is None else data.prepayment_month
    return calculate(
        params,
        prepayment_amount=data.prepayment_amount,
        prepayment_month=int(month),
        schedule_limit=schedule_limit,
        start_date=today,
    )
