"""Utility functions for the mortgage simulator.

This module provides helpers for parsing user input into Python data types and
for handling dates, including adding months and counting whole calendar months
between two dates. Amounts may be typed the way Spanish users type them
(``150.000`` or ``150.000,50``) as well as in plain or shorthand form
(``150000``, ``150k``).
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from decimal import Decimal, InvalidOperation, getcontext

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

_GROUPED_THOUSANDS = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` or ``YYYY-MM`` string into a ``date``.

    When the day component is missing the first day of the month is used.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def whole_months_between(start: date, end: date) -> int:
    """Count the whole calendar months from ``start`` to ``end``.

    A month only counts once its day-of-month has been reached, so
    2024-01-15 to 2024-03-14 is one month. Never negative.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(0, months)


def to_decimal(value: object) -> Decimal:
    """Convert an ``int``, ``float``, ``str`` or ``Decimal`` into a ``Decimal``."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid numeric value: {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


def parse_amount(value: object) -> Decimal:
    """Parse a currency amount.

    Accepts plain numbers (``"500000"``), shorthand with ``k``/``m``
    suffixes (``"500k"``) and European notation where dots group thousands
    and a comma marks decimals (``"150.000"``, ``"1.234,56"``).
    """
    if not isinstance(value, str):
        return to_decimal(value)
    text = value.strip().lower().replace(" ", "").replace("€", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    elif _GROUPED_THOUSANDS.match(text):
        text = text.replace(".", "")
    return to_decimal(text) * factor


def parse_rate(value: object) -> Decimal:
    """Parse a percentage such as ``"3"``, ``"3,25"`` or ``"3.25%"``."""
    if not isinstance(value, str):
        return to_decimal(value)
    text = value.strip().rstrip("%").strip().replace(",", ".")
    return to_decimal(text)
