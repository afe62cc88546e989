"""Shared utilities for POS Recap.

This module provides the date and number coercions used at the boundary
between raw collections and the report engine:

- Strict date parsing for values we produce ourselves (YYYY-MM-DD)
- Lenient date parsing for user and API input (never raises)
- Price coercion (never raises)
- Day boundary helpers

Examples:
    >>> from pos_recap.utils import parse_date_lenient, coerce_price
    >>> parse_date_lenient("2024-03-05")
    datetime.date(2024, 3, 5)
    >>> parse_date_lenient("not a date") is None
    True
    >>> coerce_price("abc")
    0.0

"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time

import pandas as pd

logger = logging.getLogger(__name__)

# Last representable instant of a day at millisecond precision
END_OF_DAY = time(23, 59, 59, 999000)


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Args:
        s: Date string in ISO format (YYYY-MM-DD).

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2024-01-15")
        datetime.date(2024, 1, 15)

    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def parse_date_lenient(value: object) -> date | None:
    """Parse a calendar date from user or API input.

    Accepts ``date``/``datetime`` objects and strings pandas can read
    (``2024-03-05``, ``2024-03-05T10:00:00Z``, ...). Empty strings, ``None``,
    other types and unparseable text all yield ``None``.

    Args:
        value: Raw value to parse.

    Returns:
        The calendar date, or None if the value is not a usable date.

    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        ts = pd.to_datetime(value.strip(), errors="coerce")
    except (ValueError, TypeError, OverflowError):
        ts = pd.NaT
    if pd.isna(ts):
        logger.debug("Unparseable date value %r", value)
        return None
    return ts.date()


def coerce_price(value: object) -> float:
    """Coerce a raw price into a finite float.

    Missing, non-numeric and non-finite values become 0.0.

    Examples:
        >>> coerce_price("150000")
        150000.0
        >>> coerce_price(None)
        0.0

    """
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def start_of_day(d: date) -> datetime:
    """Return 00:00:00.000 on the given day."""
    return datetime.combine(d, time.min)


def end_of_day(d: date) -> datetime:
    """Return 23:59:59.999 on the given day."""
    return datetime.combine(d, END_OF_DAY)
