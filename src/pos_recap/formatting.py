"""Indonesian display formatting for reports.

This module centralizes how money, counts and dates are shown on screen and
in exported documents, so that both renderings print identical figures.
Internal storage keeps dates as YYYY-MM-DD; display uses DD/MM/YYYY.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from pos_recap.utils import coerce_price, parse_date_lenient

# Indonesian day names (Monday through Sunday)
INDONESIAN_DAYS = [
    "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"
]

# Indonesian month names (January through December)
INDONESIAN_MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember"
]

CURRENCY_SYMBOL = "Rp"


def _group_thousands(n: int) -> str:
    return f"{n:,}".replace(",", ".")


def format_currency(amount: object) -> str:
    """Format an amount as whole Rupiah, e.g. 'Rp 150.000'.

    Sub-unit fractions are rounded half away from zero and never shown.
    Missing or non-numeric amounts format as 'Rp 0'.

    Args:
        amount: Amount to format.

    Returns:
        Formatted currency string (e.g., "Rp 1.250.000", "-Rp 500")
    """
    value = Decimal(str(coerce_price(amount)))
    rounded = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {_group_thousands(abs(rounded))}"


def format_count(n: int) -> str:
    """Format an order count with Indonesian grouping, e.g. '1.234'."""
    return _group_thousands(int(n))


def format_date(value: object) -> str:
    """Format a calendar date for display as DD/MM/YYYY.

    Args:
        value: A date, or a date string in any format the lenient parser reads.

    Returns:
        "-" for empty values, the input unchanged when it cannot be parsed,
        otherwise the DD/MM/YYYY form.
    """
    if value is None or value == "":
        return "-"
    parsed = parse_date_lenient(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d/%m/%Y")


def format_timestamp(dt: datetime) -> str:
    """Format a print timestamp like '15/03/2024 10.30.00'."""
    return dt.strftime("%d/%m/%Y %H.%M.%S")


def format_date_long(d: date) -> str:
    """Format date in long Indonesian form like 'Selasa, 5 Maret 2024'.

    Args:
        d: Date object to format

    Returns:
        Formatted date string in Indonesian
    """
    return f"{INDONESIAN_DAYS[d.weekday()]}, {d.day} {INDONESIAN_MONTHS[d.month - 1]} {d.year}"
