"""Date window resolution for report presets.

A preset names a reporting period relative to "now" (today, this week, this
month, this year, all time) or a custom range typed in by the user. The
resolver turns it into an inclusive ``DateWindow`` of instants; ``None`` on
either side means unbounded.

Weeks start on Monday. Upper bounds are end-of-day, 23:59:59.999.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from pos_recap.utils import end_of_day, parse_date_lenient, start_of_day

logger = logging.getLogger(__name__)


class Preset(str, Enum):
    """Named reporting periods."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ALL_TIME = "all-time"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str | Preset) -> Preset:
        """Return the preset named by ``value``.

        Raises:
            ValueError: If ``value`` names no preset.
        """
        if isinstance(value, Preset):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            names = ", ".join(p.value for p in cls)
            raise ValueError(f"Invalid preset '{value}'. Must be one of: {names}.") from None


@dataclass(frozen=True)
class DateWindow:
    """Inclusive instant range; a None bound is unbounded on that side."""

    start: datetime | None = None
    end: datetime | None = None

    @property
    def unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, d: date | None) -> bool:
        """Return True if the calendar day ``d`` (taken at 00:00) lies in the window.

        A missing date lies only in a fully unbounded window.
        """
        if d is None:
            return self.unbounded
        instant = start_of_day(d)
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant > self.end:
            return False
        return True


def resolve_window(
    preset: Preset | str,
    now: datetime,
    custom_from: str | None = None,
    custom_to: str | None = None,
) -> DateWindow:
    """Resolve a preset into a concrete date window.

    Args:
        preset: Preset or preset name.
        now: Reference instant.
        custom_from: Start date string, used only by the custom preset.
        custom_to: End date string, used only by the custom preset.

    Returns:
        The resolved window. For the custom preset an empty or unparseable
        string leaves that side unbounded, and a reversed range is swapped
        so that start <= end.

    Raises:
        ValueError: If ``preset`` names no preset.

    Examples:
        >>> resolve_window("monthly", datetime(2024, 3, 15))
        DateWindow(start=datetime.datetime(2024, 3, 1, 0, 0), end=datetime.datetime(2024, 3, 31, 23, 59, 59, 999000))

    """
    preset = Preset.parse(preset)
    today = now.date()

    if preset is Preset.DAILY:
        window = DateWindow(start_of_day(today), end_of_day(today))
    elif preset is Preset.WEEKLY:
        monday = today - timedelta(days=today.weekday())
        window = DateWindow(start_of_day(monday), end_of_day(monday + timedelta(days=6)))
    elif preset is Preset.MONTHLY:
        last_day = calendar.monthrange(today.year, today.month)[1]
        window = DateWindow(
            start_of_day(today.replace(day=1)),
            end_of_day(today.replace(day=last_day)),
        )
    elif preset is Preset.YEARLY:
        window = DateWindow(
            start_of_day(date(today.year, 1, 1)),
            end_of_day(date(today.year, 12, 31)),
        )
    elif preset is Preset.ALL_TIME:
        window = DateWindow()
    elif preset is Preset.CUSTOM:
        start = parse_date_lenient(custom_from)
        end = parse_date_lenient(custom_to)
        if start is not None and end is not None and start > end:
            logger.info("Custom range %s > %s; swapping bounds", start, end)
            start, end = end, start
        window = DateWindow(
            start_of_day(start) if start is not None else None,
            end_of_day(end) if end is not None else None,
        )
    else:  # pragma: no cover - every Preset member is handled above
        raise AssertionError(f"Unhandled preset {preset!r}")

    logger.debug("Resolved %s window: %s to %s", preset.value, window.start, window.end)
    return window


def format_period(window: DateWindow) -> str:
    """Describe a window for report headers.

    Returns 'Semua Waktu' (all time) for an unbounded window, otherwise
    'YYYY-MM-DD s/d YYYY-MM-DD' with 'awal'/'akhir' standing in for an open
    start/end.
    """
    if window.unbounded:
        return "Semua Waktu"
    start = window.start.date().isoformat() if window.start else "awal"
    end = window.end.date().isoformat() if window.end else "akhir"
    return f"{start} s/d {end}"
