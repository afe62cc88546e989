"""Tests for date window resolution."""

from datetime import date, datetime

import pytest

from pos_recap.reports.window import DateWindow, Preset, format_period, resolve_window
from pos_recap.utils import END_OF_DAY

NOW = datetime(2024, 3, 15, 14, 30)  # a Friday


def test_daily_window_covers_today() -> None:
    window = resolve_window("daily", NOW)
    assert window.start == datetime(2024, 3, 15)
    assert window.end == datetime.combine(date(2024, 3, 15), END_OF_DAY)


def test_weekly_window_starts_on_monday() -> None:
    window = resolve_window(Preset.WEEKLY, NOW)
    assert window.start == datetime(2024, 3, 11)
    assert window.end == datetime(2024, 3, 17, 23, 59, 59, 999000)


def test_weekly_window_on_sunday_belongs_to_previous_monday() -> None:
    window = resolve_window("weekly", datetime(2024, 3, 17, 9, 0))
    assert window.start == datetime(2024, 3, 11)
    assert window.end.date() == date(2024, 3, 17)


def test_monthly_window_in_leap_february() -> None:
    window = resolve_window("monthly", datetime(2024, 2, 10))
    assert window.start == datetime(2024, 2, 1)
    assert window.end == datetime(2024, 2, 29, 23, 59, 59, 999000)


def test_monthly_window_example() -> None:
    window = resolve_window("monthly", NOW)
    assert window == DateWindow(datetime(2024, 3, 1), datetime(2024, 3, 31, 23, 59, 59, 999000))


def test_yearly_window() -> None:
    window = resolve_window("yearly", NOW)
    assert window.start == datetime(2024, 1, 1)
    assert window.end == datetime(2024, 12, 31, 23, 59, 59, 999000)


def test_all_time_window_is_unbounded() -> None:
    window = resolve_window("all-time", NOW)
    assert window.start is None
    assert window.end is None
    assert window.unbounded


def test_custom_window_with_both_bounds() -> None:
    window = resolve_window("custom", NOW, "2024-03-01", "2024-03-10")
    assert window.start == datetime(2024, 3, 1)
    assert window.end == datetime(2024, 3, 10, 23, 59, 59, 999000)


def test_custom_window_with_empty_start_is_open() -> None:
    window = resolve_window("custom", NOW, "", "2024-03-10")
    assert window.start is None
    assert window.end == datetime(2024, 3, 10, 23, 59, 59, 999000)


def test_custom_window_with_unparseable_bounds_is_unbounded() -> None:
    window = resolve_window("custom", NOW, "kemarin", None)
    assert window.unbounded


def test_custom_window_swaps_reversed_bounds() -> None:
    window = resolve_window("custom", NOW, "2024-03-10", "2024-03-01")
    assert window.start == datetime(2024, 3, 1)
    assert window.end.date() == date(2024, 3, 10)


def test_custom_bounds_ignored_for_other_presets() -> None:
    assert resolve_window("daily", NOW, "2020-01-01", "2020-12-31") == resolve_window("daily", NOW)


def test_unknown_preset_raises() -> None:
    with pytest.raises(ValueError, match="Invalid preset"):
        resolve_window("quarterly", NOW)


def test_preset_parse_is_case_insensitive() -> None:
    assert Preset.parse(" Monthly ") is Preset.MONTHLY


@pytest.mark.parametrize("preset", ["daily", "weekly", "monthly", "yearly"])
def test_window_contains_now(preset: str) -> None:
    window = resolve_window(preset, NOW)
    assert window.start <= NOW <= window.end


def test_contains_is_inclusive_on_both_ends() -> None:
    window = resolve_window("custom", NOW, "2024-03-01", "2024-03-10")
    assert window.contains(date(2024, 3, 1))
    assert window.contains(date(2024, 3, 10))
    assert not window.contains(date(2024, 2, 29))
    assert not window.contains(date(2024, 3, 11))


def test_missing_date_only_in_unbounded_window() -> None:
    assert DateWindow().contains(None)
    assert not resolve_window("monthly", NOW).contains(None)
    assert not DateWindow(start=datetime(2024, 1, 1)).contains(None)


def test_format_period() -> None:
    assert format_period(DateWindow()) == "Semua Waktu"
    assert format_period(resolve_window("monthly", NOW)) == "2024-03-01 s/d 2024-03-31"
    assert format_period(DateWindow(end=datetime(2024, 3, 10))) == "awal s/d 2024-03-10"
    assert format_period(DateWindow(start=datetime(2024, 3, 1))) == "2024-03-01 s/d akhir"
