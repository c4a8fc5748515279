"""
Tests for recruit_forecaster/utils/time_utils.py.

What we test
------------
  - add_months() across year boundaries in both directions.
  - parse_month_key() accepts YYYY-MM and rejects everything else.
  - resolve_now() reduces dates to their month; defaults to a UTC month.
  - target_months() with and without the current month; negative windows.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from recruit_forecaster.utils.time_utils import (
    YearMonth,
    add_months,
    parse_month_key,
    resolve_now,
    target_months,
    utcnow,
)


class TestAddMonths:
    def test_forward_rollover(self):
        assert add_months(2024, 11, 3) == YearMonth(2025, 2)

    def test_backward_rollover(self):
        assert add_months(2024, 2, -3) == YearMonth(2023, 11)

    def test_zero(self):
        assert add_months(2024, 5, 0) == YearMonth(2024, 5)

    def test_whole_years(self):
        assert add_months(2024, 12, 24) == YearMonth(2026, 12)


class TestParseMonthKey:
    def test_valid(self):
        assert parse_month_key("2025-07") == YearMonth(2025, 7)

    def test_key_round_trip(self):
        assert YearMonth(2025, 7).key == "2025-07"

    @pytest.mark.parametrize("bad", ["2025", "2025-13", "2025-00", "25-01", "2025-01-01", "abcd-ef", ""])
    def test_invalid(self, bad):
        with pytest.raises(ValueError, match="YYYY-MM"):
            parse_month_key(bad)


class TestResolveNow:
    def test_from_date(self):
        assert resolve_now(date(2025, 3, 31)) == YearMonth(2025, 3)

    def test_from_datetime(self):
        assert resolve_now(datetime(2025, 12, 31, 23, 59)) == YearMonth(2025, 12)

    def test_default_is_current_utc_month(self):
        now = datetime.now(tz=timezone.utc)
        assert resolve_now() in {YearMonth(now.year, now.month), add_months(now.year, now.month, 1)}

    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is not None


class TestTargetMonths:
    def test_excludes_current(self):
        assert target_months(YearMonth(2024, 11), 3) == [
            YearMonth(2024, 12), YearMonth(2025, 1), YearMonth(2025, 2),
        ]

    def test_includes_current(self):
        result = target_months(YearMonth(2024, 11), 2, include_current=True)
        assert result == [YearMonth(2024, 11), YearMonth(2024, 12), YearMonth(2025, 1)]

    def test_zero_window(self):
        assert target_months(YearMonth(2024, 11), 0) == []
        assert target_months(YearMonth(2024, 11), 0, include_current=True) == [YearMonth(2024, 11)]

    def test_negative_window(self):
        with pytest.raises(ValueError):
            target_months(YearMonth(2024, 11), -1)
