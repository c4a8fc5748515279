"""
Calendar-month utilities for posting forecasts.

Key concepts:
  - Month arithmetic: forecasts move in whole calendar months, so dates are
    reduced to ``(year, month)`` pairs and shifted without day-of-month
    rollover surprises.
  - Target windows: helpers for producing the ``"YYYY-MM"`` months a forecast
    covers, anchored on an explicit "now".
  - Clock: ``utcnow()`` is the single place the wall clock is read; engine
    functions accept ``now`` as a parameter and only fall back to it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import NamedTuple, Optional, Union

DateLike = Union[date, datetime]

# Forecast windows never reach further than a year ahead.
MAX_WINDOW_MONTHS = 12


class YearMonth(NamedTuple):
    """A calendar month; orders chronologically."""

    year: int
    month: int

    @property
    def key(self) -> str:
        """``"YYYY-MM"`` representation."""
        return f"{self.year:04d}-{self.month:02d}"


def add_months(year: int, month: int, months: int) -> YearMonth:
    """Shift a calendar month by ``months`` (may be negative).

    Args:
        year: Starting year.
        month: Starting month, 1–12.
        months: Number of months to add.

    Returns:
        The shifted ``YearMonth``.
    """
    total = year * 12 + (month - 1) + months
    return YearMonth(total // 12, total % 12 + 1)


def parse_month_key(key: str) -> YearMonth:
    """Parse a ``"YYYY-MM"`` string.

    Raises:
        ValueError: If ``key`` is not a valid month key.
    """
    try:
        year_str, month_str = key.strip().split("-")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise ValueError(f"Cannot parse month '{key}'. Expected format: YYYY-MM.")
    if len(year_str) != 4 or not 1 <= month <= 12:
        raise ValueError(f"Cannot parse month '{key}'. Expected format: YYYY-MM.")
    return YearMonth(year, month)


def resolve_now(now: Optional[DateLike] = None) -> YearMonth:
    """Return the calendar month of ``now``, defaulting to the current UTC month."""
    if now is None:
        now = utcnow()
    return YearMonth(now.year, now.month)


def target_months(
    now: YearMonth,
    window_months: int,
    include_current: bool = False,
) -> list[YearMonth]:
    """Generate the months a forecast window covers.

    Args:
        now: Anchor month.
        window_months: Number of months to walk forward.
        include_current: When ``True`` the anchor month itself is month 0 and
            the window spans ``window_months + 1`` entries.

    Returns:
        Chronologically ordered list of ``YearMonth``.

    Raises:
        ValueError: If ``window_months`` is negative.
    """
    if window_months < 0:
        raise ValueError(f"window_months must be >= 0, got {window_months}.")
    start = 0 if include_current else 1
    return [add_months(now.year, now.month, i) for i in range(start, window_months + 1)]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
