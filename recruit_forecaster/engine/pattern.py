"""
Periodicity detection over a single organization's posting history.

Detection rules
---------------
1. Sort postings chronologically by ``(year, month_number)``.
2. Intervals are the month gaps between consecutive postings; gaps of zero
   (several postings in one month) are dropped.
3. With no intervals there is no pattern.
4. If ``pstdev / mean > 0.6`` the history is too irregular: no pattern.
5. The mean interval is bucketed:

       [2, 4]  -> quarterly
       [5, 8]  -> semiannual
       [9, 15] -> annual
       other   -> no pattern

Matching a detected pattern against a candidate month only uses the
organization's own month-of-year distribution; no calendar months are
hard-coded.
"""

from __future__ import annotations

import math
import statistics
from collections import Counter
from typing import Iterable, Optional, Sequence

from recruit_forecaster.models.posting import Posting
from recruit_forecaster.taxonomy.posting_taxonomy import PeriodicPattern

MAX_RELATIVE_STDDEV = 0.6
TYPICAL_MONTH_COUNT = 4

# (low, high, pattern): inclusive bounds on the mean interval in months.
_INTERVAL_BUCKETS: tuple[tuple[float, float, PeriodicPattern], ...] = (
    (2.0, 4.0, PeriodicPattern.QUARTERLY),
    (5.0, 8.0, PeriodicPattern.SEMIANNUAL),
    (9.0, 15.0, PeriodicPattern.ANNUAL),
)


def sort_postings(postings: Iterable[Posting]) -> list[Posting]:
    """Return postings in chronological order (stable for equal months)."""
    return sorted(postings, key=lambda p: (p.year, p.month_number))


def posting_intervals(postings: Iterable[Posting]) -> list[int]:
    """Return the positive month gaps between consecutive postings."""
    ordered = sort_postings(postings)
    intervals: list[int] = []
    for prev, curr in zip(ordered, ordered[1:]):
        gap = curr.ordinal - prev.ordinal
        if gap > 0:
            intervals.append(gap)
    return intervals


def classify_intervals(intervals: Sequence[int]) -> Optional[PeriodicPattern]:
    """Classify an interval list; ``None`` when irregular or out of range."""
    if not intervals:
        return None

    mean = statistics.fmean(intervals)
    std_dev = statistics.pstdev(intervals)
    if mean > 0 and std_dev / mean > MAX_RELATIVE_STDDEV:
        return None

    for low, high, pattern in _INTERVAL_BUCKETS:
        if low <= mean <= high:
            return pattern
    return None


def detect_pattern(postings: Iterable[Posting]) -> Optional[PeriodicPattern]:
    """Detect the re-posting interval of one organization.

    Independent of input order. Never raises: a missing or irregular pattern
    is ``None``.

    Args:
        postings: The organization's postings, in any order.

    Returns:
        The detected ``PeriodicPattern``, or ``None``.
    """
    return classify_intervals(posting_intervals(postings))


def _quarter(month: int) -> int:
    return math.ceil(month / 3)


def is_pattern_match(
    pattern: Optional[PeriodicPattern],
    target_month: int,
    postings: Iterable[Posting],
) -> bool:
    """Return ``True`` if ``target_month`` fits ``pattern`` for this history.

    Rules:
        quarterly  : target's quarter equals the quarter of any past posting.
        semiannual : target equals, or is exactly 6 months from, any past month.
        annual     : target equals any past posting month.
        None       : never matches.
    """
    historical_months = {p.month_number for p in postings}

    if pattern == PeriodicPattern.QUARTERLY:
        target_quarter = _quarter(target_month)
        return any(_quarter(m) == target_quarter for m in historical_months)
    if pattern == PeriodicPattern.SEMIANNUAL:
        return any(abs(target_month - m) in (0, 6) for m in historical_months)
    if pattern == PeriodicPattern.ANNUAL:
        return target_month in historical_months
    return False


def month_frequencies(postings: Iterable[Posting]) -> Counter[int]:
    """Count postings per calendar month number, in first-seen order."""
    return Counter(p.month_number for p in postings)


def typical_months(
    postings: Iterable[Posting],
    limit: int = TYPICAL_MONTH_COUNT,
) -> list[int]:
    """Return the organization's most frequent posting months, ascending.

    The ``limit`` most frequent month numbers are kept; ties go to the month
    that appears first in ``postings``.
    """
    counts = month_frequencies(postings)
    # Counter preserves first-seen order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return sorted(month for month, _ in ranked[:limit])
