"""
Single-organization next-posting prediction for interactive queries.

Unlike the batch generators this returns one best month, even when its
confidence is below the batch emission threshold.

With a periodic pattern:
    Step from the latest posting month by the pattern interval (3, 6 or 12)
    until the month is strictly after the current one.
    confidence = min(0.55 + data_bonus + 0.15, 0.9)

Without a pattern (typical-month fallback):
    Earliest typical month later in the current year,
        confidence = min(0.45 + data_bonus, 0.9)
    otherwise the first typical month of next year,
        confidence = min(0.40 + data_bonus, 0.9)
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from recruit_forecaster.engine.forecast import build_evidence
from recruit_forecaster.engine.pattern import detect_pattern, typical_months
from recruit_forecaster.engine.scoring import confidence_level, data_point_bonus
from recruit_forecaster.models.posting import MIN_POSTINGS_FOR_ANALYSIS, Posting
from recruit_forecaster.models.prediction import MAX_CONFIDENCE, NextPostingPrediction
from recruit_forecaster.utils.time_utils import DateLike, YearMonth, add_months, resolve_now

logger = logging.getLogger(__name__)

PATTERN_BASE_CONFIDENCE = 0.55
PATTERN_MATCH_BONUS = 0.15
THIS_YEAR_BASE_CONFIDENCE = 0.45
NEXT_YEAR_BASE_CONFIDENCE = 0.40

EVIDENCE_PER_REASON = 2
EVIDENCE_TOTAL = 3


def predict_next(
    org_name: str,
    postings: Sequence[Posting],
    now: Optional[DateLike] = None,
) -> Optional[NextPostingPrediction]:
    """Predict the month of an organization's next posting.

    Args:
        org_name: Organization display name (copied into the result).
        postings: The organization's postings, in any order.
        now:      Anchor date; defaults to the current UTC time.

    Returns:
        NextPostingPrediction, or ``None`` with fewer than two postings.
    """
    if len(postings) < MIN_POSTINGS_FOR_ANALYSIS:
        logger.debug("No prediction for '%s': only %d posting(s)", org_name, len(postings))
        return None

    current = resolve_now(now)
    pattern = detect_pattern(postings)
    months = typical_months(postings)
    bonus = data_point_bonus(len(postings))

    if pattern is None:
        later_this_year = [m for m in months if m > current.month]
        if later_this_year:
            predicted = YearMonth(current.year, later_this_year[0])
            confidence = THIS_YEAR_BASE_CONFIDENCE + bonus
        else:
            predicted = YearMonth(current.year + 1, months[0])
            confidence = NEXT_YEAR_BASE_CONFIDENCE + bonus
    else:
        step = pattern.interval_months
        latest = max(YearMonth(p.year, p.month_number) for p in postings)
        predicted = add_months(latest.year, latest.month, step)
        while predicted <= current:
            predicted = add_months(predicted.year, predicted.month, step)
        confidence = PATTERN_BASE_CONFIDENCE + bonus + PATTERN_MATCH_BONUS

    confidence = min(confidence, MAX_CONFIDENCE)

    return NextPostingPrediction(
        org_name=org_name,
        predicted_month=predicted.key,
        confidence=round(confidence, 2),
        confidence_level=confidence_level(confidence),
        periodic_pattern=pattern,
        typical_months=tuple(months),
        historical_count=len(postings),
        evidence_jobs=build_evidence(
            postings,
            predicted,
            per_reason_limit=EVIDENCE_PER_REASON,
            total_limit=EVIDENCE_TOTAL,
        ),
    )
