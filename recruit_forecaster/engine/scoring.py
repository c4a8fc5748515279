"""
Confidence scoring for a single (organization, target month) pair.

Score formula (additive, clamped to 0.90)
-----------------------------------------
    confidence = min(
        last_year_bonus      # 0.40 if posted in this month one year earlier
        + frequency_score    # up to 0.25, relative month frequency
        + pattern_bonus      # 0.20 if the target month fits the pattern
        + data_bonus,        # up to 0.15, log-scaled posting count
        0.90,
    )

Component explanations
----------------------
frequency_score (0–0.25):
    ``adj_freq / adj_max * 0.25`` where ``freq`` is the number of postings in
    the target's month-of-year and ``max`` the busiest month's count. When
    the last-year bonus applied, the posting that earned it is already
    counted once, so both values are decremented by 1 (floored at 0).
    ``adj_max == 0`` contributes nothing.

data_bonus (0–0.15):
    ``min(log10(n + 1) / 1.2, 1) * 0.15``. Saturates at n ≈ 15 postings;
    the first few postings move it most.

Emission and display
--------------------
    MIN_EMIT_CONFIDENCE = 0.50   pairs below are dropped by the generators
    >= 0.70 -> high,  >= 0.55 -> medium,  else low
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from recruit_forecaster.models.prediction import MAX_CONFIDENCE
from recruit_forecaster.taxonomy.posting_taxonomy import ConfidenceLevel

LAST_YEAR_BONUS = 0.40
FREQUENCY_WEIGHT = 0.25
PATTERN_BONUS = 0.20
DATA_VOLUME_WEIGHT = 0.15
DATA_VOLUME_SCALE = 1.2

MIN_EMIT_CONFIDENCE = 0.50

HIGH_CONFIDENCE = 0.70
MEDIUM_CONFIDENCE = 0.55


@dataclass(frozen=True)
class ConfidenceComponents:
    """Per-term breakdown of a confidence score.

    Attributes:
        last_year_bonus: 0.40 or 0.0.
        frequency_score: 0–0.25, after double-count adjustment.
        pattern_bonus:   0.20 or 0.0.
        data_bonus:      0–0.15.
    """

    last_year_bonus: float
    frequency_score: float
    pattern_bonus:   float
    data_bonus:      float

    @property
    def total(self) -> float:
        """Unclamped sum of all terms."""
        return (
            self.last_year_bonus
            + self.frequency_score
            + self.pattern_bonus
            + self.data_bonus
        )

    @property
    def confidence(self) -> float:
        """Sum clamped to ``MAX_CONFIDENCE``."""
        return min(self.total, MAX_CONFIDENCE)


def data_point_bonus(historical_count: int) -> float:
    """Log-scaled reward for history size, in ``[0, 0.15]``."""
    if historical_count <= 0:
        return 0.0
    return min(math.log10(historical_count + 1) / DATA_VOLUME_SCALE, 1.0) * DATA_VOLUME_WEIGHT


def compute_confidence_components(
    last_year_same_month: bool,
    month_freq: int,
    max_freq: int,
    pattern_matched: bool,
    historical_count: int,
) -> ConfidenceComponents:
    """Compute every term of the confidence score.

    Args:
        last_year_same_month: Organization posted in this month one year before.
        month_freq:           Postings in the target's month-of-year.
        max_freq:             Postings in the organization's busiest month.
        pattern_matched:      Result of ``is_pattern_match`` for the target.
        historical_count:     Total postings of the organization.

    Returns:
        ConfidenceComponents with all terms populated.
    """
    last_year_bonus = LAST_YEAR_BONUS if last_year_same_month else 0.0

    if last_year_same_month:
        adj_freq = max(0, month_freq - 1)
        adj_max = max(0, max_freq - 1)
    else:
        adj_freq = month_freq
        adj_max = max_freq
    if adj_max > 0 and adj_freq > 0:
        frequency_score = min(adj_freq / adj_max, 1.0) * FREQUENCY_WEIGHT
    else:
        frequency_score = 0.0

    return ConfidenceComponents(
        last_year_bonus=last_year_bonus,
        frequency_score=frequency_score,
        pattern_bonus=PATTERN_BONUS if pattern_matched else 0.0,
        data_bonus=data_point_bonus(historical_count),
    )


def score_confidence(
    last_year_same_month: bool,
    month_freq: int,
    max_freq: int,
    pattern_matched: bool,
    historical_count: int,
) -> float:
    """Return the clamped confidence in ``[0, 0.9]`` for one target month."""
    return compute_confidence_components(
        last_year_same_month=last_year_same_month,
        month_freq=month_freq,
        max_freq=max_freq,
        pattern_matched=pattern_matched,
        historical_count=historical_count,
    ).confidence


def confidence_level(confidence: float) -> ConfidenceLevel:
    """Bucket a confidence score for display."""
    if confidence >= HIGH_CONFIDENCE:
        return ConfidenceLevel.HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW
