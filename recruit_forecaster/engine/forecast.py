"""
Batch forecast generation across all organizations.

Two entry points share one scoring loop:

``generate_forecasts(histories, window_months=3, now=None)``
    Months ``now+1 .. now+window``. Sorted by month ascending, then
    confidence descending.

``generate_forecasts_with_evidence(histories, window_months=10, now=None)``
    Months ``now+0 .. now+window`` (current month included). Each prediction
    carries its supporting postings. Sorted by confidence descending so the
    caller can truncate to a top-N directly.

Per organization, pattern detection and month frequencies are computed once
and reused for every target month. Organizations with fewer than two
postings, and (organization, month) pairs scoring below
``MIN_EMIT_CONFIDENCE``, are silently absent from the output.

Evidence priority (deduplicated by job id)
------------------------------------------
    1. same_month_last_year : posted exactly one year before the target month
    2. periodic_pattern     : same calendar month, any other year
    3. high_frequency       : every other posting, most recent first
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from recruit_forecaster.engine.pattern import (
    detect_pattern,
    is_pattern_match,
    month_frequencies,
)
from recruit_forecaster.engine.scoring import (
    MIN_EMIT_CONFIDENCE,
    compute_confidence_components,
    confidence_level,
)
from recruit_forecaster.models.posting import OrganizationHistory, Posting
from recruit_forecaster.models.prediction import Evidence, Prediction, PredictionBasis
from recruit_forecaster.taxonomy.posting_taxonomy import MatchReason, PeriodicPattern
from recruit_forecaster.utils.time_utils import (
    MAX_WINDOW_MONTHS,
    DateLike,
    YearMonth,
    resolve_now,
    target_months,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MONTHS = 3
DEFAULT_EVIDENCE_WINDOW_MONTHS = 10


@dataclass(frozen=True)
class _OrgProfile:
    """Per-organization facts reused for every target month."""

    history:        OrganizationHistory
    frequencies:    dict[int, int]
    max_frequency:  int
    pattern:        Optional[PeriodicPattern]
    posted_months:  frozenset[YearMonth]

    def posted_in(self, year: int, month: int) -> bool:
        return YearMonth(year, month) in self.posted_months


def _build_profile(history: OrganizationHistory) -> _OrgProfile:
    frequencies = dict(month_frequencies(history.postings))
    return _OrgProfile(
        history=history,
        frequencies=frequencies,
        max_frequency=max(frequencies.values(), default=0),
        pattern=detect_pattern(history.postings),
        posted_months=frozenset(
            YearMonth(p.year, p.month_number) for p in history.postings
        ),
    )


def _clamp_window(window_months: int) -> int:
    if window_months < 0:
        raise ValueError(f"window_months must be >= 0, got {window_months}.")
    if window_months > MAX_WINDOW_MONTHS:
        logger.debug(
            "Forecast window %d clamped to %d months", window_months, MAX_WINDOW_MONTHS
        )
        return MAX_WINDOW_MONTHS
    return window_months


def _score_history(
    profile: _OrgProfile,
    targets: list[YearMonth],
    with_evidence: bool,
) -> list[Prediction]:
    history = profile.history
    count = len(history.postings)
    predictions: list[Prediction] = []

    for target in targets:
        last_year_same_month = profile.posted_in(target.year - 1, target.month)
        components = compute_confidence_components(
            last_year_same_month=last_year_same_month,
            month_freq=profile.frequencies.get(target.month, 0),
            max_freq=profile.max_frequency,
            pattern_matched=is_pattern_match(
                profile.pattern, target.month, history.postings
            ),
            historical_count=count,
        )
        confidence = components.confidence
        if confidence < MIN_EMIT_CONFIDENCE:
            continue

        evidence = build_evidence(history.postings, target) if with_evidence else ()
        predictions.append(
            Prediction(
                org_name=history.org_name,
                predicted_month=target.key,
                confidence=round(confidence, 2),
                confidence_level=confidence_level(confidence),
                based_on=PredictionBasis(
                    historical_count=count,
                    last_year_same_month=last_year_same_month,
                    periodic_pattern=profile.pattern,
                ),
                evidence_jobs=evidence,
            )
        )

    return predictions


def _run(
    histories: Iterable[OrganizationHistory],
    targets: list[YearMonth],
    with_evidence: bool,
) -> list[Prediction]:
    predictions: list[Prediction] = []
    skipped = 0
    for history in histories:
        if not history.has_enough_data:
            skipped += 1
            continue
        predictions.extend(_score_history(_build_profile(history), targets, with_evidence))

    logger.debug(
        "Scored %d target month(s): %d prediction(s), %d organization(s) skipped "
        "for insufficient history",
        len(targets), len(predictions), skipped,
    )
    return predictions


def generate_forecasts(
    histories: Iterable[OrganizationHistory],
    window_months: int = DEFAULT_WINDOW_MONTHS,
    now: Optional[DateLike] = None,
) -> list[Prediction]:
    """Forecast posting months for every organization over the next months.

    Args:
        histories:     Organization histories (any order).
        window_months: Number of future months, excluding the current one.
                       Clamped to 12.
        now:           Anchor date; defaults to the current UTC time.

    Returns:
        Predictions sorted by ``predicted_month`` ascending, then confidence
        descending, then organization name.

    Raises:
        ValueError: If ``window_months`` is negative.
    """
    window = _clamp_window(window_months)
    targets = target_months(resolve_now(now), window)
    predictions = _run(histories, targets, with_evidence=False)
    return sorted(
        predictions,
        key=lambda p: (p.predicted_month, -p.confidence, p.org_name),
    )


def generate_forecasts_with_evidence(
    histories: Iterable[OrganizationHistory],
    window_months: int = DEFAULT_EVIDENCE_WINDOW_MONTHS,
    now: Optional[DateLike] = None,
) -> list[Prediction]:
    """Forecast posting months with supporting evidence for each prediction.

    The current month is included as month 0, so the window spans
    ``window_months + 1`` months.

    Args:
        histories:     Organization histories; postings should carry job ids.
        window_months: Months after the current one. Clamped to 12.
        now:           Anchor date; defaults to the current UTC time.

    Returns:
        Predictions ranked by confidence descending (ties: month ascending,
        then organization name).

    Raises:
        ValueError: If ``window_months`` is negative.
    """
    window = _clamp_window(window_months)
    targets = target_months(resolve_now(now), window, include_current=True)
    predictions = _run(histories, targets, with_evidence=True)
    return sorted(
        predictions,
        key=lambda p: (-p.confidence, p.predicted_month, p.org_name),
    )


def build_evidence(
    postings: Iterable[Posting],
    target: YearMonth,
    per_reason_limit: Optional[int] = None,
    total_limit: Optional[int] = None,
) -> tuple[Evidence, ...]:
    """Select the postings that support a forecast for ``target``.

    Postings are grouped by match reason in priority order and, within a
    group, listed most recent first. A job id is cited at most once; postings
    without a job id are never merged with each other.

    Args:
        postings:         The organization's postings.
        target:           Forecast month.
        per_reason_limit: Max entries per match reason (``None`` = unlimited).
        total_limit:      Max entries overall (``None`` = unlimited).

    Returns:
        Tuple of ``Evidence`` in priority order.
    """
    ordered = sorted(
        enumerate(postings),
        key=lambda ip: (-ip[1].year, -ip[1].month_number, ip[0]),
    )

    def reason_for(p: Posting) -> MatchReason:
        if p.month_number == target.month:
            if p.year == target.year - 1:
                return MatchReason.SAME_MONTH_LAST_YEAR
            return MatchReason.PERIODIC_PATTERN
        return MatchReason.HIGH_FREQUENCY

    seen: set[str] = set()
    evidence: list[Evidence] = []
    for reason in MatchReason:
        taken = 0
        for index, posting in ordered:
            if total_limit is not None and len(evidence) >= total_limit:
                return tuple(evidence)
            if per_reason_limit is not None and taken >= per_reason_limit:
                break
            key = posting.job_id if posting.job_id is not None else f"#{index}"
            if key in seen or reason_for(posting) != reason:
                continue
            seen.add(key)
            taken += 1
            evidence.append(
                Evidence(
                    job_id=posting.job_id,
                    title=posting.title,
                    posted_month=posting.month,
                    match_reason=reason,
                )
            )

    return tuple(evidence)
