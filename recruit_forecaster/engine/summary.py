"""
Organization hiring-pattern summaries for browsing and explanation.

``summarize_organization()`` condenses one history into an
``OrganizationPattern``: totals, a postings-per-year rate over the span the
data actually covers (never less than one year), typical months, the
detected periodic pattern and the most recent postings.

``search_organization_patterns()`` filters by a case-insensitive name
substring, ranks by total postings and paginates.
"""

from __future__ import annotations

from typing import Iterable, Optional

from recruit_forecaster.engine.pattern import detect_pattern, sort_postings, typical_months
from recruit_forecaster.models.posting import OrganizationHistory
from recruit_forecaster.models.prediction import OrganizationPattern

RECENT_JOBS_LIMIT = 10
MAX_PAGE_SIZE = 100


def summarize_organization(history: OrganizationHistory) -> Optional[OrganizationPattern]:
    """Summarize one organization; ``None`` with fewer than two postings."""
    if not history.has_enough_data:
        return None

    newest_first = list(reversed(sort_postings(history.postings)))
    newest, oldest = newest_first[0], newest_first[-1]
    span_years = max(1.0, (newest.ordinal - oldest.ordinal) / 12)
    total = len(history.postings)

    return OrganizationPattern(
        org_name=history.org_name,
        total_jobs=total,
        avg_per_year=round(total / span_years, 1),
        typical_months=tuple(typical_months(history.postings)),
        periodic_pattern=detect_pattern(history.postings),
        last_posted_month=newest.month,
        most_recent_title=newest.title,
        recent_jobs=tuple(newest_first[:RECENT_JOBS_LIMIT]),
    )


def search_organization_patterns(
    histories: Iterable[OrganizationHistory],
    query: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[OrganizationPattern], int]:
    """Search organization summaries by name.

    Args:
        histories: All organization histories.
        query:     Case-insensitive substring of the organization name;
                   ``None`` or blank matches everything.
        page:      1-based page number.
        limit:     Page size, clamped to ``[1, 100]``.

    Returns:
        ``(patterns_on_page, total_matches)``; patterns ranked by total
        postings descending, then name.

    Raises:
        ValueError: If ``page`` is less than 1.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}.")
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    needle = (query or "").strip().lower()

    patterns: list[OrganizationPattern] = []
    for history in histories:
        if needle and needle not in history.org_name.lower():
            continue
        summary = summarize_organization(history)
        if summary is not None:
            patterns.append(summary)

    patterns.sort(key=lambda p: (-p.total_jobs, p.org_name))
    offset = (page - 1) * limit
    return patterns[offset:offset + limit], len(patterns)
