"""
History provider: turns job records into per-organization posting histories.

``JobRecord`` is the flat, persisted shape of one job posting (what the CSV
file and the public-data client both produce). ``build_histories()`` is the
filtering boundary in front of the engine:

  - records sharing a ``job_id`` collapse to the last one seen;
  - records with no organization name or no start date are dropped;
  - only the last ``lookback_years`` years (relative to ``now``) are kept;
  - postings are grouped per organization and sorted by month;
  - organizations with fewer than two postings are omitted.

The engine can therefore assume clean input and never validates dates.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from recruit_forecaster.models.posting import OrganizationHistory, Posting
from recruit_forecaster.taxonomy.posting_taxonomy import DutyCategory, EmploymentType
from recruit_forecaster.utils.time_utils import DateLike, resolve_now

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_YEARS = 3


class JobRecord(BaseModel):
    """One job posting as stored by the ingestion layer.

    Attributes:
        job_id: Source identifier (public-data ``recrutPblntSn``).
        org_name: Organization name; empty records are dropped downstream.
        title: Posting title.
        apply_start_at: First day of the application window, or ``None``.
        apply_end_at: Last day of the application window, or ``None``.
        employment_type: Classified contract form.
        is_internship: Whether the posting is an internship.
        duty_categories: Classified duty areas.
        regions: Normalized work regions.
        source_url: Detail page URL.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str
    org_name: Optional[str] = None
    title: Optional[str] = None
    apply_start_at: Optional[date] = None
    apply_end_at: Optional[date] = None
    employment_type: EmploymentType = EmploymentType.OTHER
    is_internship: bool = False
    duty_categories: tuple[DutyCategory, ...] = (DutyCategory.OTHER,)
    regions: tuple[str, ...] = ()
    source_url: Optional[str] = None


def build_histories(
    records: Iterable[JobRecord],
    now: Optional[DateLike] = None,
    lookback_years: int = DEFAULT_LOOKBACK_YEARS,
) -> list[OrganizationHistory]:
    """Group job records into organization histories ready for the engine.

    Args:
        records:        Job records from any source.
        now:            Anchor for the lookback window; defaults to UTC now.
        lookback_years: Postings that started before ``now - lookback_years``
                        (same month and day) are ignored.

    Returns:
        Histories with at least two postings each, sorted by organization name.
        A ``job_id`` seen more than once counts as a single posting.
    """
    records = merge_job_records(records)
    current = resolve_now(now)
    anchor_day = now.day if now is not None else 1
    cutoff = _safe_date(current.year - lookback_years, current.month, anchor_day)

    by_org: dict[str, list[Posting]] = defaultdict(list)
    dropped = 0
    for record in records:
        org_name = (record.org_name or "").strip()
        if not org_name or record.apply_start_at is None:
            dropped += 1
            continue
        if record.apply_start_at < cutoff:
            continue
        by_org[org_name].append(
            Posting.from_date(record.apply_start_at, job_id=record.job_id, title=record.title)
        )

    histories = [
        OrganizationHistory(
            org_name=org_name,
            postings=tuple(sorted(postings, key=lambda p: p.month)),
        )
        for org_name, postings in sorted(by_org.items())
        if len(postings) >= 2
    ]
    logger.info(
        "Built %d organization histories (%d record(s) without organization or date dropped)",
        len(histories), dropped,
    )
    return histories


def merge_job_records(*batches: Iterable[JobRecord]) -> list[JobRecord]:
    """Upsert job records by ``job_id``; a later record replaces an earlier one.

    Batches are applied in order, so ``merge_job_records(stored, fetched)``
    keeps every stored posting and refreshes the ones fetched again. Output
    keeps first-seen order.
    """
    merged: dict[str, JobRecord] = {}
    for batch in batches:
        for record in batch:
            merged[record.job_id] = record
    return list(merged.values())


def find_organization_history(
    histories: Iterable[OrganizationHistory],
    query: str,
) -> Optional[OrganizationHistory]:
    """Resolve a free-text organization query to a single history.

    An exact (case-insensitive) name match wins; otherwise, among histories
    whose name contains ``query``, the one with the most postings is chosen
    (ties: first in input order).

    Returns:
        The matching history, or ``None`` when nothing matches.
    """
    needle = query.strip().lower()
    if not needle:
        return None

    best: Optional[OrganizationHistory] = None
    for history in histories:
        name = history.org_name.lower()
        if name == needle:
            return history
        if needle in name and (best is None or len(history.postings) > len(best.postings)):
            best = history
    return best


def _safe_date(year: int, month: int, day: int) -> date:
    """``date(year, month, day)`` with day clamped for short months (Feb 29)."""
    while day > 28:
        try:
            return date(year, month, day)
        except ValueError:
            day -= 1
    return date(year, month, day)
