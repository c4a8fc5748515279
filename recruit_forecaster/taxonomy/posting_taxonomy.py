"""
Taxonomy for recruitment postings and the forecasts derived from them.

Two groups of enums live here:

Forecast vocabulary
  - ``PeriodicPattern``  — the coarse re-posting interval of an organization.
  - ``MatchReason``      — why a past posting is cited as evidence.
  - ``ConfidenceLevel``  — display bucket for a confidence score.

Posting classification (used by the ingestion classifiers)
  - ``DutyCategory``     — job duty area inferred from NCS classification text.
  - ``EmploymentType``   — contract form inferred from hire-type text.

Usage example::

    from recruit_forecaster.taxonomy.posting_taxonomy import PeriodicPattern

    pattern = PeriodicPattern.ANNUAL
    pattern.interval_months   # 12

This module has NO imports from any other ``recruit_forecaster`` package.
"""

from enum import StrEnum


class PeriodicPattern(StrEnum):
    """Detected re-posting interval of a single organization.

    Absence of a pattern is represented by ``None`` rather than a member.
    """

    QUARTERLY = "quarterly"
    """Mean interval of 2–4 months."""

    SEMIANNUAL = "semiannual"
    """Mean interval of 5–8 months."""

    ANNUAL = "annual"
    """Mean interval of 9–15 months."""

    @property
    def interval_months(self) -> int:
        """Canonical step used when projecting the next posting date."""
        return _PATTERN_INTERVALS[self]


_PATTERN_INTERVALS: dict[PeriodicPattern, int] = {
    PeriodicPattern.QUARTERLY:  3,
    PeriodicPattern.SEMIANNUAL: 6,
    PeriodicPattern.ANNUAL:     12,
}


class MatchReason(StrEnum):
    """Why a historical posting is cited in support of a forecast."""

    SAME_MONTH_LAST_YEAR = "same_month_last_year"
    """Posted in the same calendar month one year before the forecast month."""

    PERIODIC_PATTERN = "periodic_pattern"
    """Posted in the same calendar month in some other year."""

    HIGH_FREQUENCY = "high_frequency"
    """Any other posting by the organization."""


class ConfidenceLevel(StrEnum):
    """Display bucket for a heuristic confidence score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DutyCategory(StrEnum):
    """Job duty area inferred from NCS classification text."""

    DATA = "DATA"
    DEVELOPMENT = "DEVELOPMENT"
    MARKETING = "MARKETING"
    DESIGN = "DESIGN"
    HR = "HR"
    FINANCE = "FINANCE"
    ADMINISTRATION = "ADMINISTRATION"
    RESEARCH = "RESEARCH"
    OTHER = "OTHER"


class EmploymentType(StrEnum):
    """Contract form inferred from hire-type text."""

    INTERN = "INTERN"
    CONTRACT = "CONTRACT"
    REGULAR = "REGULAR"
    OTHER = "OTHER"
