"""
Posting history models — the engine's input records.

``Posting`` is a single historical job listing reduced to its year and month
(plus an optional job id and title for evidence display). It carries no
lifecycle of its own: the history provider builds fresh postings from stored
start dates on every engine invocation.

``OrganizationHistory`` groups the postings of one organization. The engine
only analyses histories with at least two postings; smaller histories are
valid records but produce no output.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

MIN_POSTINGS_FOR_ANALYSIS = 2


def month_key(year: int, month_number: int) -> str:
    """Return the ``"YYYY-MM"`` key for a calendar month."""
    return f"{year:04d}-{month_number:02d}"


class Posting(BaseModel):
    """A historical job posting reduced to its calendar month.

    Attributes:
        month: ``"YYYY-MM"`` key; must agree with ``year`` / ``month_number``.
        year: Four-digit calendar year.
        month_number: Calendar month, 1–12.
        job_id: Source identifier, or ``None`` when unknown.
        title: Posting title, or ``None`` when unknown.
    """

    model_config = ConfigDict(frozen=True)

    month: str
    year: int
    month_number: int
    job_id: Optional[str] = None
    title: Optional[str] = None

    @field_validator("month_number")
    @classmethod
    def validate_month_number(cls, v: int) -> int:
        if not 1 <= v <= 12:
            raise ValueError(f"month_number must be in [1, 12], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_month_key(self) -> "Posting":
        expected = month_key(self.year, self.month_number)
        if self.month != expected:
            raise ValueError(
                f"month '{self.month}' does not match year/month_number ({expected})."
            )
        return self

    @classmethod
    def from_date(
        cls,
        posted_on: date,
        job_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> "Posting":
        """Build a posting from a start date (datetimes are accepted too)."""
        return cls(
            month=month_key(posted_on.year, posted_on.month),
            year=posted_on.year,
            month_number=posted_on.month,
            job_id=job_id,
            title=title,
        )

    @property
    def ordinal(self) -> int:
        """Months since year 0; consecutive months differ by exactly 1."""
        return self.year * 12 + (self.month_number - 1)


class OrganizationHistory(BaseModel):
    """All known postings of a single organization.

    Attributes:
        org_name: Organization display name (grouping key).
        postings: Postings in any order; the engine sorts internally.
    """

    model_config = ConfigDict(frozen=True)

    org_name: str
    postings: tuple[Posting, ...] = ()

    @field_validator("org_name")
    @classmethod
    def validate_org_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("org_name must not be empty.")
        return v.strip()

    @property
    def has_enough_data(self) -> bool:
        """``True`` when there are enough postings for pattern analysis."""
        return len(self.postings) >= MIN_POSTINGS_FOR_ANALYSIS
