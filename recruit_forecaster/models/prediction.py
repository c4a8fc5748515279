"""
Forecast output models.

``Prediction`` is one (organization, month) forecast produced by the batch
generators. ``NextPostingPrediction`` is the single best answer for one
organization, as used by interactive queries. ``OrganizationPattern`` is the
explanatory summary shown alongside them.

All models are frozen: they are built once per request and discarded (or
cached by the caller), never mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from recruit_forecaster.models.posting import Posting
from recruit_forecaster.taxonomy.posting_taxonomy import (
    ConfidenceLevel,
    MatchReason,
    PeriodicPattern,
)

MAX_CONFIDENCE = 0.9


def _validate_confidence(v: float) -> float:
    if not 0.0 <= v <= MAX_CONFIDENCE:
        raise ValueError(f"confidence must be in [0.0, {MAX_CONFIDENCE}], got {v}.")
    return v


def _validate_month_key(v: str) -> str:
    parts = v.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Expected a 'YYYY-MM' month key, got '{v}'.")
    if not 1 <= int(parts[1]) <= 12:
        raise ValueError(f"Month out of range in '{v}'.")
    return v


class Evidence(BaseModel):
    """A historical posting cited to justify a forecast.

    Attributes:
        job_id: Source identifier of the cited posting (may be ``None``).
        title: Title of the cited posting (may be ``None``).
        posted_month: ``"YYYY-MM"`` of the cited posting.
        match_reason: Why the posting was selected.
    """

    model_config = ConfigDict(frozen=True)

    job_id: Optional[str] = None
    title: Optional[str] = None
    posted_month: str
    match_reason: MatchReason


class PredictionBasis(BaseModel):
    """The signals a batch prediction was scored from."""

    model_config = ConfigDict(frozen=True)

    historical_count: int
    last_year_same_month: bool
    periodic_pattern: Optional[PeriodicPattern] = None


class Prediction(BaseModel):
    """Forecast that ``org_name`` will post in ``predicted_month``.

    Attributes:
        org_name: Organization the forecast is about.
        predicted_month: ``"YYYY-MM"`` target month.
        confidence: Heuristic score in ``[0.0, 0.9]``, rounded to 2 decimals.
        confidence_level: Display bucket derived from ``confidence``.
        based_on: Signals behind the score.
        evidence_jobs: Supporting postings (evidence mode only).
    """

    model_config = ConfigDict(frozen=True)

    org_name: str
    predicted_month: str
    confidence: float
    confidence_level: ConfidenceLevel
    based_on: PredictionBasis
    evidence_jobs: tuple[Evidence, ...] = ()

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        return _validate_confidence(v)

    @field_validator("predicted_month")
    @classmethod
    def validate_predicted_month(cls, v: str) -> str:
        return _validate_month_key(v)


class NextPostingPrediction(BaseModel):
    """Best single forecast of an organization's next posting month.

    Attributes:
        org_name: Organization the forecast is about.
        predicted_month: ``"YYYY-MM"`` of the expected next posting.
        confidence: Heuristic score in ``[0.0, 0.9]``, rounded to 2 decimals.
        confidence_level: Display bucket derived from ``confidence``.
        periodic_pattern: Detected pattern, or ``None``.
        typical_months: Up to four most frequent posting months, ascending.
        historical_count: Number of postings the forecast is based on.
        evidence_jobs: Up to three supporting postings.
    """

    model_config = ConfigDict(frozen=True)

    org_name: str
    predicted_month: str
    confidence: float
    confidence_level: ConfidenceLevel
    periodic_pattern: Optional[PeriodicPattern] = None
    typical_months: tuple[int, ...] = ()
    historical_count: int
    evidence_jobs: tuple[Evidence, ...] = ()

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        return _validate_confidence(v)

    @field_validator("predicted_month")
    @classmethod
    def validate_predicted_month(cls, v: str) -> str:
        return _validate_month_key(v)


class OrganizationPattern(BaseModel):
    """Explanatory hiring-pattern summary for one organization."""

    model_config = ConfigDict(frozen=True)

    org_name: str
    total_jobs: int
    avg_per_year: float
    typical_months: tuple[int, ...] = ()
    periodic_pattern: Optional[PeriodicPattern] = None
    last_posted_month: Optional[str] = None
    most_recent_title: Optional[str] = None
    recent_jobs: tuple[Posting, ...] = ()
