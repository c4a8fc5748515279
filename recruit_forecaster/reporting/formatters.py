"""
ASCII terminal formatters for CLI commands.

All formatters accept engine output models and return plain multi-line
strings suitable for ``typer.echo()``. No third-party dependencies.

Confidence is shown as a percentage with its display bucket::

    Month    Organization                    Conf  Level   Pattern     LY
    ----------------------------------------------------------------------
    2026-11  한국전력공사                     78%  high    annual      yes
"""

from __future__ import annotations

from typing import Sequence

from recruit_forecaster.models.prediction import (
    Evidence,
    NextPostingPrediction,
    OrganizationPattern,
    Prediction,
)

_ORG_WIDTH = 30


def _pattern_label(pattern) -> str:
    return pattern.value if pattern is not None else "-"


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def _months_label(months: Sequence[int]) -> str:
    return ", ".join(str(m) for m in months) if months else "-"


def format_evidence_lines(evidence: Sequence[Evidence], indent: str = "      ") -> list[str]:
    """One line per cited posting: month, reason, title."""
    return [
        f"{indent}{e.posted_month}  {e.match_reason.value:<20}  {e.title or e.job_id or ''}"
        for e in evidence
    ]


def format_forecast_table(
    predictions: Sequence[Prediction],
    title: str = "Predicted Postings",
    show_evidence: bool = False,
) -> str:
    """Format predictions as a table, one row per (organization, month).

    Args:
        predictions:   Already ordered predictions.
        title:         Header line.
        show_evidence: Print cited postings under each row.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", f"=== {title} ==="]
    if not predictions:
        lines.append("  (no predictions: not enough history or confidence)")
        return "\n".join(lines)

    header = (
        f"  {'Month':<7}  {'Organization':<{_ORG_WIDTH}}  {'Conf':>5}  "
        f"{'Level':<6}  {'Pattern':<10}  {'LY':>3}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for p in predictions:
        basis = p.based_on
        lines.append(
            f"  {p.predicted_month:<7}  {_truncate(p.org_name, _ORG_WIDTH):<{_ORG_WIDTH}}  "
            f"{p.confidence:>5.0%}  {p.confidence_level.value:<6}  "
            f"{_pattern_label(basis.periodic_pattern):<10}  "
            f"{'yes' if basis.last_year_same_month else 'no':>3}"
        )
        if show_evidence and p.evidence_jobs:
            lines.extend(format_evidence_lines(p.evidence_jobs))

    lines.append("")
    lines.append(f"  {len(predictions)} prediction(s)")
    return "\n".join(lines)


def format_next_posting(prediction: NextPostingPrediction) -> str:
    """Format a single-organization prediction with its evidence."""
    lines = [
        "",
        f"=== Next Posting: {prediction.org_name} ===",
        f"  Predicted month:  {prediction.predicted_month}",
        f"  Confidence:       {prediction.confidence:.0%} ({prediction.confidence_level.value})",
        f"  Periodic pattern: {_pattern_label(prediction.periodic_pattern)}",
        f"  Typical months:   {_months_label(prediction.typical_months)}",
        f"  Based on:         {prediction.historical_count} posting(s)",
    ]
    if prediction.evidence_jobs:
        lines.append("  Evidence:")
        lines.extend(format_evidence_lines(prediction.evidence_jobs, indent="    "))
    return "\n".join(lines)


def format_pattern_table(
    patterns: Sequence[OrganizationPattern],
    total: int,
    page: int,
) -> str:
    """Format organization pattern summaries as a table."""
    lines: list[str] = ["", "=== Organization Hiring Patterns ==="]
    if not patterns:
        lines.append("  (no organizations match)")
        return "\n".join(lines)

    header = (
        f"  {'Organization':<{_ORG_WIDTH}}  {'Jobs':>5}  {'Per yr':>6}  "
        f"{'Pattern':<10}  {'Last':<7}  Typical months"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for p in patterns:
        lines.append(
            f"  {_truncate(p.org_name, _ORG_WIDTH):<{_ORG_WIDTH}}  {p.total_jobs:>5}  "
            f"{p.avg_per_year:>6.1f}  {_pattern_label(p.periodic_pattern):<10}  "
            f"{p.last_posted_month or '-':<7}  {_months_label(p.typical_months)}"
        )
    lines.append("")
    lines.append(f"  Page {page}: showing {len(patterns)} of {total} organization(s)")
    return "\n".join(lines)
