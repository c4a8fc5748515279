"""
CSV reader/writer for job posting records — the file-backed history provider.

Format — comma delimited, UTF-8, with a header row.
Required columns:
  job_id, org_name, title, apply_start_at

Optional columns (empty string → default):
  apply_end_at, employment_type, is_internship, duty_categories, regions,
  source_url

Date formats (apply_start_at / apply_end_at):
  YYYY-MM-DD, ISO 8601 datetime (date part is used), or YYYYMMDD

List columns (duty_categories, regions):
  semicolon separated, e.g. ``DATA;RESEARCH``

Rows whose ``apply_start_at`` is empty or unparseable are skipped with a
warning rather than failing the file: they can never become postings, and the
engine relies on this reader to filter them out. Any other bad row (empty
``job_id``, unknown enum value) fails the whole file with a ``ValueError``
listing the first 10 failures.
"""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from recruit_forecaster.ingestion.classifiers import parse_compact_date
from recruit_forecaster.ingestion.history import JobRecord
from recruit_forecaster.taxonomy.posting_taxonomy import DutyCategory, EmploymentType

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"job_id", "org_name", "title", "apply_start_at"})

CSV_FIELDNAMES: list[str] = [
    "job_id", "org_name", "title", "apply_start_at", "apply_end_at",
    "employment_type", "is_internship", "duty_categories", "regions", "source_url",
]

_LIST_SEPARATOR = ";"


class _UnusableDate(ValueError):
    """Raised for a row whose start date cannot become a posting month."""


def parse_postings_csv(path: Path) -> list[JobRecord]:
    """Parse a postings CSV file into :class:`JobRecord` objects.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        Records for every row with a usable start date, in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Postings CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = set(reader.fieldnames)
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = list(reader)

    if not rows:
        logger.warning("Postings CSV is empty (header only): %s", path)
        return []

    records: list[JobRecord] = []
    errors: list[tuple[int, str]] = []
    skipped = 0

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            records.append(_row_to_job_record(row))
        except _UnusableDate as exc:
            skipped += 1
            logger.warning("Skipping row %d of %s: %s", line_no, path.name, exc)
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))

    if errors:
        max_shown = 10
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:max_shown])
        suffix = f"\n  … and {len(errors) - max_shown} more" if len(errors) > max_shown else ""
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )

    logger.info(
        "Parsed %d posting(s) from %s (%d skipped without a usable start date)",
        len(records), path.name, skipped,
    )
    return records


def write_postings_csv(records: Iterable[JobRecord], path: Path) -> Path:
    """Write job records in the format :func:`parse_postings_csv` reads.

    Args:
        records: Records to write.
        path:    Destination (parent directories are created).

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for record in records:
            writer.writerow(
                {
                    "job_id":          record.job_id,
                    "org_name":        record.org_name or "",
                    "title":           record.title or "",
                    "apply_start_at":  record.apply_start_at.isoformat() if record.apply_start_at else "",
                    "apply_end_at":    record.apply_end_at.isoformat() if record.apply_end_at else "",
                    "employment_type": record.employment_type.value,
                    "is_internship":   "true" if record.is_internship else "false",
                    "duty_categories": _LIST_SEPARATOR.join(c.value for c in record.duty_categories),
                    "regions":         _LIST_SEPARATOR.join(record.regions),
                    "source_url":      record.source_url or "",
                }
            )
            count += 1
    logger.info("Postings CSV written: %s (%d rows)", path, count)
    return path


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_job_record(row: dict[str, str]) -> JobRecord:
    """Convert a CSV row dict to a validated :class:`JobRecord`.

    Raises:
        _UnusableDate: If ``apply_start_at`` is empty or unparseable.
        ValueError: On bad enum values or an empty ``job_id``.
        pydantic.ValidationError: On model-level validation failure.
    """
    start = _parse_date(_opt(row, "apply_start_at"))
    if start is None:
        raise _UnusableDate(
            f"apply_start_at '{row.get('apply_start_at', '')}' is empty or not a date."
        )

    fields: dict = {
        "job_id":         _req(row, "job_id"),
        "org_name":       _opt(row, "org_name"),
        "title":          _opt(row, "title"),
        "apply_start_at": start,
        "apply_end_at":   _parse_date(_opt(row, "apply_end_at")),
        "is_internship":  _parse_bool(_opt(row, "is_internship")),
        "source_url":     _opt(row, "source_url"),
    }
    if employment := _opt(row, "employment_type"):
        fields["employment_type"] = _parse_enum(EmploymentType, "employment_type", employment)
    if duties := _split_list(_opt(row, "duty_categories")):
        fields["duty_categories"] = tuple(
            _parse_enum(DutyCategory, "duty_categories", d) for d in duties
        )
    if regions := _split_list(_opt(row, "regions")):
        fields["regions"] = tuple(regions)

    return JobRecord(**fields)


def _req(row: dict[str, str], key: str) -> str:
    """Return a required string field, stripped; raise if empty."""
    v = (row.get(key) or "").strip()
    if not v:
        raise ValueError(f"Required field '{key}' is empty.")
    return v


def _opt(row: dict[str, str], key: str) -> Optional[str]:
    """Return an optional string field, or None if absent/empty."""
    v = (row.get(key) or "").strip()
    return v if v else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD``, an ISO datetime, or ``YYYYMMDD``; ``None`` if unusable."""
    if value is None:
        return None
    if value.isdigit():
        return parse_compact_date(value)
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_bool(value: Optional[str]) -> bool:
    """Parse a boolean-ish string; absent means ``False``."""
    if value is None:
        return False
    return value.lower() in ("true", "1", "yes", "t", "y")


def _split_list(value: Optional[str]) -> list[str]:
    if value is None:
        return []
    return [part.strip() for part in value.split(_LIST_SEPARATOR) if part.strip()]


def _parse_enum(enum_cls, key: str, raw: str):
    """Parse an enum value with a descriptive error."""
    try:
        return enum_cls(raw)
    except ValueError:
        valid = sorted(e.value for e in enum_cls)
        raise ValueError(f"Invalid {key} value '{raw}'. Valid values: {valid}")
