"""
Presentation-layer helpers: ranking, flattening and file export of forecasts.

The engine returns complete, ordered prediction lists; everything that only
exists for display lives here:

  - ``top_predictions()``            confidence-ranked truncation (top 50 / 100)
  - ``predictions_to_records()``     one flat dict per prediction (CSV-ready)
  - ``build_predictions_payload()``  ``{"success", "predictions", "generated_at"}``
  - ``export_to_json()`` / ``export_to_csv()``

CSV rows are flat (evidence is summarised as a count plus the cited job ids)
so the files load directly in Excel or pandas.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from recruit_forecaster.models.prediction import Prediction
from recruit_forecaster.utils.time_utils import utcnow

PREDICTION_CSV_FIELDS: list[str] = [
    "org_name", "predicted_month", "confidence", "confidence_level",
    "historical_count", "last_year_same_month", "periodic_pattern",
    "evidence_count", "evidence_job_ids",
]


def top_predictions(predictions: Sequence[Prediction], n: int) -> list[Prediction]:
    """Return the ``n`` most confident predictions.

    Sorted by confidence descending; ties keep their incoming order, so a
    month-ordered list stays month-ordered within equal confidence.

    Raises:
        ValueError: If ``n`` is less than 1.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}.")
    return sorted(predictions, key=lambda p: -p.confidence)[:n]


def prediction_to_record(prediction: Prediction) -> dict:
    """Flatten one prediction into a CSV row dict."""
    basis = prediction.based_on
    return {
        "org_name":             prediction.org_name,
        "predicted_month":      prediction.predicted_month,
        "confidence":           prediction.confidence,
        "confidence_level":     prediction.confidence_level.value,
        "historical_count":     basis.historical_count,
        "last_year_same_month": basis.last_year_same_month,
        "periodic_pattern":     basis.periodic_pattern.value if basis.periodic_pattern else "",
        "evidence_count":       len(prediction.evidence_jobs),
        "evidence_job_ids":     ";".join(e.job_id for e in prediction.evidence_jobs if e.job_id),
    }


def predictions_to_records(predictions: Sequence[Prediction]) -> list[dict]:
    """Flatten predictions, preserving order."""
    return [prediction_to_record(p) for p in predictions]


def build_predictions_payload(
    predictions: Sequence[Prediction],
    generated_at: Optional[datetime] = None,
) -> dict:
    """Build the JSON document served to the presentation layer.

    Args:
        predictions:  Already ranked / truncated predictions.
        generated_at: Timestamp to report; defaults to now (UTC).

    Returns:
        ``{"success": True, "predictions": [...], "generated_at": iso}``.
    """
    stamp = generated_at or utcnow()
    return {
        "success": True,
        "predictions": [p.model_dump(mode="json") for p in predictions],
        "generated_at": stamp.isoformat(),
    }


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and fieldnames is None:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` to a pretty-printed UTF-8 JSON file.

    Korean organization names are written as-is rather than ``\\u`` escaped.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, default=str, ensure_ascii=False),
        encoding="utf-8",
    )
    return path
