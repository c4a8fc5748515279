"""
Recruitment Posting Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (fetch postings, forecast, org lookup).
  5. Report result to stdout.

Install and run::

    pip install -e .
    recruit-forecaster --help
    recruit-forecaster validate-config
    recruit-forecaster fetch-postings --closed --pages 20
    recruit-forecaster forecast --months 3
    recruit-forecaster forecast --extended --json data/outputs/predictions.json
    recruit-forecaster predict-org 한국전력공사
    recruit-forecaster org-patterns --query 공사
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="recruit-forecaster",
    help="Recruitment Posting Forecaster — predicts when organizations will post jobs.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from recruit_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from recruit_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_as_of_or_exit(as_of: Optional[str]) -> Optional[date]:
    """Turn ``--as-of YYYY-MM`` into the first day of that month."""
    from recruit_forecaster.utils.time_utils import parse_month_key

    if as_of is None:
        return None
    try:
        ym = parse_month_key(as_of)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    return date(ym.year, ym.month, 1)


def _load_histories_or_exit(config, postings_file: Optional[str], now: Optional[date]):
    """Read the postings CSV and group it into organization histories."""
    from recruit_forecaster.ingestion.history import build_histories
    from recruit_forecaster.ingestion.postings_csv import parse_postings_csv

    path = Path(postings_file) if postings_file else Path(config.history.postings_file)
    if not path.exists():
        typer.echo(f"[ERROR] Postings file not found: {path}", err=True)
        typer.echo("  Run 'recruit-forecaster fetch-postings' first or pass --file.", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Loading postings from: {path}")
    try:
        records = parse_postings_csv(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] CSV parse failed:\n{exc}", err=True)
        raise typer.Exit(code=1)

    histories = build_histories(
        records, now=now, lookback_years=config.history.lookback_years
    )
    typer.echo(
        f"  {len(records)} posting(s) -> {len(histories)} organization(s) "
        "with enough history."
    )
    return histories


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation. The API key is never
    printed, only whether it is set.
    """
    from recruit_forecaster.config import is_publicdata_configured

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Postings file:    {config.history.postings_file}")
    typer.echo(f"  Lookback years:   {config.history.lookback_years}")
    typer.echo(
        f"  Forecast window:  {config.prediction.window_months} month(s), "
        f"extended {config.prediction.extended_window_months}"
    )
    typer.echo(
        f"  Top-N:            {config.prediction.top_n}, "
        f"extended {config.prediction.extended_top_n}"
    )
    typer.echo(
        f"  Public-data API:  {'configured' if is_publicdata_configured(config) else 'not configured'}"
    )
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        dumped = config.model_dump()
        if dumped["publicdata"].get("api_key"):
            dumped["publicdata"]["api_key"] = "***"
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("fetch-postings")
def fetch_postings(
    pages: Optional[int] = typer.Option(
        None,
        "--pages",
        help="Maximum pages to fetch (default: publicdata.max_pages).",
    ),
    closed: bool = typer.Option(
        False,
        "--closed",
        help="Fetch closed (historical) postings instead of open ones.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination CSV (default: history.postings_file).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Download job postings from the public-data API into a postings CSV.

    Fetched postings are merged into the existing file by ``job_id``: stored
    postings are kept, and ones fetched again are replaced by the new copy.

    \b
    Credential setup (.env, gitignored):
      PUBLIC_DATA_API_KEY=...   → data.go.kr service key
    """
    import httpx

    from recruit_forecaster.config import is_publicdata_configured
    from recruit_forecaster.ingestion.history import merge_job_records
    from recruit_forecaster.ingestion.postings_csv import (
        parse_postings_csv,
        write_postings_csv,
    )
    from recruit_forecaster.ingestion.publicdata_client import (
        PublicDataClient,
        PublicDataError,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if not is_publicdata_configured(config):
        typer.echo("[ERROR] PUBLIC_DATA_API_KEY is not set (.env or environment).", err=True)
        raise typer.Exit(code=1)

    out_path = Path(output) if output else Path(config.history.postings_file)
    typer.echo(
        f"fetch-postings | {'closed' if closed else 'open'} postings | "
        f"pages<={pages or config.publicdata.max_pages}"
    )

    try:
        with PublicDataClient(config.publicdata) as client:
            records = client.fetch_records(max_pages=pages, ongoing=not closed)
    except (httpx.HTTPError, PublicDataError) as exc:
        typer.echo(f"[ERROR] Fetch failed: {exc}", err=True)
        raise typer.Exit(code=1)

    stored = []
    if out_path.exists():
        try:
            stored = merge_job_records(parse_postings_csv(out_path))
        except ValueError as exc:
            typer.echo(f"[ERROR] Existing postings file is invalid: {exc}", err=True)
            raise typer.Exit(code=1)

    merged = merge_job_records(stored, records)
    write_postings_csv(merged, out_path)
    typer.echo(
        f"  Fetched {len(records)} posting(s), {len(merged) - len(stored)} new "
        f"({len(stored)} already stored)"
    )
    typer.echo(f"  Wrote {len(merged)} posting(s) to {out_path}")
    typer.echo("[OK] Postings fetched.")


@app.command("forecast")
def forecast(
    postings_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Postings CSV (default: history.postings_file).",
    ),
    months: Optional[int] = typer.Option(
        None,
        "--months",
        help="Forecast window in months (default from config).",
    ),
    extended: bool = typer.Option(
        False,
        "--extended",
        help="Include the current month and attach evidence to each prediction.",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        help="Show only the N most confident predictions (default from config).",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Pretend the current month is YYYY-MM.",
    ),
    json_path: Optional[str] = typer.Option(
        None,
        "--json",
        help="Also write the predictions payload to this JSON file.",
    ),
    csv_path: Optional[str] = typer.Option(
        None,
        "--csv",
        help="Also write flat prediction rows to this CSV file.",
    ),
    save: bool = typer.Option(
        False,
        "--save",
        help="Write predictions.json and predictions.csv into output.output_dir.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Forecast which organizations will post jobs in the coming months.

    \b
    Default mode   : months now+1 .. now+window, ordered by month.
    --extended mode: months now+0 .. now+window with evidence, ranked by
                     confidence.
    """
    from recruit_forecaster.engine.forecast import (
        generate_forecasts,
        generate_forecasts_with_evidence,
    )
    from recruit_forecaster.reporting.export import (
        PREDICTION_CSV_FIELDS,
        build_predictions_payload,
        export_to_csv,
        export_to_json,
        predictions_to_records,
        top_predictions,
    )
    from recruit_forecaster.reporting.formatters import format_forecast_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    now = _parse_as_of_or_exit(as_of)

    if extended:
        window = months if months is not None else config.prediction.extended_window_months
        limit = top if top is not None else config.prediction.extended_top_n
    else:
        window = months if months is not None else config.prediction.window_months
        limit = top if top is not None else config.prediction.top_n

    if window < 0:
        typer.echo(f"[ERROR] --months must be >= 0, got {window}.", err=True)
        raise typer.Exit(code=1)
    if limit < 1:
        typer.echo(f"[ERROR] --top must be >= 1, got {limit}.", err=True)
        raise typer.Exit(code=1)

    histories = _load_histories_or_exit(config, postings_file, now)

    if extended:
        predictions = generate_forecasts_with_evidence(histories, window, now=now)
        shown = top_predictions(predictions, limit)
        title = f"Predicted Postings (this month + {window}, top {limit})"
    else:
        predictions = generate_forecasts(histories, window, now=now)
        shown = top_predictions(predictions, limit)
        shown.sort(key=lambda p: (p.predicted_month, -p.confidence, p.org_name))
        title = f"Predicted Postings (next {window} month(s))"

    typer.echo(format_forecast_table(shown, title=title, show_evidence=extended))

    output_dir = Path(config.output.output_dir)
    if save and json_path is None:
        json_path = str(output_dir / "predictions.json")
    if save and csv_path is None:
        csv_path = str(output_dir / "predictions.csv")

    if json_path:
        out = export_to_json(build_predictions_payload(shown), Path(json_path))
        typer.echo(f"  JSON written: {out}")
    if csv_path:
        out = export_to_csv(
            predictions_to_records(shown), Path(csv_path), fieldnames=PREDICTION_CSV_FIELDS
        )
        typer.echo(f"  CSV written: {out}")

    typer.echo("")
    typer.echo(f"[OK] {len(predictions)} prediction(s) generated, {len(shown)} shown.")


@app.command("predict-org")
def predict_org(
    org_name: str = typer.Argument(..., help="Organization name (exact or substring)."),
    postings_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Postings CSV (default: history.postings_file).",
    ),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Pretend the current month is YYYY-MM.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Predict the next posting month for a single organization."""
    from recruit_forecaster.engine.predictor import predict_next
    from recruit_forecaster.ingestion.history import find_organization_history
    from recruit_forecaster.reporting.formatters import format_next_posting

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    now = _parse_as_of_or_exit(as_of)

    histories = _load_histories_or_exit(config, postings_file, now)
    history = find_organization_history(histories, org_name)
    if history is None:
        typer.echo(
            f"[ERROR] No organization matching '{org_name}' with at least two postings.",
            err=True,
        )
        raise typer.Exit(code=1)

    prediction = predict_next(history.org_name, history.postings, now=now)
    if prediction is None:
        typer.echo(f"[ERROR] Not enough history for '{history.org_name}'.", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_next_posting(prediction))
    typer.echo("")
    typer.echo("[OK] Prediction complete.")


@app.command("org-patterns")
def org_patterns(
    query: Optional[str] = typer.Option(
        None,
        "--query",
        "-q",
        help="Case-insensitive organization name filter.",
    ),
    page: int = typer.Option(1, "--page", help="1-based result page."),
    limit: int = typer.Option(20, "--limit", help="Results per page (max 100)."),
    as_of: Optional[str] = typer.Option(
        None,
        "--as-of",
        help="Anchor the lookback window on YYYY-MM instead of today.",
    ),
    postings_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Postings CSV (default: history.postings_file).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List organizations with their hiring-pattern summaries."""
    from recruit_forecaster.engine.summary import search_organization_patterns
    from recruit_forecaster.reporting.formatters import format_pattern_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    now = _parse_as_of_or_exit(as_of)

    if page < 1:
        typer.echo(f"[ERROR] --page must be >= 1, got {page}.", err=True)
        raise typer.Exit(code=1)

    histories = _load_histories_or_exit(config, postings_file, now)
    patterns, total = search_organization_patterns(histories, query, page, limit)

    typer.echo(format_pattern_table(patterns, total, page))
    typer.echo("")
    typer.echo("[OK] Patterns listed.")


if __name__ == "__main__":
    app()
