"""
Shared pytest fixtures for the Recruitment Posting Forecaster test suite.

Provides:
  - ``make_posting`` / ``make_history``: plain factories, importable from
    test modules, for building engine inputs from ``"YYYY-MM"`` strings.
  - Scenario histories used across the engine tests (annual, quarterly,
    semiannual, erratic).
  - ``app_config_file``: a TOML config in ``tmp_path`` for CLI/config tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from recruit_forecaster.models.posting import OrganizationHistory, Posting


# ── Factories ─────────────────────────────────────────────────────────────────

def make_posting(month: str, job_id: Optional[str] = None, title: Optional[str] = None) -> Posting:
    """Build a ``Posting`` from a ``"YYYY-MM"`` key."""
    year, month_number = (int(part) for part in month.split("-"))
    return Posting(
        month=month,
        year=year,
        month_number=month_number,
        job_id=job_id if job_id is not None else f"job-{month}",
        title=title,
    )


def make_history(org_name: str, *months: str) -> OrganizationHistory:
    """Build an ``OrganizationHistory`` with one posting per month key."""
    return OrganizationHistory(
        org_name=org_name,
        postings=tuple(
            make_posting(m, job_id=f"{org_name}-{i}", title=f"{org_name} 채용 {m}")
            for i, m in enumerate(months)
        ),
    )


# ── Scenario histories ────────────────────────────────────────────────────────

@pytest.fixture
def annual_history() -> OrganizationHistory:
    """Posted every March for three years."""
    return make_history("A기관", "2023-03", "2024-03", "2025-03")


@pytest.fixture
def quarterly_history() -> OrganizationHistory:
    """Posted once per quarter through 2024."""
    return make_history("B공사", "2024-01", "2024-04", "2024-07", "2024-10")


@pytest.fixture
def semiannual_history() -> OrganizationHistory:
    """Two postings five months apart."""
    return make_history("C재단", "2024-01", "2024-06")


@pytest.fixture
def erratic_history() -> OrganizationHistory:
    """Intervals of 1, 11, 2 and 9 months."""
    return make_history("D공단", "2023-01", "2023-02", "2024-01", "2024-03", "2024-12")


# ── Config fixture ────────────────────────────────────────────────────────────

@pytest.fixture
def app_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A complete TOML config whose paths all live under ``tmp_path``.

    Environment overrides are cleared so the host environment cannot leak in.
    """
    for var in (
        "RECRUIT_FORECASTER_POSTINGS_FILE",
        "RECRUIT_FORECASTER_LOG_LEVEL",
        "RECRUIT_FORECASTER_DEBUG",
        "PUBLIC_DATA_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)

    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "test.toml"
    path.write_text(
        "\n".join([
            "[project]",
            "debug = false",
            "",
            "[prediction]",
            "window_months = 3",
            "extended_window_months = 10",
            "top_n = 50",
            "extended_top_n = 100",
            "",
            "[history]",
            f'postings_file = "{(tmp_path / "postings.csv").as_posix()}"',
            "lookback_years = 3",
            "",
            "[publicdata]",
            'base_url = "https://example.test/recruitment"',
            "page_size = 2",
            "max_pages = 5",
            "request_delay_s = 0.0",
            "",
            "[output]",
            f'output_dir = "{(tmp_path / "outputs").as_posix()}"',
            "",
            "[logging]",
            'level = "WARNING"',
            f'log_file = "{(tmp_path / "logs" / "test.log").as_posix()}"',
            "json_format = false",
            "",
        ]),
        encoding="utf-8",
    )
    return path
