"""
End-to-end tests for recruit_forecaster/cli.py via ``typer.testing.CliRunner``.

Every command runs against a tmp_path config (see ``app_config_file``) and a
small postings CSV; the public-data API is replaced by ``httpx.MockTransport``.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

import recruit_forecaster.ingestion.publicdata_client as publicdata_client
from recruit_forecaster.cli import app

runner = CliRunner()

_POSTINGS = [
    ("a1", "A기관", "2023 정기 채용", "2023-03-02"),
    ("a2", "A기관", "2024 정기 채용", "2024-03-04"),
    ("a3", "A기관", "2025 정기 채용", "2025-03-03"),
    ("b1", "B공사", "1분기 채용", "2025-01-06"),
    ("b2", "B공사", "2분기 채용", "2025-04-07"),
    ("b3", "B공사", "3분기 채용", "2025-07-07"),
    ("b4", "B공사", "4분기 채용", "2025-10-06"),
    ("c1", "C재단", "단발 채용", "2025-05-01"),
]


@pytest.fixture
def postings_file(app_config_file: Path) -> Path:
    path = app_config_file.parent.parent / "postings.csv"
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["job_id", "org_name", "title", "apply_start_at"])
        writer.writerows(_POSTINGS)
    return path


@pytest.fixture(autouse=True)
def _reset_root_logging():
    """Drop handlers bound to the runner's captured stdout after each test."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def _invoke(*args: str):
    return runner.invoke(app, list(args))


# ── validate-config ───────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_ok(self, app_config_file):
        result = _invoke("validate-config", "--config", str(app_config_file))
        assert result.exit_code == 0, result.output
        assert "[OK] Config valid." in result.output
        assert "not configured" in result.output

    def test_full_masks_key(self, app_config_file, monkeypatch):
        monkeypatch.setenv("PUBLIC_DATA_API_KEY", "super-secret")
        result = _invoke("validate-config", "--config", str(app_config_file), "--full")
        assert result.exit_code == 0, result.output
        assert "super-secret" not in result.output
        assert '"api_key": "***"' in result.output

    def test_configures_logging(self, app_config_file, tmp_path):
        result = _invoke("validate-config", "--config", str(app_config_file))
        assert result.exit_code == 0, result.output
        assert (tmp_path / "logs" / "test.log").exists()

    def test_missing_config(self, tmp_path):
        result = _invoke("validate-config", "--config", str(tmp_path / "none.toml"))
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


# ── forecast ──────────────────────────────────────────────────────────────────

class TestForecast:
    def test_default_window(self, app_config_file, postings_file):
        result = _invoke("forecast", "--config", str(app_config_file), "--as-of", "2026-02")
        assert result.exit_code == 0, result.output
        assert "A기관" in result.output
        assert "2026-03" in result.output
        assert "B공사" in result.output
        assert "C재단" not in result.output.split("===")[-1]
        assert "[OK]" in result.output

    def test_top_limits_rows(self, app_config_file, postings_file):
        result = _invoke(
            "forecast", "--config", str(app_config_file), "--as-of", "2026-02", "--top", "1",
        )
        assert result.exit_code == 0, result.output
        assert "1 prediction(s)" in result.output
        assert "A기관" in result.output.split("===")[-1]

    def test_extended_with_exports(self, app_config_file, postings_file, tmp_path):
        json_out = tmp_path / "out" / "p.json"
        csv_out = tmp_path / "out" / "p.csv"
        result = _invoke(
            "forecast", "--config", str(app_config_file), "--as-of", "2026-03",
            "--extended", "--json", str(json_out), "--csv", str(csv_out),
        )
        assert result.exit_code == 0, result.output
        assert "same_month_last_year" in result.output

        payload = json.loads(json_out.read_text(encoding="utf-8"))
        assert payload["success"] is True
        first = payload["predictions"][0]
        assert first["org_name"] == "A기관"
        assert first["predicted_month"] == "2026-03"
        assert first["evidence_jobs"][0]["job_id"] == "a3"

        with csv_out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == len(payload["predictions"])

    def test_save_uses_output_dir(self, app_config_file, postings_file, tmp_path):
        result = _invoke(
            "forecast", "--config", str(app_config_file), "--as-of", "2026-02", "--save",
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "outputs" / "predictions.json").exists()
        assert (tmp_path / "outputs" / "predictions.csv").exists()

    def test_missing_postings_file(self, app_config_file):
        result = _invoke("forecast", "--config", str(app_config_file))
        assert result.exit_code == 1
        assert "Postings file not found" in result.output

    def test_bad_as_of(self, app_config_file, postings_file):
        result = _invoke("forecast", "--config", str(app_config_file), "--as-of", "2026/02")
        assert result.exit_code == 1
        assert "YYYY-MM" in result.output

    def test_negative_months(self, app_config_file, postings_file):
        result = _invoke("forecast", "--config", str(app_config_file), "--months=-1")
        assert result.exit_code == 1

    def test_invalid_csv(self, app_config_file, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("job_id,org_name\n1,x\n", encoding="utf-8")
        result = _invoke("forecast", "--config", str(app_config_file), "--file", str(bad))
        assert result.exit_code == 1
        assert "CSV parse failed" in result.output


# ── predict-org ───────────────────────────────────────────────────────────────

class TestPredictOrg:
    def test_substring_match(self, app_config_file, postings_file):
        result = _invoke(
            "predict-org", "B공", "--config", str(app_config_file), "--as-of", "2025-11",
        )
        assert result.exit_code == 0, result.output
        assert "Next Posting: B공사" in result.output
        assert "2026-01" in result.output
        assert "quarterly" in result.output

    def test_unknown_org(self, app_config_file, postings_file):
        result = _invoke("predict-org", "없는기관", "--config", str(app_config_file), "--as-of", "2026-02")
        assert result.exit_code == 1
        assert "No organization matching" in result.output

    def test_single_posting_org_not_found(self, app_config_file, postings_file):
        result = _invoke("predict-org", "C재단", "--config", str(app_config_file), "--as-of", "2026-02")
        assert result.exit_code == 1


# ── org-patterns ──────────────────────────────────────────────────────────────

class TestOrgPatterns:
    def test_lists_all(self, app_config_file, postings_file):
        result = _invoke("org-patterns", "--config", str(app_config_file), "--as-of", "2026-02")
        assert result.exit_code == 0, result.output
        table = result.output.split("===")[-1]
        assert table.index("B공사") < table.index("A기관")
        assert "showing 2 of 2" in result.output

    def test_query(self, app_config_file, postings_file):
        result = _invoke(
            "org-patterns", "--config", str(app_config_file), "--as-of", "2026-02", "--query", "a기관",
        )
        assert result.exit_code == 0, result.output
        assert "showing 1 of 1" in result.output

    def test_invalid_page(self, app_config_file, postings_file):
        result = _invoke("org-patterns", "--config", str(app_config_file), "--page", "0")
        assert result.exit_code == 1


# ── fetch-postings ────────────────────────────────────────────────────────────

class TestFetchPostings:
    def test_requires_api_key(self, app_config_file):
        result = _invoke("fetch-postings", "--config", str(app_config_file))
        assert result.exit_code == 1
        assert "PUBLIC_DATA_API_KEY" in result.output

    def test_writes_csv(self, app_config_file, tmp_path, monkeypatch):
        monkeypatch.setenv("PUBLIC_DATA_API_KEY", "k")

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["ongoingYn"] == "N"
            return httpx.Response(200, json={
                "resultCode": 200,
                "totalCount": 1,
                "result": [{
                    "recrutPblntSn": 5,
                    "instNm": "한국전력공사",
                    "recrutPbancTtl": "신입 채용",
                    "pbancBgngYmd": "20250303",
                }],
            })

        real_client = publicdata_client.PublicDataClient
        monkeypatch.setattr(
            publicdata_client,
            "PublicDataClient",
            lambda config: real_client(
                config, http_client=httpx.Client(transport=httpx.MockTransport(handler))
            ),
        )

        out = tmp_path / "fetched.csv"
        result = _invoke(
            "fetch-postings", "--config", str(app_config_file), "--closed", "--output", str(out),
        )
        assert result.exit_code == 0, result.output
        assert "Wrote 1 posting(s)" in result.output
        with out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["org_name"] == "한국전력공사"
        assert rows[0]["apply_start_at"] == "2025-03-03"

    def test_merges_into_existing_file(self, app_config_file, tmp_path, monkeypatch):
        from datetime import date

        from recruit_forecaster.ingestion.history import JobRecord
        from recruit_forecaster.ingestion.postings_csv import (
            parse_postings_csv,
            write_postings_csv,
        )

        monkeypatch.setenv("PUBLIC_DATA_API_KEY", "k")
        out = tmp_path / "history.csv"
        write_postings_csv(
            [
                JobRecord(job_id="1", org_name="한국전력공사", title="2023 채용",
                          apply_start_at=date(2023, 3, 2)),
                JobRecord(job_id="5", org_name="한국전력공사", title="old title",
                          apply_start_at=date(2025, 3, 3)),
            ],
            out,
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "resultCode": 200,
                "totalCount": 3,
                "result": [
                    {"recrutPblntSn": 5, "instNm": "한국전력공사",
                     "recrutPbancTtl": "new title", "pbancBgngYmd": "20250303"},
                    {"recrutPblntSn": 6, "instNm": "한국전력공사",
                     "recrutPbancTtl": "2026 채용", "pbancBgngYmd": "20260302"},
                    {"instNm": "이름없는기관", "pbancBgngYmd": "20260302"},
                ],
            })

        real_client = publicdata_client.PublicDataClient
        monkeypatch.setattr(
            publicdata_client,
            "PublicDataClient",
            lambda config: real_client(
                config, http_client=httpx.Client(transport=httpx.MockTransport(handler))
            ),
        )

        result = _invoke("fetch-postings", "--config", str(app_config_file), "--output", str(out))
        assert result.exit_code == 0, result.output
        assert "Fetched 2 posting(s), 1 new (2 already stored)" in result.output
        assert "Wrote 3 posting(s)" in result.output

        records = {r.job_id: r for r in parse_postings_csv(out)}
        assert set(records) == {"1", "5", "6"}
        assert records["5"].title == "new title"
        assert records["1"].apply_start_at == date(2023, 3, 2)

    def test_invalid_existing_file(self, app_config_file, tmp_path, monkeypatch):
        monkeypatch.setenv("PUBLIC_DATA_API_KEY", "k")
        out = tmp_path / "broken.csv"
        out.write_text("job_id,org_name\n,nameless\n", encoding="utf-8")
        real_client = publicdata_client.PublicDataClient
        monkeypatch.setattr(
            publicdata_client,
            "PublicDataClient",
            lambda config: real_client(
                config,
                http_client=httpx.Client(
                    transport=httpx.MockTransport(
                        lambda request: httpx.Response(
                            200, json={"resultCode": 200, "totalCount": 0, "result": []}
                        )
                    )
                ),
            ),
        )
        result = _invoke("fetch-postings", "--config", str(app_config_file), "--output", str(out))
        assert result.exit_code == 1
        assert "Existing postings file is invalid" in result.output

    def test_api_error(self, app_config_file, monkeypatch):
        monkeypatch.setenv("PUBLIC_DATA_API_KEY", "k")
        real_client = publicdata_client.PublicDataClient
        monkeypatch.setattr(
            publicdata_client,
            "PublicDataClient",
            lambda config: real_client(
                config,
                http_client=httpx.Client(
                    transport=httpx.MockTransport(lambda request: httpx.Response(503))
                ),
            ),
        )
        result = _invoke("fetch-postings", "--config", str(app_config_file))
        assert result.exit_code == 1
        assert "Fetch failed" in result.output
