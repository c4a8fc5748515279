"""
Tests for recruit_forecaster/ingestion/postings_csv.py.

What we test
------------
parse_postings_csv():
  - Valid file with only required columns.
  - All three date formats.
  - Optional columns: enums, booleans, semicolon lists.
  - Rows without a usable start date are skipped, not fatal.
  - Missing columns / bad enum / empty job_id -> ValueError.
  - Header-only file -> [].
  - Missing file -> FileNotFoundError.

write_postings_csv():
  - Output is readable by parse_postings_csv().
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from recruit_forecaster.ingestion.history import JobRecord
from recruit_forecaster.ingestion.postings_csv import (
    CSV_FIELDNAMES,
    parse_postings_csv,
    write_postings_csv,
)
from recruit_forecaster.taxonomy.posting_taxonomy import DutyCategory, EmploymentType

_HEADER = "job_id,org_name,title,apply_start_at"


def _write(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "postings.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestParsePostingsCsv:
    def test_required_columns_only(self, tmp_path):
        path = _write(
            tmp_path,
            _HEADER,
            "100,한국전력공사,2024 상반기 신입 채용,2024-03-04",
        )
        records = parse_postings_csv(path)
        assert len(records) == 1
        r = records[0]
        assert r.job_id == "100"
        assert r.org_name == "한국전력공사"
        assert r.apply_start_at == date(2024, 3, 4)
        assert r.employment_type == EmploymentType.OTHER
        assert r.duty_categories == (DutyCategory.OTHER,)
        assert r.is_internship is False

    def test_date_formats(self, tmp_path):
        path = _write(
            tmp_path,
            _HEADER,
            "1,기관,a,2024-03-04",
            "2,기관,b,20240405",
            "3,기관,c,2024-05-06T09:00:00Z",
        )
        dates = [r.apply_start_at for r in parse_postings_csv(path)]
        assert dates == [date(2024, 3, 4), date(2024, 4, 5), date(2024, 5, 6)]

    def test_optional_columns(self, tmp_path):
        path = _write(
            tmp_path,
            ",".join(CSV_FIELDNAMES),
            "7,기관,인턴 채용,2024-01-02,2024-01-20,INTERN,true,DATA;RESEARCH,서울;부산,https://x.test/7",
        )
        r = parse_postings_csv(path)[0]
        assert r.apply_end_at == date(2024, 1, 20)
        assert r.employment_type == EmploymentType.INTERN
        assert r.is_internship is True
        assert r.duty_categories == (DutyCategory.DATA, DutyCategory.RESEARCH)
        assert r.regions == ("서울", "부산")
        assert r.source_url == "https://x.test/7"

    def test_unusable_start_date_skipped(self, tmp_path):
        path = _write(
            tmp_path,
            _HEADER,
            "1,기관,a,",
            "2,기관,b,not-a-date",
            "3,기관,c,2024-02-30",
            "4,기관,d,2024-03-01",
        )
        assert [r.job_id for r in parse_postings_csv(path)] == ["4"]

    def test_empty_org_kept_for_later_filtering(self, tmp_path):
        path = _write(tmp_path, _HEADER, "1,,a,2024-03-01")
        assert parse_postings_csv(path)[0].org_name is None

    def test_missing_columns(self, tmp_path):
        path = _write(tmp_path, "job_id,org_name", "1,기관")
        with pytest.raises(ValueError, match="missing required columns"):
            parse_postings_csv(path)

    def test_bad_enum(self, tmp_path):
        path = _write(
            tmp_path,
            _HEADER + ",employment_type",
            "1,기관,a,2024-03-01,FREELANCE",
        )
        with pytest.raises(ValueError, match="Invalid employment_type"):
            parse_postings_csv(path)

    def test_empty_job_id(self, tmp_path):
        path = _write(tmp_path, _HEADER, ",기관,a,2024-03-01")
        with pytest.raises(ValueError, match="job_id"):
            parse_postings_csv(path)

    def test_errors_report_row_numbers(self, tmp_path):
        path = _write(tmp_path, _HEADER, "1,기관,a,2024-03-01", ",기관,b,2024-03-01")
        with pytest.raises(ValueError, match="Row 3"):
            parse_postings_csv(path)

    def test_header_only(self, tmp_path):
        assert parse_postings_csv(_write(tmp_path, _HEADER)) == []

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_postings_csv(tmp_path / "missing.csv")


class TestWritePostingsCsv:
    def test_written_file_parses_back(self, tmp_path):
        records = [
            JobRecord(
                job_id="1",
                org_name="한국전력공사",
                title="체험형 인턴",
                apply_start_at=date(2024, 3, 4),
                apply_end_at=date(2024, 3, 20),
                employment_type=EmploymentType.INTERN,
                is_internship=True,
                duty_categories=(DutyCategory.HR, DutyCategory.FINANCE),
                regions=("서울", "나주"),
                source_url="https://x.test/1",
            ),
            JobRecord(job_id="2", org_name="기관", apply_start_at=date(2024, 5, 1)),
        ]
        path = write_postings_csv(records, tmp_path / "out" / "postings.csv")
        assert path.exists()
        assert parse_postings_csv(path) == records

    def test_record_without_start_date_dropped_on_read(self, tmp_path):
        path = write_postings_csv(
            [JobRecord(job_id="1", org_name="기관")], tmp_path / "postings.csv"
        )
        assert parse_postings_csv(path) == []
