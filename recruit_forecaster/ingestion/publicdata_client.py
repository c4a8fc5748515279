"""
Public-data recruitment API client (data.go.kr, public institution job postings).

API:   https://apis.data.go.kr/1051000/recruitment/list
Docs:  https://www.data.go.kr  ("공공기관 채용정보" open API)

Credential setup (.env, gitignored):
  PUBLIC_DATA_API_KEY=your_service_key

Query parameters::

    serviceKey  API key
    pageNo      1-based page number
    numOfRows   page size (max 100)
    resultType  "json"
    ongoingYn   "Y" for open postings, "N" for closed (historical) ones

Response body::

    {"resultCode": 200, "resultMsg": "...", "totalCount": 1234, "result": [...]}

The client is built explicitly from ``PublicDataConfig``; callers check
``is_publicdata_configured()`` first. An ``httpx.Client`` may be injected
(tests pass one backed by ``httpx.MockTransport``).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from recruit_forecaster.config import PublicDataConfig
from recruit_forecaster.ingestion.classifiers import (
    classify_duties,
    classify_employment_type,
    is_internship,
    parse_compact_date,
    parse_regions,
)
from recruit_forecaster.ingestion.history import JobRecord

logger = logging.getLogger(__name__)


class PublicDataError(RuntimeError):
    """The API answered 2xx but reported a failure in ``resultCode``."""


@dataclass
class PublicDataPage:
    """One page of raw API items."""

    page_no: int
    total_count: int
    items: list[dict[str, Any]] = field(default_factory=list)


class PublicDataClient:
    """Client for the public-institution recruitment listing endpoint.

    Usage::

        from recruit_forecaster.config import is_publicdata_configured, load_config

        config = load_config()
        if is_publicdata_configured(config):
            with PublicDataClient(config.publicdata) as client:
                records = client.fetch_records(max_pages=5, ongoing=False)

    Attributes:
        config: API settings (base URL, key, page size, delays).
    """

    def __init__(
        self,
        config: PublicDataConfig,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=config.timeout_s)

    def __enter__(self) -> "PublicDataClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    # ── Requests ───────────────────────────────────────────────────────────────

    def fetch_page(self, page_no: int = 1, ongoing: bool = True) -> PublicDataPage:
        """Fetch a single page of postings.

        Args:
            page_no: 1-based page number.
            ongoing: ``True`` for open postings, ``False`` for closed ones.

        Returns:
            PublicDataPage with the raw items.

        Raises:
            RuntimeError:          If no API key is configured.
            httpx.HTTPStatusError: On a non-2xx response.
            PublicDataError:       If ``resultCode`` is not 200.
        """
        if not self.config.api_key:
            raise RuntimeError("PUBLIC_DATA_API_KEY must be set in .env.")

        logger.debug("Fetching public-data page %d (ongoing=%s)", page_no, ongoing)
        resp = self._http.get(
            f"{self.config.base_url}/list",
            params={
                "serviceKey": self.config.api_key,
                "pageNo": page_no,
                "numOfRows": self.config.page_size,
                "resultType": "json",
                "ongoingYn": "Y" if ongoing else "N",
            },
            headers={"Accept": "application/json"},
        )
        resp.raise_for_status()
        data = resp.json()

        if data.get("resultCode") != 200:
            raise PublicDataError(
                f"Public-data API error {data.get('resultCode')}: {data.get('resultMsg')}"
            )

        return PublicDataPage(
            page_no=page_no,
            total_count=int(data.get("totalCount") or 0),
            items=list(data.get("result") or []),
        )

    def fetch_all(
        self,
        max_pages: Optional[int] = None,
        ongoing: bool = True,
    ) -> list[dict[str, Any]]:
        """Fetch pages until ``totalCount`` is covered or ``max_pages`` is reached.

        Sleeps ``config.request_delay_s`` between pages.
        """
        limit = max_pages or self.config.max_pages
        items: list[dict[str, Any]] = []
        page_no = 1

        while page_no <= limit:
            page = self.fetch_page(page_no, ongoing=ongoing)
            items.extend(page.items)
            has_more = page_no * self.config.page_size < page.total_count
            if not has_more or not page.items:
                break
            page_no += 1
            if page_no <= limit and self.config.request_delay_s > 0:
                time.sleep(self.config.request_delay_s)

        logger.info("Fetched %d public-data posting(s) over %d page(s)", len(items), page_no)
        return items

    def fetch_records(
        self,
        max_pages: Optional[int] = None,
        ongoing: bool = True,
    ) -> list[JobRecord]:
        """Fetch all pages and normalize every item into a :class:`JobRecord`.

        Items without a posting id are skipped with a warning.
        """
        items = self.fetch_all(max_pages, ongoing)
        records = [r for r in (normalize_item(item) for item in items) if r is not None]
        skipped = len(items) - len(records)
        if skipped:
            logger.warning("Skipped %d public-data item(s) without recrutPblntSn", skipped)
        return records


def normalize_item(item: dict[str, Any]) -> Optional[JobRecord]:
    """Map a raw API item to a :class:`JobRecord`.

    Missing or malformed dates become ``None``; such records are dropped by
    ``build_histories()`` before they reach the engine. Items without a
    ``recrutPblntSn`` cannot be stored or deduplicated and yield ``None``.
    """
    raw_id = item.get("recrutPblntSn")
    job_id = str(raw_id).strip() if raw_id is not None else ""
    if not job_id:
        return None

    title = item.get("recrutPbancTtl")
    hire_type = item.get("hireTypeNmLst")
    return JobRecord(
        job_id=job_id,
        org_name=item.get("instNm"),
        title=title,
        apply_start_at=parse_compact_date(item.get("pbancBgngYmd")),
        apply_end_at=parse_compact_date(item.get("pbancEndYmd")),
        employment_type=classify_employment_type(hire_type),
        is_internship=is_internship(title, hire_type),
        duty_categories=tuple(sorted(classify_duties(item.get("ncsCdNmLst")))),
        regions=tuple(parse_regions(item.get("workRgnNmLst"))),
        source_url=item.get("srcUrl") or None,
    )
