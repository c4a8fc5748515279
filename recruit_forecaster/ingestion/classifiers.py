"""
Keyword classifiers for raw public-data postings.

Every classifier is a pure function driven by a rule table defined at module
level, so the tables can be inspected and tested without any other part of
the system:

  - ``classify_duties(text)``          NCS text  -> frozenset[DutyCategory]
  - ``classify_employment_type(text)`` hire type -> EmploymentType
  - ``is_internship(title, hire_type)``
  - ``normalize_region(name)`` / ``parse_regions(text)``
  - ``parse_compact_date("YYYYMMDD")``

Matching is case-insensitive substring search. Keywords are Korean because
the source API publishes Korean text; a few ASCII abbreviations (IT, UI, HR,
R&D) appear in the same fields.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from recruit_forecaster.taxonomy.posting_taxonomy import DutyCategory, EmploymentType

# Order matters only for readability; a text may match several categories.
DUTY_KEYWORDS: dict[DutyCategory, tuple[str, ...]] = {
    DutyCategory.DATA:           ("데이터", "정보", "전산", "it"),
    DutyCategory.DEVELOPMENT:    ("개발", "프로그래", "소프트웨어"),
    DutyCategory.MARKETING:      ("마케팅", "홍보", "광고"),
    DutyCategory.DESIGN:         ("디자인", "ui", "ux"),
    DutyCategory.HR:             ("인사", "채용", "hr"),
    DutyCategory.FINANCE:        ("재무", "회계", "세무", "경리"),
    DutyCategory.ADMINISTRATION: ("행정", "사무", "총무", "비서"),
    DutyCategory.RESEARCH:       ("연구", "r&d", "분석"),
}

# Evaluated in order; the first rule with a matching keyword wins.
# "비정규직" contains "정규직", so contract rules come first.
EMPLOYMENT_RULES: tuple[tuple[EmploymentType, tuple[str, ...]], ...] = (
    (EmploymentType.INTERN,   ("인턴", "실습", "체험")),
    (EmploymentType.CONTRACT, ("비정규", "계약", "기간제")),
    (EmploymentType.REGULAR,  ("정규직",)),
)

INTERN_TITLE_KEYWORDS: tuple[str, ...] = ("인턴", "실습", "체험형")
INTERN_HIRE_TYPE_KEYWORDS: tuple[str, ...] = ("인턴", "체험")

REGION_ALIASES: dict[str, str] = {
    "서울특별시": "서울", "서울시": "서울",
    "부산광역시": "부산", "부산시": "부산",
    "인천광역시": "인천", "인천시": "인천",
    "대구광역시": "대구", "대구시": "대구",
    "대전광역시": "대전", "대전시": "대전",
    "광주광역시": "광주", "광주시": "광주",
    "울산광역시": "울산", "울산시": "울산",
    "세종특별자치시": "세종", "세종시": "세종",
    "경기도": "경기",
    "강원도": "강원", "강원특별자치도": "강원",
    "충청북도": "충북",
    "충청남도": "충남",
    "전라북도": "전북", "전북특별자치도": "전북",
    "전라남도": "전남",
    "경상북도": "경북",
    "경상남도": "경남",
    "제주도": "제주", "제주특별자치도": "제주",
}

_REGION_SPLIT = re.compile(r"[,\s/]+")


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def classify_duties(text: Optional[str]) -> frozenset[DutyCategory]:
    """Map NCS classification text to duty categories.

    Returns ``{DutyCategory.OTHER}`` when the text is empty or matches no rule.
    """
    if not text:
        return frozenset({DutyCategory.OTHER})
    lower = text.lower()
    matched = frozenset(
        category for category, keywords in DUTY_KEYWORDS.items()
        if _contains_any(lower, keywords)
    )
    return matched or frozenset({DutyCategory.OTHER})


def classify_employment_type(text: Optional[str]) -> EmploymentType:
    """Map hire-type text to an employment type; internships take precedence."""
    if not text:
        return EmploymentType.OTHER
    lower = text.lower()
    for employment_type, keywords in EMPLOYMENT_RULES:
        if _contains_any(lower, keywords):
            return employment_type
    return EmploymentType.OTHER


def is_internship(title: Optional[str], hire_type: Optional[str]) -> bool:
    """Return ``True`` if the title or hire type marks an internship."""
    return (
        _contains_any((title or "").lower(), INTERN_TITLE_KEYWORDS)
        or _contains_any((hire_type or "").lower(), INTERN_HIRE_TYPE_KEYWORDS)
    )


def normalize_region(name: str) -> str:
    """Shorten an official region name (``"서울특별시"`` -> ``"서울"``)."""
    return REGION_ALIASES.get(name, name)


def parse_regions(text: Optional[str]) -> list[str]:
    """Split a region list on commas, slashes and whitespace, then normalize."""
    if not text:
        return []
    return [normalize_region(r) for r in _REGION_SPLIT.split(text) if r.strip()]


def parse_compact_date(value: Optional[str]) -> Optional[date]:
    """Parse a ``YYYYMMDD`` string; ``None`` if missing or invalid."""
    if not value or len(value) < 8 or not value[:8].isdigit():
        return None
    try:
        return date(int(value[0:4]), int(value[4:6]), int(value[6:8]))
    except ValueError:
        return None
