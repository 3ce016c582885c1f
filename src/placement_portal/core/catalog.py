"""Listing filters, aggregate statistics and the bundled curated catalog."""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from importlib import resources

from pydantic import TypeAdapter

from placement_portal.db.models import CompanyRow
from placement_portal.types import Company, CompanyStats

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
CURATED_DATASET = "companies.json"


def filter_companies(
    companies: Iterable[Company],
    search: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Company]:
    needle = search.strip().lower()
    matches: list[Company] = []
    for company in companies:
        if category != ALL_CATEGORIES and company.category != category:
            continue
        if needle and not (
            needle in company.name.lower()
            or needle in company.descriptor.lower()
            or needle in company.industry.lower()
        ):
            continue
        matches.append(company)
    return matches


def distinct_categories(values: Iterable[str | None]) -> list[str]:
    return sorted({value for value in values if value})


def company_stats(rows: Iterable[CompanyRow]) -> CompanyStats:
    total = 0
    by_category: Counter[str] = Counter()
    by_profitability: Counter[str] = Counter()
    by_hiring_velocity: Counter[str] = Counter()
    for row in rows:
        total += 1
        if row.get("category"):
            by_category[row["category"]] += 1
        if row.get("profitability_status"):
            by_profitability[row["profitability_status"]] += 1
        if row.get("hiring_velocity"):
            by_hiring_velocity[row["hiring_velocity"]] += 1

    return CompanyStats(
        total_count=total,
        by_category=dict(by_category),
        by_profitability=dict(by_profitability),
        by_hiring_velocity=dict(by_hiring_velocity),
    )


def load_curated_companies() -> list[Company]:
    raw = resources.files("placement_portal.data").joinpath(CURATED_DATASET).read_text(encoding="utf-8")
    return TypeAdapter(list[Company]).validate_python(json.loads(raw))


class StaticCatalog:
    """Company source backed by the curated dataset shipped with the package.

    Unlike the database, the curated entries carry the structured fields the
    flat schema cannot express yet (skills, selection rounds, hiring trends).
    """

    def __init__(self, companies: Sequence[Company] | None = None):
        self._companies = list(companies) if companies is not None else load_curated_companies()
        self._by_id = {company.id: company for company in self._companies}
        logger.debug("Loaded %d curated companies", len(self._companies))

    def list_companies(self, limit: int | None = None, offset: int = 0) -> list[Company]:
        items = self._companies[offset:]
        return items[:limit] if limit else list(items)

    def get_company(self, company_id: str) -> Company | None:
        return self._by_id.get(company_id)

    def compare_companies(self, ids: Sequence[str]) -> list[Company]:
        return [self._by_id[company_id] for company_id in ids if company_id in self._by_id]

    def companies_by_category(self, category: str) -> list[Company]:
        return [company for company in self._companies if company.category == category]

    def search_companies(self, query: str) -> list[Company]:
        if not query.strip():
            return []
        return filter_companies(self._companies, search=query)

    def categories(self) -> list[str]:
        return distinct_categories(company.category for company in self._companies)

    def stats(self) -> CompanyStats:
        return company_stats(
            {
                "category": company.category,
                "profitability_status": company.financials.profit_margin,
                "hiring_velocity": None,
            }
            for company in self._companies
        )
