from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from placement_portal.errors import SelectionLimitError
from placement_portal.types import Company

DEFAULT_MAX_SELECTION = 5


@dataclass(slots=True)
class CompanySelection:
    """Ordered set of companies picked for side-by-side comparison."""

    max_selection: int = DEFAULT_MAX_SELECTION
    _companies: list[Company] = field(default_factory=list)

    @property
    def companies(self) -> list[Company]:
        return list(self._companies)

    @property
    def ids(self) -> list[str]:
        return [company.id for company in self._companies]

    @property
    def is_full(self) -> bool:
        return len(self._companies) >= self.max_selection

    def contains(self, company_id: str) -> bool:
        return any(company.id == company_id for company in self._companies)

    def add(self, company: Company) -> None:
        if self.contains(company.id):
            return
        if self.is_full:
            raise SelectionLimitError(self.max_selection)
        self._companies.append(company)

    def remove(self, company_id: str) -> None:
        self._companies = [company for company in self._companies if company.id != company_id]

    def toggle(self, company: Company) -> bool:
        """Add or remove ``company``; returns True when it ends up selected."""
        if self.contains(company.id):
            self.remove(company.id)
            return False
        self.add(company)
        return True

    def clear(self) -> None:
        self._companies.clear()

    def extend(self, companies: Iterable[Company]) -> None:
        for company in companies:
            self.add(company)


def search_selectable(companies: Iterable[Company], query: str) -> list[Company]:
    needle = query.strip().lower()
    if not needle:
        return list(companies)
    return [
        company
        for company in companies
        if needle in company.name.lower() or needle in company.category.lower()
    ]
