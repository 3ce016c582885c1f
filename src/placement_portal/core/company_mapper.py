"""Map rows of the wide ``company`` table onto :class:`Company` entities.

The source schema stores everything as text. Plain columns are renamed,
comma separated columns are split into lists, and every field the flat schema
cannot express yet is produced by a named :class:`FieldStrategy` so it can be
filled in later without touching the rest of the mapper.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from placement_portal.db.models import PRIMARY_KEY, CompanyRow
from placement_portal.errors import UnmappableRowError
from placement_portal.types import (
    DEFAULT_CATEGORY,
    PLACEMENT_CATEGORIES,
    Company,
    Financials,
    PlacementCategory,
)

logger = logging.getLogger(__name__)


def parse_array(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_json(value: str | None, fallback: Any, model: Any = None) -> Any:
    """Decode a JSON encoded column, returning ``fallback`` on any failure.

    When ``model`` is given (a pydantic model or any type ``TypeAdapter``
    accepts) the decoded payload is validated against it as well.
    """
    if not value:
        return fallback
    try:
        data = json.loads(value)
    except (TypeError, ValueError) as exc:
        logger.debug("Falling back after JSON decode error: %s", exc)
        return fallback

    if model is None:
        return data
    try:
        return _adapter(model).validate_python(data)
    except ValidationError as exc:
        logger.debug("Falling back after JSON payload failed validation: %s", exc.errors()[:1])
        return fallback


def parse_number(value: str | None) -> float:
    if not value:
        return 0
    cleaned = value.replace(",", "").strip()
    try:
        return float(cleaned)
    except ValueError:
        return 0


def parse_category(value: str | None) -> PlacementCategory:
    if value:
        wanted = " ".join(value.split()).lower()
        for category in PLACEMENT_CATEGORIES:
            if category.lower() == wanted:
                return category  # type: ignore[return-value]
    return DEFAULT_CATEGORY


def _text(row: CompanyRow, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value)


@lru_cache(maxsize=64)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


@dataclass(frozen=True, slots=True)
class FieldStrategy:
    derive: Callable[[CompanyRow], Any]
    derivable: bool = True
    note: str = ""

    def __call__(self, row: CompanyRow) -> Any:
        return self.derive(row)


def not_derivable(default_factory: Callable[[], Any], note: str) -> FieldStrategy:
    """Placeholder for a field the current column set cannot express."""
    return FieldStrategy(derive=lambda row: default_factory(), derivable=False, note=note)


def json_column(column: str, model: Any, default_factory: Callable[[], Any] = list) -> FieldStrategy:
    return FieldStrategy(
        derive=lambda row: parse_json(row.get(column), default_factory(), model),
        note=f"JSON decoded from '{column}'",
    )


def number_column(column: str) -> FieldStrategy:
    return FieldStrategy(derive=lambda row: parse_number(row.get(column)), note=f"number from '{column}'")


def list_column(column: str) -> FieldStrategy:
    return FieldStrategy(derive=lambda row: parse_array(row.get(column)), note=f"comma list from '{column}'")


DEFAULT_STRATEGIES: dict[str, FieldStrategy] = {
    "eligibility": not_derivable(list, "no eligibility column in the source schema"),
    "ctc_value": not_derivable(int, "fixed_vs_variable_pay is a free text range"),
    "fixed_component": not_derivable(int, "no compensation breakdown columns"),
    "variable_component": not_derivable(int, "no compensation breakdown columns"),
    "bonus": not_derivable(int, "bonus_predictability is descriptive only"),
    "service_agreement": not_derivable(str, "no service agreement column"),
    "hiring_trend": not_derivable(list, "hiring_velocity holds a single label, not a yearly series"),
    "compensation_history": not_derivable(list, "no historical compensation columns"),
    "students_selected": not_derivable(int, "placement outcomes are not part of the source schema"),
    "highest_package": not_derivable(str, "placement outcomes are not part of the source schema"),
    "average_package": not_derivable(str, "placement outcomes are not part of the source schema"),
    "departments_selected": not_derivable(list, "placement outcomes are not part of the source schema"),
    "department": not_derivable(str, "no role department column"),
    "employment_type": not_derivable(str, "no employment type column"),
    "selection_process": not_derivable(list, "no selection process columns"),
    "skills": not_derivable(list, "tech_stack_tools_used lists tools, not graded skills"),
    "innovx_projects": not_derivable(list, "innovation_roadmap is not structured per project"),
    "leadership": not_derivable(list, "key_business_leaders is not structured per person"),
    "culture": not_derivable(list, "values and work_culture are not structured per item"),
}


class CompanyMapper:
    def __init__(self, strategies: Mapping[str, FieldStrategy | Callable[[CompanyRow], Any]] | None = None):
        merged = dict(DEFAULT_STRATEGIES)
        for name, strategy in (strategies or {}).items():
            if name not in DEFAULT_STRATEGIES:
                raise ValueError(f"no derivation strategy slot for field '{name}'")
            merged[name] = strategy if isinstance(strategy, FieldStrategy) else FieldStrategy(derive=strategy)
        self.strategies = merged

    def pending_fields(self) -> list[str]:
        return [name for name, strategy in self.strategies.items() if not strategy.derivable]

    def map_row(self, row: CompanyRow) -> Company:
        company_id = _text(row, PRIMARY_KEY).strip()
        if not company_id:
            raise UnmappableRowError(f"row is missing '{PRIMARY_KEY}'")

        overview = _text(row, "overview_of_the_company")
        payload: dict[str, Any] = {
            "id": company_id,
            "name": _text(row, "company_name"),
            "logo": _text(row, "logo"),
            "descriptor": overview or _text(row, "short_name"),
            "category": parse_category(row.get("category")),
            "industry": _text(row, "focus_sectors_industries"),
            "type": _text(row, "nature_of_company"),
            "founded": _text(row, "year_of_incorporation"),
            "employees": _text(row, "employee_size"),
            "compensation_range": _text(row, "fixed_vs_variable_pay"),
            "location": _text(row, "company_headquarters"),
            "locations": parse_array(row.get("office_locations")),
            "work_mode": _text(row, "remote_work_policy"),
            "revenue": _text(row, "annual_revenues"),
            "market_cap": _text(row, "company_valuation"),
            "global_presence": _text(row, "countries_operating_in"),
            "role_description": _text(row, "services_offerings_products"),
            "team_structure": _text(row, "work_culture"),
            "technologies": parse_array(row.get("tech_stack_tools_used")),
            "financials": Financials(
                revenue_growth=_text(row, "year_over_year_growth_rate"),
                profit_margin=_text(row, "profitability_status"),
                rnd_investment=_text(row, "r_and_d_investment"),
            ),
            "about": overview,
            "vision": _text(row, "vision"),
            "mission": _text(row, "mission"),
        }
        for name, strategy in self.strategies.items():
            payload[name] = self._derive(company_id, name, strategy, row)

        return Company(**payload)

    def map_rows(self, rows: Iterable[CompanyRow]) -> list[Company]:
        companies: list[Company] = []
        for index, row in enumerate(rows):
            try:
                companies.append(self.map_row(row))
            except UnmappableRowError as exc:
                logger.warning("Skipping company row %d: %s", index, exc)
        return companies

    def _derive(self, company_id: str, name: str, strategy: FieldStrategy, row: CompanyRow) -> Any:
        annotation = Company.model_fields[name].annotation
        try:
            return _adapter(annotation).validate_python(strategy(row))
        except Exception as exc:
            logger.warning("Defaulting field '%s' for company %s: %s", name, company_id, exc)
            return DEFAULT_STRATEGIES[name](row)


_DEFAULT_MAPPER = CompanyMapper()


def map_company_row(row: CompanyRow, mapper: CompanyMapper | None = None) -> Company:
    return (mapper or _DEFAULT_MAPPER).map_row(row)


def try_map_company_row(row: CompanyRow, mapper: CompanyMapper | None = None) -> Company | None:
    try:
        return map_company_row(row, mapper)
    except UnmappableRowError:
        return None


def map_company_rows(rows: Iterable[CompanyRow], mapper: CompanyMapper | None = None) -> list[Company]:
    return (mapper or _DEFAULT_MAPPER).map_rows(rows)
