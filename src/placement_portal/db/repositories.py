from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from sqlalchemy import Select, and_, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from placement_portal.core.catalog import company_stats, distinct_categories
from placement_portal.core.company_mapper import CompanyMapper, map_company_rows, parse_category
from placement_portal.db.models import ALL_COLUMNS, PRIMARY_KEY, clean_row, company_table
from placement_portal.errors import CompanyNotFoundError, CompanyServiceError
from placement_portal.types import Company, CompanyStats

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


class CompanyRepository:
    """Read access to the ``company`` table, returning mapped entities.

    Driver failures surface as :class:`CompanyServiceError`; a missing company
    is ``None`` from :meth:`get_company` and :class:`CompanyNotFoundError` from
    :meth:`require_company`.
    """

    def __init__(self, session: Session, mapper: CompanyMapper | None = None):
        self.session = session
        self.mapper = mapper

    def pending_fields(self) -> list[str]:
        return (self.mapper or CompanyMapper()).pending_fields()

    def list_companies(
        self,
        *,
        limit: int | None = None,
        offset: int = 0,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[Company]:
        statement = select(company_table)
        if order_by:
            if order_by not in ALL_COLUMNS:
                raise ValueError(f"unknown company column '{order_by}'")
            column = company_table.c[order_by]
            statement = statement.order_by(column.asc() if ascending else column.desc())
        if offset:
            statement = statement.offset(offset)
        if limit:
            statement = statement.limit(limit)
        return self._fetch(statement, "Failed to fetch companies")

    def get_company(self, company_id: str) -> Company | None:
        statement = select(company_table).where(company_table.c.company_id == company_id)
        companies = self._fetch(statement, f"Failed to fetch company {company_id}")
        return companies[0] if companies else None

    def require_company(self, company_id: str) -> Company:
        company = self.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    def compare_companies(self, ids: Sequence[str]) -> list[Company]:
        if not ids:
            return []
        statement = select(company_table).where(company_table.c.company_id.in_(list(ids)))
        by_id = {
            company.id: company
            for company in self._fetch(statement, "Failed to fetch companies for comparison")
        }
        return [by_id[company_id] for company_id in ids if company_id in by_id]

    def companies_by_category(self, category: str) -> list[Company]:
        companies = self._fetch(select(company_table), f"Failed to fetch companies by category {category}")
        return _in_category(companies, category)

    def search_companies(self, query: str) -> list[Company]:
        if not query.strip():
            return []
        pattern = _like_pattern(query.strip())
        statement = select(company_table).where(
            or_(
                func.lower(company_table.c.company_name).like(pattern, escape=LIKE_ESCAPE),
                func.lower(company_table.c.short_name).like(pattern, escape=LIKE_ESCAPE),
            )
        )
        return self._fetch(statement, f'Failed to search companies with query "{query}"')

    def filter_companies(
        self,
        *,
        category: str | None = None,
        profitability_status: str | None = None,
        employee_size: str | None = None,
        remote_work_policy: str | None = None,
    ) -> list[Company]:
        conditions = []
        if profitability_status:
            conditions.append(company_table.c.profitability_status == profitability_status)
        if employee_size:
            conditions.append(company_table.c.employee_size == employee_size)
        if remote_work_policy:
            conditions.append(
                func.lower(company_table.c.remote_work_policy).like(
                    _like_pattern(remote_work_policy), escape=LIKE_ESCAPE
                )
            )

        statement = select(company_table)
        if conditions:
            statement = statement.where(and_(*conditions))
        companies = self._fetch(statement, "Failed to filter companies")
        return _in_category(companies, category) if category else companies

    def companies_with_tech_stack(self) -> list[Company]:
        statement = select(company_table).where(
            and_(
                company_table.c.tech_stack_tools_used.is_not(None),
                company_table.c.tech_stack_tools_used != "",
            )
        )
        return self._fetch(statement, "Failed to fetch companies with skills")

    def categories(self) -> list[str]:
        statement = select(company_table.c.category)
        try:
            values = self.session.scalars(statement).all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching categories: %s", exc)
            raise CompanyServiceError("Failed to fetch categories", exc) from exc
        return distinct_categories(parse_category(value) for value in values)

    def stats(self) -> CompanyStats:
        statement = select(
            company_table.c.category,
            company_table.c.profitability_status,
            company_table.c.hiring_velocity,
        )
        try:
            rows = self.session.execute(statement).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching company stats: %s", exc)
            raise CompanyServiceError("Failed to fetch company stats", exc) from exc
        return company_stats({**row, "category": parse_category(row["category"])} for row in rows)

    def upsert_rows(self, rows: Iterable[Mapping[str, object]]) -> dict[str, int]:
        inserted = updated = skipped = 0
        try:
            for values in rows:
                row = clean_row(values)
                company_id = (row.pop(PRIMARY_KEY, None) or "").strip()
                if not company_id:
                    skipped += 1
                    continue

                exists = self.session.scalar(
                    select(company_table.c.company_id).where(company_table.c.company_id == company_id)
                )
                if exists:
                    if row:
                        self.session.execute(
                            update(company_table)
                            .where(company_table.c.company_id == company_id)
                            .values(**row)
                        )
                    updated += 1
                else:
                    self.session.execute(insert(company_table).values(company_id=company_id, **row))
                    inserted += 1
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Error importing company rows: %s", exc)
            raise CompanyServiceError("Failed to import company rows", exc) from exc

        if skipped:
            logger.warning("Skipped %d company rows without %s", skipped, PRIMARY_KEY)
        return {"inserted": inserted, "updated": updated, "skipped": skipped}

    def _fetch(self, statement: Select, message: str) -> list[Company]:
        try:
            rows = self.session.execute(statement).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("%s: %s", message, exc)
            raise CompanyServiceError(message, exc) from exc
        return map_company_rows(rows, self.mapper)


def _like_pattern(text: str) -> str:
    escaped = (
        text.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


def _in_category(companies: list[Company], category: str) -> list[Company]:
    # Stored category text is free-form; compare against the mapped category.
    wanted = " ".join(category.split()).lower()
    return [company for company in companies if company.category.lower() == wanted]
