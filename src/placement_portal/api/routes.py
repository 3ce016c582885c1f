from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from placement_portal.api.deps import get_company_source, get_repository, get_settings_dep
from placement_portal.api.schemas import (
    CompanyDetailResponse,
    CompanyListResponse,
    ImportResultResponse,
    MatrixColumnResponse,
    SkillMatrixRequest,
    SkillMatrixResponse,
    summarize,
)
from placement_portal.config import Settings
from placement_portal.core.catalog import ALL_CATEGORIES, StaticCatalog, filter_companies
from placement_portal.core.selection import CompanySelection
from placement_portal.core.skill_matrix import build_skill_matrix, filter_skill_matrix, skill_coverage
from placement_portal.db.repositories import CompanyRepository
from placement_portal.errors import CompanyServiceError, SelectionLimitError
from placement_portal.types import CompanyStats

router = APIRouter(prefix="/api", tags=["api"])

CompanySource = CompanyRepository | StaticCatalog


def _service_failure(exc: CompanyServiceError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(exc))


@router.get("/companies", response_model=CompanyListResponse)
def list_companies(
    category: str = ALL_CATEGORIES,
    search: str = "",
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    source: CompanySource = Depends(get_company_source),
    settings: Settings = Depends(get_settings_dep),
) -> CompanyListResponse:
    try:
        companies = filter_companies(source.list_companies(), search=search, category=category)
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc

    page_size = limit or settings.default_page_size
    page = companies[offset : offset + page_size]
    return CompanyListResponse(
        companies=[summarize(company) for company in page],
        total=len(companies),
        limit=page_size,
        offset=offset,
    )


@router.get("/companies/categories", response_model=list[str])
def list_categories(source: CompanySource = Depends(get_company_source)) -> list[str]:
    try:
        return source.categories()
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc


@router.get("/companies/stats", response_model=CompanyStats)
def company_stats(source: CompanySource = Depends(get_company_source)) -> CompanyStats:
    try:
        return source.stats()
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc


@router.post("/companies/import", response_model=ImportResultResponse)
def import_companies(
    rows: list[dict[str, Any]],
    repo: CompanyRepository = Depends(get_repository),
) -> ImportResultResponse:
    try:
        result = repo.upsert_rows(rows)
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc
    return ImportResultResponse(**result)


@router.get("/companies/{company_id}", response_model=CompanyDetailResponse)
def get_company(
    company_id: str,
    source: CompanySource = Depends(get_company_source),
) -> CompanyDetailResponse:
    try:
        company = source.get_company(company_id)
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")

    pending = source.pending_fields() if isinstance(source, CompanyRepository) else []
    return CompanyDetailResponse(
        company=company,
        compensation_consistent=company.compensation_is_consistent(),
        pending_fields=pending,
    )


@router.get("/compare", response_model=CompanyListResponse)
def compare_companies(
    ids: list[str] = Query([]),
    source: CompanySource = Depends(get_company_source),
) -> CompanyListResponse:
    try:
        companies = source.compare_companies(ids)
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc
    return CompanyListResponse(
        companies=[summarize(company) for company in companies],
        total=len(companies),
        limit=len(ids),
        offset=0,
    )


@router.post("/skills/matrix", response_model=SkillMatrixResponse)
def skill_matrix(
    payload: SkillMatrixRequest,
    source: CompanySource = Depends(get_company_source),
    settings: Settings = Depends(get_settings_dep),
) -> SkillMatrixResponse:
    selection = CompanySelection(max_selection=settings.max_comparison_companies)
    requested = list(dict.fromkeys(payload.company_ids))
    if len(requested) > selection.max_selection:
        raise HTTPException(status_code=400, detail=str(SelectionLimitError(selection.max_selection)))

    try:
        companies = source.compare_companies(requested)
    except CompanyServiceError as exc:
        raise _service_failure(exc) from exc

    found = {company.id for company in companies}
    missing = [company_id for company_id in requested if company_id not in found]
    if missing:
        raise HTTPException(status_code=404, detail=f"Unknown companies: {', '.join(missing)}")

    selection.extend(companies)
    rows = build_skill_matrix(selection.companies)
    matched = filter_skill_matrix(rows, payload.query)
    coverage = skill_coverage(rows)
    return SkillMatrixResponse(
        columns=[
            MatrixColumnResponse(
                id=company.id,
                name=company.name,
                logo=company.logo,
                category=company.category,
                skills_covered=coverage.get(company.id, 0),
            )
            for company in selection.companies
        ],
        rows=matched,
        total_rows=len(rows),
        matched_rows=len(matched),
    )
