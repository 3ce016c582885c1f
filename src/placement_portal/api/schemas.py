from __future__ import annotations

from pydantic import BaseModel, Field

from placement_portal.types import Company, SkillMatrixRow


class CompanySummaryResponse(BaseModel):
    id: str
    name: str
    logo: str
    descriptor: str
    category: str
    industry: str
    location: str
    compensation_range: str


class CompanyListResponse(BaseModel):
    companies: list[CompanySummaryResponse]
    total: int
    limit: int
    offset: int


class CompanyDetailResponse(BaseModel):
    company: Company
    compensation_consistent: bool
    pending_fields: list[str] = Field(default_factory=list)


class SkillMatrixRequest(BaseModel):
    company_ids: list[str] = Field(default_factory=list)
    query: str = ""


class MatrixColumnResponse(BaseModel):
    id: str
    name: str
    logo: str
    category: str
    skills_covered: int


class SkillMatrixResponse(BaseModel):
    columns: list[MatrixColumnResponse]
    rows: list[SkillMatrixRow]
    total_rows: int
    matched_rows: int


class ImportResultResponse(BaseModel):
    inserted: int
    updated: int
    skipped: int


def summarize(company: Company) -> CompanySummaryResponse:
    return CompanySummaryResponse(
        id=company.id,
        name=company.name,
        logo=company.logo,
        descriptor=company.descriptor,
        category=company.category,
        industry=company.industry,
        location=company.location,
        compensation_range=company.compensation_range,
    )
