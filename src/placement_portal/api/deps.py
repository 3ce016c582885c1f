from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from placement_portal.config import Settings
from placement_portal.core.catalog import StaticCatalog
from placement_portal.db.repositories import CompanyRepository
from placement_portal.db.session import session_scope


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    yield from session_scope(request.app.state.session_factory)


def get_repository(db: Session = Depends(get_db)) -> CompanyRepository:
    return CompanyRepository(db)


def get_company_source(
    request: Request,
    repo: CompanyRepository = Depends(get_repository),
) -> CompanyRepository | StaticCatalog:
    if request.app.state.settings.catalog_source == "static":
        return request.app.state.static_catalog
    return repo
