from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn
from sqlalchemy.orm import Session, sessionmaker

from placement_portal.api.app import create_app
from placement_portal.config import get_settings
from placement_portal.core.catalog import ALL_CATEGORIES, StaticCatalog, filter_companies
from placement_portal.core.selection import CompanySelection
from placement_portal.core.skill_matrix import build_skill_matrix, filter_skill_matrix, skill_coverage
from placement_portal.db.init import init_database
from placement_portal.db.repositories import CompanyRepository
from placement_portal.db.session import create_engine_for, create_session_factory
from placement_portal.errors import CompanyNotFoundError, SelectionLimitError
from placement_portal.logging_config import configure_logging

app = typer.Typer(help="Placement portal CLI")
companies_app = typer.Typer(help="Browse and import the company catalog")

app.add_typer(companies_app, name="companies")

_SESSION_FACTORY: sessionmaker[Session] | None = None


def session_factory() -> sessionmaker[Session]:
    global _SESSION_FACTORY
    if _SESSION_FACTORY is None:
        settings = get_settings()
        engine = create_engine_for(settings)
        init_database(engine, seed=settings.seed_on_init)
        _SESSION_FACTORY = create_session_factory(engine)
    return _SESSION_FACTORY


def _source(db: Session, source: str | None) -> CompanyRepository | StaticCatalog:
    chosen = source or get_settings().catalog_source
    if chosen == "static":
        return StaticCatalog()
    if chosen == "database":
        return CompanyRepository(db)
    raise typer.BadParameter(f"unknown source '{chosen}'", param_hint="--source")


def _echo(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command("init")
def init_cmd(seed: bool = typer.Option(True, "--seed/--no-seed")) -> None:
    """Create the company table and load the sample rows."""
    configure_logging()
    engine = create_engine_for(get_settings())
    result = init_database(engine, seed=seed)
    _echo({"ok": True, **result})


@companies_app.command("list")
def companies_list(
    category: str = typer.Option(ALL_CATEGORIES, "--category"),
    search: str = typer.Option("", "--search"),
    limit: int = typer.Option(20, "--limit"),
    source: str | None = typer.Option(None, "--source"),
) -> None:
    configure_logging()
    with session_factory()() as db:
        companies = filter_companies(_source(db, source).list_companies(), search=search, category=category)
        _echo(
            [
                {
                    "id": company.id,
                    "name": company.name,
                    "category": company.category,
                    "industry": company.industry,
                    "location": company.location,
                }
                for company in companies[:limit]
            ]
        )


@companies_app.command("show")
def companies_show(
    company_id: str = typer.Option(..., "--id"),
    source: str | None = typer.Option(None, "--source"),
) -> None:
    configure_logging()
    with session_factory()() as db:
        company = _source(db, source).get_company(company_id)
        if company is None:
            raise typer.BadParameter(str(CompanyNotFoundError(company_id)), param_hint="--id")
        _echo(
            {
                "company": company.model_dump(),
                "compensation_consistent": company.compensation_is_consistent(),
            }
        )


@companies_app.command("compare")
def companies_compare(
    ids: list[str] = typer.Option(..., "--id"),
    source: str | None = typer.Option(None, "--source"),
) -> None:
    configure_logging()
    with session_factory()() as db:
        companies = _source(db, source).compare_companies(ids)
        _echo([company.model_dump() for company in companies])


@companies_app.command("import")
def companies_import(file: Path = typer.Option(..., "--file", exists=True, readable=True)) -> None:
    """Load External Rows (a JSON object or list of objects) into the company table."""
    configure_logging()
    payload = json.loads(file.read_text(encoding="utf-8"))
    rows = payload if isinstance(payload, list) else [payload]
    with session_factory()() as db:
        result = CompanyRepository(db).upsert_rows(rows)
        _echo(result)


@companies_app.command("stats")
def companies_stats(source: str | None = typer.Option(None, "--source")) -> None:
    configure_logging()
    with session_factory()() as db:
        _echo(_source(db, source).stats().model_dump())


@app.command("matrix")
def matrix_cmd(
    ids: list[str] = typer.Option(..., "--id"),
    query: str = typer.Option("", "--query"),
    source: str | None = typer.Option(None, "--source"),
) -> None:
    """Print the skill comparison grid for the given companies."""
    configure_logging()
    settings = get_settings()
    with session_factory()() as db:
        companies = _source(db, source).compare_companies(ids)

    missing = [company_id for company_id in ids if company_id not in {c.id for c in companies}]
    if missing:
        raise typer.BadParameter(f"unknown companies: {', '.join(missing)}", param_hint="--id")

    selection = CompanySelection(max_selection=settings.max_comparison_companies)
    try:
        selection.extend(companies)
    except SelectionLimitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--id") from exc

    rows = build_skill_matrix(selection.companies)
    matched = filter_skill_matrix(rows, query)
    _echo(
        {
            "companies": selection.ids,
            "coverage": skill_coverage(rows),
            "rows": [
                {
                    "skill": row.skill_name,
                    "cells": [cell.badge for cell in row.cells],
                }
                for row in matched
            ],
        }
    )


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    settings = get_settings()
    app_instance = create_app(settings)
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
