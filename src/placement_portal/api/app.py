from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from placement_portal.api.routes import router as api_router
from placement_portal.config import Settings, get_settings
from placement_portal.core.catalog import StaticCatalog
from placement_portal.db.init import init_database
from placement_portal.db.session import create_engine_for, create_session_factory


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or create_engine_for(settings)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.static_catalog = StaticCatalog() if settings.catalog_source == "static" else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database(engine, seed=settings.seed_on_init)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "catalog_source": settings.catalog_source})

    app.include_router(api_router)
    return app
