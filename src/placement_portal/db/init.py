from __future__ import annotations

from pathlib import Path

from sqlalchemy import Engine
from sqlalchemy.engine import make_url

from placement_portal.db.base import Base
from placement_portal.db import models  # noqa: F401
from placement_portal.db.seed import load_sample_rows, seed_company_rows
from placement_portal.db.session import create_session_factory


def ensure_data_directory(engine: Engine) -> None:
    url = make_url(str(engine.url))
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def init_database(engine: Engine, *, seed: bool = True) -> dict[str, int]:
    ensure_data_directory(engine)
    Base.metadata.create_all(bind=engine)

    if not seed:
        return {"seeded_companies": 0}
    with create_session_factory(engine)() as session:
        inserted = seed_company_rows(session, load_sample_rows())
    return {"seeded_companies": inserted}
