from __future__ import annotations

import pytest

from placement_portal.config import Settings
from placement_portal.db.base import Base
from placement_portal.db.seed import load_sample_rows, seed_company_rows
from placement_portal.db.session import create_engine_for, create_session_factory
from placement_portal.types import Company, Skill


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite://", app_env="test", seed_on_init=False)


@pytest.fixture
def engine(settings: Settings):
    engine = create_engine_for(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with create_session_factory(engine)() as db:
        yield db


@pytest.fixture
def seeded_session(session):
    seed_company_rows(session, load_sample_rows())
    return session


@pytest.fixture
def make_skill():
    def factory(name: str, bloom_level: str = "AP", level: int = 5, proficiency: int = 5) -> Skill:
        return Skill(name=name, bloom_level=bloom_level, level=level, proficiency=proficiency)

    return factory


@pytest.fixture
def make_company():
    def factory(company_id: str, skills: list[Skill] | None = None, **fields) -> Company:
        fields.setdefault("name", company_id.title())
        return Company(id=company_id, skills=skills or [], **fields)

    return factory
