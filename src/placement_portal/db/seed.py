from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from importlib import resources

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from placement_portal.db.models import PRIMARY_KEY, clean_row, company_table

logger = logging.getLogger(__name__)

SAMPLE_ROWS = "company_rows.json"


def load_sample_rows() -> list[dict[str, object]]:
    raw = resources.files("placement_portal.data").joinpath(SAMPLE_ROWS).read_text(encoding="utf-8")
    return json.loads(raw)


def seed_company_rows(session: Session, rows: Iterable[Mapping[str, object]]) -> int:
    existing = set(session.scalars(select(company_table.c.company_id)).all())
    inserted = 0
    for values in rows:
        row = clean_row(values)
        company_id = (row.get(PRIMARY_KEY) or "").strip()
        if not company_id:
            logger.warning("Skipping seed row without %s", PRIMARY_KEY)
            continue
        if company_id in existing:
            continue
        row[PRIMARY_KEY] = company_id
        session.execute(insert(company_table).values(**row))
        existing.add(company_id)
        inserted += 1

    session.commit()
    return inserted
