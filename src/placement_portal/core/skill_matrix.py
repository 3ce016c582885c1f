"""Company x skill comparison grid.

Rows are the distinct skill names across the selection in ascending order;
columns follow the caller's selection order. Selections are expected to stay
small (the portal caps them at ``max_comparison_companies``), but nothing here
enforces a limit.
"""

from __future__ import annotations

from collections.abc import Sequence

from placement_portal.types import Company, Skill, SkillMatrixCell, SkillMatrixRow


def build_skill_matrix(companies: Sequence[Company]) -> list[SkillMatrixRow]:
    lookups: list[dict[str, Skill]] = []
    names: set[str] = set()
    for company in companies:
        by_name: dict[str, Skill] = {}
        for skill in company.skills:
            by_name.setdefault(skill.name, skill)
        lookups.append(by_name)
        names.update(by_name)

    rows: list[SkillMatrixRow] = []
    for skill_name in sorted(names):
        cells = [
            SkillMatrixCell(
                company_id=company.id,
                company_name=company.name,
                skill=by_name.get(skill_name),
            )
            for company, by_name in zip(companies, lookups)
        ]
        rows.append(SkillMatrixRow(skill_name=skill_name, cells=cells))
    return rows


def filter_skill_matrix(rows: Sequence[SkillMatrixRow], query: str) -> list[SkillMatrixRow]:
    if query == "":
        return list(rows)
    needle = query.lower()
    return [row for row in rows if needle in row.skill_name.lower()]


def skill_coverage(rows: Sequence[SkillMatrixRow]) -> dict[str, int]:
    """Filled cells per company id; a company selected twice is counted once."""
    coverage: dict[str, int] = {}
    for row in rows:
        covered: set[str] = set()
        for cell in row.cells:
            coverage.setdefault(cell.company_id, 0)
            if cell.has_data:
                covered.add(cell.company_id)
        for company_id in covered:
            coverage[company_id] += 1
    return coverage
