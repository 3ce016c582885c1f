import json

import pytest

from placement_portal.core.company_mapper import (
    DEFAULT_STRATEGIES,
    CompanyMapper,
    json_column,
    list_column,
    map_company_row,
    map_company_rows,
    number_column,
    parse_array,
    parse_category,
    parse_json,
    try_map_company_row,
)
from placement_portal.errors import UnmappableRowError
from placement_portal.types import DEFAULT_CATEGORY, Company, Financials, Skill


def test_office_locations_are_split_and_trimmed() -> None:
    company = map_company_row({"company_id": "acme", "office_locations": "Bangalore, Hyderabad,  Chennai "})
    assert company.locations == ["Bangalore", "Hyderabad", "Chennai"]


def test_missing_category_falls_back_to_default() -> None:
    company = map_company_row({"company_id": "acme", "company_name": "Acme"})
    assert company.category == DEFAULT_CATEGORY


def test_category_matching_ignores_case_and_spacing() -> None:
    assert parse_category("  super   dream ") == "Super Dream"
    assert parse_category("MSME") == DEFAULT_CATEGORY
    assert parse_category(None) == DEFAULT_CATEGORY


def test_row_with_only_primary_key_maps_every_field() -> None:
    company = map_company_row({"company_id": "bare"})

    assert company.id == "bare"
    assert company.name == ""
    assert company.locations == []
    assert company.technologies == []
    assert company.eligibility == []
    assert company.skills == []
    assert company.selection_process == []
    assert company.ctc_value == 0
    assert company.students_selected == 0
    assert company.financials == Financials()
    for field_name in Company.model_fields:
        assert getattr(company, field_name) is not None


@pytest.mark.parametrize("value", [None, "", " , ,  "])
def test_empty_list_sources_become_empty_lists(value) -> None:
    row = {"company_id": "acme", "office_locations": value, "tech_stack_tools_used": value}
    company = map_company_row(row)
    assert company.locations == []
    assert company.technologies == []


def test_plain_columns_are_renamed() -> None:
    row = {
        "company_id": "acme",
        "company_name": "Acme",
        "short_name": "ACM",
        "focus_sectors_industries": "Fintech",
        "nature_of_company": "Private",
        "company_headquarters": "Pune",
        "remote_work_policy": "Hybrid",
        "tech_stack_tools_used": "Go, Kafka",
        "year_over_year_growth_rate": "20%",
        "profitability_status": "Profitable",
        "vision": "Pay anyone",
    }
    company = map_company_row(row)

    assert company.name == "Acme"
    assert company.descriptor == "ACM"
    assert company.about == ""
    assert company.industry == "Fintech"
    assert company.type == "Private"
    assert company.location == "Pune"
    assert company.work_mode == "Hybrid"
    assert company.technologies == ["Go", "Kafka"]
    assert company.financials.revenue_growth == "20%"
    assert company.financials.profit_margin == "Profitable"
    assert company.financials.rnd_investment == ""
    assert company.vision == "Pay anyone"


def test_overview_wins_over_short_name_for_descriptor() -> None:
    company = map_company_row(
        {"company_id": "acme", "short_name": "ACM", "overview_of_the_company": "Payments platform"}
    )
    assert company.descriptor == "Payments platform"
    assert company.about == "Payments platform"


@pytest.mark.parametrize("row", [{}, {"company_id": None}, {"company_id": "   "}, {"company_name": "No key"}])
def test_row_without_primary_key_is_unmappable(row) -> None:
    with pytest.raises(UnmappableRowError):
        map_company_row(row)
    assert try_map_company_row(row) is None


def test_map_rows_skips_unmappable_and_keeps_order() -> None:
    rows = [
        {"company_id": "b"},
        {"company_name": "missing key"},
        {"company_id": "a"},
        {"company_id": "c"},
    ]
    assert [company.id for company in map_company_rows(rows)] == ["b", "a", "c"]


def test_parse_array_and_parse_json_helpers() -> None:
    assert parse_array("a,,b ,") == ["a", "b"]
    assert parse_array(None) == []
    assert parse_json('{"a": 1}', {}) == {"a": 1}
    assert parse_json("{broken", {"fallback": True}) == {"fallback": True}
    assert parse_json(None, []) == []
    assert parse_json('[{"year": 1}]', [], list[Skill]) == []


def _skills_mapper() -> CompanyMapper:
    return CompanyMapper(strategies={"skills": json_column("skill_relevance", list[Skill])})


def test_json_strategy_decodes_structured_column() -> None:
    skills = [{"name": "Algorithms", "bloom_level": "EV", "level": 8, "proficiency": 9, "topics": ["DP"]}]
    company = _skills_mapper().map_row({"company_id": "acme", "skill_relevance": json.dumps(skills)})
    assert company.skills == [Skill(name="Algorithms", bloom_level="EV", level=8, proficiency=9, topics=["DP"])]


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        '{"name": "Algorithms"}',
        '[{"name": "Algorithms", "bloom_level": "EV", "level": 11, "proficiency": 9}]',
    ],
)
def test_malformed_json_field_falls_back_without_failing_the_row(raw) -> None:
    row = {"company_id": "acme", "company_name": "Acme", "office_locations": "Pune", "skill_relevance": raw}
    company = _skills_mapper().map_row(row)

    assert company.skills == []
    assert company.name == "Acme"
    assert company.locations == ["Pune"]


def test_failing_strategy_degrades_to_default() -> None:
    def explode(row):
        raise RuntimeError("bad source")

    mapper = CompanyMapper(strategies={"eligibility": explode, "ctc_value": number_column("annual_revenues")})
    company = mapper.map_row({"company_id": "acme", "annual_revenues": "4,800,000"})

    assert company.eligibility == []
    assert company.ctc_value == 4800000


def test_pending_fields_track_strategy_overrides() -> None:
    default_pending = CompanyMapper().pending_fields()
    assert set(default_pending) == set(DEFAULT_STRATEGIES)
    assert "skills" in default_pending

    mapper = CompanyMapper(strategies={"departments_selected": list_column("diversity_metrics")})
    assert "departments_selected" not in mapper.pending_fields()
    company = mapper.map_row({"company_id": "acme", "diversity_metrics": "CSE, ECE"})
    assert company.departments_selected == ["CSE", "ECE"]


def test_unknown_strategy_slot_is_rejected() -> None:
    with pytest.raises(ValueError, match="no derivation strategy slot"):
        CompanyMapper(strategies={"name": lambda row: "x"})
