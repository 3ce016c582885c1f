import pytest
from sqlalchemy import text

from placement_portal.core.company_mapper import CompanyMapper, list_column
from placement_portal.db.repositories import CompanyRepository
from placement_portal.errors import CompanyNotFoundError, CompanyServiceError


def test_list_and_get_seeded_companies(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)

    companies = repo.list_companies(order_by="company_name")
    assert len(companies) == 8
    assert companies[0].name == "Amazon"
    assert [c.id for c in repo.list_companies(order_by="company_name", limit=2, offset=1)] == [
        "goldman-sachs",
        "google",
    ]

    google = repo.get_company("google")
    assert google is not None
    assert google.category == "Marquee"
    assert google.locations == ["Bangalore", "Hyderabad", "Gurgaon"]
    assert google.skills == []
    assert repo.get_company("nope") is None


def test_unknown_order_column_is_rejected(seeded_session) -> None:
    with pytest.raises(ValueError):
        CompanyRepository(seeded_session).list_companies(order_by="salary")


def test_require_company_raises_not_found(seeded_session) -> None:
    with pytest.raises(CompanyNotFoundError) as excinfo:
        CompanyRepository(seeded_session).require_company("nope")
    assert excinfo.value.company_id == "nope"


def test_compare_preserves_requested_order(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)

    companies = repo.compare_companies(["zeta", "missing", "amazon", "google"])

    assert [c.id for c in companies] == ["zeta", "amazon", "google"]
    assert repo.compare_companies([]) == []


def test_search_and_category_queries(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)

    assert [c.id for c in repo.search_companies("GOLD")] == ["goldman-sachs"]
    assert repo.search_companies("   ") == []
    assert {c.id for c in repo.companies_by_category("Core")} == {"infosys", "tcs"}
    assert repo.categories() == ["Core", "Dream", "Marquee", "Startup", "Super Dream"]


def test_filter_combines_conditions(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)

    hybrid = repo.filter_companies(remote_work_policy="hybrid")
    assert {c.id for c in hybrid} == {"google", "microsoft", "goldman-sachs", "razorpay", "zeta"}

    marquee_hybrid = repo.filter_companies(category="Marquee", remote_work_policy="Hybrid")
    assert {c.id for c in marquee_hybrid} == {"google", "microsoft"}
    assert len(repo.filter_companies()) == 8
    assert len(repo.companies_with_tech_stack()) == 8


def test_stats_aggregate_table(seeded_session) -> None:
    stats = CompanyRepository(seeded_session).stats()

    assert stats.total_count == 8
    assert stats.by_category["Core"] == 2
    assert stats.by_profitability == {"Profitable": 8}
    assert stats.by_hiring_velocity == {"High": 6, "Medium": 2}


def test_upsert_rows_inserts_updates_and_skips(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)

    result = repo.upsert_rows(
        [
            {"company_id": "acme", "company_name": "Acme", "category": "Startup", "office_locations": "Pune"},
            {"company_id": "zeta", "remote_work_policy": "Remote"},
            {"company_name": "No key"},
            {"company_id": "  "},
        ]
    )

    assert result == {"inserted": 1, "updated": 1, "skipped": 2}
    assert repo.get_company("acme").locations == ["Pune"]
    zeta = repo.get_company("zeta")
    assert zeta.work_mode == "Remote"
    assert zeta.name == "Zeta"


def test_repository_uses_custom_mapper(seeded_session) -> None:
    mapper = CompanyMapper(strategies={"departments_selected": list_column("office_locations")})
    repo = CompanyRepository(seeded_session, mapper=mapper)

    assert repo.get_company("razorpay").departments_selected == ["Bangalore"]
    assert "departments_selected" not in repo.pending_fields()


def test_driver_failures_become_service_errors(session) -> None:
    session.execute(text("DROP TABLE company"))
    repo = CompanyRepository(session)

    with pytest.raises(CompanyServiceError) as excinfo:
        repo.list_companies()
    assert excinfo.value.original_error is not None

    with pytest.raises(CompanyServiceError):
        repo.categories()
    with pytest.raises(CompanyServiceError):
        repo.stats()


def test_category_queries_follow_the_mapped_category(session) -> None:
    repo = CompanyRepository(session)
    repo.upsert_rows(
        [
            {"company_id": "acme", "company_name": "Acme", "category": "super dream"},
            {"company_id": "smallco", "company_name": "SmallCo", "category": "MSME"},
            {"company_id": "blank", "company_name": "Blank"},
        ]
    )

    assert repo.get_company("acme").category == "Super Dream"
    assert repo.categories() == ["Core", "Super Dream"]
    assert [c.id for c in repo.companies_by_category("Super Dream")] == ["acme"]
    assert {c.id for c in repo.companies_by_category("Core")} == {"smallco", "blank"}
    assert [c.id for c in repo.filter_companies(category="super  DREAM")] == ["acme"]
    assert repo.companies_by_category("MSME") == []
    assert repo.stats().by_category == {"Super Dream": 1, "Core": 2}


def test_like_wildcards_in_queries_are_literal(seeded_session) -> None:
    repo = CompanyRepository(seeded_session)
    repo.upsert_rows([{"company_id": "pct", "company_name": "100% Labs", "remote_work_policy": "Remote_first"}])

    assert repo.search_companies("%") == [repo.get_company("pct")]
    assert repo.search_companies("_") == []
    assert [c.id for c in repo.search_companies("0% l")] == ["pct"]
    assert [c.id for c in repo.filter_companies(remote_work_policy="_first")] == ["pct"]
    assert repo.filter_companies(remote_work_policy="hy_rid") == []


def test_upsert_stores_list_and_object_values_as_text(session) -> None:
    repo = CompanyRepository(session)
    repo.upsert_rows(
        [
            {
                "company_id": "acme",
                "office_locations": ["Pune", "Delhi"],
                "tech_stack_tools_used": ("Go", " ", "Kafka"),
                "awards_recognitions": {"2024": "Best Employer"},
            }
        ]
    )

    company = repo.get_company("acme")
    assert company.locations == ["Pune", "Delhi"]
    assert company.technologies == ["Go", "Kafka"]
    raw = session.execute(text("SELECT awards_recognitions FROM company WHERE company_id = 'acme'")).scalar()
    assert raw == '{"2024": "Best Employer"}'
