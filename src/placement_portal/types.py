from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

PlacementCategory = Literal["Marquee", "Super Dream", "Dream", "Core", "IT", "Startup"]
BloomLevel = Literal["CU", "AP", "AN", "EV", "CR"]
ProjectDifficulty = Literal["Beginner", "Intermediate", "Advanced"]

PLACEMENT_CATEGORIES: tuple[str, ...] = ("Marquee", "Super Dream", "Dream", "Core", "IT", "Startup")
DEFAULT_CATEGORY: PlacementCategory = "Core"

BLOOM_LABELS: dict[str, str] = {
    "CU": "Conceptual Understanding",
    "AP": "Application",
    "AN": "Analysis",
    "EV": "Evaluation",
    "CR": "Creation",
}


class Skill(BaseModel):
    name: str
    bloom_level: BloomLevel
    level: int
    proficiency: int
    topics: list[str] = Field(default_factory=list)

    @field_validator("level", "proficiency")
    @classmethod
    def validate_scale(cls, value: int) -> int:
        if value < 1 or value > 10:
            raise ValueError("skill level and proficiency must be between 1 and 10")
        return value


class SelectionRound(BaseModel):
    title: str
    mode: str = ""
    duration: str = ""
    description: str = ""
    focus: str = ""
    questions: list[str] = Field(default_factory=list)


class HiringTrend(BaseModel):
    year: str
    count: int = 0


class CompensationHistory(BaseModel):
    year: str
    ctc: float = 0


class InnovXProject(BaseModel):
    title: str
    description: str = ""
    difficulty: ProjectDifficulty = "Intermediate"
    skills: list[str] = Field(default_factory=list)
    relevance: str = ""


class Leader(BaseModel):
    name: str
    role: str = ""
    image: str = ""
    bio: str = ""


class Financials(BaseModel):
    revenue_growth: str = ""
    profit_margin: str = ""
    rnd_investment: str = ""


class CultureItem(BaseModel):
    title: str
    description: str = ""
    icon: str = ""


class Company(BaseModel):
    id: str
    name: str = ""
    logo: str = ""
    descriptor: str = ""
    category: PlacementCategory = DEFAULT_CATEGORY
    industry: str = ""
    type: str = ""
    founded: str = ""
    employees: str = ""

    compensation_range: str = ""
    ctc_value: float = 0
    fixed_component: float = 0
    variable_component: float = 0
    bonus: float = 0
    service_agreement: str = ""

    location: str = ""
    locations: list[str] = Field(default_factory=list)
    work_mode: str = ""
    eligibility: list[str] = Field(default_factory=list)

    revenue: str = ""
    market_cap: str = ""
    global_presence: str = ""

    hiring_trend: list[HiringTrend] = Field(default_factory=list)
    compensation_history: list[CompensationHistory] = Field(default_factory=list)
    students_selected: int = 0
    highest_package: str = ""
    average_package: str = ""
    departments_selected: list[str] = Field(default_factory=list)

    role_description: str = ""
    team_structure: str = ""
    technologies: list[str] = Field(default_factory=list)
    department: str = ""
    employment_type: str = ""

    selection_process: list[SelectionRound] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    innovx_projects: list[InnovXProject] = Field(default_factory=list)
    leadership: list[Leader] = Field(default_factory=list)
    financials: Financials = Field(default_factory=Financials)
    culture: list[CultureItem] = Field(default_factory=list)

    about: str = ""
    vision: str = ""
    mission: str = ""

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("company id must not be empty")
        return value

    def compensation_is_consistent(self) -> bool:
        """Advisory check: fixed + variable + bonus should add up to the CTC.

        Companies that publish no breakdown (all components zero) are treated
        as consistent. Nothing in the mapper enforces this.
        """
        parts = (self.fixed_component, self.variable_component, self.bonus)
        if not any(parts):
            return True
        return abs(sum(parts) - self.ctc_value) < 0.5


class SkillMatrixCell(BaseModel):
    company_id: str
    company_name: str
    skill: Skill | None = None

    @property
    def has_data(self) -> bool:
        return self.skill is not None

    @property
    def bloom_label(self) -> str:
        if self.skill is None:
            return ""
        return BLOOM_LABELS[self.skill.bloom_level]

    @property
    def badge(self) -> str:
        if self.skill is None:
            return "-"
        return f"{self.skill.bloom_level} L{self.skill.level} P{self.skill.proficiency}"


class SkillMatrixRow(BaseModel):
    skill_name: str
    cells: list[SkillMatrixCell] = Field(default_factory=list)


class CompanyStats(BaseModel):
    total_count: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_profitability: dict[str, int] = Field(default_factory=dict)
    by_hiring_velocity: dict[str, int] = Field(default_factory=dict)
