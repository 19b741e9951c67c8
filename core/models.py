from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from types import MappingProxyType
from typing import Any, Literal, Mapping

JobStatus = Literal["draft", "pending", "published", "closed"]
PublishStatus = Literal["draft", "pending", "ready"]
AttemptStatus = Literal["draft", "in_progress", "submitted", "scored"]


def _known_fields(cls, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass(frozen=True)
class UserProfile:
    role_needed: str | None = None
    industries: tuple[str, ...] = ()
    avg_deal_eur: int | None = None
    location_city: str | None = None
    location_country: str | None = None
    tools: tuple[str, ...] = ()
    language: str | None = None
    employment_type: str | None = None
    weekly_hours_needed: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        values = _known_fields(cls, data)
        for key in ("industries", "tools"):
            if key in values:
                values[key] = tuple(values[key] or ())
        return cls(**values)


@dataclass(frozen=True)
class ScreeningQuestion:
    id: str
    question: str
    type: Literal["text", "select", "radio"] = "text"
    options: tuple[str, ...] = ()
    required: bool = False


@dataclass(frozen=True)
class Job:
    id: str = ""
    company_id: str = ""
    title: str | None = None
    role_needed: str | None = None
    seniority: str | None = None
    industries: tuple[str, ...] = ()
    leads_type: str | None = None
    sales_cycle_band: str | None = None
    avg_product_cost_band: str | None = None
    leads_available: bool = False
    avg_commission_percent: float | None = None
    avg_commission_eur: int | None = None
    one_time_payment_eur: int | None = None
    weekly_hours_needed: int | None = None
    employment_type: str | None = None
    location_city: str | None = None
    location_country: str | None = None
    location_mode: str | None = None
    language: str = "de"
    tools: tuple[str, ...] = ()
    screening_questions: tuple[ScreeningQuestion, ...] = ()
    description_md: str | None = None
    requirements_md: str | None = None
    responsibilities_md: str | None = None
    benefits_md: str | None = None
    kpis_md: str | None = None
    product_desc_md: str | None = None
    status: JobStatus = "draft"
    quality_score_int: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        values = _known_fields(cls, data)
        for key in ("industries", "tools"):
            if key in values:
                values[key] = tuple(values[key] or ())
        if "screening_questions" in values:
            values["screening_questions"] = tuple(
                ScreeningQuestion(
                    id=item["id"],
                    question=item["question"],
                    type=item.get("type", "text"),
                    options=tuple(item.get("options") or ()),
                    required=bool(item.get("required", False)),
                )
                for item in values["screening_questions"] or ()
            )
        return cls(**values)


@dataclass(frozen=True)
class FitBreakdown:
    role: int
    lead_type: int
    sales_cycle: int
    deal_size: int
    location: int
    tools: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class FitScoreResult:
    score: int
    reasons: list[str]
    breakdown: FitBreakdown
    band: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "reasons": list(self.reasons),
            "breakdown": self.breakdown.as_dict(),
            "band": self.band,
        }


@dataclass(frozen=True)
class QualityBreakdown:
    title: int
    role: int
    industries: int
    lead_type: int
    commission: int
    employment: int
    description: int

    def total(self) -> int:
        return sum(asdict(self).values())

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class QualityScoreResult:
    score: int
    breakdown: QualityBreakdown
    feedback: list[str]
    publish_status: PublishStatus

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "breakdown": self.breakdown.as_dict(),
            "feedback": list(self.feedback),
            "publish_status": self.publish_status,
        }


@dataclass(frozen=True)
class MCOption:
    id: str
    text: str
    points: int


@dataclass(frozen=True)
class MCQuestion:
    id: str
    question: str
    options: tuple[MCOption, ...]

    def option(self, option_id: str) -> MCOption | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


@dataclass(frozen=True)
class Scenario:
    id: str
    title: str
    prompt: str
    key_words: tuple[str, ...] = ()
    min_words: int = 100
    max_words: int = 150


@dataclass(frozen=True)
class MCAnswer:
    question_id: str
    selected_option: str
    points: int


@dataclass(frozen=True)
class MCScore:
    raw_score: int
    scaled_score: int


@dataclass(frozen=True)
class ScenarioDetails:
    key_word_score: int
    sentiment_score: int
    strategy_score: int
    engagement_score: int


@dataclass(frozen=True)
class ScenarioAnswer:
    scenario_id: str
    response: str
    score: int
    details: ScenarioDetails


@dataclass(frozen=True)
class CategoryScores:
    empathy: int
    hostility_handling: int
    acquisition: int
    resilience: int


@dataclass(frozen=True)
class AssessmentResult:
    part1_score: int
    part2_score: int
    total_score: int
    passed: bool
    categories: CategoryScores
    mc_raw_score: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProctorFlags:
    focus_changes: int = 0
    paste_count: int = 0


@dataclass(frozen=True)
class AssessmentAttempt:
    id: str
    user_id: str
    mc_questions: tuple[MCQuestion, ...]
    scenario: Scenario
    status: AttemptStatus = "draft"
    current_part: Literal[1, 2] = 1
    current_question_index: int = 0
    mc_answers: Mapping[str, str] = field(default_factory=dict)
    scenario_response: str = ""
    part_time_left: int = 420
    question_time_left: int = 21
    proctor_flags: ProctorFlags = field(default_factory=ProctorFlags)
    result: AssessmentResult | None = None

    def __post_init__(self):
        if not isinstance(self.mc_answers, MappingProxyType):
            object.__setattr__(self, "mc_answers", MappingProxyType(dict(self.mc_answers)))

    @property
    def current_question(self) -> MCQuestion | None:
        if self.current_part != 1 or not self.mc_questions:
            return None
        return self.mc_questions[self.current_question_index]
