from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DIMENSIONS = ("role", "lead_type", "sales_cycle", "deal_size", "location", "tools")

# Integer percents; the composite divides by 100 only after summing.
FIT_WEIGHTS = {
    "role": 30,
    "lead_type": 15,
    "sales_cycle": 15,
    "deal_size": 15,
    "location": 15,
    "tools": 10,
}

ROLE_SYNONYMS = {
    "setter": ("appointment setter", "lead generation"),
    "closer": ("account executive", "sales executive"),
    "full cycle": ("account executive", "business development"),
    "consultant": ("sales consultant", "advisor"),
}

SALES_CYCLE_SCORES = {
    "1-7 tage": 70,
    "1-4 wochen": 90,
    "1-3 monate": 85,
    "3-6 monate": 80,
    "6+ monate": 60,
}

# Whole-band match only; range bands such as "25001_50000" stay unparsed.
COST_BAND_PATTERN = re.compile(r"^\s*(\d+)\s*(k?)\s*$", re.IGNORECASE)

# Checked in this order; ties keep it after sorting by score.
REASON_RULES = (
    ("role", 85, "Passende Rolle ({role})"),
    ("deal_size", 80, "Passende Dealgröße ({cost_band})"),
    ("sales_cycle", 80, "Sales-Zyklus-Komfort ({sales_cycle})"),
    ("location", 90, "Standort-Match ({location})"),
    ("lead_type", 85, "Lead-Typ ({lead_type})"),
    ("tools", 80, "Bekannte Tools/CRM"),
)

FIT_BANDS = ((90, "High"), (75, "Strong"), (60, "Moderate"))


@dataclass(frozen=True)
class FitRubric:
    weights: Mapping[str, int] = field(default_factory=lambda: MappingProxyType(dict(FIT_WEIGHTS)))
    role_synonyms: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType(dict(ROLE_SYNONYMS)))
    sales_cycle_scores: Mapping[str, int] = field(default_factory=lambda: MappingProxyType(dict(SALES_CYCLE_SCORES)))
    cost_band_pattern: re.Pattern = COST_BAND_PATTERN
    reason_rules: tuple[tuple[str, int, str], ...] = REASON_RULES
    max_reasons: int = 3
    remote_modes: tuple[str, ...] = ("remote", "hybrid")
    warm_lead_type: str = "warm"


TITLE_ROLE_KEYWORDS = ("sales", "setter", "closer", "consultant", "manager", "executive", "development")

# Feedback fires when a component scores below its floor (commission: when zero).
QUALITY_FEEDBACK = (
    ("title", 15, "Titel optimieren: 10-90 Zeichen, Rolle erwähnen"),
    ("role", 15, "Rolle und Seniorität spezifizieren"),
    ("industries", 10, "1-3 Zielbranchen auswählen"),
    ("lead_type", 10, "Lead-Typ und Sales-Zyklus definieren"),
    ("commission", 1, "Vergütungsstruktur (% oder €/Jahr) angeben"),
    ("employment", 5, "Stunden/Woche und Anstellungsart klären"),
    ("description", 5, "Ausführliche Beschreibung (mind. 400 Zeichen)"),
)


@dataclass(frozen=True)
class QualityRubric:
    title_role_keywords: tuple[str, ...] = TITLE_ROLE_KEYWORDS
    title_min_length: int = 10
    title_max_length: int = 90
    max_industries: int = 3
    description_min_length: int = 400
    publish_threshold: int = 70
    review_threshold: int = 50
    feedback: tuple[tuple[str, int, str], ...] = QUALITY_FEEDBACK


SCENARIO_KEYWORD_GROUPS = (
    ("bedarf", "ziel", "problem", "pain", "herausforderung"),
    ("nutzen", "value", "wert", "vorteil", "mehrwert"),
    ("termin", "meeting", "call", "gespräch", "treffen"),
    ("verstehen", "verständnis", "nachvollziehen", "empathie"),
)
POSITIVE_TERMS = ("gern", "freue", "danke", "spannend", "gemeinsam", "helfen", "unterstützen")
HOSTILE_TERMS = ("nervig", "keine zeit", "spam", "störung", "weg")
STRATEGY_PATTERNS = (
    "nächster schritt",
    "2 option",
    "poc",
    "test",
    "agenda",
    "kurzes gespräch",
    "unverbindlich",
    "pilot",
)
CONCRETE_TIME_PATTERN = re.compile(r"(diese|kommende) woche|15 ?min|20 ?min|morgen|übermorgen")


@dataclass(frozen=True)
class ScenarioRubric:
    keyword_groups: tuple[tuple[str, ...], ...] = SCENARIO_KEYWORD_GROUPS
    positive_terms: tuple[str, ...] = POSITIVE_TERMS
    hostile_terms: tuple[str, ...] = HOSTILE_TERMS
    strategy_patterns: tuple[str, ...] = STRATEGY_PATTERNS
    concrete_time_pattern: re.Pattern = CONCRETE_TIME_PATTERN
    max_key_word_score: int = 4


MAX_POINTS_PER_QUESTION = 5
MC_PASS_THRESHOLD = 80
MC_SCALED_MAX = 20
SCENARIO_PASS_THRESHOLD = 4
TOTAL_PASS_THRESHOLD = 16
TOTAL_MAX = 27

CATEGORY_QUESTIONS = {
    "empathy": ("q2", "q3", "q6", "q7", "q8", "q18"),
    "hostility_handling": ("q1", "q13", "q17"),
    "acquisition": ("q4", "q5", "q9", "q11", "q16", "q19"),
    "resilience": ("q10", "q12", "q14", "q15", "q20"),
}

DEFAULT_FIT_RUBRIC = FitRubric()
DEFAULT_QUALITY_RUBRIC = QualityRubric()
DEFAULT_SCENARIO_RUBRIC = ScenarioRubric()
