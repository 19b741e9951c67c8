"""Scoring for the two-part sales assessment.

Part 1 is a batch of multiple-choice answers worth up to five points each,
scaled onto 20 points only when the raw percentage clears the 80 % gate.
Part 2 is one free-text scenario response scored by keyword heuristics on a
seven-point scale. ``calculate_assessment_result`` combines both into the
final verdict.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Literal, Mapping

from core.errors import InvalidAnswerError
from core.matchers import round_half_up
from core.models import (
    AssessmentResult,
    CategoryScores,
    MCAnswer,
    MCQuestion,
    MCScore,
    Scenario,
    ScenarioAnswer,
    ScenarioDetails,
)
from core.rubrics import (
    CATEGORY_QUESTIONS,
    DEFAULT_SCENARIO_RUBRIC,
    MAX_POINTS_PER_QUESTION,
    MC_PASS_THRESHOLD,
    MC_SCALED_MAX,
    SCENARIO_PASS_THRESHOLD,
    TOTAL_MAX,
    TOTAL_PASS_THRESHOLD,
    ScenarioRubric,
)

logger = logging.getLogger(__name__)

MIN_SUBMIT_WORDS = 10
WORD_COUNT_FLOOR = 90

WordCountStatus = Literal["too_short", "ok", "too_long"]


def _validate(answers: list[MCAnswer]) -> None:
    for answer in answers:
        points = answer.points
        if isinstance(points, bool) or not isinstance(points, int) or not 0 <= points <= MAX_POINTS_PER_QUESTION:
            logger.warning("Rejected answer %r with points=%r", answer.question_id, points)
            raise InvalidAnswerError(
                f"Answer to {answer.question_id!r} has points={points!r}; "
                f"expected an integer in [0, {MAX_POINTS_PER_QUESTION}]"
            )


def _raw_percentage(answers: list[MCAnswer]) -> int:
    if not answers:
        return 0
    total = sum(answer.points for answer in answers)
    return round_half_up(total / (len(answers) * MAX_POINTS_PER_QUESTION) * 100)


def score_mc_questions(answers: Iterable[MCAnswer]) -> MCScore:
    answers = list(answers)
    _validate(answers)
    raw = _raw_percentage(answers)
    # Below the gate Part 1 earns nothing at all.
    scaled = round_half_up(raw / 100 * MC_SCALED_MAX) if raw >= MC_PASS_THRESHOLD else 0
    return MCScore(raw_score=raw, scaled_score=scaled)


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    return any(term in text for term in terms)


def score_scenario_response(
    response: str,
    scenario: Scenario,
    rubric: ScenarioRubric = DEFAULT_SCENARIO_RUBRIC,
) -> ScenarioAnswer:
    response = response or ""
    text = response.lower()

    key_word_score = sum(1 for group in rubric.keyword_groups if _contains_any(text, group))
    key_word_score = min(rubric.max_key_word_score, key_word_score)

    has_positive = _contains_any(text, rubric.positive_terms)
    has_hostile = _contains_any(text, rubric.hostile_terms)
    sentiment_score = 1 if has_positive and not has_hostile else 0

    strategy_score = 1 if _contains_any(text, rubric.strategy_patterns) else 0

    has_question = "?" in response
    has_concrete_time = rubric.concrete_time_pattern.search(text) is not None
    engagement_score = 1 if has_question and has_concrete_time else 0

    details = ScenarioDetails(
        key_word_score=key_word_score,
        sentiment_score=sentiment_score,
        strategy_score=strategy_score,
        engagement_score=engagement_score,
    )
    total = key_word_score + sentiment_score + strategy_score + engagement_score
    logger.debug("Scenario %r scored %d (%s)", scenario.id, total, details)
    return ScenarioAnswer(scenario_id=scenario.id, response=response, score=total, details=details)


def calculate_categories(
    answers: Iterable[MCAnswer],
    groups: Mapping[str, Iterable[str]] = CATEGORY_QUESTIONS,
) -> CategoryScores:
    answers = list(answers)
    scores = {}
    for category, question_ids in groups.items():
        members = set(question_ids)
        scores[category] = _raw_percentage([a for a in answers if a.question_id in members])
    return CategoryScores(**scores)


def calculate_assessment_result(mc_answers: Iterable[MCAnswer], scenario_answer: ScenarioAnswer) -> AssessmentResult:
    mc_answers = list(mc_answers)
    mc = score_mc_questions(mc_answers)
    part2 = scenario_answer.score
    total = mc.scaled_score + part2
    passed = (
        mc.raw_score >= MC_PASS_THRESHOLD
        and part2 >= SCENARIO_PASS_THRESHOLD
        and total >= TOTAL_PASS_THRESHOLD
    )
    result = AssessmentResult(
        part1_score=mc.scaled_score,
        part2_score=part2,
        total_score=total,
        passed=passed,
        categories=calculate_categories(mc_answers),
        mc_raw_score=mc.raw_score,
    )
    logger.info("Assessment scored: total=%d passed=%s (mc raw=%d)", total, passed, mc.raw_score)
    return result


def build_mc_answers(questions: Iterable[MCQuestion], selections: Mapping[str, str]) -> list[MCAnswer]:
    """Turn question-id -> option-id selections into scored answers.

    Selections for unknown questions or options count as zero points.
    """
    by_id = {question.id: question for question in questions}
    answers = []
    for question_id, option_id in selections.items():
        question = by_id.get(question_id)
        option = question.option(option_id) if question else None
        answers.append(MCAnswer(question_id=question_id, selected_option=option_id, points=option.points if option else 0))
    return answers


def count_words(text: str) -> int:
    return len([word for word in re.split(r"\s+", (text or "").strip()) if word])


def word_count_status(count: int, scenario: Scenario) -> WordCountStatus:
    if count < WORD_COUNT_FLOOR:
        return "too_short"
    if count > scenario.max_words:
        return "too_long"
    return "ok"


def result_grade(result: AssessmentResult) -> str:
    if not result.passed:
        return "Nicht bestanden"
    percentage = result.total_score / TOTAL_MAX * 100
    if percentage >= 90:
        return "Ausgezeichnet"
    if percentage >= 80:
        return "Sehr gut"
    return "Bestanden"
