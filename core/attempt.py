"""Timed assessment attempt as an explicit state machine.

An attempt moves ``draft -> in_progress -> submitted -> scored`` and never
back. ``transition`` takes the current attempt and one event and returns the
next attempt; nothing is mutated in place and no wall clock is read. The
caller owns the clock and reports elapsed time with ``Tick`` events, so a
timer reaching zero goes through exactly the same advance/submit path as a
user clicking "next" or "submit".
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Sequence, Union

from core.assessment import build_mc_answers, calculate_assessment_result, score_scenario_response
from core.errors import AttemptTransitionError
from core.models import AssessmentAttempt, MCQuestion, ProctorFlags, Scenario

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptTiming:
    question_seconds: int = 21
    part1_seconds: int = 420
    part2_seconds: int = 180


DEFAULT_TIMING = AttemptTiming()


@dataclass(frozen=True)
class StartAttempt:
    pass


@dataclass(frozen=True)
class SelectAnswer:
    question_id: str
    option_id: str


@dataclass(frozen=True)
class NextQuestion:
    pass


@dataclass(frozen=True)
class Tick:
    seconds: int = 1


@dataclass(frozen=True)
class UpdateScenarioResponse:
    text: str


@dataclass(frozen=True)
class SubmitAssessment:
    pass


@dataclass(frozen=True)
class FocusLost:
    pass


@dataclass(frozen=True)
class PasteDetected:
    pass


@dataclass(frozen=True)
class ScoreAttempt:
    pass


Event = Union[
    StartAttempt,
    SelectAnswer,
    NextQuestion,
    Tick,
    UpdateScenarioResponse,
    SubmitAssessment,
    FocusLost,
    PasteDetected,
    ScoreAttempt,
]


def select_random_questions(
    questions: Sequence[MCQuestion], count: int, rng: random.Random | None = None
) -> list[MCQuestion]:
    rng = rng or random.Random()
    pool = list(questions)
    return rng.sample(pool, min(count, len(pool)))


def select_random_scenario(scenarios: Sequence[Scenario], rng: random.Random | None = None) -> Scenario:
    if not scenarios:
        raise ValueError("at least one scenario is required")
    rng = rng or random.Random()
    return scenarios[rng.randrange(len(scenarios))]


def create_attempt(
    attempt_id: str,
    user_id: str,
    questions: Sequence[MCQuestion],
    scenarios: Sequence[Scenario],
    question_count: int = 20,
    rng: random.Random | None = None,
    timing: AttemptTiming = DEFAULT_TIMING,
) -> AssessmentAttempt:
    rng = rng or random.Random()
    selected = select_random_questions(questions, question_count, rng)
    if not selected:
        raise ValueError("at least one multiple-choice question is required")
    return AssessmentAttempt(
        id=attempt_id,
        user_id=user_id,
        mc_questions=tuple(selected),
        scenario=select_random_scenario(scenarios, rng),
        part_time_left=timing.part1_seconds,
        question_time_left=timing.question_seconds,
    )


def _reject(attempt: AssessmentAttempt, event: Event, why: str) -> AttemptTransitionError:
    logger.warning(
        "Rejected %s on attempt %r (status=%s, part=%d): %s",
        type(event).__name__, attempt.id, attempt.status, attempt.current_part, why,
    )
    return AttemptTransitionError(f"{type(event).__name__} not allowed: {why}")


def _require_running(attempt: AssessmentAttempt, event: Event, part: int | None = None) -> None:
    if attempt.status != "in_progress":
        raise _reject(attempt, event, f"attempt is {attempt.status}")
    if part is not None and attempt.current_part != part:
        raise _reject(attempt, event, f"attempt is in part {attempt.current_part}")


def _enter_part_two(attempt: AssessmentAttempt, timing: AttemptTiming) -> AssessmentAttempt:
    return replace(
        attempt,
        current_part=2,
        current_question_index=0,
        part_time_left=timing.part2_seconds,
        question_time_left=0,
    )


def _advance(attempt: AssessmentAttempt, timing: AttemptTiming) -> AssessmentAttempt:
    if attempt.current_question_index < len(attempt.mc_questions) - 1:
        return replace(
            attempt,
            current_question_index=attempt.current_question_index + 1,
            question_time_left=timing.question_seconds,
        )
    return _enter_part_two(attempt, timing)


def _submit(attempt: AssessmentAttempt) -> AssessmentAttempt:
    return replace(attempt, status="submitted", part_time_left=0)


def _on_start(attempt, event, timing):
    if attempt.status != "draft":
        raise _reject(attempt, event, f"attempt is {attempt.status}")
    return replace(
        attempt,
        status="in_progress",
        part_time_left=timing.part1_seconds,
        question_time_left=timing.question_seconds,
    )


def _on_select(attempt, event, timing):
    _require_running(attempt, event, part=1)
    question = attempt.current_question
    if question is None or question.id != event.question_id:
        raise _reject(attempt, event, f"{event.question_id!r} is not the current question")
    if question.option(event.option_id) is None:
        raise _reject(attempt, event, f"{event.option_id!r} is not an option of {question.id!r}")
    return replace(attempt, mc_answers={**attempt.mc_answers, question.id: event.option_id})


def _on_next(attempt, event, timing):
    _require_running(attempt, event, part=1)
    return _advance(attempt, timing)


def _on_tick(attempt, event, timing):
    if event.seconds < 0:
        raise _reject(attempt, event, "elapsed time cannot be negative")
    if attempt.status in ("submitted", "scored"):
        return attempt
    _require_running(attempt, event)

    # Tick(n) lands where n one-second ticks would.
    remaining = event.seconds
    while remaining > 0 and attempt.status == "in_progress":
        attempt, remaining = _spend(attempt, remaining, timing)
    return attempt


def _spend(attempt: AssessmentAttempt, seconds: int, timing: AttemptTiming) -> tuple[AssessmentAttempt, int]:
    """Run the clock up to the next timer expiry and return the unspent seconds."""
    if attempt.current_part == 2:
        step = min(seconds, attempt.part_time_left)
        part_left = attempt.part_time_left - step
        if part_left == 0:
            logger.info("Attempt %r auto-submitted on timeout", attempt.id)
            return _submit(attempt), seconds - step
        return replace(attempt, part_time_left=part_left), seconds - step

    step = min(seconds, attempt.part_time_left, attempt.question_time_left)
    part_left = attempt.part_time_left - step
    question_left = attempt.question_time_left - step
    if part_left == 0:
        logger.info("Attempt %r part 1 timed out", attempt.id)
        return _enter_part_two(attempt, timing), seconds - step
    if question_left == 0:
        return _advance(replace(attempt, part_time_left=part_left), timing), seconds - step
    return replace(attempt, part_time_left=part_left, question_time_left=question_left), seconds - step


def _on_response(attempt, event, timing):
    _require_running(attempt, event, part=2)
    return replace(attempt, scenario_response=event.text)


def _on_submit(attempt, event, timing):
    _require_running(attempt, event, part=2)
    return _submit(attempt)


def _on_focus_lost(attempt, event, timing):
    if attempt.status != "in_progress":
        return attempt
    flags = attempt.proctor_flags
    return replace(attempt, proctor_flags=replace(flags, focus_changes=flags.focus_changes + 1))


def _on_paste(attempt, event, timing):
    if attempt.status != "in_progress":
        return attempt
    flags = attempt.proctor_flags
    return replace(attempt, proctor_flags=replace(flags, paste_count=flags.paste_count + 1))


def _on_score(attempt, event, timing):
    if attempt.status != "submitted":
        raise _reject(attempt, event, f"attempt is {attempt.status}")
    mc_answers = build_mc_answers(attempt.mc_questions, attempt.mc_answers)
    scenario_answer = score_scenario_response(attempt.scenario_response, attempt.scenario)
    result = calculate_assessment_result(mc_answers, scenario_answer)
    return replace(attempt, status="scored", result=result)


_HANDLERS: dict[type, Callable[[AssessmentAttempt, Event, AttemptTiming], AssessmentAttempt]] = {
    StartAttempt: _on_start,
    SelectAnswer: _on_select,
    NextQuestion: _on_next,
    Tick: _on_tick,
    UpdateScenarioResponse: _on_response,
    SubmitAssessment: _on_submit,
    FocusLost: _on_focus_lost,
    PasteDetected: _on_paste,
    ScoreAttempt: _on_score,
}


def transition(attempt: AssessmentAttempt, event: Event, timing: AttemptTiming = DEFAULT_TIMING) -> AssessmentAttempt:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown attempt event: {event!r}")
    updated = handler(attempt, event, timing)
    if updated is not attempt:
        logger.debug(
            "Attempt %r: %s -> status=%s part=%d index=%d",
            attempt.id, type(event).__name__, updated.status, updated.current_part, updated.current_question_index,
        )
    return updated


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 2
    cooldown: timedelta = timedelta(days=30)


@dataclass(frozen=True)
class RetryStatus:
    remaining_attempts: int
    can_start: bool
    next_attempt_at: datetime | None


DEFAULT_RETRY_POLICY = RetryPolicy()


def retry_status(
    attempts_used: int,
    last_attempt_at: datetime | None,
    now: datetime,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> RetryStatus:
    remaining = max(0, policy.max_attempts - attempts_used)
    if remaining > 0:
        return RetryStatus(remaining_attempts=remaining, can_start=True, next_attempt_at=None)
    if last_attempt_at is None:
        return RetryStatus(remaining_attempts=0, can_start=True, next_attempt_at=None)
    next_at = last_attempt_at + policy.cooldown
    return RetryStatus(remaining_attempts=0, can_start=now >= next_at, next_attempt_at=next_at)
