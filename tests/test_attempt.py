from __future__ import annotations

import random
from datetime import datetime, timedelta

import pytest

from core.attempt import (
    AttemptTiming,
    FocusLost,
    NextQuestion,
    PasteDetected,
    ScoreAttempt,
    SelectAnswer,
    StartAttempt,
    SubmitAssessment,
    Tick,
    UpdateScenarioResponse,
    create_attempt,
    retry_status,
    select_random_questions,
    select_random_scenario,
    transition,
)
from core.errors import AttemptTransitionError
from core.models import MCOption, MCQuestion, Scenario

STRONG_RESPONSE = (
    "Ich habe Verständnis für Ihr Problem. Der Nutzen ist klar: ein kurzes Gespräch, "
    "unverbindlich. Ich freue mich, passt Ihnen morgen ein Termin?"
)


def _questions(count: int = 20) -> list[MCQuestion]:
    return [
        MCQuestion(
            id=f"q{i}",
            question=f"Frage {i}",
            options=tuple(MCOption(id=opt, text=opt.upper(), points=points) for opt, points in zip("abcde", range(1, 6))),
        )
        for i in range(1, count + 1)
    ]


def _scenarios() -> list[Scenario]:
    return [Scenario(id=f"scenario{i}", title=f"Szenario {i}", prompt="...") for i in range(1, 4)]


def _started(seed: int = 1):
    attempt = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(seed))
    return transition(attempt, StartAttempt())


def _run(attempt, events):
    for event in events:
        attempt = transition(attempt, event)
    return attempt


def _in_part_two():
    return _run(_started(), [NextQuestion()] * 20)


def test_create_attempt_is_seedable():
    a = create_attempt("att-1", "user-1", _questions(30), _scenarios(), rng=random.Random(42))
    b = create_attempt("att-2", "user-1", _questions(30), _scenarios(), rng=random.Random(42))
    assert [q.id for q in a.mc_questions] == [q.id for q in b.mc_questions]
    assert a.scenario == b.scenario
    assert len(a.mc_questions) == 20
    assert len({q.id for q in a.mc_questions}) == 20
    assert a.status == "draft"


def test_select_random_questions_caps_at_pool_size():
    assert len(select_random_questions(_questions(5), 20, random.Random(0))) == 5


def test_select_random_scenario():
    scenarios = _scenarios()
    assert select_random_scenario(scenarios, random.Random(3)) in scenarios
    with pytest.raises(ValueError):
        select_random_scenario([])


def test_create_attempt_requires_questions():
    with pytest.raises(ValueError):
        create_attempt("att-1", "user-1", [], _scenarios())


def test_start_sets_timers():
    attempt = _started()
    assert attempt.status == "in_progress"
    assert attempt.current_part == 1
    assert attempt.part_time_left == 420
    assert attempt.question_time_left == 21
    with pytest.raises(AttemptTransitionError):
        transition(attempt, StartAttempt())


def test_transition_does_not_mutate_input():
    attempt = _started()
    question = attempt.current_question
    updated = transition(attempt, SelectAnswer(question.id, "c"))
    assert updated.mc_answers == {question.id: "c"}
    assert attempt.mc_answers == {}
    assert updated.current_question_index == 0


def test_answers_are_read_only():
    attempt = _started()
    question = attempt.current_question
    updated = transition(attempt, SelectAnswer(question.id, "c"))
    with pytest.raises(TypeError):
        updated.mc_answers[question.id] = "e"
    with pytest.raises(TypeError):
        attempt.mc_answers["q1"] = "a"
    assert updated.mc_answers == {question.id: "c"}


def test_select_answer_rules():
    attempt = _started()
    current = attempt.current_question
    other = attempt.mc_questions[1]
    with pytest.raises(AttemptTransitionError):
        transition(attempt, SelectAnswer(other.id, "a"))
    with pytest.raises(AttemptTransitionError):
        transition(attempt, SelectAnswer(current.id, "z"))
    draft = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(1))
    with pytest.raises(AttemptTransitionError):
        transition(draft, SelectAnswer(draft.mc_questions[0].id, "a"))


def test_next_question_advances_and_resets_question_timer():
    attempt = transition(_started(), Tick(5))
    assert attempt.question_time_left == 16
    attempt = transition(attempt, NextQuestion())
    assert attempt.current_question_index == 1
    assert attempt.question_time_left == 21
    assert attempt.part_time_left == 415


def test_last_question_moves_to_part_two():
    attempt = _run(_started(), [NextQuestion()] * 19)
    assert attempt.current_question_index == 19
    attempt = transition(attempt, NextQuestion())
    assert attempt.current_part == 2
    assert attempt.current_question_index == 0
    assert attempt.part_time_left == 180
    assert attempt.current_question is None
    with pytest.raises(AttemptTransitionError):
        transition(attempt, NextQuestion())


def test_question_timeout_auto_advances():
    attempt = transition(_started(), Tick(21))
    assert attempt.current_question_index == 1
    assert attempt.question_time_left == 21
    assert attempt.part_time_left == 399


def test_part_one_runs_out_into_part_two():
    attempt = _run(_started(), [Tick()] * 420)
    assert attempt.status == "in_progress"
    assert attempt.current_part == 2
    assert attempt.part_time_left == 180


def test_part_one_overrun_carries_into_part_two():
    attempt = transition(_started(), Tick(500))
    assert attempt.current_part == 2
    assert attempt.part_time_left == 100
    assert transition(_started(), Tick(600)).status == "submitted"


@pytest.mark.parametrize("seconds", [20, 21, 22, 63, 419, 420, 421, 599, 600, 700])
def test_coarse_tick_matches_one_second_ticks(seconds):
    coarse = transition(_started(), Tick(seconds))
    fine = _run(_started(), [Tick()] * seconds)
    assert coarse == fine


def test_coarse_tick_advances_several_questions():
    attempt = transition(_started(), Tick(63))
    assert attempt.current_question_index == 3
    assert attempt.question_time_left == 21
    assert attempt.part_time_left == 357


def test_part_timer_wins_when_both_timers_expire():
    timing = AttemptTiming(question_seconds=30, part1_seconds=30, part2_seconds=60)
    attempt = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(1), timing=timing)
    attempt = transition(transition(attempt, StartAttempt(), timing), Tick(30), timing)
    assert attempt.current_part == 2
    assert attempt.part_time_left == 60


def test_part_two_timeout_submits_once():
    attempt = transition(_in_part_two(), Tick(179))
    assert attempt.status == "in_progress"
    assert attempt.part_time_left == 1
    submitted = transition(attempt, Tick())
    assert submitted.status == "submitted"
    assert submitted.part_time_left == 0
    assert transition(submitted, Tick()) is submitted
    assert transition(submitted, Tick(30)) is submitted


def test_negative_tick_rejected():
    with pytest.raises(AttemptTransitionError):
        transition(_started(), Tick(-1))


def test_tick_on_draft_rejected():
    draft = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(1))
    with pytest.raises(AttemptTransitionError):
        transition(draft, Tick())


def test_submit_rules():
    draft = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(1))
    with pytest.raises(AttemptTransitionError):
        transition(draft, SubmitAssessment())
    with pytest.raises(AttemptTransitionError):
        transition(_started(), SubmitAssessment())
    submitted = transition(_in_part_two(), SubmitAssessment())
    assert submitted.status == "submitted"
    with pytest.raises(AttemptTransitionError):
        transition(submitted, SubmitAssessment())


def test_scenario_response_only_in_part_two():
    with pytest.raises(AttemptTransitionError):
        transition(_started(), UpdateScenarioResponse("Hallo"))
    attempt = transition(_in_part_two(), UpdateScenarioResponse("Hallo"))
    assert attempt.scenario_response == "Hallo"


def test_proctor_flags_counted_while_running():
    attempt = _run(_started(), [FocusLost(), FocusLost(), PasteDetected()])
    assert attempt.proctor_flags.focus_changes == 2
    assert attempt.proctor_flags.paste_count == 1


def test_proctor_flags_ignored_outside_running_attempt():
    submitted = transition(_in_part_two(), SubmitAssessment())
    assert transition(submitted, FocusLost()) is submitted
    assert transition(submitted, PasteDetected()) is submitted


def test_scoring_requires_submission():
    with pytest.raises(AttemptTransitionError):
        transition(_in_part_two(), ScoreAttempt())


def test_full_run_scores_and_passes():
    attempt = _started()
    for _ in range(len(attempt.mc_questions)):
        attempt = transition(attempt, SelectAnswer(attempt.current_question.id, "e"))
        attempt = transition(attempt, NextQuestion())
    attempt = _run(attempt, [UpdateScenarioResponse(STRONG_RESPONSE), SubmitAssessment(), ScoreAttempt()])
    assert attempt.status == "scored"
    assert attempt.result.part1_score == 20
    assert attempt.result.part2_score == 7
    assert attempt.result.total_score == 27
    assert attempt.result.passed
    assert transition(attempt, Tick()) is attempt
    with pytest.raises(AttemptTransitionError):
        transition(attempt, ScoreAttempt())


def test_unanswered_attempt_scores_zero():
    attempt = _run(_in_part_two(), [SubmitAssessment(), ScoreAttempt()])
    assert attempt.result.total_score == 0
    assert not attempt.result.passed


def test_custom_timing():
    timing = AttemptTiming(question_seconds=5, part1_seconds=10, part2_seconds=3)
    attempt = create_attempt("att-1", "user-1", _questions(), _scenarios(), rng=random.Random(1), timing=timing)
    attempt = transition(attempt, StartAttempt(), timing)
    assert attempt.part_time_left == 10
    attempt = transition(attempt, Tick(10), timing)
    assert attempt.current_part == 2
    assert attempt.part_time_left == 3


def test_unknown_event_rejected():
    with pytest.raises(TypeError):
        transition(_started(), object())


def test_retry_status():
    now = datetime(2026, 3, 1, 12, 0)
    fresh = retry_status(0, None, now)
    assert fresh.remaining_attempts == 2
    assert fresh.can_start

    last = now - timedelta(days=10)
    blocked = retry_status(2, last, now)
    assert blocked.remaining_attempts == 0
    assert not blocked.can_start
    assert blocked.next_attempt_at == last + timedelta(days=30)

    assert retry_status(2, now - timedelta(days=31), now).can_start
    assert retry_status(1, last, now).remaining_attempts == 1
