from __future__ import annotations

from typing import Iterable

from core.models import FitScoreResult, Job, UserProfile
from core.rubrics import DEFAULT_FIT_RUBRIC, FitRubric
from core.scoring import score_fit


def rank_jobs(
    profile: UserProfile,
    jobs: Iterable[Job],
    limit: int | None = None,
    min_score: int = 0,
    rubric: FitRubric = DEFAULT_FIT_RUBRIC,
) -> list[tuple[Job, FitScoreResult]]:
    """Score every job for one profile, best fit first.

    Equal scores keep the input order.
    """
    results = [(job, score_fit(profile, job, rubric)) for job in jobs]
    ranked = [item for item in results if item[1].score >= min_score]
    ranked.sort(key=lambda item: item[1].score, reverse=True)
    return ranked[:limit] if limit is not None else ranked
