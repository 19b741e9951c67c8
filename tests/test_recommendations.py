from __future__ import annotations

from pathlib import Path

from core.catalog import load_jobs
from core.models import Job, UserProfile
from core.recommendations import rank_jobs

BASE_DIR = Path(__file__).resolve().parents[1]


def _profile() -> UserProfile:
    return UserProfile(
        role_needed="Closer",
        avg_deal_eur=20000,
        location_city="Berlin",
        location_country="Deutschland",
        tools=("HubSpot",),
    )


def test_rank_sample_jobs_best_fit_first():
    ranked = rank_jobs(_profile(), load_jobs(BASE_DIR / "data"))
    assert [job.id for job, _ in ranked] == ["job-101", "job-103", "job-104", "job-102"]
    assert ranked[0][1].score == 88
    assert ranked[1][1].score == 70


def test_rank_respects_limit_and_min_score():
    jobs = load_jobs(BASE_DIR / "data")
    assert [job.id for job, _ in rank_jobs(_profile(), jobs, limit=2)] == ["job-101", "job-103"]
    assert [job.id for job, _ in rank_jobs(_profile(), jobs, min_score=60)] == ["job-101", "job-103"]
    assert rank_jobs(_profile(), jobs, min_score=101) == []


def test_equal_scores_keep_input_order():
    jobs = [Job(id=f"job-{i}", title="Sales Closer", role_needed="Closer") for i in range(5)]
    ranked = rank_jobs(_profile(), jobs)
    assert [job.id for job, _ in ranked] == [job.id for job in jobs]


def test_recommendation_order_stable():
    jobs = load_jobs(BASE_DIR / "data")
    assert rank_jobs(_profile(), jobs) == rank_jobs(_profile(), jobs)
