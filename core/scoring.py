from __future__ import annotations

import logging

import numpy as np

from core.matchers import (
    match_deal_size,
    match_lead_type,
    match_location,
    match_role,
    match_sales_cycle,
    match_tools,
    round_half_up,
)
from core.models import FitBreakdown, FitScoreResult, Job, UserProfile
from core.rubrics import DEFAULT_FIT_RUBRIC, DIMENSIONS, FIT_BANDS, FitRubric

logger = logging.getLogger(__name__)


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def fit_band(score: float) -> str:
    for floor, label in FIT_BANDS:
        if score >= floor:
            return label
    return "Low"


def weight_vector(rubric: FitRubric = DEFAULT_FIT_RUBRIC) -> np.ndarray:
    return np.array([rubric.weights[dim] for dim in DIMENSIONS], dtype=np.int64)


def breakdown_for(profile: UserProfile, job: Job, rubric: FitRubric = DEFAULT_FIT_RUBRIC) -> FitBreakdown:
    return FitBreakdown(
        role=match_role(profile.role_needed, job.role_needed, rubric.role_synonyms),
        lead_type=match_lead_type(job.leads_type, rubric.warm_lead_type),
        sales_cycle=match_sales_cycle(job.sales_cycle_band, rubric.sales_cycle_scores),
        deal_size=match_deal_size(
            profile.avg_deal_eur,
            job.avg_commission_eur,
            job.avg_product_cost_band,
            rubric.cost_band_pattern,
        ),
        location=match_location(profile, job, rubric.remote_modes),
        tools=match_tools(profile.tools, job.tools),
    )


def composite_score(breakdown: FitBreakdown, weights: np.ndarray) -> int:
    values = np.array([getattr(breakdown, dim) for dim in DIMENSIONS], dtype=np.int64)
    total = int(np.dot(values, weights))
    return _clamp(round_half_up(total / 100))


def _reason_context(job: Job) -> dict[str, str]:
    return {
        "role": job.role_needed or "",
        "cost_band": job.avg_product_cost_band or "flexibel",
        "sales_cycle": job.sales_cycle_band or "flexibel",
        "location": job.location_mode or job.location_city or "flexibel",
        "lead_type": job.leads_type or "gemischt",
    }


def build_reasons(breakdown: FitBreakdown, job: Job, rubric: FitRubric = DEFAULT_FIT_RUBRIC) -> list[str]:
    context = _reason_context(job)
    candidates: list[tuple[int, str]] = []
    for dim, threshold, template in rubric.reason_rules:
        value = getattr(breakdown, dim)
        if value >= threshold:
            candidates.append((value, template.format(**context)))
    candidates.sort(key=lambda item: item[0], reverse=True)
    return [text for _, text in candidates[: rubric.max_reasons]]


def score_fit(profile: UserProfile, job: Job, rubric: FitRubric = DEFAULT_FIT_RUBRIC) -> FitScoreResult:
    breakdown = breakdown_for(profile, job, rubric)
    score = composite_score(breakdown, weight_vector(rubric))
    reasons = build_reasons(breakdown, job, rubric)
    logger.debug("Fit score %d for job %r (%s)", score, job.id, breakdown.as_dict())
    return FitScoreResult(score=score, reasons=reasons, breakdown=breakdown, band=fit_band(score))
