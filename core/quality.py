from __future__ import annotations

import logging
from dataclasses import replace

from core.models import Job, PublishStatus, QualityBreakdown, QualityScoreResult
from core.rubrics import DEFAULT_QUALITY_RUBRIC, QualityRubric

logger = logging.getLogger(__name__)


def _score_title(title: str | None, rubric: QualityRubric) -> int:
    if not title:
        return 0
    length = len(title)
    if rubric.title_min_length <= length <= rubric.title_max_length:
        lowered = title.lower()
        has_role = any(keyword in lowered for keyword in rubric.title_role_keywords)
        return 20 if has_role else 15
    return 5 if length < rubric.title_min_length else 10


def _score_role(role_needed: str | None, seniority: str | None) -> int:
    if not role_needed:
        return 0
    return 20 if seniority else 15


def _score_industries(industries, rubric: QualityRubric) -> int:
    if not industries:
        return 0
    return 15 if len(industries) <= rubric.max_industries else 10


def _score_lead_type(leads_type: str | None, sales_cycle_band: str | None) -> int:
    return (8 if leads_type else 0) + (7 if sales_cycle_band else 0)


def _score_commission(percent: float | None, absolute: int | None) -> int:
    return 15 if (percent or absolute) else 0


def _score_employment(weekly_hours: int | None, employment_type: str | None) -> int:
    return (5 if weekly_hours else 0) + (5 if employment_type else 0)


def _score_description(description: str | None, rubric: QualityRubric) -> int:
    if not description:
        return 0
    return 5 if len(description) >= rubric.description_min_length else 2


def _feedback(breakdown: QualityBreakdown, rubric: QualityRubric) -> list[str]:
    return [message for component, floor, message in rubric.feedback if getattr(breakdown, component) < floor]


def can_publish(score: int, rubric: QualityRubric = DEFAULT_QUALITY_RUBRIC) -> bool:
    return score >= rubric.publish_threshold


def get_publish_status(score: int, rubric: QualityRubric = DEFAULT_QUALITY_RUBRIC) -> PublishStatus:
    if score >= rubric.publish_threshold:
        return "ready"
    if score >= rubric.review_threshold:
        return "pending"
    return "draft"


def calculate_quality_score(job: Job, rubric: QualityRubric = DEFAULT_QUALITY_RUBRIC) -> QualityScoreResult:
    breakdown = QualityBreakdown(
        title=_score_title(job.title, rubric),
        role=_score_role(job.role_needed, job.seniority),
        industries=_score_industries(job.industries, rubric),
        lead_type=_score_lead_type(job.leads_type, job.sales_cycle_band),
        commission=_score_commission(job.avg_commission_percent, job.avg_commission_eur),
        employment=_score_employment(job.weekly_hours_needed, job.employment_type),
        description=_score_description(job.description_md, rubric),
    )
    score = breakdown.total()
    logger.debug("Quality score %d for job %r (%s)", score, job.id, breakdown.as_dict())
    return QualityScoreResult(
        score=score,
        breakdown=breakdown,
        feedback=_feedback(breakdown, rubric),
        publish_status=get_publish_status(score, rubric),
    )


def apply_quality_score(job: Job, rubric: QualityRubric = DEFAULT_QUALITY_RUBRIC) -> Job:
    return replace(job, quality_score_int=calculate_quality_score(job, rubric).score)
