"""Per-dimension match scores (0-100) for a candidate profile against a job.

Every matcher is total: a missing attribute yields the dimension's neutral
default instead of raising.
"""
from __future__ import annotations

import math
import re
from typing import Iterable, Mapping

from core.models import Job, UserProfile
from core.rubrics import COST_BAND_PATTERN, ROLE_SYNONYMS, SALES_CYCLE_SCORES

NEUTRAL = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def match_role(
    user_role: str | None,
    job_role: str | None,
    synonyms: Mapping[str, Iterable[str]] = ROLE_SYNONYMS,
) -> int:
    user, job = _norm(user_role), _norm(job_role)
    if not user or not job:
        return NEUTRAL
    if user == job:
        return 100
    for key, related in synonyms.items():
        if key in user and any(term in job for term in related):
            return 85
    return 30


def match_lead_type(lead_type: str | None, warm: str = "warm") -> int:
    value = _norm(lead_type)
    if not value:
        return NEUTRAL
    return 90 if value == warm else 70


def match_sales_cycle(band: str | None, table: Mapping[str, int] = SALES_CYCLE_SCORES) -> int:
    value = _norm(band)
    if not value:
        return NEUTRAL
    return table.get(value, NEUTRAL)


def parse_cost_band(band: str | None, pattern: re.Pattern = COST_BAND_PATTERN) -> int | None:
    """Return the deal size implied by a cost band like ``"5k"`` or ``"800"``.

    Only a single amount with an optional ``k`` suffix is understood; any other
    band shape returns None.
    """
    if not band:
        return None
    match = pattern.match(band)
    if not match:
        return None
    amount = int(match.group(1))
    if match.group(2):
        amount *= 1000
    return amount or None


def match_deal_size(
    user_avg_deal: int | None,
    job_commission_eur: int | None,
    cost_band: str | None,
    pattern: re.Pattern = COST_BAND_PATTERN,
) -> int:
    if not user_avg_deal and not job_commission_eur and not cost_band:
        return NEUTRAL
    job_deal = parse_cost_band(cost_band, pattern)
    if user_avg_deal and job_deal:
        ratio = min(user_avg_deal, job_deal) / max(user_avg_deal, job_deal)
        return round_half_up(ratio * 100)
    return 70


def match_location(profile: UserProfile, job: Job, remote_modes: Iterable[str] = ("remote", "hybrid")) -> int:
    if _norm(job.location_mode) in remote_modes:
        return 95
    user_city, job_city = _norm(profile.location_city), _norm(job.location_city)
    if user_city and job_city and user_city == job_city:
        return 100
    user_country, job_country = _norm(profile.location_country), _norm(job.location_country)
    if user_country and job_country and user_country == job_country:
        return 80
    return 40


def match_tools(user_tools: Iterable[str], job_tools: Iterable[str]) -> int:
    required = [_norm(tool) for tool in job_tools if _norm(tool)]
    if not required:
        return 80
    known = [_norm(tool) for tool in user_tools if _norm(tool)]
    if not known:
        return 60
    matched = [tool for tool in required if any(tool in mine or mine in tool for mine in known)]
    return round_half_up(len(matched) / len(required) * 100)
