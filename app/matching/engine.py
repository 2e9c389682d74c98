from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from app.core.config.scoring import get_scoring_value
from app.schemas.candidate import CandidateRecord
from app.schemas.job import JobProfile
from app.schemas.match import MatchResult, MatchTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierThresholds:
    a: int = 85
    b: int = 70
    c: int = 50


@dataclass(frozen=True)
class MatchingRules:
    tiers: TierThresholds = TierThresholds()
    experience_bonus: int = 10
    neutral_base_score: int = 50


def load_matching_rules() -> MatchingRules:
    defaults = MatchingRules()
    tiers = get_scoring_value("matching.tiers", {}) or {}
    return MatchingRules(
        tiers=TierThresholds(
            a=int(tiers.get("a", defaults.tiers.a)),
            b=int(tiers.get("b", defaults.tiers.b)),
            c=int(tiers.get("c", defaults.tiers.c)),
        ),
        experience_bonus=int(get_scoring_value("matching.experience_bonus", defaults.experience_bonus)),
        neutral_base_score=int(get_scoring_value("matching.neutral_base_score", defaults.neutral_base_score)),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _normalize_skills(skills: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for skill in skills:
        cleaned = (skill or "").strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def _overlaps(left: str, right: str) -> bool:
    # substring match in either direction, so "c" also matches "c++"
    return left in right or right in left


def assign_tier(score: int, thresholds: TierThresholds = TierThresholds()) -> MatchTier:
    if score >= thresholds.a:
        return "A"
    if score >= thresholds.b:
        return "B"
    if score >= thresholds.c:
        return "C"
    return "D"


def score_candidate(
    candidate: CandidateRecord,
    job: JobProfile,
    rules: MatchingRules | None = None,
) -> MatchResult:
    rules = rules or MatchingRules()
    candidate_skills = _normalize_skills(candidate.skills)
    required = _normalize_skills(job.required_skills)
    preferred = _normalize_skills(job.preferred_skills)

    matched = [skill for skill in candidate_skills if any(_overlaps(skill, req) for req in required)]
    missing = [req for req in required if not any(_overlaps(skill, req) for skill in candidate_skills)]
    matched_preferred = [skill for skill in candidate_skills if any(_overlaps(skill, pref) for pref in preferred)]

    if required:
        base = _round_half_up(len(matched) / max(1, len(required)) * 100)
    else:
        base = rules.neutral_base_score

    meets_experience = candidate.years_of_experience >= job.min_experience
    bonus = rules.experience_bonus if meets_experience else 0
    overall = min(100, base + bonus)

    explanation = f"Matched {len(matched)} of {len(required)} required skills. " + (
        "Meets experience requirements." if meets_experience else "May need more experience."
    )
    return MatchResult(
        candidate_name=candidate.name,
        overall_score=overall,
        tier=assign_tier(overall, rules.tiers),
        matched_skills=tuple(matched),
        missing_skills=tuple(missing),
        matched_preferred_skills=tuple(matched_preferred),
        skills_score=min(100, base),
        experience_score=100 if meets_experience else 50,
        explanation=explanation,
    )


def rank_candidates(
    candidates: Sequence[CandidateRecord],
    job: JobProfile,
    *,
    min_score: int = 0,
    max_results: int = 100,
    rules: MatchingRules | None = None,
) -> list[MatchResult]:
    """Score, filter and order candidates for one job.

    Sorting is stable, so candidates with equal scores keep their input order.
    """
    scored = [score_candidate(candidate, job, rules) for candidate in candidates]
    kept = [result for result in scored if result.overall_score >= min_score]
    kept.sort(key=lambda result: result.overall_score, reverse=True)
    ranked = kept[: max(0, max_results)]
    logger.info(
        "match_completed job=%s candidates=%s matches=%s top_score=%s",
        job.title,
        len(candidates),
        len(ranked),
        ranked[0].overall_score if ranked else 0,
    )
    return ranked
