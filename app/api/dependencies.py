from __future__ import annotations

from functools import lru_cache

from app.authenticity.analyzer import AuthenticityAnalyzer, build_authenticity_analyzer
from app.matching.engine import MatchingRules, load_matching_rules
from app.parsing.orchestrator import FallbackOrchestrator
from app.parsing.service import get_orchestrator


def get_resume_orchestrator() -> FallbackOrchestrator:
    return get_orchestrator("resume")


def get_job_orchestrator() -> FallbackOrchestrator:
    return get_orchestrator("job")


@lru_cache(maxsize=1)
def get_matching_rules() -> MatchingRules:
    return load_matching_rules()


@lru_cache(maxsize=1)
def get_authenticity_analyzer() -> AuthenticityAnalyzer:
    return build_authenticity_analyzer()
