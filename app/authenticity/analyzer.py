"""Heuristic authenticity scoring for parsed resumes.

Signals are combined into a 0-100 score (100 = genuine). Only the technical
depth signal needs a model call; when it is unavailable the signal is left
neutral and the rest of the report is still produced.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from app.ai.config import ProviderSpec, load_provider_spec
from app.ai.errors import AuxiliaryAnalysisUnavailable
from app.ai.factory import try_get_ai_client
from app.ai.output import parse_json_object
from app.ai.prompts import build_depth_messages
from app.ai.types import AIClient
from app.core.config import settings
from app.core.config.scoring import get_scoring_value
from app.schemas.authenticity import (
    AuthenticityReport,
    AuthenticitySignals,
    QuickAuthenticityCheck,
    Recommendation,
    RedFlag,
)
from app.schemas.candidate import CandidateRecord, Experience

logger = logging.getLogger(__name__)

GENERIC_PHRASES = (
    "results-driven professional",
    "proven track record",
    "extensive experience in",
    "strong communication skills",
    "team player",
    "detail-oriented",
    "self-motivated",
    "fast-paced environment",
    "exceeded expectations",
    "spearheaded initiatives",
    "synergy",
    "leverage",
    "stakeholders",
    "proactive approach",
)
DISPOSABLE_EMAIL_DOMAINS = ("tempmail", "guerrillamail", "mailinator", "10minutemail", "yopmail", "throwaway")
DEPTH_UNAVAILABLE_ISSUE = "Technical depth analysis unavailable"

_ONGOING_END_DATES = {"present", "current", "now"}
_DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y/%m", "%m/%Y", "%b %Y", "%B %Y", "%Y")
_DAYS_PER_MONTH = 30
_MAX_SUSPICIOUS_PATTERNS = 5


@dataclass(frozen=True)
class AuthenticityConfig:
    generic_phrases: tuple[str, ...] = GENERIC_PHRASES
    generic_phrase_threshold: int = 5
    generic_phrase_high_threshold: int = 10
    keyword_match_threshold: float = 80
    experience_mismatch_years: int = 2
    short_tenure_months: float = 2
    flag_deductions: Mapping[str, float] = field(
        default_factory=lambda: {"high": 20, "medium": 10, "low": 5}
    )
    signal_weights: Mapping[str, float] = field(
        default_factory=lambda: {
            "ai_generated_probability": 0.3,
            "over_optimization": 0.2,
            "generic_language": 0.2,
            "inconsistencies": 0.3,
        }
    )
    green_flag_bonus: float = 5
    risk_thresholds: Mapping[str, float] = field(
        default_factory=lambda: {"low": 75, "medium": 50, "high": 25}
    )
    risk_floor_flags: tuple[str, ...] = ("Generic AI Language",)
    disposable_email_domains: tuple[str, ...] = DISPOSABLE_EMAIL_DOMAINS


def load_authenticity_config() -> AuthenticityConfig:
    section: dict[str, Any] = get_scoring_value("authenticity", {}) or {}
    defaults = AuthenticityConfig()
    return AuthenticityConfig(
        generic_phrases=tuple(section.get("generic_phrases") or defaults.generic_phrases),
        generic_phrase_threshold=int(section.get("generic_phrase_threshold", defaults.generic_phrase_threshold)),
        generic_phrase_high_threshold=int(
            section.get("generic_phrase_high_threshold", defaults.generic_phrase_high_threshold)
        ),
        keyword_match_threshold=float(section.get("keyword_match_threshold", defaults.keyword_match_threshold)),
        experience_mismatch_years=int(section.get("experience_mismatch_years", defaults.experience_mismatch_years)),
        short_tenure_months=float(section.get("short_tenure_months", defaults.short_tenure_months)),
        flag_deductions={**defaults.flag_deductions, **(section.get("flag_deductions") or {})},
        signal_weights={**defaults.signal_weights, **(section.get("signal_weights") or {})},
        green_flag_bonus=float(section.get("green_flag_bonus", defaults.green_flag_bonus)),
        risk_thresholds={**defaults.risk_thresholds, **(section.get("risk_thresholds") or {})},
        risk_floor_flags=tuple(section.get("risk_floor_flags") or defaults.risk_floor_flags),
        disposable_email_domains=tuple(section.get("disposable_email_domains") or defaults.disposable_email_domains),
    )


def parse_resume_date(value: str | None, *, now: datetime) -> datetime | None:
    """Parse the loose date strings found in extracted work history.

    Accepts ``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD`` and ``Mon YYYY``; "Present" and
    "Current" resolve to ``now``. Anything else is None.
    """
    if not value:
        return None
    cleaned = value.strip()
    if cleaned.lower() in _ONGOING_END_DATES:
        return now
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def _months_between(start: datetime, end: datetime) -> float:
    return (end - start).days / _DAYS_PER_MONTH


@dataclass
class _Findings:
    signals: AuthenticitySignals = field(default_factory=AuthenticitySignals)
    red_flags: list[RedFlag] = field(default_factory=list)
    green_flags: list[str] = field(default_factory=list)
    verification_questions: list[str] = field(default_factory=list)

    def flag(self, name: str, severity: str, explanation: str) -> None:
        self.red_flags.append(RedFlag(flag=name, severity=severity, explanation=explanation))


class AuthenticityAnalyzer:
    def __init__(
        self,
        client: AIClient | None = None,
        spec: ProviderSpec | None = None,
        config: AuthenticityConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._client = client
        self._spec = spec
        self._config = config or AuthenticityConfig()
        self._clock = clock

    def analyze(
        self,
        source_text: str,
        candidate: CandidateRecord,
        job_text: str | None = None,
    ) -> AuthenticityReport:
        text_lower = (source_text or "").lower()
        findings = _Findings()

        self._check_generic_language(text_lower, findings)
        if job_text:
            self._check_over_optimization(text_lower, job_text, candidate, findings)
        if candidate.experience:
            self._check_timeline(candidate, findings)

        try:
            self._check_technical_depth(source_text or "", candidate, findings)
        except AuxiliaryAnalysisUnavailable as exc:
            logger.warning("authenticity_depth_unavailable candidate=%s: %s", candidate.name, exc)
            findings.signals.verification_issues.append(DEPTH_UNAVAILABLE_ISSUE)

        has_linkedin = self._check_contact(text_lower, candidate, findings)

        score = self._aggregate(findings)
        risk_level = self._risk_level(score, findings.red_flags)
        recommendations = self._recommendations(risk_level, findings.signals, has_linkedin)

        logger.info(
            "authenticity_analysis_completed candidate=%s score=%s risk=%s red_flags=%s",
            candidate.name,
            score,
            risk_level,
            len(findings.red_flags),
        )
        return AuthenticityReport(
            overall_score=score,
            risk_level=risk_level,
            signals=findings.signals,
            red_flags=findings.red_flags,
            green_flags=findings.green_flags,
            recommendations=recommendations,
            verification_questions=findings.verification_questions,
        )

    def quick_check(self, candidate: CandidateRecord, source_text: str | None = None) -> QuickAuthenticityCheck:
        report = self.analyze(source_text or "", candidate)
        return QuickAuthenticityCheck(
            score=report.overall_score,
            risk_level=report.risk_level,
            top_issues=[flag.flag for flag in report.red_flags[:3]],
        )

    def _check_generic_language(self, text_lower: str, findings: _Findings) -> None:
        hits = sum(1 for phrase in self._config.generic_phrases if phrase.lower() in text_lower)
        if hits > self._config.generic_phrase_threshold:
            findings.signals.generic_language = min(100, hits * 10)
            severity = "high" if hits > self._config.generic_phrase_high_threshold else "medium"
            findings.flag(
                "Generic AI Language",
                severity,
                f"Resume contains {hits} generic phrases commonly produced by AI writing tools",
            )
        elif hits == 0:
            findings.green_flags.append("Uses specific, personal language instead of generic phrases")

    def _check_over_optimization(
        self,
        text_lower: str,
        job_text: str,
        candidate: CandidateRecord,
        findings: _Findings,
    ) -> None:
        job_words = [word for word in job_text.lower().split() if len(word) > 4]
        if not job_words:
            return
        resume_words = set(text_lower.split())
        rate = sum(1 for word in job_words if word in resume_words) / len(job_words) * 100
        if rate <= self._config.keyword_match_threshold:
            return

        findings.signals.over_optimization = round(rate, 1)
        findings.flag(
            "Suspiciously High Keyword Match",
            "high",
            f"Resume matches {round(rate)}% of job keywords - likely tailored with AI",
        )
        first_skill = candidate.skills[0] if candidate.skills else "your main skill"
        last_skill = candidate.skills[-1] if candidate.skills else "your most recent skill"
        findings.verification_questions.extend(
            [
                "Can you describe a specific project where you used these technologies together?",
                f"What challenges did you face when working with {first_skill}?",
                f"How did you learn {last_skill}?",
            ]
        )

    def _check_timeline(self, candidate: CandidateRecord, findings: _Findings) -> None:
        now = self._clock()
        entries: list[Experience] = candidate.experience

        for current, following in zip(entries, entries[1:]):
            current_start = parse_resume_date(current.start_date, now=now)
            following_start = parse_resume_date(following.start_date, now=now)
            if current_start and following_start and current_start > following_start:
                findings.signals.inconsistencies += 20
                findings.flag(
                    "Timeline Inconsistency",
                    "medium",
                    f"Work history at {current.company or 'an employer'} starts after "
                    f"{following.company or 'the next employer'}",
                )

        total_months = 0.0
        for entry in entries:
            start = parse_resume_date(entry.start_date, now=now)
            if start is None:
                continue
            # a missing end date is an ongoing role
            ongoing = not entry.end_date or entry.end_date.strip().lower() in _ONGOING_END_DATES
            end = now if ongoing else parse_resume_date(entry.end_date, now=now)
            if end is None:
                continue
            months = _months_between(start, end)
            total_months += months
            if not ongoing and months < self._config.short_tenure_months:
                findings.signals.verification_issues.append(
                    f"Very short tenure at {entry.company or 'an employer'} ({round(months)} months)"
                )

        calculated_years = math.floor(total_months / 12)
        claimed_years = candidate.years_of_experience or 0
        if abs(calculated_years - claimed_years) > self._config.experience_mismatch_years:
            findings.signals.inconsistencies += 30
            findings.flag(
                "Experience Mismatch",
                "high",
                f"Claims {claimed_years:g} years but timeline shows {calculated_years} years",
            )
        else:
            findings.green_flags.append("Work history timeline is consistent")

    def _request_depth_analysis(self, source_text: str, candidate: CandidateRecord) -> dict[str, Any]:
        if self._client is None:
            raise AuxiliaryAnalysisUnavailable("no analysis provider configured")
        spec = self._spec
        try:
            completion = self._client.complete(
                build_depth_messages(source_text, candidate.skills),
                temperature=0.2,
                max_tokens=1000,
                timeout_s=spec.timeout_s if spec else 30.0,
                json_mode=True,
            )
            return parse_json_object(completion.text, provider_id=spec.provider_id if spec else None)
        except Exception as exc:
            raise AuxiliaryAnalysisUnavailable(str(exc) or exc.__class__.__name__) from exc

    def _check_technical_depth(self, source_text: str, candidate: CandidateRecord, findings: _Findings) -> None:
        analysis = self._request_depth_analysis(source_text, candidate)

        depth = analysis.get("technical_depth")
        if depth in ("superficial", "moderate", "deep"):
            findings.signals.technical_depth = depth
        if depth == "superficial":
            findings.signals.ai_generated_probability += 40
            findings.flag(
                "Lacks Technical Depth",
                "high",
                "Resume mentions skills but lacks specific details that demonstrate real experience",
            )
            findings.verification_questions.extend(
                [
                    "Walk me through the architecture of your most complex project",
                    "What specific challenges did you solve that required your core skills?",
                    "Explain a technical decision you made and why",
                ]
            )

        if not analysis.get("has_concrete_metrics"):
            findings.signals.ai_generated_probability += 20
            findings.flag(
                "No Quantifiable Results",
                "medium",
                "Resume lacks specific metrics or measurable achievements",
            )
        else:
            findings.green_flags.append("Includes specific, quantifiable achievements")

        patterns = analysis.get("suspicious_patterns")
        if isinstance(patterns, list):
            for pattern in [p for p in patterns if isinstance(p, str) and p.strip()][:_MAX_SUSPICIOUS_PATTERNS]:
                findings.flag("Suspicious Pattern", "medium", pattern.strip())

    def _check_contact(self, text_lower: str, candidate: CandidateRecord, findings: _Findings) -> bool:
        if not candidate.email or not candidate.phone:
            findings.signals.verification_issues.append("Missing contact information")

        if candidate.email and "@" in candidate.email:
            domain = candidate.email.rsplit("@", 1)[1].lower()
            if any(marker in domain for marker in self._config.disposable_email_domains):
                findings.flag(
                    "Disposable Email",
                    "high",
                    "Using a temporary email service - red flag for authenticity",
                )

        has_linkedin = "linkedin.com" in text_lower
        has_github = "github.com" in text_lower
        has_portfolio = "portfolio" in text_lower or "website" in text_lower
        if not (has_linkedin or has_github or has_portfolio):
            findings.signals.verification_issues.append("No online presence (LinkedIn/GitHub/Portfolio)")
            findings.flag(
                "No Digital Footprint",
                "medium",
                "No LinkedIn, GitHub, or portfolio links - harder to verify",
            )
        else:
            findings.green_flags.append("Provides online profiles for verification")
        return has_linkedin

    def _aggregate(self, findings: _Findings) -> int:
        signals = findings.signals
        signals.ai_generated_probability = min(100, signals.ai_generated_probability)
        signals.inconsistencies = min(100, signals.inconsistencies)

        score = 100.0
        for red_flag in findings.red_flags:
            score -= self._config.flag_deductions.get(red_flag.severity, 0)
        weights = self._config.signal_weights
        score -= signals.ai_generated_probability * weights.get("ai_generated_probability", 0)
        score -= signals.over_optimization * weights.get("over_optimization", 0)
        score -= signals.generic_language * weights.get("generic_language", 0)
        score -= signals.inconsistencies * weights.get("inconsistencies", 0)
        score += len(findings.green_flags) * self._config.green_flag_bonus
        return int(math.floor(max(0.0, min(100.0, score)) + 0.5))

    def _risk_level(self, score: int, red_flags: list[RedFlag]) -> str:
        thresholds = self._config.risk_thresholds
        if score >= thresholds["low"]:
            risk = "LOW"
        elif score >= thresholds["medium"]:
            risk = "MEDIUM"
        elif score >= thresholds["high"]:
            risk = "HIGH"
        else:
            risk = "CRITICAL"

        floored = any(flag.flag in self._config.risk_floor_flags for flag in red_flags)
        if risk == "LOW" and floored:
            return "MEDIUM"
        return risk

    def _recommendations(
        self,
        risk_level: str,
        signals: AuthenticitySignals,
        has_linkedin: bool,
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []
        if risk_level in ("CRITICAL", "HIGH"):
            recommendations.append(
                Recommendation(action="Require a technical screening test before the interview", priority="high")
            )
            recommendations.append(
                Recommendation(action="Verify employment history with previous employers", priority="high")
            )
        if signals.ai_generated_probability > 60:
            recommendations.append(
                Recommendation(action="Ask for GitHub contributions or code samples", priority="high")
            )
        if signals.over_optimization > 80:
            recommendations.append(
                Recommendation(action="Request the original version of the resume (before tailoring)", priority="medium")
            )
        if not has_linkedin:
            recommendations.append(
                Recommendation(action="Request a LinkedIn profile for background verification", priority="medium")
            )
        recommendations.append(
            Recommendation(action="Use behavioral interview questions to verify real experience", priority="high")
        )
        return recommendations


def build_authenticity_analyzer() -> AuthenticityAnalyzer:
    config = load_authenticity_config()
    provider_id = settings.authenticity_provider or get_scoring_value("authenticity.provider")
    if not provider_id:
        return AuthenticityAnalyzer(config=config)
    spec = load_provider_spec(str(provider_id))
    return AuthenticityAnalyzer(client=try_get_ai_client(spec), spec=spec, config=config)
