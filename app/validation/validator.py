"""Deterministic cross-check of extracted output against its source text.

Every model response is treated as untrusted input: the validator only looks at
plain mappings and tolerates any shape, so a malformed extraction costs
confidence instead of raising.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping

from app.ai.types import EntityKind
from app.core.config.scoring import get_scoring_value
from app.schemas.parsing import ValidationResult, ValidationSummary

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SKILL_CHARS_RE = re.compile(r"^[A-Za-z0-9\s.\-+#/&()]+$")
_PLACEHOLDER_NAMES = ("unknown", "candidate", "n/a", "full name", "your name", "first last")
_PLACEHOLDER_TITLES = ("unknown", "n/a", "job title", "position")
_DISPLAY_LIMIT = 3


@dataclass(frozen=True)
class ValidationThresholds:
    resume: int = 70
    job: int = 75

    def for_kind(self, kind: EntityKind) -> int:
        return self.resume if kind == "resume" else self.job


@dataclass(frozen=True)
class ValidationRules:
    min_skills: int = 3
    resume_skill_verification_ratio: float = 0.5
    max_years_of_experience: float = 50
    min_required_skills: int = 3
    job_skill_verification_ratio: float = 0.7
    max_min_experience: float = 30
    short_text_chars: int = 100


def load_validation_thresholds() -> ValidationThresholds:
    return ValidationThresholds(
        resume=int(get_scoring_value("parsing.resume.min_confidence", 70)),
        job=int(get_scoring_value("parsing.job.min_confidence", 75)),
    )


def load_validation_rules() -> ValidationRules:
    defaults = ValidationRules()
    return ValidationRules(
        min_skills=int(get_scoring_value("validation.resume.min_skills", defaults.min_skills)),
        resume_skill_verification_ratio=float(
            get_scoring_value("validation.resume.skill_verification_ratio", defaults.resume_skill_verification_ratio)
        ),
        max_years_of_experience=float(
            get_scoring_value("validation.resume.max_years_of_experience", defaults.max_years_of_experience)
        ),
        min_required_skills=int(get_scoring_value("validation.job.min_required_skills", defaults.min_required_skills)),
        job_skill_verification_ratio=float(
            get_scoring_value("validation.job.skill_verification_ratio", defaults.job_skill_verification_ratio)
        ),
        max_min_experience=float(get_scoring_value("validation.job.max_min_experience", defaults.max_min_experience)),
    )


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _string_items(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _mapping_items(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def _verified(items: list[str], source_lower: str) -> list[str]:
    return [item for item in items if item.lower() in source_lower]


def _finalize(
    kind: EntityKind,
    confidence: int,
    errors: list[str],
    warnings: list[str],
    suggestions: list[str],
    threshold: int,
) -> ValidationResult:
    confidence = max(0, min(100, confidence))
    valid = not errors and confidence >= threshold
    logger.info(
        "parse_validation kind=%s valid=%s confidence=%s errors=%s warnings=%s",
        kind,
        valid,
        confidence,
        len(errors),
        len(warnings),
    )
    return ValidationResult(
        valid=valid,
        confidence=confidence,
        errors=tuple(errors),
        warnings=tuple(warnings),
        suggestions=tuple(dict.fromkeys(suggestions)),
    )


def validate_resume_parse(
    source_text: str,
    output: Mapping[str, Any],
    *,
    threshold: int = 70,
    rules: ValidationRules | None = None,
) -> ValidationResult:
    rules = rules or ValidationRules()
    output = output if isinstance(output, Mapping) else {}
    source_lower = (source_text or "").lower()
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []
    confidence = 100

    name = _text(output.get("name"))
    if len(name) < 2:
        errors.append("CRITICAL: No name extracted")
        confidence -= 40
    else:
        if any(marker in name.lower() for marker in _PLACEHOLDER_NAMES):
            errors.append(f'CRITICAL: Name is a placeholder ("{name}")')
            confidence -= 30
        if not re.search(r"\s", name):
            warnings.append("Name might be incomplete (missing last name?)")
            confidence -= 10
        if name.lower() not in source_lower:
            errors.append("CRITICAL: Extracted name not found in source text")
            confidence -= 25

    skills = _string_items(output.get("skills"))
    if len(skills) < rules.min_skills:
        errors.append(f"CRITICAL: Insufficient skills extracted (minimum {rules.min_skills} required)")
        confidence -= 30
    else:
        suspicious = [s for s in skills if len(s) < 2 or len(s) > 50 or not _SKILL_CHARS_RE.match(s)]
        if suspicious:
            warnings.append(f"Suspicious skills detected: {', '.join(suspicious[:_DISPLAY_LIMIT])}")
            confidence -= 10
        verified = _verified(skills, source_lower)
        if len(verified) < len(skills) * rules.resume_skill_verification_ratio:
            warnings.append(f"Only {len(verified)}/{len(skills)} skills verified in text")
            confidence -= 15

    experience = _mapping_items(output.get("experience"))
    if not experience:
        warnings.append("No work experience extracted")
        confidence -= 15
    for index, entry in enumerate(experience, start=1):
        if len(_text(entry.get("title"))) < 2:
            warnings.append(f"Experience #{index}: Missing job title")
            confidence -= 5
        if len(_text(entry.get("company"))) < 2:
            warnings.append(f"Experience #{index}: Missing company name")
            confidence -= 5
        if not entry.get("start_date"):
            warnings.append(f"Experience #{index}: Missing start date")
            confidence -= 3

    email = _text(output.get("email"))
    phone = _text(output.get("phone"))
    if not email and not phone:
        warnings.append("No contact information extracted (email or phone)")
        suggestions.append("Consider asking the candidate to add contact details to the resume")
    if email and not is_valid_email(email):
        errors.append("CRITICAL: Invalid email format extracted")
        confidence -= 15

    education = _mapping_items(output.get("education"))
    if not education:
        warnings.append("No education extracted")

    years_raw = output.get("years_of_experience")
    if years_raw is not None:
        years = _number(years_raw)
        if years is None or years < 0 or years > rules.max_years_of_experience:
            errors.append(f"CRITICAL: Invalid years of experience ({years_raw})")
            confidence -= 20

    if len((source_text or "").strip()) < rules.short_text_chars:
        warnings.append(f"Source text is very short (< {rules.short_text_chars} characters)")

    data_points = (
        len(skills) + len(experience) + len(education) + len(_mapping_items(output.get("certifications")))
    )
    if data_points < 5:
        warnings.append("Very little data extracted - the resume may be poorly formatted")
        suggestions.append("Try uploading a different format (PDF to DOCX or vice versa)")

    valid_so_far = not errors and max(0, confidence) >= threshold
    if not valid_so_far:
        if any("name" in e.lower() for e in errors):
            suggestions.append("Ensure the resume has a clear name at the top")
        if any("skills" in e.lower() for e in errors):
            suggestions.append('Add a "Skills" section with clear technical abilities')
        if confidence < 60:
            suggestions.append("Try re-exporting the resume as a clean PDF from Word or Google Docs")
            suggestions.append("Remove images, complex formatting and tables")

    return _finalize("resume", confidence, errors, warnings, suggestions, threshold)


def validate_job_analysis(
    source_text: str,
    output: Mapping[str, Any],
    *,
    threshold: int = 75,
    rules: ValidationRules | None = None,
) -> ValidationResult:
    rules = rules or ValidationRules()
    output = output if isinstance(output, Mapping) else {}
    source_lower = (source_text or "").lower()
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []
    confidence = 100

    title = _text(output.get("title"))
    if len(title) < 3 or title.lower() in _PLACEHOLDER_TITLES or title.lower() == "unknown position":
        errors.append("CRITICAL: No job title extracted")
        confidence -= 40

    required = _string_items(output.get("required_skills"))
    if len(required) < rules.min_required_skills:
        errors.append(f"CRITICAL: Too few required skills extracted (minimum {rules.min_required_skills})")
        confidence -= 30
        suggestions.append('Add a clear "Requirements" or "Qualifications" section')
    else:
        verified = _verified(required, source_lower)
        if len(verified) < len(required) * rules.job_skill_verification_ratio:
            warnings.append(
                f"Only {len(verified)}/{len(required)} required skills are clearly stated in the job description"
            )
            confidence -= 15

    min_experience = _number(output.get("min_experience"))
    if min_experience is None or min_experience < 0:
        warnings.append("No minimum experience requirement found")
        confidence -= 10
    elif min_experience > rules.max_min_experience:
        errors.append(f"CRITICAL: Unrealistic experience requirement ({output.get('min_experience')} years)")
        confidence -= 20

    max_experience = _number(output.get("max_experience"))
    if max_experience is not None and min_experience is not None and max_experience < min_experience:
        warnings.append("Maximum experience is lower than the minimum")
        confidence -= 5

    if not _text(output.get("location_type")):
        warnings.append("Location type not specified (remote/hybrid/onsite)")
        confidence -= 5

    if not _text(output.get("seniority_level")):
        warnings.append("Seniority level not determined")
        confidence -= 5

    if len((source_text or "").strip()) < rules.short_text_chars:
        warnings.append(f"Job description is very short (< {rules.short_text_chars} characters)")

    if errors or max(0, confidence) < threshold:
        suggestions.append("Include clear sections: Requirements, Responsibilities, Qualifications")
        suggestions.append('List specific technical skills (e.g. "Python", "AWS", not just "coding")')

    return _finalize("job", confidence, errors, warnings, suggestions, threshold)


def validate(
    kind: EntityKind,
    source_text: str,
    output: Mapping[str, Any],
    *,
    thresholds: ValidationThresholds | None = None,
    rules: ValidationRules | None = None,
) -> ValidationResult:
    thresholds = thresholds or ValidationThresholds()
    if kind == "resume":
        return validate_resume_parse(source_text, output, threshold=thresholds.resume, rules=rules)
    if kind == "job":
        return validate_job_analysis(source_text, output, threshold=thresholds.job, rules=rules)
    raise ValueError(f"Unsupported entity kind '{kind}'")


def _parse_quality(confidence: int) -> str:
    if confidence >= 90:
        return "excellent"
    if confidence >= 75:
        return "good"
    if confidence >= 60:
        return "acceptable"
    return "poor"


def generate_user_feedback(validation: ValidationResult, kind: EntityKind) -> str:
    label = "resume" if kind == "resume" else "job description"
    confidence = validation.confidence
    if confidence >= 90:
        lines = [
            f"Excellent Quality ({confidence}% confidence)",
            f"The {label} was understood with high accuracy. All key information was extracted.",
        ]
    elif confidence >= 75:
        lines = [
            f"Good Quality ({confidence}% confidence)",
            "Most information was extracted correctly, with minor issues:",
        ]
    elif confidence >= 60:
        lines = [f"Acceptable Quality ({confidence}% confidence)", "Extraction had some difficulty. Review recommended:"]
    else:
        lines = [
            f"Poor Quality ({confidence}% confidence)",
            "Information could not be extracted reliably. Action required:",
        ]

    if validation.errors:
        lines.append("")
        lines.append("Issues Found:")
        lines.extend(f"- {error}" for error in validation.errors)
    if validation.warnings and confidence >= 60:
        lines.append("")
        lines.append("Minor Issues:")
        lines.extend(f"- {warning}" for warning in validation.warnings[:_DISPLAY_LIMIT])
    if validation.suggestions:
        lines.append("")
        lines.append("Suggestions for Improvement:")
        lines.extend(f"- {suggestion}" for suggestion in validation.suggestions)
    return "\n".join(lines).strip()


def create_validation_summary(validation: ValidationResult, kind: EntityKind) -> ValidationSummary:
    return ValidationSummary(
        parse_quality=_parse_quality(validation.confidence),
        ready_for_matching=validation.valid,
        requires_review=not validation.valid,
        user_message=generate_user_feedback(validation, kind),
        technical_details=validation,
    )
