from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from app.ai.errors import SchemaError
from app.ai.types import EntityKind
from app.schemas.candidate import CandidateRecord, ParseStatus
from app.schemas.job import JobProfile

_CANDIDATE_FIELDS = (
    "name",
    "email",
    "phone",
    "location",
    "title",
    "summary",
    "years_of_experience",
    "skills",
    "experience",
    "education",
    "certifications",
    "languages",
)
_LOCATION_TYPES = {"remote", "hybrid", "onsite", "any"}
_SENIORITY_LEVELS = {"intern", "junior", "mid", "senior", "lead", "executive"}


def infer_seniority_from_experience(years: float) -> str:
    if years <= 0:
        return "intern"
    if years <= 2:
        return "junior"
    if years <= 5:
        return "mid"
    if years <= 8:
        return "senior"
    if years <= 12:
        return "lead"
    return "executive"


def _as_number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _objects_only(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def build_candidate_record(
    raw_output: Mapping[str, Any],
    *,
    parse_confidence: int = 0,
    parse_status: ParseStatus = "processing",
    parse_method: str | None = None,
    file_name: str | None = None,
) -> CandidateRecord:
    payload: dict[str, Any] = {key: raw_output.get(key) for key in _CANDIDATE_FIELDS}
    payload["name"] = str(payload.get("name") or "").strip()
    for key in ("experience", "education", "certifications"):
        payload[key] = _objects_only(payload.get(key))
    if not isinstance(payload.get("email"), str):
        payload["email"] = None
    try:
        return CandidateRecord(
            **payload,
            parse_confidence=parse_confidence,
            parse_status=parse_status,
            parse_method=parse_method,
            file_name=file_name,
        )
    except ValidationError as exc:
        raise SchemaError(f"Extracted resume does not match the candidate schema: {exc.error_count()} errors") from exc


def build_job_profile(
    raw_output: Mapping[str, Any],
    *,
    parse_confidence: int = 0,
    parse_status: ParseStatus = "processing",
    parse_method: str | None = None,
) -> JobProfile:
    min_experience = max(0.0, _as_number(raw_output.get("min_experience"), 0.0))
    max_raw = raw_output.get("max_experience")
    max_experience = _as_number(max_raw, min_experience + 5) if max_raw is not None else min_experience + 5

    location_type = str(raw_output.get("location_type") or "any").strip().lower()
    if location_type not in _LOCATION_TYPES:
        location_type = "any"
    seniority = str(raw_output.get("seniority_level") or "").strip().lower()
    if seniority not in _SENIORITY_LEVELS:
        seniority = infer_seniority_from_experience(min_experience)

    try:
        return JobProfile(
            title=str(raw_output.get("title") or "Unknown Position").strip(),
            required_skills=raw_output.get("required_skills"),
            preferred_skills=raw_output.get("preferred_skills"),
            min_experience=min_experience,
            max_experience=max_experience,
            education_level=raw_output.get("education_level") if isinstance(raw_output.get("education_level"), str) else None,
            location_type=location_type,
            locations=raw_output.get("locations"),
            seniority_level=seniority,
            industry=raw_output.get("industry") if isinstance(raw_output.get("industry"), str) else None,
            key_responsibilities=raw_output.get("key_responsibilities"),
            must_have_requirements=raw_output.get("must_have_requirements"),
            nice_to_have=raw_output.get("nice_to_have"),
            deal_breakers=raw_output.get("deal_breakers"),
            parse_confidence=parse_confidence,
            parse_status=parse_status,
            parse_method=parse_method,
        )
    except ValidationError as exc:
        raise SchemaError(f"Extracted job does not match the job schema: {exc.error_count()} errors") from exc


def build_record(
    kind: EntityKind,
    raw_output: Mapping[str, Any],
    *,
    parse_confidence: int = 0,
    parse_status: ParseStatus = "processing",
    parse_method: str | None = None,
    file_name: str | None = None,
) -> CandidateRecord | JobProfile:
    if kind == "resume":
        return build_candidate_record(
            raw_output,
            parse_confidence=parse_confidence,
            parse_status=parse_status,
            parse_method=parse_method,
            file_name=file_name,
        )
    return build_job_profile(
        raw_output,
        parse_confidence=parse_confidence,
        parse_status=parse_status,
        parse_method=parse_method,
    )
