from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .candidate import ParseStatus, _clean_string_list

LocationType = Literal["remote", "hybrid", "onsite", "any"]
SeniorityLevel = Literal["intern", "junior", "mid", "senior", "lead", "executive"]


class JobProfile(BaseModel):
    title: str
    required_skills: list[str] = Field(default_factory=list)
    preferred_skills: list[str] = Field(default_factory=list)
    min_experience: float = Field(default=0, ge=0)
    max_experience: float | None = None
    education_level: str | None = None
    location_type: LocationType = "any"
    locations: list[str] = Field(default_factory=list)
    seniority_level: SeniorityLevel = "mid"
    industry: str | None = None
    key_responsibilities: list[str] = Field(default_factory=list)
    must_have_requirements: list[str] = Field(default_factory=list)
    nice_to_have: list[str] = Field(default_factory=list)
    deal_breakers: list[str] = Field(default_factory=list)

    parse_confidence: int = Field(default=0, ge=0, le=100)
    parse_status: ParseStatus = "processing"
    parse_method: str | None = None

    @field_validator(
        "required_skills",
        "preferred_skills",
        "locations",
        "key_responsibilities",
        "must_have_requirements",
        "nice_to_have",
        "deal_breakers",
        mode="before",
    )
    @classmethod
    def _validate_lists(cls, value: Any) -> list[str]:
        return _clean_string_list(value)

    @field_validator("location_type", "seniority_level", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value
