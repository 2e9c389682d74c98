from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

ParseStatus = Literal["processing", "completed", "needs_review", "failed"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]


def _clean_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


class Experience(BaseModel):
    title: str | None = None
    company: str | None = None
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration: str | None = None
    description: str | None = None
    achievements: list[str] = Field(default_factory=list)
    skills_used: list[str] = Field(default_factory=list)

    @field_validator("start_date", "end_date", "duration", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("achievements", "skills_used", mode="before")
    @classmethod
    def _validate_lists(cls, value: Any) -> list[str]:
        return _clean_string_list(value)


class Education(BaseModel):
    degree: str | None = None
    field_of_study: str | None = None
    institution: str | None = None
    location: str | None = None
    start_year: str | None = None
    end_year: str | None = None
    gpa: str | None = None
    achievements: list[str] = Field(default_factory=list)

    @field_validator("start_year", "end_year", "gpa", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def _validate_lists(cls, value: Any) -> list[str]:
        return _clean_string_list(value)


class Certification(BaseModel):
    name: str | None = None
    issuer: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None
    credential_id: str | None = None
    credential_url: str | None = None

    @field_validator("issue_date", "expiry_date", "credential_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)


class CandidateRecord(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    title: str | None = None
    summary: str = ""
    years_of_experience: float = 0
    skills: list[str] = Field(default_factory=list)
    experience: list[Experience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    certifications: list[Certification] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)

    parse_confidence: int = Field(default=0, ge=0, le=100)
    parse_status: ParseStatus = "processing"
    parse_method: str | None = None
    file_name: str | None = None

    authenticity_score: int | None = None
    authenticity_risk: RiskLevel | None = None
    authenticity_report: dict[str, Any] | None = None

    @field_validator("skills", "languages", mode="before")
    @classmethod
    def _validate_lists(cls, value: Any) -> list[str]:
        return _clean_string_list(value)

    @field_validator("phone", "location", "title", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _validate_summary(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _validate_years(cls, value: Any) -> float:
        return 0 if value is None or value == "" else value
