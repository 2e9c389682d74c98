from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .candidate import CandidateRecord
from .job import JobProfile

ParseOutcomeStatus = Literal["accepted", "needs_review", "failed"]
ParseQuality = Literal["excellent", "good", "acceptable", "poor"]


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ParseAttempt(BaseModel):
    provider_id: str
    model: str
    raw_output: dict[str, Any] = Field(default_factory=dict)
    raw_text: str = ""
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    cost_estimate: float = 0.0
    latency_ms: int = 0


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    confidence: int = Field(ge=0, le=100)
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


class ValidationSummary(BaseModel):
    parse_quality: ParseQuality
    ready_for_matching: bool
    requires_review: bool
    user_message: str
    technical_details: ValidationResult


class ParseOutcome(BaseModel):
    status: ParseOutcomeStatus
    record: Union[CandidateRecord, JobProfile, None] = None
    confidence: int = 0
    validation_summary: ValidationSummary | None = None
    provider_id: str | None = None
    attempts_made: int = 0
    warning: str | None = None
    error: str | None = None
    token_usage: TokenUsage | None = None
    cost_estimate: float | None = None
    latency_ms: int | None = None


class BatchItem(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    text: str = Field(default="", max_length=200000)


class BatchItemResult(BaseModel):
    file_name: str
    status: Literal["success", "needs_review", "error"]
    outcome: ParseOutcome | None = None
    error: str | None = None


class BatchReport(BaseModel):
    total: int
    succeeded: int
    needs_review: int
    failed: int
    results: list[BatchItemResult] = Field(default_factory=list)
