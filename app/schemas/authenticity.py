from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .candidate import RiskLevel

Severity = Literal["low", "medium", "high"]
Priority = Literal["high", "medium", "low"]
TechnicalDepth = Literal["superficial", "moderate", "deep"]


class AuthenticitySignals(BaseModel):
    ai_generated_probability: float = 0
    over_optimization: float = 0
    generic_language: float = 0
    inconsistencies: float = 0
    verification_issues: list[str] = Field(default_factory=list)
    technical_depth: TechnicalDepth | None = None


class RedFlag(BaseModel):
    flag: str
    severity: Severity
    explanation: str


class Recommendation(BaseModel):
    action: str
    priority: Priority


class AuthenticityReport(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    signals: AuthenticitySignals
    red_flags: list[RedFlag] = Field(default_factory=list)
    green_flags: list[str] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    verification_questions: list[str] = Field(default_factory=list)


class QuickAuthenticityCheck(BaseModel):
    score: int
    risk_level: RiskLevel
    top_issues: list[str] = Field(default_factory=list)
