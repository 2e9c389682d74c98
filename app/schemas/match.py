from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MatchTier = Literal["A", "B", "C", "D"]


class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate_name: str
    overall_score: int = Field(ge=0, le=100)
    tier: MatchTier
    matched_skills: tuple[str, ...] = ()
    missing_skills: tuple[str, ...] = ()
    matched_preferred_skills: tuple[str, ...] = ()
    skills_score: int = Field(default=0, ge=0, le=100)
    experience_score: int = Field(default=0, ge=0, le=100)
    explanation: str
