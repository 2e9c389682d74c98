from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from app.api.dependencies import get_matching_rules
from app.core.rate_limit import rate_limit
from app.matching.engine import MatchingRules, rank_candidates
from app.schemas.candidate import CandidateRecord
from app.schemas.job import JobProfile
from app.schemas.match import MatchResult

router = APIRouter()


class MatchRequest(BaseModel):
    job: JobProfile
    candidates: list[CandidateRecord] = Field(default_factory=list, max_length=1000)
    min_score: int = Field(default=0, ge=0, le=100)
    max_results: int = Field(default=100, ge=1, le=1000)


@router.post("/match", response_model=list[MatchResult])
@rate_limit()
def match_candidates(
    request: Request,
    payload: MatchRequest,
    rules: MatchingRules = Depends(get_matching_rules),
):
    _ = request
    return rank_candidates(
        payload.candidates,
        payload.job,
        min_score=payload.min_score,
        max_results=payload.max_results,
        rules=rules,
    )
