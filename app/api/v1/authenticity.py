from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from app.api.dependencies import get_authenticity_analyzer
from app.authenticity.analyzer import AuthenticityAnalyzer
from app.core.rate_limit import rate_limit
from app.schemas.authenticity import AuthenticityReport, QuickAuthenticityCheck
from app.schemas.candidate import CandidateRecord

router = APIRouter()


class AuthenticityRequest(BaseModel):
    resume_text: str = Field(default="", max_length=200000)
    candidate: CandidateRecord
    job_text: str | None = Field(default=None, max_length=200000)


@router.post("/authenticity", response_model=AuthenticityReport)
@rate_limit()
def check_authenticity(
    request: Request,
    payload: AuthenticityRequest,
    analyzer: AuthenticityAnalyzer = Depends(get_authenticity_analyzer),
):
    _ = request
    return analyzer.analyze(payload.resume_text, payload.candidate, payload.job_text)


@router.post("/authenticity/quick", response_model=QuickAuthenticityCheck)
@rate_limit()
def quick_authenticity_check(
    request: Request,
    payload: AuthenticityRequest,
    analyzer: AuthenticityAnalyzer = Depends(get_authenticity_analyzer),
):
    """Score and top three issues only; job text is ignored."""
    _ = request
    return analyzer.quick_check(payload.candidate, payload.resume_text or None)
