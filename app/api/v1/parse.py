from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.api.dependencies import get_job_orchestrator, get_resume_orchestrator
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.parsing.batch import BatchTooLargeError
from app.parsing.orchestrator import FallbackOrchestrator
from app.parsing.service import analyze_job, parse_resume, parse_resume_batch
from app.schemas.parsing import BatchItem, BatchReport, ParseOutcome

router = APIRouter()


class ResumeParseRequest(BaseModel):
    text: str = Field(default="", max_length=200000)
    file_name: str | None = Field(default=None, max_length=255)


class JobParseRequest(BaseModel):
    text: str = Field(default="", max_length=200000)


class BulkParseRequest(BaseModel):
    items: list[BatchItem] = Field(default_factory=list)


def _respond(outcome: ParseOutcome):
    if outcome.status == "failed":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=outcome.model_dump(mode="json"),
        )
    return outcome


@router.post("/parse/resume", response_model=ParseOutcome)
@rate_limit()
def parse_resume_endpoint(
    request: Request,
    payload: ResumeParseRequest,
    orchestrator: FallbackOrchestrator = Depends(get_resume_orchestrator),
):
    _ = request
    return _respond(parse_resume(payload.text, payload.file_name, orchestrator=orchestrator))


@router.post("/parse/job", response_model=ParseOutcome)
@rate_limit()
def parse_job_endpoint(
    request: Request,
    payload: JobParseRequest,
    orchestrator: FallbackOrchestrator = Depends(get_job_orchestrator),
):
    _ = request
    return _respond(analyze_job(payload.text, orchestrator=orchestrator))


@router.post("/parse/bulk", response_model=BatchReport)
@rate_limit(settings.bulk_rate_limit)
def parse_bulk_endpoint(
    request: Request,
    payload: BulkParseRequest,
    orchestrator: FallbackOrchestrator = Depends(get_resume_orchestrator),
):
    _ = request
    if not payload.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")
    try:
        return parse_resume_batch(payload.items, orchestrator=orchestrator)
    except BatchTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
