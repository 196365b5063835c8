from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.config import settings
from database.session import SessionLocal
from models.assessment import Assessment
from services.analysis_service import AnalysisService
from services.assessment_service import get_assessment
from services.diary_service import DiaryFeedbackService
from services.llm_client import LLMClient, get_llm_client
from services.rate_limiter import RateLimiter


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


DbDep = Annotated[Session, Depends(get_db)]
LLMDep = Annotated[LLMClient, Depends(get_llm_client)]


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


def get_client_key(request: Request) -> str:
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


ClientKeyDep = Annotated[str, Depends(get_client_key)]


def get_analysis_service(limiter: RateLimiterDep, llm: LLMDep) -> AnalysisService:
    return AnalysisService(rate_limiter=limiter, llm=llm)


def get_diary_service(llm: LLMDep) -> DiaryFeedbackService:
    return DiaryFeedbackService(llm=llm)


AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
DiaryServiceDep = Annotated[DiaryFeedbackService, Depends(get_diary_service)]


def get_assessment_or_404(assessment_id: str, db: DbDep) -> Assessment:
    a = get_assessment(db, assessment_id)
    if not a:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assessment not found.")
    return a


AssessmentDep = Annotated[Assessment, Depends(get_assessment_or_404)]
