from fastapi import APIRouter, HTTPException, status

from api.deps import AssessmentDep, DbDep, DiaryServiceDep
from schemas.diary import (
    DiaryEntryCreate,
    DiaryEntryListResponse,
    DiaryEntryResponse,
    DiaryEntryUpdate,
    DiaryFeedbackRequest,
    DiaryFeedbackResponse,
    DiaryInsights,
    DiaryInsightsRequest,
    FollowUpCreate,
)
from services import diary_entry_service
from services.assessment_service import get_assessment

router = APIRouter()


@router.post("/diary/ai-feedback", response_model=DiaryFeedbackResponse)
def diary_ai_feedback(payload: DiaryFeedbackRequest, service: DiaryServiceDep):
    return DiaryFeedbackResponse(feedback=service.get_feedback(payload))


@router.post("/diary/insights", response_model=DiaryInsights)
def diary_insights(payload: DiaryInsightsRequest, service: DiaryServiceDep):
    return service.get_insights(payload.entries, payload.assessment)


@router.get("/assessments/{assessment_id}/diary", response_model=DiaryEntryListResponse)
def list_diary_entries(a: AssessmentDep, db: DbDep):
    entries = diary_entry_service.list_entries(db, a.id)
    return DiaryEntryListResponse(entries=[diary_entry_service.to_response(e) for e in entries])


@router.post(
    "/assessments/{assessment_id}/diary",
    response_model=DiaryEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_diary_entry(payload: DiaryEntryCreate, a: AssessmentDep, db: DbDep, service: DiaryServiceDep):
    e = diary_entry_service.create_entry(db, a, payload, feedback_service=service)
    return diary_entry_service.to_response(e)


def _entry_or_404(db, entry_id: str):
    e = diary_entry_service.get_entry(db, entry_id)
    if not e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Diary entry not found.")
    return e


@router.patch("/diary/{entry_id}", response_model=DiaryEntryResponse)
def update_diary_entry(entry_id: str, payload: DiaryEntryUpdate, db: DbDep):
    e = _entry_or_404(db, entry_id)
    return diary_entry_service.to_response(diary_entry_service.update_entry_text(db, e, payload.entry_text))


@router.delete("/diary/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_diary_entry(entry_id: str, db: DbDep):
    diary_entry_service.delete_entry(db, _entry_or_404(db, entry_id))


@router.post("/diary/{entry_id}/follow-up", response_model=DiaryEntryResponse)
def add_follow_up(entry_id: str, payload: FollowUpCreate, db: DbDep, service: DiaryServiceDep):
    e = _entry_or_404(db, entry_id)
    a = get_assessment(db, e.assessment_id)
    e = diary_entry_service.add_follow_up(db, e, a, payload.question, feedback_service=service)
    return diary_entry_service.to_response(e)
