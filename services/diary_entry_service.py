from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from models.assessment import Assessment
from models.diary import DiaryEntry
from schemas.diary import DiaryEntryCreate, DiaryEntryResponse, DiaryFeedbackRequest, FollowUp, RecentEntry
from services.assessment_service import to_diary_context
from services.diary_service import DiaryFeedbackService
from services.errors import AnalysisError, FollowUpExists

logger = logging.getLogger(__name__)

RECENT_ENTRY_LIMIT = 10


def list_entries(db: Session, assessment_id: str) -> list[DiaryEntry]:
    return (
        db.query(DiaryEntry)
        .filter(DiaryEntry.assessment_id == assessment_id)
        .order_by(DiaryEntry.created_at.desc())
        .all()
    )


def get_entry(db: Session, entry_id: str) -> DiaryEntry | None:
    return db.query(DiaryEntry).filter(DiaryEntry.id == entry_id).first()


def to_recent(e: DiaryEntry) -> RecentEntry:
    return RecentEntry(entry_type=e.entry_type, pain_level=e.pain_level, entry_text=e.entry_text, created_at=e.created_at)


def to_response(e: DiaryEntry) -> DiaryEntryResponse:
    follow_up = FollowUp.model_validate_json(e.follow_up_json) if e.follow_up_json else None
    return DiaryEntryResponse(
        id=str(e.id),
        assessment_id=str(e.assessment_id),
        entry_type=e.entry_type,
        pain_level=e.pain_level,
        sentiment=e.sentiment,
        entry_text=e.entry_text,
        ai_response=e.ai_response,
        follow_up=follow_up,
        created_at=e.created_at,
    )


def create_entry(
    db: Session,
    a: Assessment,
    payload: DiaryEntryCreate,
    feedback_service: DiaryFeedbackService | None = None,
) -> DiaryEntry:
    recent = [to_recent(e) for e in list_entries(db, a.id)[:RECENT_ENTRY_LIMIT]]

    e = DiaryEntry(
        assessment_id=a.id,
        entry_type=payload.entry_type,
        pain_level=payload.pain_level,
        sentiment=payload.sentiment,
        entry_text=payload.entry_text,
    )
    db.add(e)
    db.commit()
    db.refresh(e)

    if payload.request_ai_feedback and feedback_service is not None:
        request = DiaryFeedbackRequest(
            entry_type=payload.entry_type,
            entry_text=payload.entry_text,
            pain_level=payload.pain_level,
            sentiment=payload.sentiment,
            recent_entries=recent,
            assessment=to_diary_context(a),
        )
        try:
            e.ai_response = feedback_service.get_feedback(request)
        except AnalysisError as err:
            # The entry is already stored; it just goes without feedback.
            logger.warning("Diary feedback failed for entry %s: %s", e.id, err.message)
        else:
            db.commit()
            db.refresh(e)
    return e


def update_entry_text(db: Session, e: DiaryEntry, entry_text: str) -> DiaryEntry:
    e.entry_text = entry_text
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def delete_entry(db: Session, e: DiaryEntry) -> None:
    db.delete(e)
    db.commit()


def add_follow_up(
    db: Session,
    e: DiaryEntry,
    a: Assessment,
    question: str,
    feedback_service: DiaryFeedbackService,
) -> DiaryEntry:
    if e.follow_up_json:
        raise FollowUpExists()

    response: str | None
    try:
        response = feedback_service.answer_follow_up(
            entry_type=e.entry_type,
            entry_text=e.entry_text,
            ai_response=e.ai_response,
            question=question,
            assessment=to_diary_context(a),
        )
    except AnalysisError as err:
        logger.warning("Follow-up answer failed for entry %s: %s", e.id, err.message)
        response = None

    follow_up = FollowUp(question=question, response=response, created_at=datetime.utcnow())
    e.follow_up_json = follow_up.model_dump_json(by_alias=True)
    db.add(e)
    db.commit()
    db.refresh(e)
    return e
