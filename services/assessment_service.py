from __future__ import annotations

import json
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from models.assessment import Assessment
from schemas.analysis import AnalysisResult
from schemas.assessment import AssessmentCreate, AssessmentResponse, FormData, PainPoint
from schemas.diary import DiaryAssessmentContext

logger = logging.getLogger(__name__)

EXPORT_DISCLAIMER = "Informational self-assessment only. Not a diagnosis or a substitute for professional medical advice."


def create_assessment(db: Session, payload: AssessmentCreate) -> Assessment:
    a = Assessment(
        selected_muscles_json=json.dumps(payload.selected_muscles),
        pain_points_json=json.dumps([p.model_dump() for p in payload.pain_points]),
        form_data_json=payload.form_data.model_dump_json(by_alias=True),
        analysis_json=payload.analysis.model_dump_json(by_alias=True) if payload.analysis else None,
    )
    if payload.created_at:
        a.created_at = payload.created_at
    db.add(a)
    db.commit()
    db.refresh(a)
    logger.info("Saved assessment %s (%d muscles)", a.id, len(payload.selected_muscles))
    return a


def list_assessments(db: Session) -> list[Assessment]:
    return db.query(Assessment).order_by(Assessment.created_at.desc()).all()


def get_assessment(db: Session, assessment_id: str) -> Assessment | None:
    return db.query(Assessment).filter(Assessment.id == assessment_id).first()


def delete_assessment(db: Session, a: Assessment) -> None:
    db.delete(a)
    db.commit()
    logger.info("Deleted assessment %s", a.id)


def _analysis(a: Assessment) -> AnalysisResult | None:
    return AnalysisResult.model_validate_json(a.analysis_json) if a.analysis_json else None


def to_response(a: Assessment) -> AssessmentResponse:
    return AssessmentResponse(
        id=str(a.id),
        selected_muscles=json.loads(a.selected_muscles_json or "[]"),
        pain_points=[PainPoint.model_validate(p) for p in json.loads(a.pain_points_json or "[]")],
        form_data=FormData.model_validate_json(a.form_data_json),
        analysis=_analysis(a),
        created_at=a.created_at,
    )


def to_diary_context(a: Assessment) -> DiaryAssessmentContext:
    form = FormData.model_validate_json(a.form_data_json)
    return DiaryAssessmentContext(
        selected_muscles=json.loads(a.selected_muscles_json or "[]"),
        pain_level=form.pain_level,
        goals=form.goals,
        story=form.story,
        triggers_and_relief=form.triggers_and_relief,
        analysis=json.loads(a.analysis_json) if a.analysis_json else None,
        created_at=a.created_at,
    )


def build_assessment_export_json(a: Assessment) -> dict:
    return {
        "disclaimer": EXPORT_DISCLAIMER,
        "exportedAt": datetime.utcnow().isoformat(),
        "assessment": to_response(a).model_dump(mode="json", by_alias=True),
    }
