from fastapi import APIRouter, status
from fastapi.responses import Response

from api.deps import AssessmentDep, DbDep
from schemas.assessment import AssessmentCreate, AssessmentListResponse, AssessmentResponse
from services.assessment_service import (
    build_assessment_export_json,
    create_assessment,
    delete_assessment,
    list_assessments,
    to_response,
)
from services.report_service import pdf_filename, render_assessment_pdf

router = APIRouter()


@router.get("/assessments", response_model=AssessmentListResponse)
def get_assessments(db: DbDep):
    return AssessmentListResponse(assessments=[to_response(a) for a in list_assessments(db)])


@router.post("/assessments", response_model=AssessmentResponse, status_code=status.HTTP_201_CREATED)
def post_assessment(payload: AssessmentCreate, db: DbDep):
    return to_response(create_assessment(db, payload))


@router.get("/assessments/{assessment_id}", response_model=AssessmentResponse)
def get_one_assessment(a: AssessmentDep):
    return to_response(a)


@router.delete("/assessments/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_assessment(a: AssessmentDep, db: DbDep):
    delete_assessment(db, a)


@router.get("/assessments/{assessment_id}/export.json")
def export_assessment_json(a: AssessmentDep):
    return build_assessment_export_json(a)


@router.get("/assessments/{assessment_id}/pdf")
def export_assessment_pdf(a: AssessmentDep):
    data = to_response(a)
    pdf = render_assessment_pdf(data, data.analysis)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(data.created_at)}"'},
    )
