from fastapi import APIRouter
from fastapi.responses import Response

from schemas.assessment import AssessmentCreate
from services.report_service import pdf_filename, render_assessment_pdf

router = APIRouter()


@router.post("/export-pdf")
def export_pdf(payload: AssessmentCreate):
    pdf = render_assessment_pdf(payload, payload.analysis)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename()}"'},
    )
