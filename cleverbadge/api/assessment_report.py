import os

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from cleverbadge.api.deps import http_error, parse_uuid
from cleverbadge.core.config import settings
from cleverbadge.core.errors import AssessmentNotCompleted, AssessmentNotFound
from cleverbadge.db.session import get_db
from cleverbadge.models.assessment import STATUS_COMPLETED, Assessment
from cleverbadge.reports.report_builder import generate_assessment_report
from cleverbadge.reports.report_docx import generate_report_docx
from cleverbadge.services.assessment import AssessmentService

router = APIRouter(prefix="/assessments", tags=["Assessment Reports"])


@router.get("/{assessment_id}/report")
def get_or_download_report(
    assessment_id: str,
    download: bool = Query(False, description="Set true to download report"),
    db: Session = Depends(get_db)
):
    # ---------------------------------
    # 1. Validate assessment
    # ---------------------------------
    assessment_uuid = parse_uuid(assessment_id, "assessment")

    assessment = db.query(Assessment).filter(Assessment.id == assessment_uuid).first()
    if not assessment:
        raise http_error(AssessmentNotFound("Assessment not found"))

    if assessment.status != STATUS_COMPLETED:
        raise http_error(AssessmentNotCompleted("Assessment has not been submitted"))

    # ---------------------------------
    # 2. Build report from the snapshot
    # ---------------------------------
    report = generate_assessment_report(
        assessment,
        assessment.test,
        AssessmentService.score_of(assessment),
    )

    # ---------------------------------
    # 3. DOWNLOAD MODE
    # ---------------------------------
    if download:
        os.makedirs(settings.REPORTS_DIR, exist_ok=True)
        file_path = os.path.join(settings.REPORTS_DIR, f"assessment_report_{assessment.id}.docx")
        generate_report_docx(report, file_path)

        return FileResponse(
            path=file_path,
            filename=os.path.basename(file_path),
            media_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        )

    # ---------------------------------
    # 4. JSON MODE (UI VIEW)
    # ---------------------------------
    return report
