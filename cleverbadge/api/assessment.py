from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cleverbadge.api.deps import http_error, parse_uuid
from cleverbadge.core.errors import AssessmentError
from cleverbadge.db.session import get_db
from cleverbadge.schemas.assessment import (
    AnswerRequest,
    AnswerResponse,
    AnswersResponse,
    AssessmentDetailResponse,
    AssessmentListResponse,
    AssessmentStatusResponse,
    ResultsResponse,
    StartAssessmentRequest,
    StartAssessmentResponse,
    SubmitResponse,
)
from cleverbadge.services.assessment import AssessmentService

router = APIRouter(prefix="/assessments", tags=["Assessments"])


# -------------------------------------------------
# GET: list (admin)
# -------------------------------------------------

@router.get("", response_model=AssessmentListResponse)
def list_assessments(
    test_id: Optional[str] = Query(None),
    status: Optional[Literal["STARTED", "COMPLETED", "ABANDONED"]] = Query(None),
    db: Session = Depends(get_db),
):
    test_uuid = parse_uuid(test_id, "test") if test_id else None
    return AssessmentService.list_assessments(db, test_id=test_uuid, status=status)


# -------------------------------------------------
# POST: start
# -------------------------------------------------

@router.post(
    "/start",
    response_model=StartAssessmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_assessment(
    payload: StartAssessmentRequest,
    db: Session = Depends(get_db),
):
    try:
        return AssessmentService.start_assessment(db, payload)
    except AssessmentError as exc:
        raise http_error(exc)


# -------------------------------------------------
# POST: answer (upsert)
# -------------------------------------------------

@router.post(
    "/{assessment_id}/answer",
    response_model=AnswerResponse,
)
def submit_answer(
    assessment_id: str,
    payload: AnswerRequest,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.record_answer(db, assessment_uuid, payload)
    except AssessmentError as exc:
        raise http_error(exc)


@router.get("/{assessment_id}/answers", response_model=AnswersResponse)
def get_answers(
    assessment_id: str,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.get_answers(db, assessment_uuid)
    except AssessmentError as exc:
        raise http_error(exc)


# -------------------------------------------------
# GET: resume confirmation
# -------------------------------------------------

@router.get("/{assessment_id}/status", response_model=AssessmentStatusResponse)
def get_resume_status(
    assessment_id: str,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.check_resumable(db, assessment_uuid)
    except AssessmentError as exc:
        raise http_error(exc)


# -------------------------------------------------
# POST: submit (scores exactly once)
# -------------------------------------------------

@router.post("/{assessment_id}/submit", response_model=SubmitResponse)
def submit_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.submit_assessment(db, assessment_uuid)
    except AssessmentError as exc:
        raise http_error(exc)


# -------------------------------------------------
# GET: candidate review / admin detail
# -------------------------------------------------

@router.get("/{assessment_id}/results", response_model=ResultsResponse)
def get_results(
    assessment_id: str,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.get_results(db, assessment_uuid)
    except AssessmentError as exc:
        raise http_error(exc)


@router.get("/{assessment_id}/details", response_model=AssessmentDetailResponse)
def get_assessment_detail(
    assessment_id: str,
    db: Session = Depends(get_db),
):
    assessment_uuid = parse_uuid(assessment_id, "assessment")
    try:
        return AssessmentService.get_assessment_detail(db, assessment_uuid)
    except AssessmentError as exc:
        raise http_error(exc)
