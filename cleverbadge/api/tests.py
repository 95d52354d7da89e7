from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cleverbadge.api.deps import http_error, parse_uuid
from cleverbadge.core.errors import AssessmentError
from cleverbadge.db.session import get_db
from cleverbadge.schemas.analytics import QuestionAnalyticsResponse
from cleverbadge.schemas.test import TestCreate, TestListResponse, TestOut, TestPublicInfo
from cleverbadge.services.analytics import AnalyticsService
from cleverbadge.services.catalog import CatalogService, summarize_test

router = APIRouter(prefix="/tests", tags=["Tests"])


@router.get("", response_model=TestListResponse)
def list_tests(db: Session = Depends(get_db)):
    tests = CatalogService.list_tests(db)
    return {"tests": tests, "total": len(tests)}


@router.post("", response_model=TestOut, status_code=status.HTTP_201_CREATED)
def create_test(payload: TestCreate, db: Session = Depends(get_db)):
    try:
        test = CatalogService.create_test(db, payload)
    except AssessmentError as exc:
        raise http_error(exc)
    return summarize_test(test)


@router.get("/slug/{slug}", response_model=TestPublicInfo)
def get_test_by_slug(slug: str, db: Session = Depends(get_db)):
    """
    Landing data for a shared test link.

    No questions, no answers: only what the candidate needs to start.
    """
    try:
        test, question_count = CatalogService.get_public_test(db, slug)
    except AssessmentError as exc:
        raise http_error(exc)

    return {
        "id": test.id,
        "title": test.title,
        "description": test.description,
        "slug": test.slug,
        "pass_threshold": test.pass_threshold,
        "show_explanations": test.show_explanations,
        "explanation_scope": test.explanation_scope,
        "question_count": question_count,
    }


@router.get("/{test_id}/analytics/questions", response_model=QuestionAnalyticsResponse)
def get_question_analytics(test_id: str, db: Session = Depends(get_db)):
    test_uuid = parse_uuid(test_id, "test")
    try:
        return AnalyticsService.question_success_rates(db, test_uuid)
    except AssessmentError as exc:
        raise http_error(exc)
