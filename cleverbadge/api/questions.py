from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cleverbadge.api.deps import http_error
from cleverbadge.core.errors import AssessmentError
from cleverbadge.db.session import get_db
from cleverbadge.schemas.test import QuestionCreate, QuestionListResponse, QuestionOut
from cleverbadge.services.catalog import CatalogService

router = APIRouter(prefix="/questions", tags=["Questions"])


@router.get("", response_model=QuestionListResponse)
def list_questions(
    question_type: Optional[Literal["SINGLE", "MULTIPLE"]] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    questions = CatalogService.list_questions(db, question_type=question_type)
    return {"questions": questions, "total": len(questions)}


@router.post("", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def create_question(
    payload: QuestionCreate,
    db: Session = Depends(get_db),
):
    try:
        return CatalogService.create_question(db, payload)
    except AssessmentError as exc:
        raise http_error(exc)
