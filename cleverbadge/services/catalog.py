from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from cleverbadge.core.errors import (
    InvalidOptions,
    ProtectedTest,
    QuestionNotFound,
    SlugTaken,
    TestDisabled,
    TestNotFound,
)
from cleverbadge.engine.scorer import options_from_list, validate_options
from cleverbadge.models.question import Question
from cleverbadge.models.test import Test, TestQuestion
from cleverbadge.schemas.test import QuestionCreate, TestCreate

logger = logging.getLogger(__name__)


class CatalogService:
    """Question bank and test definitions."""

    @staticmethod
    def create_question(db: Session, payload: QuestionCreate) -> Question:
        if isinstance(payload.options, list):
            options = options_from_list([o.model_dump(exclude_none=True) for o in payload.options])
        else:
            options = {
                str(option_id): option.model_dump(exclude_none=True)
                for option_id, option in payload.options.items()
            }

        is_valid, errors = validate_options(options, payload.type)
        if not is_valid:
            raise InvalidOptions(errors)

        question = Question(
            text=payload.text,
            type=payload.type,
            options=options,
            tags=payload.tags,
        )
        db.add(question)
        db.commit()
        db.refresh(question)
        return question

    @staticmethod
    def create_test(db: Session, payload: TestCreate) -> Test:
        if db.query(Test.id).filter(Test.slug == payload.slug).first():
            raise SlugTaken(f"A test with slug {payload.slug} already exists")

        question_ids = [link.question_id for link in payload.questions]
        if question_ids:
            found = {
                row.id
                for row in db.query(Question.id).filter(Question.id.in_(question_ids)).all()
            }
            missing = [str(qid) for qid in question_ids if qid not in found]
            if missing:
                raise QuestionNotFound(f"Unknown question ids: {', '.join(missing)}")

        test = Test(
            title=payload.title,
            slug=payload.slug,
            description=payload.description,
            is_enabled=payload.is_enabled,
            visibility=payload.visibility,
            pass_threshold=payload.pass_threshold,
            show_explanations=payload.show_explanations.value,
            explanation_scope=payload.explanation_scope.value,
        )
        for position, link in enumerate(payload.questions):
            test.questions.append(TestQuestion(
                question_id=link.question_id,
                weight=link.weight,
                position=position,
            ))

        db.add(test)
        db.commit()
        db.refresh(test)
        logger.info(f"Created test {test.slug} with {len(payload.questions)} questions")
        return test

    @staticmethod
    def list_questions(db: Session, question_type: Optional[str] = None) -> List[Question]:
        query = db.query(Question)
        if question_type:
            query = query.filter(Question.type == question_type)
        return query.order_by(Question.created_at.desc()).all()

    @staticmethod
    def list_tests(db: Session) -> List[Dict[str, Any]]:
        """Every test with its question count, newest first."""
        tests = db.query(Test).order_by(Test.created_at.desc()).all()
        return [summarize_test(test) for test in tests]

    @staticmethod
    def get_public_test(db: Session, slug: str) -> Tuple[Test, int]:
        """
        Resolve a test link for a candidate.

        Raises TestNotFound, TestDisabled or ProtectedTest.
        """
        test = db.query(Test).filter(Test.slug == slug).first()
        if not test:
            raise TestNotFound("Test not found")

        ensure_startable(test)
        return test, len(test.questions)


def ensure_startable(test: Test) -> None:
    if not test.is_enabled:
        raise TestDisabled("This test is currently disabled and cannot be started.")
    if test.visibility == "protected":
        raise ProtectedTest("This test is protected and requires an invitation.")


def summarize_test(test: Test) -> Dict[str, Any]:
    return {
        "id": test.id,
        "title": test.title,
        "description": test.description,
        "slug": test.slug,
        "is_enabled": test.is_enabled,
        "visibility": test.visibility,
        "pass_threshold": test.pass_threshold,
        "show_explanations": test.show_explanations,
        "explanation_scope": test.explanation_scope,
        "question_count": len(test.questions),
        "created_at": test.created_at,
    }
