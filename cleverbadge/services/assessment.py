# cleverbadge/services/assessment.py

"""
Assessment lifecycle: start, answer upsert, resume check, submit, review.

Every write first locks the assessment row, so answers and the final
submit are serialized per assessment: a submit scores exactly once, and a
write that arrives after it is rejected.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from cleverbadge.core.config import settings
from cleverbadge.core.errors import (
    AssessmentAbandoned,
    AssessmentCompleted,
    AssessmentExpired,
    AssessmentNotCompleted,
    AssessmentNotFound,
    QuestionNotInTest,
    TestNotFound,
)
from cleverbadge.engine.feedback import (
    ExplanationScope,
    FeedbackContext,
    FeedbackPolicy,
    OptionFeedback,
    annotate_options,
    project_feedback,
)
from cleverbadge.engine.scorer import (
    PassStatus,
    ScoreResult,
    WeightedQuestion,
    pass_status,
    score_breakdown,
)
from cleverbadge.engine.session_guard import as_utc, expires_at, is_expired, utcnow
from cleverbadge.models.assessment import (
    STATUS_ABANDONED,
    STATUS_COMPLETED,
    STATUS_STARTED,
    Assessment,
    AssessmentAnswer,
)
from cleverbadge.models.test import Test
from cleverbadge.schemas.assessment import AnswerRequest, StartAssessmentRequest
from cleverbadge.services.catalog import ensure_startable

logger = logging.getLogger(__name__)


def assessment_ttl() -> timedelta:
    return timedelta(hours=settings.ASSESSMENT_TIMEOUT_HOURS)


def snapshot_test_questions(test: Test) -> List[Dict[str, Any]]:
    """Freeze the test's question content, in test order."""
    snapshot = []
    for number, link in enumerate(test.questions, start=1):
        question = link.question
        snapshot.append({
            "id": str(question.id),
            "question_number": number,
            "text": question.text,
            "type": question.type,
            "weight": link.weight,
            "options": question.options,
            "tags": question.tags or [],
        })
    return snapshot


def weighted_questions(snapshot: List[Dict[str, Any]]) -> List[WeightedQuestion]:
    return [WeightedQuestion(question, question["weight"]) for question in snapshot]


def candidate_view(question: Dict[str, Any]) -> Dict[str, Any]:
    """Question as sent to candidates: correctness and explanations stripped."""
    return {
        "id": question["id"],
        "question_number": question["question_number"],
        "text": question["text"],
        "type": question["type"],
        "weight": question["weight"],
        "options": [
            {"id": str(option_id), "text": option["text"]}
            for option_id, option in question["options"].items()
        ],
    }


def _feedback_dicts(feedback: Optional[List[OptionFeedback]]) -> Optional[List[Dict[str, Any]]]:
    if feedback is None:
        return None
    return [entry.to_dict() for entry in feedback]


class AssessmentService:

    # ------------------------------------------------------------------
    # Loading and guards
    # ------------------------------------------------------------------

    @staticmethod
    def _get(db: Session, assessment_id: UUID, lock: bool = False) -> Assessment:
        query = db.query(Assessment).filter(Assessment.id == assessment_id)
        if lock:
            query = query.with_for_update()
        assessment = query.first()
        if not assessment:
            raise AssessmentNotFound("Assessment not found")
        return assessment

    @staticmethod
    def _ensure_active(db: Session, assessment: Assessment, now: datetime) -> None:
        """
        Reject writes to an assessment that is no longer STARTED.

        A STARTED assessment past its lifetime is marked ABANDONED here and
        reported as expired.
        """
        if assessment.status == STATUS_COMPLETED:
            logger.warning(f"Rejected write to completed assessment {assessment.id}")
            raise AssessmentCompleted("Assessment already completed")

        if assessment.status == STATUS_ABANDONED:
            raise AssessmentAbandoned("Assessment was abandoned")

        if is_expired(assessment.started_at, now, assessment_ttl()):
            assessment.status = STATUS_ABANDONED
            db.commit()
            logger.info(f"Assessment {assessment.id} expired, marked {STATUS_ABANDONED}")
            raise AssessmentExpired("Assessment has expired")

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    @staticmethod
    def start_assessment(
        db: Session,
        payload: StartAssessmentRequest,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        test = db.query(Test).filter(Test.id == payload.test_id).first()
        if not test:
            raise TestNotFound("Test not found")

        ensure_startable(test)

        snapshot = snapshot_test_questions(test)
        assessment = Assessment(
            test_id=test.id,
            candidate_name=payload.candidate_name,
            status=STATUS_STARTED,
            started_at=now or utcnow(),
            questions_snapshot=snapshot,
        )
        db.add(assessment)
        db.commit()
        db.refresh(assessment)

        logger.info(f"Started assessment {assessment.id} on test {test.slug} ({len(snapshot)} questions)")

        return {
            "assessment_id": assessment.id,
            "test": {
                "id": test.id,
                "title": test.title,
                "description": test.description,
                "pass_threshold": test.pass_threshold,
                "show_explanations": test.show_explanations,
                "explanation_scope": test.explanation_scope,
            },
            "questions": [candidate_view(q) for q in snapshot],
            "total_questions": len(snapshot),
            "started_at": assessment.started_at,
        }

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    @staticmethod
    def record_answer(
        db: Session,
        assessment_id: UUID,
        payload: AnswerRequest,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Upsert the answer for one question; the latest selection wins."""
        now = now or utcnow()
        assessment = AssessmentService._get(db, assessment_id, lock=True)
        AssessmentService._ensure_active(db, assessment, now)

        question_id = str(payload.question_id)
        question = next(
            (q for q in assessment.questions_snapshot if q["id"] == question_id),
            None,
        )
        if question is None:
            raise QuestionNotInTest("Question is not part of this assessment")

        answer = (
            db.query(AssessmentAnswer)
            .filter(
                AssessmentAnswer.assessment_id == assessment.id,
                AssessmentAnswer.question_id == payload.question_id,
            )
            .first()
        )
        if answer:
            answer.selected_options = payload.selected_options
            answer.answered_at = now
        else:
            db.add(AssessmentAnswer(
                assessment_id=assessment.id,
                question_id=payload.question_id,
                selected_options=payload.selected_options,
                answered_at=now,
            ))
        db.commit()

        answered = (
            db.query(AssessmentAnswer)
            .filter(AssessmentAnswer.assessment_id == assessment.id)
            .count()
        )

        feedback = project_feedback(
            question,
            payload.selected_options,
            FeedbackPolicy.from_test(assessment.test),
            FeedbackContext.AFTER_ANSWER,
        )

        return {
            "message": "Answer recorded",
            "question_id": payload.question_id,
            "answered_questions": answered,
            "total_questions": len(assessment.questions_snapshot),
            "feedback": _feedback_dicts(feedback),
        }

    @staticmethod
    def get_answers(db: Session, assessment_id: UUID) -> Dict[str, Any]:
        assessment = AssessmentService._get(db, assessment_id)
        answers = sorted(assessment.answers, key=lambda a: as_utc(a.answered_at))
        return {
            "assessment_id": assessment.id,
            "answers": [
                {
                    "question_id": a.question_id,
                    "selected_options": a.selected_options,
                    "answered_at": a.answered_at,
                }
                for a in answers
            ],
        }

    # ------------------------------------------------------------------
    # Resume
    # ------------------------------------------------------------------

    @staticmethod
    def check_resumable(
        db: Session,
        assessment_id: UUID,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Server-side confirmation that a cached session may continue.

        Raises AssessmentExpired, AssessmentAbandoned or AssessmentCompleted.
        """
        now = now or utcnow()
        assessment = AssessmentService._get(db, assessment_id, lock=True)
        AssessmentService._ensure_active(db, assessment, now)

        return {
            "assessment_id": assessment.id,
            "status": assessment.status,
            "can_resume": True,
            "started_at": assessment.started_at,
            "expires_at": expires_at(assessment.started_at, assessment_ttl()),
        }

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    @staticmethod
    def submit_assessment(
        db: Session,
        assessment_id: UUID,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or utcnow()
        assessment = AssessmentService._get(db, assessment_id, lock=True)
        AssessmentService._ensure_active(db, assessment, now)

        answer_rows = {str(a.question_id): a for a in assessment.answers}
        result = score_breakdown(
            weighted_questions(assessment.questions_snapshot),
            {qid: a.selected_options for qid, a in answer_rows.items()},
        )

        for question_score in result.questions:
            row = answer_rows.get(question_score.question_id)
            if row is not None:
                row.is_correct = question_score.is_correct

        assessment.status = STATUS_COMPLETED
        assessment.score_percentage = result.percentage
        assessment.completed_at = now
        db.commit()

        test = assessment.test
        status = pass_status(result.percentage, test.pass_threshold)

        logger.info(
            f"Assessment {assessment.id} completed: {result.percentage}% "
            f"({result.earned_weight}/{result.total_weight}), {status.value}"
        )

        return {
            "assessment_id": assessment.id,
            "score_percentage": result.percentage,
            "pass_threshold": test.pass_threshold,
            "passed": None if not test.pass_threshold else status == PassStatus.PASSED,
            "status": STATUS_COMPLETED,
            "total_questions": len(result.questions),
            "completed_at": assessment.completed_at,
        }

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    @staticmethod
    def score_of(assessment: Assessment) -> ScoreResult:
        """Recompute the breakdown from the snapshot and stored answers."""
        return score_breakdown(
            weighted_questions(assessment.questions_snapshot),
            {str(a.question_id): a.selected_options for a in assessment.answers},
        )

    @staticmethod
    def get_results(db: Session, assessment_id: UUID) -> Dict[str, Any]:
        """Candidate review after submission, disclosed per the test policy."""
        assessment = AssessmentService._get(db, assessment_id)
        if assessment.status != STATUS_COMPLETED:
            raise AssessmentNotCompleted("Assessment has not been submitted")

        test = assessment.test
        policy = FeedbackPolicy.from_test(test)
        result = AssessmentService.score_of(assessment)
        scores = {q.question_id: q for q in result.questions}

        questions = []
        for question in assessment.questions_snapshot:
            question_score = scores[question["id"]]
            feedback = project_feedback(
                question,
                question_score.selected_options,
                policy,
                FeedbackContext.AFTER_SUBMIT,
            )
            questions.append({
                "question_id": question["id"],
                "question_number": question["question_number"],
                "text": question["text"],
                "weight": question["weight"],
                "is_correct": question_score.is_correct,
                "selected_options": question_score.selected_options,
                "feedback": _feedback_dicts(feedback),
            })

        return {
            "assessment_id": assessment.id,
            "candidate_name": assessment.candidate_name,
            "test_title": test.title,
            "score_percentage": assessment.score_percentage,
            "display_percentage": result.display_percentage,
            "pass_threshold": test.pass_threshold,
            "pass_status": pass_status(assessment.score_percentage, test.pass_threshold),
            "completed_at": assessment.completed_at,
            "show_explanations": policy.show_explanations,
            "explanation_scope": policy.explanation_scope,
            "questions": questions,
        }

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    @staticmethod
    def list_assessments(
        db: Session,
        test_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        query = db.query(Assessment, Test).join(Test, Assessment.test_id == Test.id)
        if test_id:
            query = query.filter(Assessment.test_id == test_id)
        if status:
            query = query.filter(Assessment.status == status)

        rows = query.order_by(Assessment.started_at.desc()).all()
        assessments = [
            {
                "id": a.id,
                "candidate_name": a.candidate_name,
                "status": a.status,
                "score_percentage": a.score_percentage,
                "started_at": a.started_at,
                "completed_at": a.completed_at,
                "test_id": t.id,
                "test_title": t.title,
                "test_slug": t.slug,
            }
            for a, t in rows
        ]
        return {"assessments": assessments, "total": len(assessments)}

    @staticmethod
    def get_assessment_detail(db: Session, assessment_id: UUID) -> Dict[str, Any]:
        """Every option annotated, whatever the candidate disclosure policy."""
        assessment = AssessmentService._get(db, assessment_id)
        test = assessment.test
        result = AssessmentService.score_of(assessment)
        scores = {q.question_id: q for q in result.questions}

        questions = []
        for question in assessment.questions_snapshot:
            question_score = scores[question["id"]]
            annotated = annotate_options(
                question,
                question_score.selected_options,
                ExplanationScope.ALL_ANSWERS,
            )
            options = [
                dict(entry.to_dict(), text=question["options"][entry.id]["text"])
                for entry in annotated
            ]
            questions.append({
                "question_id": question["id"],
                "question_number": question["question_number"],
                "text": question["text"],
                "type": question["type"],
                "weight": question["weight"],
                "answered": question_score.answered,
                "is_correct": question_score.is_correct,
                "selected_options": question_score.selected_options,
                "options": options,
            })

        completed = assessment.status == STATUS_COMPLETED
        return {
            "id": assessment.id,
            "candidate_name": assessment.candidate_name,
            "status": assessment.status,
            "score_percentage": assessment.score_percentage,
            "started_at": assessment.started_at,
            "completed_at": assessment.completed_at,
            "test_id": test.id,
            "test_title": test.title,
            "pass_threshold": test.pass_threshold,
            "pass_status": pass_status(assessment.score_percentage, test.pass_threshold) if completed else None,
            "questions": questions,
        }

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    @staticmethod
    def mark_expired_assessments(db: Session, now: Optional[datetime] = None) -> int:
        """Mark every STARTED assessment past its lifetime as ABANDONED."""
        cutoff = (now or utcnow()) - assessment_ttl()
        count = (
            db.query(Assessment)
            .filter(
                Assessment.status == STATUS_STARTED,
                Assessment.started_at < cutoff,
            )
            .update({Assessment.status: STATUS_ABANDONED}, synchronize_session=False)
        )
        db.commit()

        if count:
            logger.info(f"Marked {count} expired assessment(s) as {STATUS_ABANDONED}")
        return count
