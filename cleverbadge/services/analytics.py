from typing import Any, Dict
from uuid import UUID

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from cleverbadge.core.errors import TestNotFound
from cleverbadge.engine.scorer import round_percentage
from cleverbadge.models.assessment import STATUS_COMPLETED, Assessment, AssessmentAnswer
from cleverbadge.models.question import Question
from cleverbadge.models.test import Test, TestQuestion


class AnalyticsService:

    @staticmethod
    def question_success_rates(db: Session, test_id: UUID) -> Dict[str, Any]:
        """
        Per-question success rates over COMPLETED assessments of a test,
        hardest questions first.
        """
        test = db.query(Test).filter(Test.id == test_id).first()
        if not test:
            raise TestNotFound("Test not found")

        total_assessments = (
            db.query(Assessment)
            .filter(Assessment.test_id == test_id, Assessment.status == STATUS_COMPLETED)
            .count()
        )

        correct = func.sum(case((AssessmentAnswer.is_correct.is_(True), 1), else_=0))

        rows = (
            db.query(
                TestQuestion.question_id,
                Question.text,
                Question.type,
                TestQuestion.weight,
                TestQuestion.position,
                func.count(AssessmentAnswer.id).label("total_attempts"),
                func.coalesce(correct, 0).label("correct_attempts"),
            )
            .join(Question, Question.id == TestQuestion.question_id)
            .outerjoin(
                Assessment,
                and_(
                    Assessment.test_id == TestQuestion.test_id,
                    Assessment.status == STATUS_COMPLETED,
                ),
            )
            .outerjoin(
                AssessmentAnswer,
                and_(
                    AssessmentAnswer.assessment_id == Assessment.id,
                    AssessmentAnswer.question_id == TestQuestion.question_id,
                ),
            )
            .filter(TestQuestion.test_id == test_id)
            .group_by(
                TestQuestion.question_id,
                Question.text,
                Question.type,
                TestQuestion.weight,
                TestQuestion.position,
            )
            .all()
        )

        stats = []
        for row in rows:
            total = int(row.total_attempts)
            correct_count = int(row.correct_attempts)
            stats.append({
                "question_id": row.question_id,
                "question_text": row.text,
                "question_type": row.type,
                "weight": row.weight,
                "position": row.position,
                "total_attempts": total,
                "correct_attempts": correct_count,
                "success_rate": round_percentage(correct_count / total * 100) if total else 0.0,
            })

        stats.sort(key=lambda s: (s["success_rate"], s["position"]))
        for stat in stats:
            stat.pop("position")

        return {
            "test_id": test.id,
            "test_title": test.title,
            "total_assessments": total_assessments,
            "question_stats": stats,
        }
