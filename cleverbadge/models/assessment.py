import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    JSON,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from cleverbadge.db.base import Base
from cleverbadge.models.question import utcnow


STATUS_STARTED = "STARTED"
STATUS_COMPLETED = "COMPLETED"
STATUS_ABANDONED = "ABANDONED"


# =========================
# Assessment (candidate attempt)
# =========================
class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    test_id = Column(Uuid, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_name = Column(String(100), nullable=False)

    status = Column(String(20), nullable=False, default=STATUS_STARTED)

    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    score_percentage = Column(Float, nullable=True)

    # Question content frozen at start: scoring never re-resolves the live bank
    questions_snapshot = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)

    test = relationship("Test")
    answers = relationship(
        "AssessmentAnswer",
        back_populates="assessment",
        cascade="all, delete-orphan",
    )


class AssessmentAnswer(Base):
    __tablename__ = "assessment_answers"
    __table_args__ = (
        UniqueConstraint("assessment_id", "question_id", name="uq_assessment_answer_question"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    assessment_id = Column(
        Uuid,
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = Column(Uuid, ForeignKey("questions.id", ondelete="RESTRICT"), nullable=False)

    selected_options = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    is_correct = Column(Boolean, nullable=True)

    answered_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    assessment = relationship("Assessment", back_populates="answers")
