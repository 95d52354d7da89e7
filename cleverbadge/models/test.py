import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from cleverbadge.db.base import Base
from cleverbadge.models.question import utcnow


class Test(Base):
    __tablename__ = "tests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    is_enabled = Column(Boolean, default=False, nullable=False)
    visibility = Column(String(20), default="private", nullable=False)  # public | private | protected

    # 0 means neutral: score shown without a pass/fail label
    pass_threshold = Column(Integer, default=0, nullable=False)

    show_explanations = Column(String(30), default="never", nullable=False)
    explanation_scope = Column(String(30), default="selected_only", nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    questions = relationship(
        "TestQuestion",
        back_populates="test",
        order_by="TestQuestion.position",
        cascade="all, delete-orphan",
    )


class TestQuestion(Base):
    __tablename__ = "test_questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    test_id = Column(Uuid, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Uuid, ForeignKey("questions.id", ondelete="RESTRICT"), nullable=False)

    weight = Column(Integer, default=1, nullable=False)
    position = Column(Integer, default=0, nullable=False)

    test = relationship("Test", back_populates="questions")
    question = relationship("Question")
