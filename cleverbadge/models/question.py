import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from cleverbadge.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =========================
# Question bank
# =========================
class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    text = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # SINGLE | MULTIPLE

    # {"0": {"text": ..., "is_correct": bool, "explanation": ...}, "1": {...}}
    options = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    tags = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
