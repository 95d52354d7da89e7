# cleverbadge/schemas/test.py

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from cleverbadge.engine.feedback import ExplanationScope, ShowExplanations

# Lowercase words joined by single hyphens
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# =========================
# Question bank
# =========================
class OptionIn(BaseModel):
    text: str
    is_correct: bool
    explanation: Optional[str] = None


class QuestionCreate(BaseModel):
    text: str = Field(..., min_length=1)
    type: Literal["SINGLE", "MULTIPLE"]
    # A list gets IDs "0", "1", ...; a mapping keeps the given IDs
    options: Union[Dict[str, OptionIn], List[OptionIn]]
    tags: Optional[List[str]] = None


class QuestionOut(BaseModel):
    """Admin view of a bank question, correct flags included"""
    id: UUID
    text: str
    type: str
    options: Dict[str, Dict[str, Any]]
    tags: Optional[List[str]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuestionListResponse(BaseModel):
    questions: List[QuestionOut]
    total: int


# =========================
# Tests
# =========================
class TestQuestionLink(BaseModel):
    question_id: UUID
    weight: PositiveInt = 1


class TestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    is_enabled: bool = False
    visibility: Literal["public", "private", "protected"] = "private"
    pass_threshold: int = Field(0, ge=0, le=100)
    show_explanations: ShowExplanations = ShowExplanations.NEVER
    explanation_scope: ExplanationScope = ExplanationScope.SELECTED_ONLY
    questions: List[TestQuestionLink] = []

    @field_validator("questions")
    @classmethod
    def unique_questions(cls, links: List[TestQuestionLink]) -> List[TestQuestionLink]:
        seen = set()
        for link in links:
            if link.question_id in seen:
                raise ValueError(f"Question {link.question_id} is listed more than once")
            seen.add(link.question_id)
        return links


class TestOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    slug: str
    is_enabled: bool
    visibility: str
    pass_threshold: int
    show_explanations: ShowExplanations
    explanation_scope: ExplanationScope
    question_count: int
    created_at: datetime


class TestListResponse(BaseModel):
    tests: List[TestOut]
    total: int


class TestPublicInfo(BaseModel):
    """What the landing page needs before a candidate starts"""
    id: UUID
    title: str
    description: Optional[str] = None
    slug: str
    pass_threshold: int
    show_explanations: ShowExplanations
    explanation_scope: ExplanationScope
    question_count: int

    model_config = ConfigDict(from_attributes=True)
