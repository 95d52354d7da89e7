# cleverbadge/schemas/assessment.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_serializer

from cleverbadge.engine.feedback import ExplanationScope, ShowExplanations
from cleverbadge.engine.scorer import PassStatus


# =========================
# Start
# =========================
class StartAssessmentRequest(BaseModel):
    test_id: UUID
    candidate_name: str = Field(..., min_length=2, max_length=100)

    @field_validator("candidate_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Candidate name must be between 2 and 100 characters")
        return value


class CandidateOption(BaseModel):
    """Option as shown to candidates: no correctness, no explanation"""
    id: str
    text: str


class CandidateQuestion(BaseModel):
    id: UUID
    question_number: int
    text: str
    type: str
    weight: int
    options: List[CandidateOption]


class TestSummary(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    pass_threshold: int
    show_explanations: ShowExplanations
    explanation_scope: ExplanationScope


class StartAssessmentResponse(BaseModel):
    assessment_id: UUID
    test: TestSummary
    questions: List[CandidateQuestion]
    total_questions: int
    started_at: datetime


# =========================
# Answers
# =========================
class AnswerRequest(BaseModel):
    question_id: UUID
    selected_options: List[str] = Field(..., min_length=1)

    @field_validator("selected_options", mode="before")
    @classmethod
    def stringify_ids(cls, value):
        # Option IDs are strings; accept the numeric form older clients send
        if isinstance(value, list):
            return [str(v) for v in value]
        return value


class OptionFeedbackSchema(BaseModel):
    id: str
    is_correct: bool
    explanation: Optional[str] = None
    was_selected: bool


class AnswerResponse(BaseModel):
    message: str
    question_id: UUID
    answered_questions: int
    total_questions: int
    feedback: Optional[List[OptionFeedbackSchema]] = None

    @model_serializer(mode="wrap")
    def drop_undisclosed_feedback(self, handler):
        # feedback is only part of the response when the policy reveals it
        data = handler(self)
        if data.get("feedback") is None:
            data.pop("feedback", None)
        return data


class AnswerRecord(BaseModel):
    question_id: UUID
    selected_options: List[str]
    answered_at: datetime


class AnswersResponse(BaseModel):
    assessment_id: UUID
    answers: List[AnswerRecord]


# =========================
# Resume check
# =========================
class AssessmentStatusResponse(BaseModel):
    assessment_id: UUID
    status: str
    can_resume: bool
    started_at: datetime
    expires_at: datetime


# =========================
# Submit / results
# =========================
class SubmitResponse(BaseModel):
    assessment_id: UUID
    score_percentage: float
    pass_threshold: int
    passed: Optional[bool] = None
    status: str = "COMPLETED"
    total_questions: int
    completed_at: datetime


class QuestionResult(BaseModel):
    question_id: UUID
    question_number: int
    text: str
    weight: int
    is_correct: bool
    selected_options: List[str]
    feedback: Optional[List[OptionFeedbackSchema]] = None


class ResultsResponse(BaseModel):
    assessment_id: UUID
    candidate_name: str
    test_title: str
    score_percentage: float
    display_percentage: int
    pass_threshold: int
    pass_status: PassStatus
    completed_at: datetime
    show_explanations: ShowExplanations
    explanation_scope: ExplanationScope
    questions: List[QuestionResult]


# =========================
# Admin views
# =========================
class AssessmentListItem(BaseModel):
    id: UUID
    candidate_name: str
    status: str
    score_percentage: Optional[float] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    test_id: UUID
    test_title: str
    test_slug: str


class AssessmentListResponse(BaseModel):
    assessments: List[AssessmentListItem]
    total: int


class AnnotatedOption(BaseModel):
    id: str
    text: str
    is_correct: bool
    explanation: Optional[str] = None
    was_selected: bool


class AssessmentDetailQuestion(BaseModel):
    question_id: UUID
    question_number: int
    text: str
    type: str
    weight: int
    answered: bool
    is_correct: bool
    selected_options: List[str]
    options: List[AnnotatedOption]


class AssessmentDetailResponse(BaseModel):
    id: UUID
    candidate_name: str
    status: str
    score_percentage: Optional[float] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    test_id: UUID
    test_title: str
    pass_threshold: int
    pass_status: Optional[PassStatus] = None
    questions: List[AssessmentDetailQuestion]
