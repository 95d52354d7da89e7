from typing import List
from uuid import UUID

from pydantic import BaseModel


class QuestionStat(BaseModel):
    question_id: UUID
    question_text: str
    question_type: str
    weight: int
    total_attempts: int
    correct_attempts: int
    success_rate: float


class QuestionAnalyticsResponse(BaseModel):
    test_id: UUID
    test_title: str
    total_assessments: int
    question_stats: List[QuestionStat]
