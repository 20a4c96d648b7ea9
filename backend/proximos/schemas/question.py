"""
Question, option and difficulty feedback schemas.
"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from proximos.schemas.common import PageFields


class OptionPayload(BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreateRequest(BaseModel):
    type: Literal["open_ended", "closed_ended"]
    statement: str
    options: list[OptionPayload] = []
    expected_answer_text: str | None = None
    passing_score: int | None = None
    topic_ids: list[str] = []


class OptionResponse(BaseModel):
    id: str
    original_order: int
    text: str
    is_correct: bool | None = None  # only shown to platform admins


class DifficultyResponse(BaseModel):
    votes: int = 0
    logic: float | None = None
    labor: float | None = None
    theory: float | None = None
    overall: float | None = None


class TopicRef(BaseModel):
    id: str
    name: str


class QuestionResponse(BaseModel):
    id: str
    type: str
    statement: str
    expected_answer_text: str | None = None
    passing_score: int | None = None
    options: list[OptionResponse] = []
    topics: list[TopicRef] = []
    difficulty: DifficultyResponse | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class QuestionListResponse(PageFields):
    data: list[QuestionResponse]


class FeedbackRequest(BaseModel):
    difficulty_logic: int = Field(ge=1, le=3)
    difficulty_labor: int = Field(ge=1, le=3)
    difficulty_theory: int = Field(ge=1, le=3)


class FeedbackResponse(BaseModel):
    id: str
    question_id: str
    difficulty_logic: int
    difficulty_labor: int
    difficulty_theory: int
    updated_at: datetime | None = None
