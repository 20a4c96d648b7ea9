"""
Question submission schemas.
"""
from datetime import datetime

from pydantic import BaseModel, Field

from proximos.schemas.common import PageFields


class SubmitAnswerRequest(BaseModel):
    option_id: str | None = None
    answer_text: str | None = None


class GradeRequest(BaseModel):
    score: int = Field(ge=0, le=100)
    feedback: str | None = None


class SubmissionResponse(BaseModel):
    id: str
    question_id: str
    question_statement: str | None = None
    option_id: str | None = None
    answer_text: str | None = None
    score: int | None = None
    passed: bool
    graded: bool
    answer_feedback: str | None = None
    submitted_at: datetime | None = None
    updated_at: datetime | None = None


class SubmissionListResponse(PageFields):
    data: list[SubmissionResponse]
