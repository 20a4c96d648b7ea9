"""
Topic schemas. Update requests distinguish an absent field from an explicit null
(model_fields_set): a null description clears it, a null or empty parent_id moves the topic to the root.
"""
from datetime import datetime

from pydantic import BaseModel

from proximos.schemas.common import PageFields


class TopicCreateRequest(BaseModel):
    name: str
    description: str | None = None
    parent_id: str | None = None


class TopicUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    parent_id: str | None = None


class TopicCountsResponse(BaseModel):
    questions: int = 0
    video_lessons: int = 0
    handouts: int = 0
    exercise_lists: int = 0


class TopicResponse(BaseModel):
    id: str
    parent_id: str | None = None
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class TopicDetailResponse(TopicResponse):
    content_counts: TopicCountsResponse


class TopicListResponse(PageFields):
    data: list[TopicResponse]
