"""
Activity and activity item schemas.
An item request carries up to five optional content ids; the server accepts it only when exactly one is set
and derives the item type from it. There is no client-supplied type field.
"""
from datetime import datetime

from pydantic import BaseModel

from proximos.schemas.common import PageFields


class ActivityCreateRequest(BaseModel):
    title: str
    description: str | None = None
    due_date: datetime


class ActivityUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None


class ActivityResponse(BaseModel):
    id: str
    group_id: str
    title: str
    description: str | None = None
    due_date: datetime
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ActivityListResponse(PageFields):
    data: list[ActivityResponse]


class ActivityItemCreateRequest(BaseModel):
    title: str
    description: str | None = None
    question_id: str | None = None
    video_lesson_id: str | None = None
    handout_id: str | None = None
    open_exercise_list_id: str | None = None
    simulated_exam_id: str | None = None


class ActivityItemUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class ReorderItemsRequest(BaseModel):
    item_ids: list[str]


class ActivityItemResponse(BaseModel):
    id: str
    activity_id: str
    order_index: int
    title: str
    description: str | None = None
    type: str
    question_id: str | None = None
    video_lesson_id: str | None = None
    handout_id: str | None = None
    open_exercise_list_id: str | None = None
    simulated_exam_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ActivityItemListResponse(BaseModel):
    data: list[ActivityItemResponse]
