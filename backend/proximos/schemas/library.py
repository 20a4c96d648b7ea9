"""
Library content schemas: video lessons, handouts, exercise lists, simulated exams.
"""
from datetime import datetime

from pydantic import BaseModel

from proximos.schemas.common import PageFields


class LibraryCreateRequest(BaseModel):
    title: str
    description: str | None = None
    topic_ids: list[str] = []


class VideoLessonCreateRequest(LibraryCreateRequest):
    video_url: str
    duration_minutes: int


class FileContentCreateRequest(LibraryCreateRequest):
    """Handouts and exercise lists: the file is referenced by URL."""
    file_url: str


class SimulatedExamCreateRequest(BaseModel):
    title: str
    description: str | None = None
    question_ids: list[str] = []


class LibraryResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    topic_ids: list[str] = []
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VideoLessonResponse(LibraryResponse):
    video_url: str
    duration_minutes: int


class FileContentResponse(LibraryResponse):
    file_url: str


class SimulatedExamResponse(LibraryResponse):
    question_ids: list[str] = []


class VideoLessonListResponse(PageFields):
    data: list[VideoLessonResponse]


class FileContentListResponse(PageFields):
    data: list[FileContentResponse]


class SimulatedExamListResponse(PageFields):
    data: list[SimulatedExamResponse]
