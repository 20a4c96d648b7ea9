"""
Library API: /video-lessons, /handouts, /open-exercise-lists, /simulated-exams.
Create and delete need a platform admin; get and list need a logged-in user.
get/list/delete are registered once per kind by _add_read_and_delete_routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.user import User
from proximos.schemas.library import (
    VideoLessonCreateRequest,
    FileContentCreateRequest,
    SimulatedExamCreateRequest,
    VideoLessonResponse,
    FileContentResponse,
    SimulatedExamResponse,
    VideoLessonListResponse,
    FileContentListResponse,
    SimulatedExamListResponse,
)
from proximos.services import library as library_service
from proximos.services.library import LibraryKind, VIDEO_LESSONS, HANDOUTS, EXERCISE_LISTS, SIMULATED_EXAMS
from proximos.api.deps import get_current_user, require_admin, PageParams


def _common_fields(row) -> dict:
    return {
        "id": str(row.public_id),
        "title": row.title,
        "description": row.description,
        "is_active": row.is_active,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _topic_ids(row) -> list[str]:
    return [str(t.public_id) for t in row.topics if t.is_active]


def video_lesson_to_response(row) -> VideoLessonResponse:
    return VideoLessonResponse(
        **_common_fields(row), topic_ids=_topic_ids(row), video_url=row.video_url, duration_minutes=row.duration_minutes
    )


def file_content_to_response(row) -> FileContentResponse:
    return FileContentResponse(**_common_fields(row), topic_ids=_topic_ids(row), file_url=row.file_url)


def simulated_exam_to_response(row) -> SimulatedExamResponse:
    return SimulatedExamResponse(
        **_common_fields(row), question_ids=[str(q.public_id) for q in row.questions if q.is_active]
    )


def _add_read_and_delete_routes(router: APIRouter, kind: LibraryKind, to_response, list_response):
    @router.get("", response_model=list_response)
    def list_rows(
        title: str | None = None,
        page: PageParams = Depends(),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        total = library_service.count_content(db, kind, title)
        rows = library_service.list_content(db, kind, page.page_size, page.offset, title)
        return list_response(data=[to_response(r) for r in rows], **page.meta(total))

    @router.get("/{public_id}")
    def get_row(public_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
        return to_response(library_service.get_active(db, kind, public_id))

    @router.delete("/{public_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_row(public_id: str, current_user: User = Depends(require_admin), db: Session = Depends(get_db)):
        library_service.archive_content(db, kind, public_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


video_lessons_router = APIRouter(prefix="/video-lessons", tags=["library"])
handouts_router = APIRouter(prefix="/handouts", tags=["library"])
exercise_lists_router = APIRouter(prefix="/open-exercise-lists", tags=["library"])
simulated_exams_router = APIRouter(prefix="/simulated-exams", tags=["library"])


@video_lessons_router.post("", response_model=VideoLessonResponse, status_code=status.HTTP_201_CREATED)
def create_video_lesson(
    data: VideoLessonCreateRequest, current_user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    row = library_service.create_content(
        db,
        VIDEO_LESSONS,
        current_user,
        data.title,
        data.description,
        data.topic_ids,
        video_url=data.video_url,
        duration_minutes=data.duration_minutes,
    )
    return video_lesson_to_response(row)


@handouts_router.post("", response_model=FileContentResponse, status_code=status.HTTP_201_CREATED)
def create_handout(
    data: FileContentCreateRequest, current_user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    row = library_service.create_content(
        db, HANDOUTS, current_user, data.title, data.description, data.topic_ids, file_url=data.file_url
    )
    return file_content_to_response(row)


@exercise_lists_router.post("", response_model=FileContentResponse, status_code=status.HTTP_201_CREATED)
def create_exercise_list(
    data: FileContentCreateRequest, current_user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    row = library_service.create_content(
        db, EXERCISE_LISTS, current_user, data.title, data.description, data.topic_ids, file_url=data.file_url
    )
    return file_content_to_response(row)


@simulated_exams_router.post("", response_model=SimulatedExamResponse, status_code=status.HTTP_201_CREATED)
def create_simulated_exam(
    data: SimulatedExamCreateRequest, current_user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    row = library_service.create_content(
        db, SIMULATED_EXAMS, current_user, data.title, data.description, question_ids=data.question_ids
    )
    return simulated_exam_to_response(row)


_add_read_and_delete_routes(video_lessons_router, VIDEO_LESSONS, video_lesson_to_response, VideoLessonListResponse)
_add_read_and_delete_routes(handouts_router, HANDOUTS, file_content_to_response, FileContentListResponse)
_add_read_and_delete_routes(exercise_lists_router, EXERCISE_LISTS, file_content_to_response, FileContentListResponse)
_add_read_and_delete_routes(
    simulated_exams_router, SIMULATED_EXAMS, simulated_exam_to_response, SimulatedExamListResponse
)

routers = [video_lessons_router, handouts_router, exercise_lists_router, simulated_exams_router]
