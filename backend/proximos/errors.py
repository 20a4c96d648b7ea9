"""
Typed application errors and their JSON envelope: {"code", "message", "details"}.
Services raise AppError; main.py registers the handlers that render it.
Codes are stable so the frontend can localize messages.
"""
import logging
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
_PG_UNIQUE_VIOLATION = "23505"
_SQLITE_UNIQUE_ERRORNAMES = ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")


class AppError(Exception):
    def __init__(self, code: str, message: str, http_status: int, details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"AppError({self.code!r}, {self.http_status})"


def _factory(code: str, message: str, http_status: int):
    def make(details: Any = None) -> AppError:
        return AppError(code, message, http_status, details)
    return make


# Generic
invalid_input = _factory("INVALID_INPUT", "The provided input is invalid.", status.HTTP_400_BAD_REQUEST)
invalid_body = _factory("INVALID_REQUEST_BODY", "The request body could not be parsed.", status.HTTP_400_BAD_REQUEST)
internal_error = _factory("INTERNAL_ERROR", "An unexpected error occurred.", status.HTTP_500_INTERNAL_SERVER_ERROR)

# Auth
unauthorized = _factory("UNAUTHORIZED", "Authentication is required.", status.HTTP_401_UNAUTHORIZED)
invalid_credentials = _factory("INVALID_CREDENTIALS", "Invalid email or password.", status.HTTP_401_UNAUTHORIZED)
forbidden = _factory("FORBIDDEN", "You do not have permission to perform this action.", status.HTTP_403_FORBIDDEN)
user_not_found = _factory("USER_NOT_FOUND", "The requested user was not found.", status.HTTP_404_NOT_FOUND)
email_taken = _factory("USER_EMAIL_ALREADY_EXISTS", "The provided email is already registered.", status.HTTP_409_CONFLICT)
setup_unavailable = _factory("SETUP_UNAVAILABLE", "Initial setup is no longer available.", status.HTTP_409_CONFLICT)

# Topics
topic_not_found = _factory("TOPIC_NOT_FOUND", "The requested topic was not found.", status.HTTP_404_NOT_FOUND)
topic_name_taken = _factory(
    "TOPIC_NAME_TAKEN", "A topic with this name already exists under the same parent.", status.HTTP_409_CONFLICT
)
topic_has_children = _factory(
    "TOPIC_HAS_CHILDREN", "Cannot delete a topic that has child topics.", status.HTTP_409_CONFLICT
)

# Content library
question_not_found = _factory("QUESTION_NOT_FOUND", "The requested question was not found.", status.HTTP_404_NOT_FOUND)
handout_not_found = _factory("HANDOUT_NOT_FOUND", "The requested handout was not found.", status.HTTP_404_NOT_FOUND)
handout_title_taken = _factory(
    "HANDOUT_TITLE_TAKEN", "A handout with this title already exists.", status.HTTP_409_CONFLICT
)
video_lesson_not_found = _factory(
    "VIDEO_LESSON_NOT_FOUND", "The requested video lesson was not found.", status.HTTP_404_NOT_FOUND
)
video_lesson_title_taken = _factory(
    "VIDEO_LESSON_TITLE_TAKEN", "A video lesson with this title already exists.", status.HTTP_409_CONFLICT
)
exercise_list_not_found = _factory(
    "OPEN_EXERCISE_LIST_NOT_FOUND", "The requested exercise list was not found.", status.HTTP_404_NOT_FOUND
)
exercise_list_title_taken = _factory(
    "OPEN_EXERCISE_LIST_TITLE_TAKEN", "An exercise list with this title already exists.", status.HTTP_409_CONFLICT
)
simulated_exam_not_found = _factory(
    "SIMULATED_EXAM_NOT_FOUND", "The requested simulated exam was not found.", status.HTTP_404_NOT_FOUND
)
simulated_exam_title_taken = _factory(
    "SIMULATED_EXAM_TITLE_TAKEN", "A simulated exam with this title already exists.", status.HTTP_409_CONFLICT
)

# Groups and activities
group_not_found = _factory("GROUP_NOT_FOUND", "The requested group was not found.", status.HTTP_404_NOT_FOUND)
member_not_found = _factory("MEMBER_NOT_FOUND", "The requested member was not found.", status.HTTP_404_NOT_FOUND)
member_already_exists = _factory(
    "MEMBER_ALREADY_EXISTS", "The user is already a member of this group.", status.HTTP_409_CONFLICT
)
activity_not_found = _factory("ACTIVITY_NOT_FOUND", "The requested activity was not found.", status.HTTP_404_NOT_FOUND)
activity_title_taken = _factory(
    "ACTIVITY_TITLE_TAKEN", "An activity with this title already exists in the group.", status.HTTP_409_CONFLICT
)
activity_item_not_found = _factory(
    "ACTIVITY_ITEM_NOT_FOUND", "The requested activity item was not found.", status.HTTP_404_NOT_FOUND
)
activity_items_changed = _factory(
    "ACTIVITY_ITEMS_CHANGED", "The activity items were changed by another request. Retry.", status.HTTP_409_CONFLICT
)

# Submissions
question_submission_not_found = _factory(
    "QUESTION_SUBMISSION_NOT_FOUND", "The requested submission was not found.", status.HTTP_404_NOT_FOUND
)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the IntegrityError comes from a unique index/constraint (not FK, NOT NULL or CHECK)."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == _PG_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlite_errorname", None) in _SQLITE_UNIQUE_ERRORNAMES:
        return True
    # Last resort for drivers that expose neither code
    msg = str(orig or exc).lower()
    return "unique constraint" in msg or "duplicate key" in msg


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(exc.to_dict()))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    err = invalid_body(details=jsonable_encoder(exc.errors(), exclude={"ctx", "url"}))
    return JSONResponse(status_code=err.http_status, content=err.to_dict())


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    err = internal_error()
    return JSONResponse(status_code=err.http_status, content=err.to_dict())
