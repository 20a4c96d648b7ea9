"""
Content library: handouts, video lessons, exercise lists and simulated exams share one set of rules
(create, get, list by title, archive). Each kind differs only in its model, its extra fields and its error codes.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.library import VideoLesson, Handout, ExerciseList, SimulatedExam, TITLE_MAX_LENGTH
from proximos.models.question import Question
from proximos.models.types import parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_required, clean_optional, write_transaction
from proximos.services.topics import resolve_topic_ids

logger = logging.getLogger(__name__)

URL_MAX_LENGTH = 1024


@dataclass(frozen=True)
class LibraryKind:
    name: str
    model: type
    not_found: Callable[..., errors.AppError]
    title_taken: Callable[..., errors.AppError]


VIDEO_LESSONS = LibraryKind("video_lesson", VideoLesson, errors.video_lesson_not_found, errors.video_lesson_title_taken)
HANDOUTS = LibraryKind("handout", Handout, errors.handout_not_found, errors.handout_title_taken)
EXERCISE_LISTS = LibraryKind(
    "exercise_list", ExerciseList, errors.exercise_list_not_found, errors.exercise_list_title_taken
)
SIMULATED_EXAMS = LibraryKind(
    "simulated_exam", SimulatedExam, errors.simulated_exam_not_found, errors.simulated_exam_title_taken
)


def get_active(db: Session, kind: LibraryKind, public_id):
    """Return the active row of this kind or raise its *_NOT_FOUND error."""
    pid = parse_public_id(public_id)
    model = kind.model
    row = db.scalar(select(model).where(model.public_id == pid, model.active())) if pid else None
    if row is None:
        raise kind.not_found()
    return row


def _kind_fields(db: Session, kind: LibraryKind, fields: dict) -> dict:
    """Validate the fields specific to each kind."""
    if kind is VIDEO_LESSONS:
        duration = fields.get("duration_minutes")
        if not isinstance(duration, int) or duration <= 0:
            raise errors.invalid_input({"duration_minutes": "must be a positive integer"})
        return {"video_url": clean_required(fields.get("video_url"), URL_MAX_LENGTH), "duration_minutes": duration}
    if kind in (HANDOUTS, EXERCISE_LISTS):
        return {"file_url": clean_required(fields.get("file_url"), URL_MAX_LENGTH)}
    if kind is SIMULATED_EXAMS:
        questions = []
        seen = set()
        for qid in fields.get("question_ids") or []:
            pid = parse_public_id(qid)
            question = db.scalar(select(Question).where(Question.public_id == pid, Question.active())) if pid else None
            if question is None:
                raise errors.question_not_found({"question_id": str(qid)})
            if question.id not in seen:
                seen.add(question.id)
                questions.append(question)
        return {"questions": questions}
    return {}


def create_content(
    db: Session,
    kind: LibraryKind,
    actor: User,
    title: str,
    description: str | None = None,
    topic_ids: list[str] | None = None,
    **fields,
):
    values = {
        "title": clean_required(title, TITLE_MAX_LENGTH),
        "description": clean_optional(description),
        "created_by_id": actor.id,
    }
    values.update(_kind_fields(db, kind, fields))
    if kind is not SIMULATED_EXAMS:
        values["topics"] = resolve_topic_ids(db, topic_ids)

    row = kind.model(**values)
    with write_transaction(db, conflict=kind.title_taken):
        db.add(row)
    db.refresh(row)
    logger.info("%s created: %s", kind.name, row.public_id)
    return row


def archive_content(db: Session, kind: LibraryKind, public_id) -> None:
    row = get_active(db, kind, public_id)
    with write_transaction(db):
        row.archive()
    logger.info("%s archived: %s", kind.name, row.public_id)


def count_content(db: Session, kind: LibraryKind, title: str | None = None) -> int:
    model = kind.model
    stmt = select(func.count()).select_from(model).where(model.active())
    if title:
        stmt = stmt.where(model.title.ilike(f"%{title.strip()}%"))
    return db.scalar(stmt) or 0


def list_content(db: Session, kind: LibraryKind, limit: int, offset: int, title: str | None = None) -> list:
    model = kind.model
    stmt = select(model).where(model.active())
    if title:
        stmt = stmt.where(model.title.ilike(f"%{title.strip()}%"))
    stmt = stmt.order_by(model.title.asc(), model.id.asc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))
