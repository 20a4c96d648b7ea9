"""
Topic tree rules: create, update (partial, reparent with cycle check), delete in three modes, list/count.

Delete modes:
  ""         only when the topic has no active children, else TOPIC_HAS_CHILDREN (nothing changes)
  "cascade"  archive the topic and its whole active subtree
  "reparent" move direct children to the topic's own parent, then archive the topic

(parent, name) uniqueness is left to the unique index; violations surface as TOPIC_NAME_TAKEN.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import select, update, func, distinct
from sqlalchemy.orm import Session, aliased

from proximos import errors
from proximos.models.library import VideoLesson, Handout, ExerciseList, video_lesson_topics, handout_topics, exercise_list_topics
from proximos.models.question import Question, question_topics
from proximos.models.topic import Topic, NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from proximos.models.types import Lifecycle, parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_required, clean_optional, write_transaction

logger = logging.getLogger(__name__)

DELETE_MODES = ("", "cascade", "reparent")


@dataclass
class TopicCounts:
    questions: int = 0
    video_lessons: int = 0
    handouts: int = 0
    exercise_lists: int = 0


def get_active_topic(db: Session, public_id) -> Topic:
    """Return the active topic or raise TOPIC_NOT_FOUND."""
    pid = parse_public_id(public_id)
    topic = db.scalar(select(Topic).where(Topic.public_id == pid, Topic.active())) if pid else None
    if topic is None:
        raise errors.topic_not_found()
    return topic


def resolve_parent_id(db: Session, parent_public_id: str | None) -> int | None:
    """None/empty means root; otherwise the parent must exist and be active."""
    if parent_public_id is None or not str(parent_public_id).strip():
        return None
    return get_active_topic(db, parent_public_id).id


def resolve_topic_ids(db: Session, public_ids: list[str] | None) -> list[Topic]:
    """Resolve a list of topic public ids (duplicates collapsed); any unknown id raises TOPIC_NOT_FOUND."""
    topics: list[Topic] = []
    seen: set[int] = set()
    for pid in public_ids or []:
        topic = get_active_topic(db, pid)
        if topic.id not in seen:
            seen.add(topic.id)
            topics.append(topic)
    return topics


def subtree_ids(db: Session, topic_id: int) -> list[int]:
    """Ids of the topic and all of its active descendants (recursive CTE)."""
    tree = select(Topic.id).where(Topic.id == topic_id).cte("descendants", recursive=True)
    found = tree.alias()
    child = aliased(Topic)
    # UNION (not UNION ALL) so a corrupted cyclic tree still terminates
    tree = tree.union(
        select(child.id)
        .join(found, child.parent_id == found.c.id)
        .where(child.lifecycle == Lifecycle.ACTIVE.value)
    )
    return list(db.scalars(select(tree.c.id)))


def count_children(db: Session, topic_id: int) -> int:
    return db.scalar(select(func.count()).select_from(Topic).where(Topic.parent_id == topic_id, Topic.active())) or 0


def create_topic(
    db: Session,
    actor: User,
    name: str,
    description: str | None = None,
    parent_public_id: str | None = None,
) -> Topic:
    clean_name = clean_required(name, NAME_MAX_LENGTH)
    clean_description = clean_optional(description, DESCRIPTION_MAX_LENGTH)
    parent_id = resolve_parent_id(db, parent_public_id)

    topic = Topic(name=clean_name, description=clean_description, parent_id=parent_id, created_by_id=actor.id)
    with write_transaction(db, conflict=errors.topic_name_taken):
        db.add(topic)
    db.refresh(topic)
    logger.info("Topic created: %s (parent_id=%s)", topic.public_id, parent_id)
    return topic


def update_topic(db: Session, public_id: str, changes: dict) -> Topic:
    """
    Partial update. Only keys present in changes are applied:
    name (required, trimmed), description (empty/None clears), parent_id (empty/None moves to root).
    Everything is validated before the topic is touched.
    """
    topic = get_active_topic(db, public_id)

    values = {}
    if "name" in changes:
        values["name"] = clean_required(changes["name"], NAME_MAX_LENGTH)
    if "description" in changes:
        values["description"] = clean_optional(changes["description"], DESCRIPTION_MAX_LENGTH)
    if "parent_id" in changes:
        new_parent_id = resolve_parent_id(db, changes["parent_id"])
        if new_parent_id is not None and new_parent_id in subtree_ids(db, topic.id):
            raise errors.invalid_input({"parent_id": "A topic cannot be moved under itself or one of its descendants."})
        values["parent_id"] = new_parent_id

    with write_transaction(db, conflict=errors.topic_name_taken):
        for key, value in values.items():
            setattr(topic, key, value)
    db.refresh(topic)
    logger.info("Topic updated: %s (%s)", topic.public_id, ", ".join(sorted(values)) or "no changes")
    return topic


def delete_topic(db: Session, public_id: str, mode: str = "") -> None:
    mode = (mode or "").strip().lower()
    if mode not in DELETE_MODES:
        raise errors.invalid_input({"mode": "must be one of: cascade, reparent"})
    topic = get_active_topic(db, public_id)

    children = count_children(db, topic.id)
    if children and not mode:
        raise errors.topic_has_children({"children": children})

    with write_transaction(db, conflict=errors.topic_name_taken):
        if children and mode == "cascade":
            ids = subtree_ids(db, topic.id)
            db.execute(
                update(Topic)
                .where(Topic.id.in_(ids), Topic.active())
                .values(lifecycle=Lifecycle.ARCHIVED.value, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            logger.info("Topic %s archived with %s descendant(s)", topic.public_id, len(ids) - 1)
            return
        topic.archive()
        # Archived before children move up: a child may share the topic's name
        db.flush()
        if children and mode == "reparent":
            db.execute(
                update(Topic)
                .where(Topic.parent_id == topic.id, Topic.active())
                .values(parent_id=topic.parent_id, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            logger.info("Topic %s removed; %s child(ren) moved to parent_id=%s", topic.public_id, children, topic.parent_id)
        else:
            logger.info("Topic %s removed", topic.public_id)


def _topic_filters(db: Session, name: str | None, parent_id: str | None) -> list | None:
    """Build WHERE clauses; None means the filter can match nothing (unknown parent)."""
    clauses = [Topic.active()]
    if name:
        clauses.append(Topic.name.ilike(f"%{name.strip()}%"))
    if parent_id is not None:
        if not parent_id.strip():
            clauses.append(Topic.parent_id.is_(None))
        else:
            pid = parse_public_id(parent_id)
            parent = db.scalar(select(Topic).where(Topic.public_id == pid, Topic.active())) if pid else None
            if parent is None:
                return None
            clauses.append(Topic.parent_id == parent.id)
    return clauses


def count_topics(db: Session, name: str | None = None, parent_id: str | None = None) -> int:
    clauses = _topic_filters(db, name, parent_id)
    if clauses is None:
        return 0
    return db.scalar(select(func.count()).select_from(Topic).where(*clauses)) or 0


def list_topics(
    db: Session, limit: int, offset: int, name: str | None = None, parent_id: str | None = None
) -> list[Topic]:
    """parent_id: None = any, "" = roots only, uuid = children of that topic."""
    clauses = _topic_filters(db, name, parent_id)
    if clauses is None:
        return []
    stmt = select(Topic).where(*clauses).order_by(Topic.name.asc(), Topic.id.asc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def _count_linked(db: Session, link_table, link_column: str, model, topic_ids: list[int]) -> int:
    owner = link_table.c[link_column]
    stmt = (
        select(func.count(distinct(owner)))
        .select_from(link_table)
        .join(model, model.id == owner)
        .where(link_table.c.topic_id.in_(topic_ids), model.active())
    )
    return db.scalar(stmt) or 0


def content_counts(db: Session, topic: Topic) -> TopicCounts:
    """Active content tagged with the topic or any of its active descendants."""
    ids = subtree_ids(db, topic.id)
    return TopicCounts(
        questions=_count_linked(db, question_topics, "question_id", Question, ids),
        video_lessons=_count_linked(db, video_lesson_topics, "video_lesson_id", VideoLesson, ids),
        handouts=_count_linked(db, handout_topics, "handout_id", Handout, ids),
        exercise_lists=_count_linked(db, exercise_list_topics, "exercise_list_id", ExerciseList, ids),
    )
