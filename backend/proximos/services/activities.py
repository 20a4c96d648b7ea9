"""
Activities and their ordered items.

An item references exactly one piece of content. The caller passes up to five optional public ids keyed
by ContentKind; anything other than exactly one is INVALID_INPUT and nothing is written. The item type is
derived from the reference through ActivityItem.for_content.

order_index is dense (0..n-1) and unique per activity: create appends, delete closes the gap, and
reorder takes a full permutation of the item ids.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select, func, update
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.activity import Activity, ActivityItem, ContentKind, ContentRef
from proximos.models.group import Group
from proximos.models.library import VideoLesson, Handout, ExerciseList, SimulatedExam
from proximos.models.question import Question
from proximos.models.types import parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_required, clean_optional, write_transaction
from proximos.services.groups import get_active_group, is_group_admin, is_group_member

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255

_CONTENT_MODELS = {
    ContentKind.QUESTION: (Question, errors.question_not_found),
    ContentKind.VIDEO_LESSON: (VideoLesson, errors.video_lesson_not_found),
    ContentKind.HANDOUT: (Handout, errors.handout_not_found),
    ContentKind.EXERCISE_LIST: (ExerciseList, errors.exercise_list_not_found),
    ContentKind.SIMULATED_EXAM: (SimulatedExam, errors.simulated_exam_not_found),
}


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _require_group_admin(db: Session, group: Group, actor: User) -> None:
    if not is_group_admin(db, group, actor):
        raise errors.forbidden()


def _require_member(db: Session, group: Group, actor: User) -> None:
    if not actor.is_admin and not is_group_member(db, group, actor):
        raise errors.forbidden()


def get_active_activity(db: Session, public_id) -> Activity:
    pid = parse_public_id(public_id)
    activity = db.scalar(select(Activity).where(Activity.public_id == pid, Activity.active())) if pid else None
    if activity is None:
        raise errors.activity_not_found()
    return activity


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


def create_activity(
    db: Session, group_public_id, actor: User, title: str, due_date: datetime, description: str | None = None
) -> Activity:
    group = get_active_group(db, group_public_id)
    _require_group_admin(db, group, actor)
    if due_date is None:
        raise errors.invalid_input({"due_date": "required"})

    activity = Activity(
        group_id=group.id,
        title=clean_required(title, TITLE_MAX_LENGTH),
        description=clean_optional(description),
        due_date=as_utc(due_date),
        created_by_id=actor.id,
    )
    with write_transaction(db, conflict=errors.activity_title_taken):
        db.add(activity)
    db.refresh(activity)
    logger.info("Activity created: %s in group %s", activity.public_id, group.public_id)
    return activity


def get_activity(db: Session, public_id, actor: User) -> Activity:
    activity = get_active_activity(db, public_id)
    _require_member(db, activity.group, actor)
    return activity


def update_activity(db: Session, public_id, actor: User, changes: dict) -> Activity:
    """Partial update of title, description (empty clears) and due_date."""
    activity = get_active_activity(db, public_id)
    _require_group_admin(db, activity.group, actor)

    values = {}
    if "title" in changes:
        values["title"] = clean_required(changes["title"], TITLE_MAX_LENGTH)
    if "description" in changes:
        values["description"] = clean_optional(changes["description"])
    if "due_date" in changes:
        if changes["due_date"] is None:
            raise errors.invalid_input({"due_date": "cannot be cleared"})
        values["due_date"] = as_utc(changes["due_date"])

    with write_transaction(db, conflict=errors.activity_title_taken):
        for key, value in values.items():
            setattr(activity, key, value)
    db.refresh(activity)
    logger.info("Activity updated: %s", activity.public_id)
    return activity


def delete_activity(db: Session, public_id, actor: User) -> None:
    activity = get_active_activity(db, public_id)
    _require_group_admin(db, activity.group, actor)
    with write_transaction(db):
        activity.archive()
    logger.info("Activity archived: %s", activity.public_id)


def _activities_by_due(group: Group, upcoming: bool, now: datetime):
    stmt = select(Activity).where(Activity.group_id == group.id, Activity.active())
    if upcoming:
        return stmt.where(Activity.due_date >= now)
    return stmt.where(Activity.due_date < now)


def list_activities(
    db: Session, group_public_id, actor: User, upcoming: bool, limit: int, offset: int, now: datetime | None = None
) -> tuple[list[Activity], int]:
    """Upcoming: due now or later, soonest first. Past: already due, most recent first. Returns (page, total)."""
    group = get_active_group(db, group_public_id)
    _require_member(db, group, actor)
    now = as_utc(now or datetime.now(timezone.utc))

    stmt = _activities_by_due(group, upcoming, now)
    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    order = Activity.due_date.asc() if upcoming else Activity.due_date.desc()
    rows = db.scalars(stmt.order_by(order, Activity.id.asc()).limit(limit).offset(offset))
    return list(rows), total


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def resolve_content(db: Session, references: dict[ContentKind, str | None]) -> ContentRef:
    """
    Turn the caller's optional references into the single ContentRef.
    The count is checked before any lookup, so zero or several references never touch the database.
    """
    given = {kind: value for kind, value in references.items() if value is not None}
    if len(given) != 1:
        raise errors.invalid_input({"content": "exactly one content reference is required", "given": len(given)})
    kind, public_id = next(iter(given.items()))
    model, not_found = _CONTENT_MODELS[kind]
    pid = parse_public_id(public_id)
    row = db.scalar(select(model.id).where(model.public_id == pid, model.active())) if pid else None
    if row is None:
        raise not_found()
    return ContentRef(kind, row)


def _next_order_index(db: Session, activity_id: int) -> int:
    current = db.scalar(select(func.max(ActivityItem.order_index)).where(ActivityItem.activity_id == activity_id))
    return 0 if current is None else current + 1


def _items(db: Session, activity_id: int) -> list[ActivityItem]:
    stmt = select(ActivityItem).where(ActivityItem.activity_id == activity_id).order_by(ActivityItem.order_index)
    return list(db.scalars(stmt))


def _park_indices(db: Session, activity_id: int) -> None:
    """Move every index of the activity to a negative slot so new 0..n-1 values never collide mid-update."""
    db.execute(
        update(ActivityItem)
        .where(ActivityItem.activity_id == activity_id)
        .values(order_index=-1 - ActivityItem.order_index)
        .execution_options(synchronize_session=False)
    )


def _assign_indices(db: Session, ordered_ids: list[int]) -> None:
    for index, item_id in enumerate(ordered_ids):
        db.execute(
            update(ActivityItem)
            .where(ActivityItem.id == item_id)
            .values(order_index=index, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )


def get_item(db: Session, public_id) -> ActivityItem:
    pid = parse_public_id(public_id)
    item = db.scalar(select(ActivityItem).where(ActivityItem.public_id == pid)) if pid else None
    if item is None or not item.activity.is_active:
        raise errors.activity_item_not_found()
    return item


def create_item(
    db: Session,
    activity_public_id,
    actor: User,
    title: str,
    references: dict[ContentKind, str | None],
    description: str | None = None,
) -> ActivityItem:
    activity = get_active_activity(db, activity_public_id)
    _require_group_admin(db, activity.group, actor)
    clean_title = clean_required(title, TITLE_MAX_LENGTH)
    clean_description = clean_optional(description)
    ref = resolve_content(db, references)

    item = ActivityItem.for_content(
        ref,
        activity_id=activity.id,
        order_index=_next_order_index(db, activity.id),
        title=clean_title,
        description=clean_description,
    )
    with write_transaction(db, conflict=errors.activity_items_changed):
        db.add(item)
    db.refresh(item)
    logger.info("Activity item %s added to %s (%s, index %s)", item.public_id, activity.public_id, item.type, item.order_index)
    return item


def update_item(db: Session, public_id, actor: User, changes: dict) -> ActivityItem:
    """Title and description only; the content reference of an item never changes."""
    item = get_item(db, public_id)
    _require_group_admin(db, item.activity.group, actor)
    values = {}
    if "title" in changes:
        values["title"] = clean_required(changes["title"], TITLE_MAX_LENGTH)
    if "description" in changes:
        values["description"] = clean_optional(changes["description"])
    with write_transaction(db):
        for key, value in values.items():
            setattr(item, key, value)
    db.refresh(item)
    return item


def delete_item(db: Session, public_id, actor: User) -> None:
    item = get_item(db, public_id)
    item_public_id = item.public_id
    activity = item.activity
    _require_group_admin(db, activity.group, actor)
    with write_transaction(db, conflict=errors.activity_items_changed):
        db.delete(item)
        db.flush()
        remaining = [i.id for i in _items(db, activity.id)]
        _park_indices(db, activity.id)
        _assign_indices(db, remaining)
    db.expire_all()
    logger.info("Activity item %s removed from %s", item_public_id, activity.public_id)


def list_items(db: Session, activity_public_id, actor: User) -> list[ActivityItem]:
    activity = get_active_activity(db, activity_public_id)
    _require_member(db, activity.group, actor)
    return _items(db, activity.id)


def reorder_items(db: Session, activity_public_id, actor: User, ordered_ids: list[str]) -> list[ActivityItem]:
    """
    ordered_ids must name every item of the activity exactly once. Any omission, duplicate or
    unknown id is INVALID_INPUT and the current order is left untouched.
    """
    activity = get_active_activity(db, activity_public_id)
    _require_group_admin(db, activity.group, actor)

    items = _items(db, activity.id)
    by_public_id = {item.public_id: item.id for item in items}
    wanted = [parse_public_id(value) for value in ordered_ids or []]
    if len(wanted) != len(items) or len(set(wanted)) != len(wanted) or not set(wanted) <= set(by_public_id):
        raise errors.invalid_input(
            {"item_ids": "must list every item of the activity exactly once", "expected": len(items)}
        )

    with write_transaction(db, conflict=errors.activity_items_changed):
        _park_indices(db, activity.id)
        _assign_indices(db, [by_public_id[pid] for pid in wanted])
    db.expire_all()
    logger.info("Activity %s: %s item(s) reordered", activity.public_id, len(items))
    return _items(db, activity.id)
