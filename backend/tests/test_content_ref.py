"""
Unit tests for the content reference model and the text/page helpers. No HTTP.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from proximos.errors import AppError
from proximos.models.activity import Activity, ActivityItem, ContentKind, ContentRef
from proximos.models.group import Group
from proximos.models.library import Handout, VideoLesson
from proximos.services.activities import resolve_content
from proximos.services.common import clean_required, clean_optional, normalize_page, total_pages


@pytest.mark.parametrize("kind", list(ContentKind))
def test_for_content_sets_type_and_single_reference(kind):
    item = ActivityItem.for_content(ContentRef(kind, 7), title="Item", order_index=0)
    assert item.type == kind.value
    assert getattr(item, kind.column) == 7
    others = [k for k in ContentKind if k is not kind]
    assert all(getattr(item, k.column) is None for k in others)
    assert item.content_ref == ContentRef(kind, 7)


def test_for_content_refuses_explicit_type_or_reference():
    ref = ContentRef(ContentKind.HANDOUT, 1)
    with pytest.raises(TypeError):
        ActivityItem.for_content(ref, title="Item", type="question")
    with pytest.raises(TypeError):
        ActivityItem.for_content(ref, title="Item", question_id=3)


@pytest.mark.parametrize(
    "references",
    [
        {},
        {kind: None for kind in ContentKind},
        {ContentKind.QUESTION: "a", ContentKind.HANDOUT: "b"},
    ],
)
def test_resolve_content_counts_before_lookup(references):
    # db=None: the count check must fail before any query runs
    with pytest.raises(AppError) as exc:
        resolve_content(None, references)
    assert exc.value.code == "INVALID_INPUT"


def test_database_rejects_item_with_two_references(db, admin):
    group = Group(name="G", created_by_id=admin.id)
    handout = Handout(title="H", file_url="https://x/h.pdf", created_by_id=admin.id)
    lesson = VideoLesson(title="V", video_url="https://x/v", duration_minutes=3, created_by_id=admin.id)
    db.add_all([group, handout, lesson])
    db.flush()
    activity = Activity(group_id=group.id, title="A", due_date=datetime.now(timezone.utc), created_by_id=admin.id)
    db.add(activity)
    db.flush()

    item = ActivityItem.for_content(
        ContentRef(ContentKind.HANDOUT, handout.id), activity_id=activity.id, order_index=0, title="Bad"
    )
    item.video_lesson_id = lesson.id
    db.add(item)
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()


def test_clean_required_trims_and_rejects_blank():
    assert clean_required("  Algebra  ") == "Algebra"
    for value in ("", "   ", None):
        with pytest.raises(AppError):
            clean_required(value)
    with pytest.raises(AppError):
        clean_required("abcd", max_length=3)


def test_clean_optional_blank_becomes_none():
    assert clean_optional("  text ") == "text"
    assert clean_optional("   ") is None
    assert clean_optional(None) is None


def test_normalize_page():
    assert normalize_page(0, 0) == (1, 20)
    assert normalize_page(-3, 101) == (1, 20)
    assert normalize_page(3, 100) == (3, 100)
    assert normalize_page(None, None) == (1, 20)
    assert total_pages(41, 20) == 3
    assert total_pages(0, 20) == 0
