"""
API tests for activity items: exactly-one content reference, derived type, dense ordering,
atomic reorder, and group-admin / membership permissions.
"""
import uuid

from sqlalchemy import select, func

from conftest import (
    create_activity,
    create_closed_question,
    create_group,
    create_handout,
    create_video_lesson,
    auth_headers,
)
from proximos.models.activity import ActivityItem


def _setup(client, headers):
    group = create_group(client, headers)
    activity = create_activity(client, headers, group["id"])
    return group, activity


def _add_item(client, headers, activity_id, title, **refs):
    return client.post(f"/activities/{activity_id}/items", json={"title": title, **refs}, headers=headers)


def _item_count(db) -> int:
    return db.scalar(select(func.count()).select_from(ActivityItem))


def test_item_type_is_derived_from_reference(client, as_admin):
    _, activity = _setup(client, as_admin)
    question = create_closed_question(client, as_admin)
    handout = create_handout(client, as_admin)
    lesson = create_video_lesson(client, as_admin)

    r = _add_item(client, as_admin, activity["id"], "Answer this", question_id=question["id"])
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["type"] == "question"
    assert body["question_id"] == question["id"]
    assert body["handout_id"] is None

    r = _add_item(client, as_admin, activity["id"], "Read this", handout_id=handout["id"])
    assert r.json()["type"] == "handout"
    r = _add_item(client, as_admin, activity["id"], "Watch this", video_lesson_id=lesson["id"])
    assert r.json()["type"] == "video_lesson"


def test_client_supplied_type_is_ignored(client, as_admin):
    _, activity = _setup(client, as_admin)
    handout = create_handout(client, as_admin)
    r = _add_item(client, as_admin, activity["id"], "Read", handout_id=handout["id"], type="question")
    assert r.status_code == 201
    assert r.json()["type"] == "handout"


def test_zero_references_rejected_and_nothing_persisted(client, as_admin, db):
    _, activity = _setup(client, as_admin)
    r = _add_item(client, as_admin, activity["id"], "Nothing")
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"
    assert _item_count(db) == 0


def test_two_references_rejected_and_nothing_persisted(client, as_admin, db):
    _, activity = _setup(client, as_admin)
    question = create_closed_question(client, as_admin)
    lesson = create_video_lesson(client, as_admin)
    r = _add_item(client, as_admin, activity["id"], "Both", question_id=question["id"], video_lesson_id=lesson["id"])
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"
    assert _item_count(db) == 0


def test_missing_content_reports_its_kind(client, as_admin, db):
    _, activity = _setup(client, as_admin)
    cases = {
        "question_id": "QUESTION_NOT_FOUND",
        "video_lesson_id": "VIDEO_LESSON_NOT_FOUND",
        "handout_id": "HANDOUT_NOT_FOUND",
        "open_exercise_list_id": "OPEN_EXERCISE_LIST_NOT_FOUND",
        "simulated_exam_id": "SIMULATED_EXAM_NOT_FOUND",
    }
    for field, code in cases.items():
        r = _add_item(client, as_admin, activity["id"], "Ghost", **{field: str(uuid.uuid4())})
        assert r.status_code == 404
        assert r.json()["code"] == code
    assert _item_count(db) == 0


def test_items_are_appended_in_order(client, as_admin):
    _, activity = _setup(client, as_admin)
    handout = create_handout(client, as_admin)
    for title in ("A", "B", "C"):
        _add_item(client, as_admin, activity["id"], title, handout_id=handout["id"])
    r = client.get(f"/activities/{activity['id']}/items", headers=as_admin)
    assert [(i["title"], i["order_index"]) for i in r.json()["data"]] == [("A", 0), ("B", 1), ("C", 2)]


def _three_items(client, headers):
    _, activity = _setup(client, headers)
    handout = create_handout(client, headers)
    ids = {}
    for title in ("A", "B", "C"):
        ids[title] = _add_item(client, headers, activity["id"], title, handout_id=handout["id"]).json()["id"]
    return activity, ids


def _order(client, headers, activity_id):
    data = client.get(f"/activities/{activity_id}/items", headers=headers).json()["data"]
    return [(i["title"], i["order_index"]) for i in data]


def test_reorder_assigns_dense_indices(client, as_admin):
    activity, ids = _three_items(client, as_admin)
    r = client.put(
        f"/activities/{activity['id']}/items/reorder",
        json={"item_ids": [ids["C"], ids["A"], ids["B"]]},
        headers=as_admin,
    )
    assert r.status_code == 200, r.text
    assert [(i["title"], i["order_index"]) for i in r.json()["data"]] == [("C", 0), ("A", 1), ("B", 2)]
    assert _order(client, as_admin, activity["id"]) == [("C", 0), ("A", 1), ("B", 2)]


def test_reorder_with_missing_item_changes_nothing(client, as_admin):
    activity, ids = _three_items(client, as_admin)
    r = client.put(
        f"/activities/{activity['id']}/items/reorder", json={"item_ids": [ids["C"], ids["A"]]}, headers=as_admin
    )
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"
    assert _order(client, as_admin, activity["id"]) == [("A", 0), ("B", 1), ("C", 2)]


def test_reorder_with_duplicate_or_foreign_ids_changes_nothing(client, as_admin):
    activity, ids = _three_items(client, as_admin)
    for item_ids in (
        [ids["C"], ids["C"], ids["A"]],
        [ids["C"], ids["A"], str(uuid.uuid4())],
        [ids["C"], ids["A"], ids["B"], str(uuid.uuid4())],
    ):
        r = client.put(f"/activities/{activity['id']}/items/reorder", json={"item_ids": item_ids}, headers=as_admin)
        assert r.status_code == 400
    assert _order(client, as_admin, activity["id"]) == [("A", 0), ("B", 1), ("C", 2)]


def test_delete_item_keeps_indices_dense(client, as_admin):
    activity, ids = _three_items(client, as_admin)
    r = client.delete(f"/activity-items/{ids['A']}", headers=as_admin)
    assert r.status_code == 204
    assert _order(client, as_admin, activity["id"]) == [("B", 0), ("C", 1)]

    handout = create_handout(client, as_admin, "Another")
    _add_item(client, as_admin, activity["id"], "D", handout_id=handout["id"])
    assert _order(client, as_admin, activity["id"]) == [("B", 0), ("C", 1), ("D", 2)]


def test_update_item_title_and_description(client, as_admin):
    activity, ids = _three_items(client, as_admin)
    r = client.put(f"/activity-items/{ids['B']}", json={"title": " Read chapter 2 ", "description": "p. 10"}, headers=as_admin)
    assert r.status_code == 200
    assert r.json()["title"] == "Read chapter 2"
    assert r.json()["description"] == "p. 10"
    assert r.json()["type"] == "handout"

    r = client.put(f"/activity-items/{ids['B']}", json={"title": "  "}, headers=as_admin)
    assert r.status_code == 400


def test_only_group_admin_can_change_items(client, as_admin, student):
    group, activity = _setup(client, as_admin)
    handout = create_handout(client, as_admin)
    r = client.post(f"/groups/{group['id']}/members", json={"user_id": str(student.public_id)}, headers=as_admin)
    assert r.status_code == 201

    as_member = auth_headers(student)
    r = _add_item(client, as_member, activity["id"], "Sneaky", handout_id=handout["id"])
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"

    # Members can read the checklist
    _add_item(client, as_admin, activity["id"], "Read", handout_id=handout["id"])
    r = client.get(f"/activities/{activity['id']}/items", headers=as_member)
    assert r.status_code == 200
    assert len(r.json()["data"]) == 1


def test_non_member_cannot_list_items(client, as_admin, as_student):
    _, activity = _setup(client, as_admin)
    r = client.get(f"/activities/{activity['id']}/items", headers=as_student)
    assert r.status_code == 403


def test_unknown_item_is_not_found(client, as_admin):
    r = client.delete(f"/activity-items/{uuid.uuid4()}", headers=as_admin)
    assert r.status_code == 404
    assert r.json()["code"] == "ACTIVITY_ITEM_NOT_FOUND"
