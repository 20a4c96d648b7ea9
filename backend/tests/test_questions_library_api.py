"""
API tests for the question bank (validation, filters, feedback medians) and the content library
(title uniqueness among active rows, archive, simulated exams).
"""
import uuid

import pytest

from conftest import create_topic, create_closed_question, create_handout, create_video_lesson, auth_headers


@pytest.mark.parametrize(
    "options",
    [
        [{"text": "only one", "is_correct": True}],
        [{"text": "a", "is_correct": False}, {"text": "b", "is_correct": False}],
        [{"text": "a", "is_correct": True}, {"text": "b", "is_correct": True}],
        [{"text": "a", "is_correct": True}, {"text": "  ", "is_correct": False}],
    ],
)
def test_closed_ended_option_rules(client, as_admin, options):
    r = client.post(
        "/questions", json={"type": "closed_ended", "statement": "Pick", "options": options}, headers=as_admin
    )
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"


def test_open_ended_needs_expected_answer_and_passing_score(client, as_admin):
    r = client.post("/questions", json={"type": "open_ended", "statement": "Explain"}, headers=as_admin)
    assert r.status_code == 400
    r = client.post(
        "/questions",
        json={"type": "open_ended", "statement": "Explain", "expected_answer_text": "x", "passing_score": 101},
        headers=as_admin,
    )
    assert r.status_code == 400


def test_unknown_question_type_is_bad_body(client, as_admin):
    r = client.post("/questions", json={"type": "essay", "statement": "Explain"}, headers=as_admin)
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_REQUEST_BODY"
    assert isinstance(r.json()["details"], list)


def test_list_questions_by_statement_and_topic(client, as_admin, as_student):
    algebra = create_topic(client, as_admin, "Algebra")
    create_closed_question(client, as_admin, "Solve x + 1 = 2", topic_ids=[algebra["id"]])
    create_closed_question(client, as_admin, "Capital of France?")

    r = client.get("/questions", params={"statement": "SOLVE"}, headers=as_student)
    assert [q["statement"] for q in r.json()["data"]] == ["Solve x + 1 = 2"]
    r = client.get("/questions", params={"topic_id": algebra["id"]}, headers=as_student)
    assert r.json()["total_items"] == 1
    assert r.json()["data"][0]["topics"] == [{"id": algebra["id"], "name": "Algebra"}]


def test_deleted_question_disappears(client, as_admin):
    question = create_closed_question(client, as_admin)
    assert client.delete(f"/questions/{question['id']}", headers=as_admin).status_code == 204
    r = client.get(f"/questions/{question['id']}", headers=as_admin)
    assert r.status_code == 404
    assert r.json()["code"] == "QUESTION_NOT_FOUND"


def test_feedback_upsert_and_medians(client, as_admin, make_user):
    question = create_closed_question(client, as_admin)
    voters = [auth_headers(make_user(name=f"Voter {i}")) for i in range(3)]
    votes = [(1, 2, 3), (3, 2, 1), (2, 2, 2)]
    for headers, (logic, labor, theory) in zip(voters, votes):
        r = client.put(
            f"/questions/{question['id']}/feedback",
            json={"difficulty_logic": logic, "difficulty_labor": labor, "difficulty_theory": theory},
            headers=headers,
        )
        assert r.status_code == 200, r.text

    difficulty = client.get(f"/questions/{question['id']}", headers=as_admin).json()["difficulty"]
    assert difficulty == {"votes": 3, "logic": 2.0, "labor": 2.0, "theory": 2.0, "overall": 2.0}

    # Voting again replaces the earlier vote
    client.put(
        f"/questions/{question['id']}/feedback",
        json={"difficulty_logic": 3, "difficulty_labor": 3, "difficulty_theory": 3},
        headers=voters[2],
    )
    difficulty = client.get(f"/questions/{question['id']}", headers=as_admin).json()["difficulty"]
    assert difficulty["votes"] == 3
    assert difficulty["logic"] == 3.0


def test_feedback_out_of_range_is_rejected(client, as_admin):
    question = create_closed_question(client, as_admin)
    r = client.put(
        f"/questions/{question['id']}/feedback",
        json={"difficulty_logic": 4, "difficulty_labor": 1, "difficulty_theory": 1},
        headers=as_admin,
    )
    assert r.status_code == 400


def test_library_title_unique_among_active(client, as_admin):
    first = create_handout(client, as_admin, "Notes")
    r = client.post("/handouts", json={"title": "Notes", "file_url": "https://x/y.pdf"}, headers=as_admin)
    assert r.status_code == 409
    assert r.json()["code"] == "HANDOUT_TITLE_TAKEN"

    assert client.delete(f"/handouts/{first['id']}", headers=as_admin).status_code == 204
    assert client.get(f"/handouts/{first['id']}", headers=as_admin).status_code == 404
    create_handout(client, as_admin, "Notes")


def test_each_library_kind_has_its_own_codes(client, as_admin):
    create_video_lesson(client, as_admin, "Intro")
    r = client.post(
        "/video-lessons",
        json={"title": "Intro", "video_url": "https://v/1", "duration_minutes": 5},
        headers=as_admin,
    )
    assert r.json()["code"] == "VIDEO_LESSON_TITLE_TAKEN"

    r = client.get(f"/open-exercise-lists/{uuid.uuid4()}", headers=as_admin)
    assert r.status_code == 404
    assert r.json()["code"] == "OPEN_EXERCISE_LIST_NOT_FOUND"


def test_video_lesson_needs_positive_duration(client, as_admin):
    r = client.post(
        "/video-lessons", json={"title": "Intro", "video_url": "https://v/1", "duration_minutes": 0}, headers=as_admin
    )
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"


def test_library_list_by_title(client, as_admin, as_student):
    create_handout(client, as_admin, "Algebra notes")
    create_handout(client, as_admin, "Biology notes")
    r = client.get("/handouts", params={"title": "algebra"}, headers=as_student)
    assert [h["title"] for h in r.json()["data"]] == ["Algebra notes"]


def test_simulated_exam_bundles_questions(client, as_admin):
    q1 = create_closed_question(client, as_admin, "Q1")
    q2 = create_closed_question(client, as_admin, "Q2")
    r = client.post(
        "/simulated-exams", json={"title": "Mock 1", "question_ids": [q1["id"], q2["id"], q1["id"]]}, headers=as_admin
    )
    assert r.status_code == 201, r.text
    assert sorted(r.json()["question_ids"]) == sorted([q1["id"], q2["id"]])

    r = client.post("/simulated-exams", json={"title": "Mock 2", "question_ids": [str(uuid.uuid4())]}, headers=as_admin)
    assert r.status_code == 404
    assert r.json()["code"] == "QUESTION_NOT_FOUND"


def test_regular_user_cannot_create_content(client, as_student):
    r = client.post("/handouts", json={"title": "Notes", "file_url": "https://x/y.pdf"}, headers=as_student)
    assert r.status_code == 403
