"""
Grading: pure rules (no DB) and the submission flow through the API.
"""
import uuid
from types import SimpleNamespace

import pytest

from conftest import create_closed_question, create_open_question, auth_headers
from proximos.errors import AppError
from proximos.services.grading import grade_closed_ended, grade_open_ended


def _options():
    return [
        SimpleNamespace(public_id=uuid.uuid4(), is_correct=False),
        SimpleNamespace(public_id=uuid.uuid4(), is_correct=True),
        SimpleNamespace(public_id=uuid.uuid4(), is_correct=False),
    ]


def test_correct_option_passes_with_full_score():
    options = _options()
    grade = grade_closed_ended(options, str(options[1].public_id))
    assert grade.passed is True
    assert grade.score == 100
    assert grade.option is options[1]


def test_any_other_option_fails_with_zero():
    options = _options()
    for option in (options[0], options[2]):
        grade = grade_closed_ended(options, option.public_id)
        assert grade.passed is False
        assert grade.score == 0


def test_unknown_or_missing_option_is_invalid_input():
    options = _options()
    for selected in (str(uuid.uuid4()), None, "garbage"):
        with pytest.raises(AppError) as exc:
            grade_closed_ended(options, selected)
        assert exc.value.code == "INVALID_INPUT"


def test_open_ended_passes_at_threshold():
    assert grade_open_ended(60, 60).passed is True
    assert grade_open_ended(59, 60).passed is False
    assert grade_open_ended(100, None).passed is True
    with pytest.raises(AppError):
        grade_open_ended(101, 60)


def _correct_and_wrong(question):
    """Admin view of a question carries is_correct on each option."""
    correct = next(o for o in question["options"] if o["is_correct"])
    wrong = next(o for o in question["options"] if not o["is_correct"])
    return correct, wrong


def test_submit_closed_ended(client, as_admin, as_student):
    question = create_closed_question(client, as_admin)
    correct, wrong = _correct_and_wrong(question)

    r = client.post(f"/questions/{question['id']}/submissions", json={"option_id": correct["id"]}, headers=as_student)
    assert r.status_code == 201, r.text
    body = r.json()
    assert (body["passed"], body["score"], body["graded"]) == (True, 100, True)
    assert body["option_id"] == correct["id"]

    r = client.post(f"/questions/{question['id']}/submissions", json={"option_id": wrong["id"]}, headers=as_student)
    assert (r.json()["passed"], r.json()["score"]) == (False, 0)


def test_submit_closed_ended_without_option_is_rejected(client, as_admin, as_student):
    question = create_closed_question(client, as_admin)
    r = client.post(f"/questions/{question['id']}/submissions", json={}, headers=as_student)
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"


def test_student_does_not_see_correct_flags(client, as_admin, as_student):
    question = create_closed_question(client, as_admin)
    r = client.get(f"/questions/{question['id']}", headers=as_student)
    assert r.status_code == 200
    assert all(o["is_correct"] is None for o in r.json()["options"])


def test_open_ended_stays_ungraded_until_written_back(client, as_admin, as_student):
    question = create_open_question(client, as_admin, passing_score=70)
    r = client.post(f"/questions/{question['id']}/submissions", json={"answer_text": "  "}, headers=as_student)
    assert r.status_code == 400

    r = client.post(
        f"/questions/{question['id']}/submissions", json={"answer_text": "It calls itself."}, headers=as_student
    )
    assert r.status_code == 201
    submission = r.json()
    assert submission["score"] is None
    assert submission["graded"] is False
    assert submission["passed"] is False

    r = client.put(
        f"/question-submissions/{submission['id']}/grade", json={"score": 80, "feedback": "Good"}, headers=as_admin
    )
    assert r.status_code == 200
    assert (r.json()["score"], r.json()["passed"], r.json()["answer_feedback"]) == (80, True, "Good")

    r = client.put(f"/question-submissions/{submission['id']}/grade", json={"score": 69}, headers=as_admin)
    assert (r.json()["score"], r.json()["passed"]) == (69, False)


def test_grade_write_back_needs_admin_and_open_ended(client, as_admin, as_student):
    question = create_closed_question(client, as_admin)
    correct, _ = _correct_and_wrong(question)
    submission = client.post(
        f"/questions/{question['id']}/submissions", json={"option_id": correct["id"]}, headers=as_student
    ).json()

    r = client.put(f"/question-submissions/{submission['id']}/grade", json={"score": 10}, headers=as_student)
    assert r.status_code == 403
    r = client.put(f"/question-submissions/{submission['id']}/grade", json={"score": 10}, headers=as_admin)
    assert r.status_code == 400
    r = client.put(f"/question-submissions/{submission['id']}/grade", json={"score": 150}, headers=as_admin)
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_REQUEST_BODY"


def test_submissions_are_private_to_owner(client, as_admin, student, make_user):
    question = create_open_question(client, as_admin)
    owner = auth_headers(student)
    other = auth_headers(make_user(name="Other"))
    submission = client.post(
        f"/questions/{question['id']}/submissions", json={"answer_text": "Answer"}, headers=owner
    ).json()

    assert client.get(f"/question-submissions/{submission['id']}", headers=owner).status_code == 200
    assert client.get(f"/question-submissions/{submission['id']}", headers=as_admin).status_code == 200
    r = client.get(f"/question-submissions/{submission['id']}", headers=other)
    assert r.status_code == 404
    assert r.json()["code"] == "QUESTION_SUBMISSION_NOT_FOUND"


def test_list_my_submissions(client, as_admin, as_student):
    first = create_open_question(client, as_admin, statement="Explain recursion.")
    second = create_open_question(client, as_admin, statement="Explain iteration.")
    for q in (first, second):
        client.post(f"/questions/{q['id']}/submissions", json={"answer_text": "Answer"}, headers=as_student)
    client.post(f"/questions/{first['id']}/submissions", json={"answer_text": "Admin"}, headers=as_admin)

    r = client.get("/question-submissions/me", headers=as_student)
    assert r.status_code == 200
    assert r.json()["total_items"] == 2

    r = client.get("/question-submissions/me", params={"statement": "recursion"}, headers=as_student)
    assert [s["question_id"] for s in r.json()["data"]] == [first["id"]]
