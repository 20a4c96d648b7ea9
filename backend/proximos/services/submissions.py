"""
Question submissions: answer, read back, list mine, and admin write-back of open-ended grades.
"""
import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.question import Question
from proximos.models.submission import QuestionSubmission
from proximos.models.types import parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_optional, write_transaction
from proximos.services.grading import grade_closed_ended, grade_open_ended
from proximos.services.questions import get_active_question

logger = logging.getLogger(__name__)


def submit_answer(
    db: Session, question_public_id, user: User, option_id: str | None = None, answer_text: str | None = None
) -> QuestionSubmission:
    """
    Closed-ended: option_id required, graded immediately (100/passed or 0/failed).
    Open-ended: non-empty answer_text required, stored with score NULL until graded.
    """
    question = get_active_question(db, question_public_id)
    submission = QuestionSubmission(question_id=question.id, user_id=user.id)

    if question.is_closed_ended:
        grade = grade_closed_ended(question.options, option_id)
        submission.question_option_id = grade.option.id
        submission.score = grade.score
        submission.passed = grade.passed
    else:
        text = clean_optional(answer_text)
        if text is None:
            raise errors.invalid_input({"answer_text": "required for open-ended questions"})
        submission.answer_text = text
        submission.passed = False

    with write_transaction(db):
        db.add(submission)
    db.refresh(submission)
    logger.info(
        "Submission %s for question %s (score=%s)", submission.public_id, question.public_id, submission.score
    )
    return submission


def _get_submission(db: Session, public_id) -> QuestionSubmission:
    pid = parse_public_id(public_id)
    submission = db.scalar(select(QuestionSubmission).where(QuestionSubmission.public_id == pid)) if pid else None
    if submission is None:
        raise errors.question_submission_not_found()
    return submission


def get_submission(db: Session, public_id, actor: User) -> QuestionSubmission:
    """Owner or platform admin; anyone else gets NOT_FOUND."""
    submission = _get_submission(db, public_id)
    if submission.user_id != actor.id and not actor.is_admin:
        raise errors.question_submission_not_found()
    return submission


def grade_submission(db: Session, public_id, score: int, feedback: str | None = None) -> QuestionSubmission:
    """Write back a grade for an open-ended answer; passed = score >= the question's passing score."""
    submission = _get_submission(db, public_id)
    question = submission.question
    if question.is_closed_ended:
        raise errors.invalid_input({"submission": "closed-ended answers are graded automatically"})
    grade = grade_open_ended(score, question.passing_score)

    with write_transaction(db):
        submission.score = grade.score
        submission.passed = grade.passed
        submission.answer_feedback = clean_optional(feedback)
    db.refresh(submission)
    logger.info("Submission %s graded: score=%s passed=%s", submission.public_id, grade.score, grade.passed)
    return submission


def _mine(user: User, statement: str | None):
    stmt = select(QuestionSubmission).where(QuestionSubmission.user_id == user.id)
    if statement:
        stmt = stmt.join(Question, Question.id == QuestionSubmission.question_id).where(
            Question.statement.ilike(f"%{statement.strip()}%")
        )
    return stmt


def list_my_submissions(
    db: Session, user: User, limit: int, offset: int, statement: str | None = None
) -> tuple[list[QuestionSubmission], int]:
    """Newest first. Returns (page, total)."""
    stmt = _mine(user, statement)
    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    rows = db.scalars(
        stmt.order_by(QuestionSubmission.submitted_at.desc(), QuestionSubmission.id.desc()).limit(limit).offset(offset)
    )
    return list(rows), total
