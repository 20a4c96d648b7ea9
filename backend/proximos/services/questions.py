"""
Question bank: create (closed-ended with options, open-ended with expected answer), get, list, archive,
and per-user difficulty feedback aggregated as medians.
"""
import logging
import statistics
from dataclasses import dataclass

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.question import Question, QuestionOption, QuestionFeedback, QuestionType, question_topics
from proximos.models.topic import Topic
from proximos.models.types import parse_public_id
from proximos.models.user import User
from proximos.services.common import clean_required, clean_optional, write_transaction
from proximos.services.topics import resolve_topic_ids

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2
DIFFICULTY_RANGE = (1, 3)


@dataclass
class DifficultySummary:
    votes: int = 0
    logic: float | None = None
    labor: float | None = None
    theory: float | None = None
    overall: float | None = None


def get_active_question(db: Session, public_id) -> Question:
    pid = parse_public_id(public_id)
    question = db.scalar(select(Question).where(Question.public_id == pid, Question.active())) if pid else None
    if question is None:
        raise errors.question_not_found()
    return question


def _build_options(options: list[dict] | None) -> list[QuestionOption]:
    """Closed-ended: at least two options with text, exactly one flagged correct."""
    options = options or []
    if len(options) < MIN_OPTIONS:
        raise errors.invalid_input({"options": f"at least {MIN_OPTIONS} options are required"})
    built = []
    for order, option in enumerate(options):
        built.append(
            QuestionOption(
                original_order=order,
                text=clean_required(option.get("text")),
                is_correct=bool(option.get("is_correct")),
            )
        )
    if sum(1 for o in built if o.is_correct) != 1:
        raise errors.invalid_input({"options": "exactly one option must be correct"})
    return built


def create_question(
    db: Session,
    actor: User,
    type: str,
    statement: str,
    options: list[dict] | None = None,
    expected_answer_text: str | None = None,
    passing_score: int | None = None,
    topic_ids: list[str] | None = None,
) -> Question:
    try:
        qtype = QuestionType(type)
    except ValueError:
        raise errors.invalid_input({"type": "must be open_ended or closed_ended"}) from None

    question = Question(type=qtype.value, statement=clean_required(statement), created_by_id=actor.id)
    if qtype is QuestionType.CLOSED_ENDED:
        question.options = _build_options(options)
    else:
        expected = clean_optional(expected_answer_text)
        if expected is None:
            raise errors.invalid_input({"expected_answer_text": "required for open-ended questions"})
        if passing_score is None or not 0 <= passing_score <= 100:
            raise errors.invalid_input({"passing_score": "must be between 0 and 100"})
        question.expected_answer_text = expected
        question.passing_score = passing_score
    question.topics = resolve_topic_ids(db, topic_ids)

    with write_transaction(db):
        db.add(question)
    db.refresh(question)
    logger.info("Question created: %s (%s, %s option(s))", question.public_id, qtype.value, len(question.options))
    return question


def archive_question(db: Session, public_id) -> None:
    question = get_active_question(db, public_id)
    with write_transaction(db):
        question.archive()
    logger.info("Question archived: %s", question.public_id)


def _question_filters(db: Session, statement: str | None, topic_id: str | None) -> list | None:
    clauses = [Question.active()]
    if statement:
        clauses.append(Question.statement.ilike(f"%{statement.strip()}%"))
    if topic_id:
        pid = parse_public_id(topic_id)
        topic = db.scalar(select(Topic).where(Topic.public_id == pid, Topic.active())) if pid else None
        if topic is None:
            return None
        tagged = select(question_topics.c.question_id).where(question_topics.c.topic_id == topic.id)
        clauses.append(Question.id.in_(tagged))
    return clauses


def count_questions(db: Session, statement: str | None = None, topic_id: str | None = None) -> int:
    clauses = _question_filters(db, statement, topic_id)
    if clauses is None:
        return 0
    return db.scalar(select(func.count()).select_from(Question).where(*clauses)) or 0


def list_questions(
    db: Session, limit: int, offset: int, statement: str | None = None, topic_id: str | None = None
) -> list[Question]:
    """Newest first."""
    clauses = _question_filters(db, statement, topic_id)
    if clauses is None:
        return []
    stmt = select(Question).where(*clauses).order_by(Question.created_at.desc(), Question.id.desc())
    return list(db.scalars(stmt.limit(limit).offset(offset)))


def _check_difficulty(name: str, value: int) -> int:
    low, high = DIFFICULTY_RANGE
    if not isinstance(value, int) or not low <= value <= high:
        raise errors.invalid_input({name: f"must be between {low} and {high}"})
    return value


def upsert_feedback(db: Session, public_id, user: User, logic: int, labor: int, theory: int) -> QuestionFeedback:
    """One vote per (question, user); voting again replaces the previous vote."""
    question = get_active_question(db, public_id)
    values = {
        "difficulty_logic": _check_difficulty("difficulty_logic", logic),
        "difficulty_labor": _check_difficulty("difficulty_labor", labor),
        "difficulty_theory": _check_difficulty("difficulty_theory", theory),
    }
    feedback = db.scalar(
        select(QuestionFeedback).where(QuestionFeedback.question_id == question.id, QuestionFeedback.user_id == user.id)
    )
    with write_transaction(db):
        if feedback is None:
            feedback = QuestionFeedback(question_id=question.id, user_id=user.id, **values)
            db.add(feedback)
        else:
            for key, value in values.items():
                setattr(feedback, key, value)
    db.refresh(feedback)
    logger.info("Feedback recorded for question %s", question.public_id)
    return feedback


def difficulty_summary(db: Session, question: Question) -> DifficultySummary:
    rows = db.execute(
        select(
            QuestionFeedback.difficulty_logic, QuestionFeedback.difficulty_labor, QuestionFeedback.difficulty_theory
        ).where(QuestionFeedback.question_id == question.id)
    ).all()
    if not rows:
        return DifficultySummary()
    logic = [r[0] for r in rows]
    labor = [r[1] for r in rows]
    theory = [r[2] for r in rows]
    return DifficultySummary(
        votes=len(rows),
        logic=float(statistics.median(logic)),
        labor=float(statistics.median(labor)),
        theory=float(statistics.median(theory)),
        overall=float(statistics.median(logic + labor + theory)),
    )
