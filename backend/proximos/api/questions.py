"""
Questions API: create/delete (platform admin), get/list (any user), difficulty feedback,
and answering (POST /questions/{id}/submissions).
Option correctness is only returned to platform admins.
"""
from dataclasses import asdict

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.question import Question, QuestionFeedback
from proximos.models.user import User
from proximos.schemas.question import (
    QuestionCreateRequest,
    QuestionResponse,
    QuestionListResponse,
    OptionResponse,
    TopicRef,
    DifficultyResponse,
    FeedbackRequest,
    FeedbackResponse,
)
from proximos.schemas.submission import SubmitAnswerRequest, SubmissionResponse
from proximos.services import questions as question_service
from proximos.services.submissions import submit_answer
from proximos.api.deps import get_current_user, require_admin, PageParams
from proximos.api.submissions import submission_to_response

router = APIRouter(prefix="/questions", tags=["questions"])


def question_to_response(q: Question, viewer: User, difficulty: DifficultyResponse | None = None) -> QuestionResponse:
    show_answers = viewer.is_admin
    return QuestionResponse(
        id=str(q.public_id),
        type=q.type,
        statement=q.statement,
        expected_answer_text=q.expected_answer_text if show_answers else None,
        passing_score=q.passing_score,
        options=[
            OptionResponse(
                id=str(o.public_id),
                original_order=o.original_order,
                text=o.text,
                is_correct=o.is_correct if show_answers else None,
            )
            for o in q.options
        ],
        topics=[TopicRef(id=str(t.public_id), name=t.name) for t in q.topics if t.is_active],
        difficulty=difficulty,
        is_active=q.is_active,
        created_at=q.created_at,
        updated_at=q.updated_at,
    )


def _feedback_to_response(f: QuestionFeedback, question: Question) -> FeedbackResponse:
    return FeedbackResponse(
        id=str(f.public_id),
        question_id=str(question.public_id),
        difficulty_logic=f.difficulty_logic,
        difficulty_labor=f.difficulty_labor,
        difficulty_theory=f.difficulty_theory,
        updated_at=f.updated_at,
    )


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
def create_question(
    data: QuestionCreateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    question = question_service.create_question(
        db,
        current_user,
        type=data.type,
        statement=data.statement,
        options=[o.model_dump() for o in data.options],
        expected_answer_text=data.expected_answer_text,
        passing_score=data.passing_score,
        topic_ids=data.topic_ids,
    )
    return question_to_response(question, current_user)


@router.get("", response_model=QuestionListResponse)
def list_questions(
    statement: str | None = None,
    topic_id: str | None = None,
    page: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    total = question_service.count_questions(db, statement, topic_id)
    rows = question_service.list_questions(db, page.page_size, page.offset, statement, topic_id)
    return QuestionListResponse(data=[question_to_response(q, current_user) for q in rows], **page.meta(total))


@router.get("/{question_id}", response_model=QuestionResponse)
def get_question(question_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Question with median difficulty from user feedback."""
    question = question_service.get_active_question(db, question_id)
    summary = question_service.difficulty_summary(db, question)
    return question_to_response(question, current_user, DifficultyResponse(**asdict(summary)))


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(question_id: str, current_user: User = Depends(require_admin), db: Session = Depends(get_db)):
    question_service.archive_question(db, question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{question_id}/feedback", response_model=FeedbackResponse)
def put_feedback(
    question_id: str,
    data: FeedbackRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create or replace the current user's difficulty vote."""
    feedback = question_service.upsert_feedback(
        db, question_id, current_user, data.difficulty_logic, data.difficulty_labor, data.difficulty_theory
    )
    return _feedback_to_response(feedback, feedback.question)


@router.post("/{question_id}/submissions", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit(
    question_id: str,
    data: SubmitAnswerRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Closed-ended answers come back graded; open-ended ones with score null."""
    submission = submit_answer(db, question_id, current_user, data.option_id, data.answer_text)
    return submission_to_response(submission)
