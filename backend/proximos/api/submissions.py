"""
Submissions API: my submissions, single submission (owner or admin), admin grade write-back.
Answering lives under /questions/{id}/submissions.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from proximos.database import get_db
from proximos.models.submission import QuestionSubmission
from proximos.models.user import User
from proximos.schemas.submission import GradeRequest, SubmissionResponse, SubmissionListResponse
from proximos.services import submissions as submission_service
from proximos.api.deps import get_current_user, require_admin, PageParams

router = APIRouter(prefix="/question-submissions", tags=["submissions"])


def submission_to_response(s: QuestionSubmission) -> SubmissionResponse:
    return SubmissionResponse(
        id=str(s.public_id),
        question_id=str(s.question.public_id),
        question_statement=s.question.statement,
        option_id=str(s.option.public_id) if s.option is not None else None,
        answer_text=s.answer_text,
        score=s.score,
        passed=s.passed,
        graded=s.is_graded,
        answer_feedback=s.answer_feedback,
        submitted_at=s.submitted_at,
        updated_at=s.updated_at,
    )


@router.get("/me", response_model=SubmissionListResponse)
def list_mine(
    statement: str | None = None,
    page: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current user's submissions, newest first; statement filters by question text."""
    rows, total = submission_service.list_my_submissions(db, current_user, page.page_size, page.offset, statement)
    return SubmissionListResponse(data=[submission_to_response(s) for s in rows], **page.meta(total))


@router.get("/{submission_id}", response_model=SubmissionResponse)
def get_submission(submission_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return submission_to_response(submission_service.get_submission(db, submission_id, current_user))


@router.put("/{submission_id}/grade", response_model=SubmissionResponse)
def grade_submission(
    submission_id: str,
    data: GradeRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Open-ended only; closed-ended submissions are graded on submit."""
    submission = submission_service.grade_submission(db, submission_id, data.score, data.feedback)
    return submission_to_response(submission)
