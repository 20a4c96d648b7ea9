"""
QuestionSubmission: one answer by one user. Closed-ended answers are graded on submit;
open-ended answers keep score NULL until an admin writes a grade back.
"""
from datetime import datetime

from sqlalchemy import Integer, Text, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from proximos.database import Base
from proximos.models.types import IdentityMixin


class QuestionSubmission(IdentityMixin, Base):
    __tablename__ = "question_submissions"

    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_option_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("question_options.id", ondelete="SET NULL"), nullable=True
    )
    answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    answer_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("score IS NULL OR (score BETWEEN 0 AND 100)", name="question_submissions_score_check"),
    )

    question = relationship("Question")
    user = relationship("User")
    option = relationship("QuestionOption")

    @property
    def is_graded(self) -> bool:
        return self.score is not None
