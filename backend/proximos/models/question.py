"""
Question: closed_ended (options, one flagged correct, auto-graded) or open_ended
(expected answer + passing score, graded later). Tagged with topics (M:N).
QuestionFeedback: per-user difficulty votes (logic, labor, theory on 1..3), aggregated as medians.
"""
import enum

from sqlalchemy import String, Integer, Text, Boolean, Column, ForeignKey, Table, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin, LifecycleMixin


class QuestionType(str, enum.Enum):
    OPEN_ENDED = "open_ended"
    CLOSED_ENDED = "closed_ended"


question_topics = Table(
    "question_topics",
    Base.metadata,
    Column("question_id", Integer, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("topic_id", Integer, ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True),
)


class Question(IdentityMixin, TimestampMixin, LifecycleMixin, Base):
    __tablename__ = "questions"

    type: Mapped[str] = mapped_column(String(20), nullable=False, default=QuestionType.CLOSED_ENDED.value)
    statement: Mapped[str] = mapped_column(Text, nullable=False)
    expected_answer_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    passing_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('open_ended', 'closed_ended')", name="questions_type_check"),
        CheckConstraint("passing_score IS NULL OR (passing_score BETWEEN 0 AND 100)", name="questions_passing_score_check"),
    )

    options = relationship(
        "QuestionOption", back_populates="question", cascade="all, delete-orphan",
        order_by="QuestionOption.original_order",
    )
    topics = relationship("Topic", secondary=question_topics)
    feedbacks = relationship("QuestionFeedback", back_populates="question", cascade="all, delete-orphan")

    @property
    def is_closed_ended(self) -> bool:
        return self.type == QuestionType.CLOSED_ENDED.value


class QuestionOption(IdentityMixin, TimestampMixin, Base):
    __tablename__ = "question_options"

    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    original_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (UniqueConstraint("question_id", "original_order", name="uq_question_options_order"),)

    question = relationship("Question", back_populates="options")


class QuestionFeedback(IdentityMixin, TimestampMixin, Base):
    __tablename__ = "question_feedbacks"

    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    difficulty_logic: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty_labor: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty_theory: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("question_id", "user_id", name="uq_question_feedbacks_user"),
        CheckConstraint("difficulty_logic BETWEEN 1 AND 3", name="question_feedbacks_logic_check"),
        CheckConstraint("difficulty_labor BETWEEN 1 AND 3", name="question_feedbacks_labor_check"),
        CheckConstraint("difficulty_theory BETWEEN 1 AND 3", name="question_feedbacks_theory_check"),
    )

    question = relationship("Question", back_populates="feedbacks")
