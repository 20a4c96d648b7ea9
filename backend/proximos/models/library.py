"""
Content library: video lessons, handouts, exercise lists, simulated exams.
Each is archivable, titled (unique among active rows) and topic-tagged. URLs are plain strings;
uploading the underlying files is handled outside this service.
"""
from sqlalchemy import String, Integer, Text, Column, ForeignKey, Table, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin, LifecycleMixin, Lifecycle

TITLE_MAX_LENGTH = 255


def _topic_link_table(name: str, owner_table: str, owner_column: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column(owner_column, Integer, ForeignKey(f"{owner_table}.id", ondelete="CASCADE"), primary_key=True),
        Column("topic_id", Integer, ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True),
    )


video_lesson_topics = _topic_link_table("video_lesson_topics", "video_lessons", "video_lesson_id")
handout_topics = _topic_link_table("handout_topics", "handouts", "handout_id")
exercise_list_topics = _topic_link_table("exercise_list_topics", "exercise_lists", "exercise_list_id")

simulated_exam_questions = Table(
    "simulated_exam_questions",
    Base.metadata,
    Column("simulated_exam_id", Integer, ForeignKey("simulated_exams.id", ondelete="CASCADE"), primary_key=True),
    Column("question_id", Integer, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
)


class LibraryContentMixin(IdentityMixin, TimestampMixin, LifecycleMixin):
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)


class VideoLesson(LibraryContentMixin, Base):
    __tablename__ = "video_lessons"

    video_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("duration_minutes > 0", name="video_lessons_duration_check"),)

    topics = relationship("Topic", secondary=video_lesson_topics)


class Handout(LibraryContentMixin, Base):
    __tablename__ = "handouts"

    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)

    topics = relationship("Topic", secondary=handout_topics)


class ExerciseList(LibraryContentMixin, Base):
    __tablename__ = "exercise_lists"

    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)

    topics = relationship("Topic", secondary=exercise_list_topics)


class SimulatedExam(LibraryContentMixin, Base):
    __tablename__ = "simulated_exams"

    questions = relationship("Question", secondary=simulated_exam_questions)


for _model in (VideoLesson, Handout, ExerciseList, SimulatedExam):
    Index(
        f"uq_{_model.__tablename__}_title_active",
        _model.title,
        unique=True,
        postgresql_where=_model.lifecycle == Lifecycle.ACTIVE.value,
        sqlite_where=_model.lifecycle == Lifecycle.ACTIVE.value,
    )
