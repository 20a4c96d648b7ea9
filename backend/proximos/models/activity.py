"""
Activity: group-scoped assignment with a due date and an ordered checklist of items.
ActivityItem points at exactly one piece of content. The item type is never taken from the client:
ActivityItem.for_content(ref) sets the single foreign key and the type column together, and the
CHECK constraint rejects any row with zero or several references.
"""
import enum
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin, LifecycleMixin, Lifecycle


class ContentKind(str, enum.Enum):
    QUESTION = "question"
    VIDEO_LESSON = "video_lesson"
    HANDOUT = "handout"
    EXERCISE_LIST = "open_exercise_list"
    SIMULATED_EXAM = "simulated_exam"

    @property
    def column(self) -> str:
        return _KIND_COLUMNS[self]


_KIND_COLUMNS = {
    ContentKind.QUESTION: "question_id",
    ContentKind.VIDEO_LESSON: "video_lesson_id",
    ContentKind.HANDOUT: "handout_id",
    ContentKind.EXERCISE_LIST: "exercise_list_id",
    ContentKind.SIMULATED_EXAM: "simulated_exam_id",
}


@dataclass(frozen=True)
class ContentRef:
    """One piece of content: its kind plus its internal id."""
    kind: ContentKind
    id: int


def _exactly_one_sql(columns) -> str:
    return " + ".join(f"(CASE WHEN {c} IS NOT NULL THEN 1 ELSE 0 END)" for c in columns) + " = 1"


class Activity(IdentityMixin, TimestampMixin, LifecycleMixin, Base):
    __tablename__ = "activities"

    group_id: Mapped[int] = mapped_column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    group = relationship("Group")
    items = relationship(
        "ActivityItem", back_populates="activity", cascade="all, delete-orphan", order_by="ActivityItem.order_index"
    )


Index(
    "uq_activities_group_title_active",
    Activity.group_id,
    Activity.title,
    unique=True,
    postgresql_where=Activity.lifecycle == Lifecycle.ACTIVE.value,
    sqlite_where=Activity.lifecycle == Lifecycle.ACTIVE.value,
)


class ActivityItem(IdentityMixin, TimestampMixin, Base):
    __tablename__ = "activity_items"

    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)

    question_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("questions.id", ondelete="RESTRICT"))
    video_lesson_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("video_lessons.id", ondelete="RESTRICT"))
    handout_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("handouts.id", ondelete="RESTRICT"))
    exercise_list_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("exercise_lists.id", ondelete="RESTRICT"))
    simulated_exam_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("simulated_exams.id", ondelete="RESTRICT"))

    __table_args__ = (
        UniqueConstraint("activity_id", "order_index", name="uq_activity_items_order"),
        CheckConstraint(_exactly_one_sql(_KIND_COLUMNS.values()), name="activity_item_content_exclusive_check"),
        CheckConstraint(
            "type IN ('question', 'video_lesson', 'handout', 'open_exercise_list', 'simulated_exam')",
            name="activity_items_type_check",
        ),
    )

    activity = relationship("Activity", back_populates="items")
    question = relationship("Question")
    video_lesson = relationship("VideoLesson")
    handout = relationship("Handout")
    exercise_list = relationship("ExerciseList")
    simulated_exam = relationship("SimulatedExam")

    @classmethod
    def for_content(cls, ref: ContentRef, **fields) -> "ActivityItem":
        for column in ("type", *_KIND_COLUMNS.values()):
            if column in fields:
                raise TypeError(f"{column} is derived from the content reference")
        item = cls(type=ref.kind.value, **fields)
        setattr(item, ref.kind.column, ref.id)
        return item

    @property
    def content_ref(self) -> ContentRef:
        kind = ContentKind(self.type)
        return ContentRef(kind, getattr(self, kind.column))

    @property
    def content(self):
        """The referenced content row (Question, VideoLesson, ...)."""
        return getattr(self, ContentKind(self.type).column[: -len("_id")])
