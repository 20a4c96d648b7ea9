"""
Topic: self-referential category tree used to tag questions and library content.
parent_id is a plain nullable FK; cycles are prevented in services.topics, not by the schema.
(parent, name) is unique among active topics, NULL parent being one shared namespace for roots.
"""
from sqlalchemy import String, Integer, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin, LifecycleMixin, Lifecycle

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 512


class Topic(IdentityMixin, TimestampMixin, LifecycleMixin, Base):
    __tablename__ = "topics"

    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("topics.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    __table_args__ = (
        CheckConstraint("length(name) > 0 AND length(name) <= 255", name="topics_name_check"),
        CheckConstraint(
            "description IS NULL OR (length(description) > 0 AND length(description) <= 512)",
            name="topics_description_check",
        ),
    )

    parent = relationship("Topic", remote_side="Topic.id")

    @property
    def parent_public_id(self):
        return self.parent.public_id if self.parent is not None else None


# coalesce() folds root topics into a single bucket (same effect as UNIQUE NULLS NOT DISTINCT)
Index(
    "uq_topics_parent_name_active",
    func.coalesce(Topic.parent_id, 0),
    Topic.name,
    unique=True,
    postgresql_where=Topic.lifecycle == Lifecycle.ACTIVE.value,
    sqlite_where=Topic.lifecycle == Lifecycle.ACTIVE.value,
)
