"""
Group (classroom) and membership. A member counts only once accepted (accepted_by_id set);
group admins manage activities and members.
"""
import enum
from datetime import datetime

from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin, LifecycleMixin


class MemberRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class Group(IdentityMixin, TimestampMixin, LifecycleMixin, Base):
    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    access_type: Mapped[str] = mapped_column(String(20), nullable=False, default="closed")
    visibility_type: Mapped[str] = mapped_column(String(20), nullable=False, default="private")
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    __table_args__ = (
        CheckConstraint("access_type IN ('open', 'closed')", name="groups_access_type_check"),
        CheckConstraint("visibility_type IN ('public', 'private')", name="groups_visibility_type_check"),
    )

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")


class GroupMember(Base):
    __tablename__ = "group_members"

    group_id: Mapped[int] = mapped_column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=MemberRole.MEMBER.value)
    accepted_by_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("role IN ('admin', 'member')", name="group_members_role_check"),)

    group = relationship("Group", back_populates="members")
    user = relationship("User", foreign_keys=[user_id])

    @property
    def is_accepted(self) -> bool:
        return self.accepted_by_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_accepted and self.role == MemberRole.ADMIN.value
