"""
User model: auth (email + password), role (admin | regular).
Content is created by admins; groups, activities and submissions are scoped by membership.
"""
import enum

from sqlalchemy import String, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from proximos.database import Base
from proximos.models.types import IdentityMixin, TimestampMixin


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    REGULAR = "regular"


class User(IdentityMixin, TimestampMixin, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.REGULAR.value)

    __table_args__ = (CheckConstraint("role IN ('admin', 'regular')", name="users_role_check"),)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
