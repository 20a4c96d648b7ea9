"""
User accounts: first-admin setup, registration and credential checks.
"""
import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from proximos import errors
from proximos.models.types import parse_public_id
from proximos.models.user import User, UserRole
from proximos.services.auth import hash_password, verify_password
from proximos.services.common import clean_required, write_transaction

logger = logging.getLogger(__name__)


def create_user(db: Session, name: str, email: str, password: str, role: UserRole = UserRole.REGULAR) -> User:
    if not password:
        raise errors.invalid_input({"password": "required"})
    user = User(
        name=clean_required(name, 255),
        email=clean_required(email, 255).lower(),
        password_hash=hash_password(password),
        role=role.value,
    )
    with write_transaction(db, conflict=errors.email_taken):
        db.add(user)
    db.refresh(user)
    logger.info("User created: %s (role=%s)", user.public_id, user.role)
    return user


def setup_first_admin(db: Session, name: str, email: str, password: str) -> User:
    """Only available while the users table is empty."""
    if db.scalar(select(func.count()).select_from(User)):
        raise errors.setup_unavailable()
    return create_user(db, name, email, password, role=UserRole.ADMIN)


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.scalar(select(User).where(User.email == (email or "").strip().lower()))
    if user is None or not verify_password(password or "", user.password_hash):
        logger.debug("Login rejected for %s", email)
        raise errors.invalid_credentials()
    return user


def get_user_by_public_id(db: Session, public_id) -> User | None:
    pid = parse_public_id(public_id)
    return db.scalar(select(User).where(User.public_id == pid)) if pid else None
