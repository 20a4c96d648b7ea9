"""
Auth service: password hashing and JWT creation/verification.
Uses bcrypt directly (no passlib) to avoid passlib/bcrypt version conflicts.
Token claims: sub (user public id), email, role (admin | regular), exp.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
from jose import JWTError, jwt

from proximos.config import settings
from proximos.models.types import parse_public_id
from proximos.models.user import User, UserRole

# Bcrypt limit is 72 bytes; use 71 so we never exceed
BCRYPT_MAX_BYTES = 71


@dataclass(frozen=True)
class TokenClaims:
    user_public_id: UUID
    email: str
    role: UserRole


def _truncate_to_bytes(s: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    if not s:
        return b""
    return s.encode("utf-8")[:max_bytes]


def hash_password(password: str) -> str:
    """Hash password for storage. Raises ValueError if password is None."""
    if password is None:
        raise ValueError("password is required")
    return bcrypt.hashpw(_truncate_to_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_truncate_to_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user: User) -> str:
    """Sign a token for the user. A role outside admin | regular raises ValueError."""
    role = UserRole(user.role)
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    payload = {"sub": str(user.public_id), "email": user.email, "role": role.value, "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def read_access_token(token: str) -> TokenClaims | None:
    """Verified claims, or None for a bad signature, an expired token, a non-UUID subject or an unknown role."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    user_public_id = parse_public_id(payload.get("sub"))
    if user_public_id is None:
        return None
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        return None
    return TokenClaims(user_public_id=user_public_id, email=payload.get("email") or "", role=role)
