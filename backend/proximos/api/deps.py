"""
Shared dependencies: get_current_user from the auth cookie or a Bearer token, require_admin on top.
"""
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from proximos import errors
from proximos.config import settings
from proximos.database import get_db
from proximos.models.user import User
from proximos.services.auth import read_access_token
from proximos.services.common import normalize_page, total_pages
from proximos.services.users import get_user_by_public_id

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def _request_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """Cookie first (browser clients), then Authorization: Bearer."""
    token = (request.cookies.get(settings.auth_cookie_name) or "").strip()
    if token:
        return token
    if credentials and (getattr(credentials, "credentials", None) or "").strip():
        return credentials.credentials.strip()
    return None


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Require a valid token; return User or 401."""
    token = _request_token(request, credentials)
    if not token:
        logger.debug("Auth failed: no token in cookie or Authorization header")
        raise errors.unauthorized()
    claims = read_access_token(token)
    if claims is None:
        logger.debug("Auth failed: invalid or expired token")
        raise errors.unauthorized()
    user = get_user_by_public_id(db, claims.user_public_id)
    if not user:
        logger.debug("Auth failed: token subject no longer exists")
        raise errors.unauthorized()
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise errors.forbidden()
    return current_user


class PageParams:
    """page_number / page_size query parameters, normalized (bad values fall back to defaults)."""

    def __init__(self, page_number: int = 1, page_size: int = 0):
        self.page_number, self.page_size = normalize_page(page_number, page_size)

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    def meta(self, total: int) -> dict:
        return {
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_items": total,
            "total_pages": total_pages(total, self.page_size),
        }
