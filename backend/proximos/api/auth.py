"""
Auth routes: first-admin setup, register (role regular), login (JWT in cookie and body), logout, GET /auth/me.
"""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from proximos.config import settings
from proximos.database import get_db
from proximos.models.user import User
from proximos.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse
from proximos.services.auth import create_access_token
from proximos.services.users import authenticate, create_user, setup_first_admin
from proximos.api.deps import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.public_id), name=user.name, email=user.email, role=user.role, created_at=user.created_at
    )


@router.post("/setup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def setup(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create the first platform admin. 409 SETUP_UNAVAILABLE once any user exists."""
    return user_to_response(setup_first_admin(db, data.name, data.email, data.password))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user; role is regular."""
    return user_to_response(create_user(db, data.name, data.email, data.password))


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Login with email/password; sets the auth cookie and returns the JWT."""
    user = authenticate(db, data.email, data.password)
    token = create_access_token(user)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        max_age=settings.jwt_expire_hours * 3600,
    )
    logger.info("User logged in: %s", user.public_id)
    return TokenResponse(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key=settings.auth_cookie_name)
    return response


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Return current user (id, name, email, role)."""
    return user_to_response(current_user)
