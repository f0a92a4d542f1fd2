"""
Users API — /api/users
──────────────────────
Endpoints:
  POST /api/users/register                — Create account (201)
  POST /api/users/login                   — Authenticate, return bearer token
  GET  /api/users/{username}/profile      — Own profile (requires bearer token)
  GET  /api/users/{username}/statistics   — Own rating/favorite statistics
  GET  /api/users/{username}/activity     — Own latest rating + star distribution
  GET  /api/users/{username}/ratings      — Every rating the user authored
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mrp.db.models import User
from mrp.db.session import get_db
from mrp.deps.auth import get_current_user
from mrp.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserProfileResponse,
)
from mrp.schemas.profile import UserActivityResponse, UserStatisticsResponse
from mrp.schemas.ratings import RatingResponse
from mrp.services.auth_service import DuplicateUserError, login_user, register_user
from mrp.services.errors import InvalidCredentialsError, ValidationError
from mrp.services.profile_service import get_user_activity, get_user_statistics
from mrp.services.rating_service import list_ratings_by_user

router = APIRouter()


def _require_self(current_user: User, username: str) -> None:
    if current_user.username != username:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


# ── Routes ────────────────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """
    Create a new user account.

    Returns 400 on missing username / short password, 409 if taken.
    """
    try:
        register_user(db, payload.username, payload.password)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DuplicateUserError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate with username + password, return a fresh bearer token."""
    try:
        token = login_user(db, payload.username, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    return TokenResponse(token=token)


@router.get("/{username}/profile", response_model=UserProfileResponse)
def profile(
    username: str,
    current_user: User = Depends(get_current_user),
) -> UserProfileResponse:
    """Return the caller's profile; other users' profiles are 403."""
    _require_self(current_user, username)
    return UserProfileResponse.model_validate(current_user)


@router.get("/{username}/statistics", response_model=UserStatisticsResponse)
def statistics(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserStatisticsResponse:
    _require_self(current_user, username)
    return UserStatisticsResponse.model_validate(get_user_statistics(db, current_user.id))


@router.get("/{username}/activity", response_model=UserActivityResponse)
def activity(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserActivityResponse:
    _require_self(current_user, username)
    return UserActivityResponse.model_validate(get_user_activity(db, current_user.id))


@router.get("/{username}/ratings", response_model=list[RatingResponse])
def own_ratings(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[RatingResponse]:
    """All of the caller's ratings, pending and rejected included."""
    _require_self(current_user, username)
    return [RatingResponse.model_validate(r) for r in list_ratings_by_user(db, current_user.id)]
