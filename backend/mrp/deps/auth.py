"""
Auth dependencies — shared across all protected endpoints.

Usage in any route:
    from mrp.deps.auth import get_current_user
    from mrp.db.models import User

    @router.get("/protected")
    def protected(user: User = Depends(get_current_user)):
        ...
"""
import logging

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from mrp.core.config import settings
from mrp.core.security import authenticate
from mrp.db.models import User
from mrp.db.session import get_db
from mrp.services.auth_service import get_user_by_id

logger = logging.getLogger(__name__)


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the ``Authorization: Bearer <token>`` header to its User.

    Raises 401 on any failure, including a token that a later login has
    rotated out.
    """
    user = authenticate(authorization, lambda user_id: get_user_by_id(db, user_id))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_moderator(current_user: User = Depends(get_current_user)) -> User:
    """
    Gate for the moderation endpoints.

    Every authenticated user passes unless MODERATION_REQUIRES_ROLE is on,
    in which case only users flagged ``is_moderator`` do.
    """
    if settings.MODERATION_REQUIRES_ROLE and not current_user.is_moderator:
        logger.warning("User %s denied moderation access", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Moderator role required",
        )
    return current_user
