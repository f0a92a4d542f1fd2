"""
Auth business logic — registration, login, token rotation.

All DB writes go through this layer (not directly in routes).
"""
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mrp.core.security import hash_password, issue_token, verify_password
from mrp.db.models import User
from mrp.services.errors import ConflictError, InvalidCredentialsError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 3


# ── Custom exceptions ────────────────────────────────────────────────────────


class DuplicateUserError(ConflictError):
    """Raised when registration conflicts with an existing username."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"A user named {username!r} already exists")


# ── Service functions ────────────────────────────────────────────────────────


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    """Fetch a single user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, username: str | None, password: str | None) -> UUID:
    """
    Register a new user and return its id.

    - Strips surrounding whitespace from the username.
    - Requires a password of at least MIN_PASSWORD_LENGTH characters.
    - Stores only the PBKDF2 hash; the token column starts out NULL.
    """
    normalised_username = (username or "").strip()
    if not normalised_username:
        raise ValidationError("username is required")
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if get_user_by_username(db, normalised_username) is not None:
        raise DuplicateUserError(normalised_username)

    user = User(
        username=normalised_username,
        password_hash=hash_password(password),
        token=None,
    )
    db.add(user)

    try:
        db.flush()  # trigger INSERT; raises when a concurrent signup won
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateUserError(normalised_username) from exc

    db.commit()
    logger.info("Registered user %s", user.id)
    return user.id


def login_user(db: Session, username: str | None, password: str | None) -> str:
    """
    Verify credentials and return a freshly issued bearer token.

    The new token replaces whatever token the user held before, so earlier
    tokens stop authenticating.
    """
    user = get_user_by_username(db, (username or "").strip())
    if user is None or not verify_password(password or "", user.password_hash):
        logger.warning("Rejected login attempt")
        raise InvalidCredentialsError("Invalid credentials")

    token = issue_token(user.id, user.username)
    user.token = token
    db.add(user)
    db.commit()

    logger.info("User %s logged in", user.id)
    return token
