"""
Favorite business logic — a set of (user, media) pairs.
"""
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mrp.db.models import Favorite, MediaEntry
from mrp.services.errors import ValidationError
from mrp.services.media_service import get_media_by_id


class UnknownMediaError(ValidationError):
    """Raised when favoriting a media entry that does not exist."""


def is_favorite(db: Session, user_id: UUID, media_id: UUID) -> bool:
    return (
        db.query(Favorite.id)
        .filter(Favorite.user_id == user_id, Favorite.media_id == media_id)
        .first()
    ) is not None


def add_favorite(db: Session, user_id: UUID, media_id: UUID) -> bool:
    """
    Mark a media entry as favorite. Idempotent.

    Returns True when a new row was written, False when it already existed.
    """
    if get_media_by_id(db, media_id) is None:
        raise UnknownMediaError(f"Media entry {media_id} not found")

    if is_favorite(db, user_id, media_id):
        return False

    db.add(Favorite(user_id=user_id, media_id=media_id))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same pair first
        db.rollback()
        return False
    return True


def remove_favorite(db: Session, user_id: UUID, media_id: UUID) -> None:
    """Drop the pair if present. Idempotent."""
    db.query(Favorite).filter(
        Favorite.user_id == user_id,
        Favorite.media_id == media_id,
    ).delete(synchronize_session=False)
    db.commit()


def toggle_favorite(db: Session, user_id: UUID, media_id: UUID) -> bool:
    """Flip the pair. Returns True if now a favorite, False if removed."""
    if is_favorite(db, user_id, media_id):
        remove_favorite(db, user_id, media_id)
        return False
    add_favorite(db, user_id, media_id)
    return True


def list_favorites(db: Session, user_id: UUID) -> list[MediaEntry]:
    """The user's favorite media, most recently favorited first."""
    return (
        db.query(MediaEntry)
        .join(Favorite, Favorite.media_id == MediaEntry.id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), MediaEntry.title.asc())
        .all()
    )


def count_favorites(db: Session, media_id: UUID) -> int:
    return (
        db.query(func.count(Favorite.id))
        .filter(Favorite.media_id == media_id)
        .scalar()
    ) or 0
