"""
Rating business logic — creation, author edits and the moderation workflow.

A rating's approval_status is a small state machine:

    pending  --approve-->  approved
    pending  --reject--->  rejected
    approved --author changes comment--> pending
    rejected --author changes comment--> pending

Only approved ratings are public and count towards a media's average score.
"""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from mrp.db.models import ApprovalStatusEnum, Rating
from mrp.schemas.ratings import RatingUpdateRequest
from mrp.services.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from mrp.services.media_service import get_media

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


class RatingNotFoundError(NotFoundError):
    """Raised when a rating does not exist."""


class NotRatingOwnerError(ForbiddenError):
    """Raised when a user tries to modify another user's rating."""


class InvalidStarsError(ValidationError):
    """Raised when stars fall outside 1..5."""


class InvalidTransitionError(ConflictError):
    """Raised when moderation tries to flip approved <-> rejected directly."""


def validate_stars(stars: Any) -> int:
    if isinstance(stars, bool) or not isinstance(stars, int):
        raise InvalidStarsError("stars must be an integer between 1 and 5")
    if stars < MIN_STARS or stars > MAX_STARS:
        raise InvalidStarsError("stars must be between 1 and 5")
    return stars


def _clean_comment(comment: str | None) -> str | None:
    if comment is None:
        return None
    stripped = comment.strip()
    return stripped or None


def get_rating_by_id(db: Session, rating_id: UUID) -> Rating | None:
    return db.query(Rating).filter(Rating.id == rating_id).first()


def get_rating(db: Session, rating_id: UUID) -> Rating:
    rating = get_rating_by_id(db, rating_id)
    if rating is None:
        raise RatingNotFoundError(f"Rating {rating_id} not found")
    return rating


def create_rating(
    db: Session,
    media_id: UUID,
    user_id: UUID,
    stars: Any,
    comment: str | None = None,
) -> Rating:
    """Create a pending rating. The rater need not own the media."""
    validated_stars = validate_stars(stars)
    get_media(db, media_id)

    rating = Rating(
        media_id=media_id,
        user_id=user_id,
        stars=validated_stars,
        comment=_clean_comment(comment),
        approval_status=ApprovalStatusEnum.PENDING.value,
    )
    db.add(rating)
    db.commit()
    db.refresh(rating)
    logger.info("User %s rated media %s (rating %s)", user_id, media_id, rating.id)
    return rating


def _owned_rating_or_raise(db: Session, rating_id: UUID, user_id: UUID) -> Rating:
    rating = (
        db.query(Rating)
        .filter(Rating.id == rating_id, Rating.user_id == user_id)
        .first()
    )
    if rating is not None:
        return rating
    if get_rating_by_id(db, rating_id) is None:
        raise RatingNotFoundError(f"Rating {rating_id} not found")
    raise NotRatingOwnerError("You can only modify your own ratings")


def update_rating(
    db: Session,
    rating_id: UUID,
    user_id: UUID,
    payload: RatingUpdateRequest,
) -> Rating:
    """
    Apply an author's edit.

    Only keys present in the request body are touched. Changing the comment
    text of an approved or rejected rating sends it back to moderation;
    a stars-only edit keeps the current status.
    """
    rating = _owned_rating_or_raise(db, rating_id, user_id)
    provided = payload.model_fields_set

    if "stars" in provided:
        rating.stars = validate_stars(payload.stars)

    if "comment" in provided:
        new_comment = _clean_comment(payload.comment)
        if new_comment != rating.comment:
            rating.comment = new_comment
            if rating.approval_status != ApprovalStatusEnum.PENDING.value:
                logger.info("Rating %s returned to moderation after edit", rating.id)
                rating.approval_status = ApprovalStatusEnum.PENDING.value

    db.add(rating)
    db.commit()
    db.refresh(rating)
    return rating


def delete_rating(db: Session, rating_id: UUID, user_id: UUID) -> None:
    """Delete a rating. Only the author can delete."""
    deleted = (
        db.query(Rating)
        .filter(Rating.id == rating_id, Rating.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        if get_rating_by_id(db, rating_id) is None:
            raise RatingNotFoundError(f"Rating {rating_id} not found")
        raise NotRatingOwnerError("You can only delete your own ratings")
    db.commit()


def list_ratings_for_media(db: Session, media_id: UUID) -> list[Rating]:
    """Public ratings of a media entry: approved only, newest first."""
    return (
        db.query(Rating)
        .filter(
            Rating.media_id == media_id,
            Rating.approval_status == ApprovalStatusEnum.APPROVED.value,
        )
        .order_by(Rating.created_at.desc(), Rating.id.asc())
        .all()
    )


def list_ratings_by_user(db: Session, user_id: UUID) -> list[Rating]:
    """Every rating a user authored, in any status, newest first."""
    return (
        db.query(Rating)
        .filter(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.asc())
        .all()
    )


def list_pending_ratings(db: Session) -> list[Rating]:
    """Moderation queue, oldest first."""
    return (
        db.query(Rating)
        .filter(Rating.approval_status == ApprovalStatusEnum.PENDING.value)
        .order_by(Rating.created_at.asc(), Rating.id.asc())
        .all()
    )


def _moderate(db: Session, rating_id: UUID, target: ApprovalStatusEnum) -> Rating:
    moved = (
        db.query(Rating)
        .filter(
            Rating.id == rating_id,
            Rating.approval_status == ApprovalStatusEnum.PENDING.value,
        )
        .update({"approval_status": target.value}, synchronize_session=False)
    )
    if moved:
        db.commit()
        logger.info("Rating %s moved to %s", rating_id, target.value)
    else:
        db.rollback()

    rating = get_rating(db, rating_id)
    db.refresh(rating)
    if rating.approval_status != target.value:
        raise InvalidTransitionError(
            f"Rating {rating_id} is {rating.approval_status} and cannot become {target.value}"
        )
    return rating


def approve_rating(db: Session, rating_id: UUID) -> Rating:
    """pending -> approved. Approving an approved rating is a no-op."""
    return _moderate(db, rating_id, ApprovalStatusEnum.APPROVED)


def reject_rating(db: Session, rating_id: UUID) -> Rating:
    """pending -> rejected. Rejecting a rejected rating is a no-op."""
    return _moderate(db, rating_id, ApprovalStatusEnum.REJECTED)
