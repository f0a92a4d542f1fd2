"""
Media business logic — catalog CRUD, search, filtering and score aggregation.
"""
import logging
import re
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from mrp.db.models import ApprovalStatusEnum, MediaEntry, MediaTypeEnum, Rating
from mrp.schemas.media import MediaFilters, MediaWriteRequest
from mrp.services.errors import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SORT_KEYS = ("title", "year", "score")
LIKE_ESCAPE = "\\"


class MediaNotFoundError(NotFoundError):
    """Raised when a media entry cannot be found."""


class NotMediaOwnerError(ForbiddenError):
    """Raised when a user tries to modify another user's media entry."""


class InvalidMediaPayloadError(ValidationError):
    """Raised when media payload validation fails at service layer."""


def normalize_title(title: str) -> str:
    """Trim and collapse whitespace."""
    return re.sub(r"\s+", " ", title.strip())


def normalize_genres(genres: str | None) -> str | None:
    """Strip each comma-separated genre and drop empty ones."""
    if genres is None:
        return None
    parts = [part.strip() for part in genres.split(",")]
    cleaned = ",".join(part for part in parts if part)
    return cleaned or None


def normalize_media_type(media_type: str | None) -> str:
    value = (media_type or "").strip().lower()
    allowed = {member.value for member in MediaTypeEnum}
    if value not in allowed:
        raise InvalidMediaPayloadError(
            f"mediaType must be one of {', '.join(sorted(allowed))}"
        )
    return value


def validate_media_payload(payload: MediaWriteRequest) -> dict[str, Any]:
    """
    Check a create/update body and return normalized column values.

    title must be non-blank, mediaType one of movie/series/game; year and
    age restriction are optional, the latter never negative.
    """
    title = normalize_title(payload.title or "")
    if not title:
        raise InvalidMediaPayloadError("title cannot be empty")
    if len(title) > 500:
        raise InvalidMediaPayloadError("title cannot exceed 500 characters")

    if payload.age_restriction is not None and payload.age_restriction < 0:
        raise InvalidMediaPayloadError("ageRestriction cannot be negative")

    return {
        "title": title,
        "description": payload.description,
        "media_type": normalize_media_type(payload.media_type),
        "release_year": payload.release_year,
        "genres": normalize_genres(payload.genres),
        "age_restriction": payload.age_restriction,
    }


def create_media(db: Session, owner_id: UUID, payload: MediaWriteRequest) -> MediaEntry:
    """Create a media entry owned by the authenticated user."""
    values = validate_media_payload(payload)
    row = MediaEntry(owner_id=owner_id, **values)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("User %s created media %s", owner_id, row.id)
    return row


def get_media_by_id(db: Session, media_id: UUID) -> MediaEntry | None:
    """Fetch one media entry by UUID."""
    return db.query(MediaEntry).filter(MediaEntry.id == media_id).first()


def get_media(db: Session, media_id: UUID) -> MediaEntry:
    row = get_media_by_id(db, media_id)
    if row is None:
        raise MediaNotFoundError(f"Media entry {media_id} not found")
    return row


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching *text* literally as a substring."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _apply_text_query(query: Query, text: str | None) -> Query:
    cleaned = (text or "").strip()
    if not cleaned:
        return query
    pattern = _contains_pattern(cleaned)
    return query.filter(
        or_(
            MediaEntry.title.ilike(pattern, escape=LIKE_ESCAPE),
            MediaEntry.description.ilike(pattern, escape=LIKE_ESCAPE),
        )
    )


def list_media(db: Session, query: str | None = None) -> list[MediaEntry]:
    """
    Case-insensitive substring search over title and description.

    A missing or blank query returns the whole catalog. Results are ordered
    by title ascending.
    """
    q = _apply_text_query(db.query(MediaEntry), query)
    return q.order_by(MediaEntry.title.asc(), MediaEntry.id.asc()).all()


def _approved_average_subquery(db: Session):
    return (
        db.query(
            Rating.media_id.label("media_id"),
            func.avg(Rating.stars).label("avg_score"),
        )
        .filter(Rating.approval_status == ApprovalStatusEnum.APPROVED.value)
        .group_by(Rating.media_id)
        .subquery()
    )


def filter_and_sort_media(
    db: Session,
    filters: MediaFilters,
    sort_by: str | None = "title",
    sort_order: str | None = "asc",
) -> list[MediaEntry]:
    """
    Filter the catalog and sort it.

    Filters combine with AND. ``max_age`` keeps entries without an age
    restriction. Sort keys: title, year, score (approved average, 0 when
    unrated); unknown keys fall back to title, unknown orders to asc.
    """
    sort_key = (sort_by or "title").lower()
    if sort_key not in SORT_KEYS:
        sort_key = "title"
    descending = (sort_order or "asc").lower() == "desc"

    q = _apply_text_query(db.query(MediaEntry), filters.query)

    if filters.genre and filters.genre.strip():
        q = q.filter(
            MediaEntry.genres.ilike(_contains_pattern(filters.genre.strip()), escape=LIKE_ESCAPE)
        )
    if filters.media_type and filters.media_type.strip():
        q = q.filter(MediaEntry.media_type == filters.media_type.strip().lower())
    if filters.year is not None:
        q = q.filter(MediaEntry.release_year == filters.year)
    if filters.min_year is not None:
        q = q.filter(MediaEntry.release_year >= filters.min_year)
    if filters.max_year is not None:
        q = q.filter(MediaEntry.release_year <= filters.max_year)
    if filters.max_age is not None:
        q = q.filter(
            or_(
                MediaEntry.age_restriction.is_(None),
                MediaEntry.age_restriction <= filters.max_age,
            )
        )

    if sort_key == "score":
        averages = _approved_average_subquery(db)
        q = q.outerjoin(averages, averages.c.media_id == MediaEntry.id)
        primary = func.coalesce(averages.c.avg_score, 0)
    elif sort_key == "year":
        primary = MediaEntry.release_year
    else:
        primary = MediaEntry.title

    ordering = [primary.desc() if descending else primary.asc()]
    if sort_key != "title":
        ordering.append(MediaEntry.title.asc())
    ordering.append(MediaEntry.id.asc())

    return q.order_by(*ordering).all()


def _ownership_error(db: Session, media_id: UUID) -> Exception:
    """Explain why an owner-scoped statement touched no rows."""
    if get_media_by_id(db, media_id) is None:
        return MediaNotFoundError(f"Media entry {media_id} not found")
    return NotMediaOwnerError("You can only modify your own media entries")


def update_media(
    db: Session,
    media_id: UUID,
    owner_id: UUID,
    payload: MediaWriteRequest,
) -> MediaEntry:
    """
    Replace the editable fields of an owned entry. id and owner never change.

    The owner check is part of the UPDATE's WHERE clause.
    """
    values = validate_media_payload(payload)
    updated = (
        db.query(MediaEntry)
        .filter(MediaEntry.id == media_id, MediaEntry.owner_id == owner_id)
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise _ownership_error(db, media_id)

    db.commit()
    row = get_media(db, media_id)
    db.refresh(row)
    return row


def delete_media(db: Session, media_id: UUID, owner_id: UUID) -> None:
    """Delete an owned entry; its ratings and favorites cascade."""
    deleted = (
        db.query(MediaEntry)
        .filter(MediaEntry.id == media_id, MediaEntry.owner_id == owner_id)
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        db.rollback()
        raise _ownership_error(db, media_id)

    db.commit()
    logger.info("User %s deleted media %s", owner_id, media_id)


def average_score(db: Session, media_id: UUID) -> float:
    """Mean stars over approved ratings, 0.0 when there are none."""
    value = (
        db.query(func.avg(Rating.stars))
        .filter(
            Rating.media_id == media_id,
            Rating.approval_status == ApprovalStatusEnum.APPROVED.value,
        )
        .scalar()
    )
    if value is None:
        return 0.0
    return float(value)
