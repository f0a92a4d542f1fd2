"""
Media API — /api/media
──────────────────────
Endpoints:
  GET    /api/media                  — Search (?query=) or filter + sort
  POST   /api/media                  — Create an entry (owner = caller)
  GET    /api/media/{id}             — Entry detail with averageScore
  PUT    /api/media/{id}             — Owner-only update
  DELETE /api/media/{id}             — Owner-only delete
  POST   /api/media/{id}/ratings     — Rate an entry (starts pending)
  GET    /api/media/{id}/ratings     — Approved ratings only
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from mrp.db.models import MediaEntry, User
from mrp.db.session import get_db
from mrp.deps.auth import get_current_user
from mrp.schemas.media import (
    MediaCreatedResponse,
    MediaDetailResponse,
    MediaFilters,
    MediaResponse,
    MediaWriteRequest,
)
from mrp.schemas.ratings import RatingCreatedResponse, RatingCreateRequest, RatingResponse
from mrp.services.errors import ForbiddenError, NotFoundError, ValidationError
from mrp.services.favorite_service import count_favorites
from mrp.services.media_service import (
    MediaNotFoundError,
    average_score,
    create_media,
    delete_media,
    filter_and_sort_media,
    get_media,
    list_media,
    update_media,
)
from mrp.services.rating_service import create_rating, list_ratings_for_media

router = APIRouter()


def map_media_detail(db: Session, row: MediaEntry) -> MediaDetailResponse:
    """Serialize an entry together with its aggregates."""
    base = MediaResponse.model_validate(row)
    return MediaDetailResponse(
        **base.model_dump(),
        average_score=average_score(db, row.id),
        favorite_count=count_favorites(db, row.id),
    )


# ── Routes ────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[MediaResponse])
def search_media(
    query: str | None = Query(None, description="Title/description substring"),
    genre: str | None = Query(None),
    media_type: str | None = Query(None, alias="type"),
    year: int | None = Query(None),
    min_year: int | None = Query(None, alias="minYear"),
    max_year: int | None = Query(None, alias="maxYear"),
    max_age: int | None = Query(None, alias="maxAge"),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
) -> list[MediaResponse]:
    """
    Plain search when only ``query`` is given; any filter or sort parameter
    switches to filter + sort (title/asc by default).
    """
    filters = MediaFilters(
        genre=genre,
        media_type=media_type,
        year=year,
        min_year=min_year,
        max_year=max_year,
        max_age=max_age,
    )
    if filters.is_empty() and sort_by is None and sort_order is None:
        rows = list_media(db, query)
    else:
        filters.query = query
        rows = filter_and_sort_media(db, filters, sort_by or "title", sort_order or "asc")
    return [MediaResponse.model_validate(row) for row in rows]


@router.post("", response_model=MediaCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_media_entry(
    payload: MediaWriteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MediaCreatedResponse:
    try:
        row = create_media(db, current_user.id, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MediaCreatedResponse(id=row.id)


@router.get("/{media_id}", response_model=MediaDetailResponse)
def get_media_entry(media_id: UUID, db: Session = Depends(get_db)) -> MediaDetailResponse:
    try:
        row = get_media(db, media_id)
    except MediaNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return map_media_detail(db, row)


@router.put("/{media_id}", response_model=MediaDetailResponse)
def update_media_entry(
    media_id: UUID,
    payload: MediaWriteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MediaDetailResponse:
    try:
        row = update_media(db, media_id, current_user.id, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return map_media_detail(db, row)


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_media_entry(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_media(db, media_id, current_user.id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.post(
    "/{media_id}/ratings",
    response_model=RatingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def rate_media(
    media_id: UUID,
    payload: RatingCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RatingCreatedResponse:
    try:
        rating = create_rating(db, media_id, current_user.id, payload.stars, payload.comment)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RatingCreatedResponse(id=rating.id)


@router.get("/{media_id}/ratings", response_model=list[RatingResponse])
def media_ratings(media_id: UUID, db: Session = Depends(get_db)) -> list[RatingResponse]:
    return [RatingResponse.model_validate(r) for r in list_ratings_for_media(db, media_id)]
