"""
Favorites API — /api/favorites
──────────────────────────────
Endpoints:
  GET    /api/favorites                     — Caller's favorite media
  POST   /api/favorites                     — Add {mediaId}
  DELETE /api/favorites/{media_id}          — Remove (idempotent)
  GET    /api/favorites/{media_id}/status   — {isFavorite}
  POST   /api/favorites/{media_id}/toggle   — Flip, returns {isFavorite}
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mrp.db.models import User
from mrp.db.session import get_db
from mrp.deps.auth import get_current_user
from mrp.schemas.auth import MessageResponse
from mrp.schemas.favorites import FavoriteRequest, FavoriteStatusResponse
from mrp.schemas.media import MediaResponse
from mrp.services.errors import ValidationError
from mrp.services.favorite_service import (
    add_favorite,
    is_favorite,
    list_favorites,
    remove_favorite,
    toggle_favorite,
)

router = APIRouter()


@router.get("", response_model=list[MediaResponse])
def my_favorites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[MediaResponse]:
    return [MediaResponse.model_validate(row) for row in list_favorites(db, current_user.id)]


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add(
    payload: FavoriteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    try:
        add_favorite(db, current_user.id, payload.media_id)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MessageResponse(message="Added to favorites")


@router.delete("/{media_id}", response_model=MessageResponse)
def remove(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    remove_favorite(db, current_user.id, media_id)
    return MessageResponse(message="Removed from favorites")


@router.get("/{media_id}/status", response_model=FavoriteStatusResponse)
def favorite_status(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FavoriteStatusResponse:
    return FavoriteStatusResponse(is_favorite=is_favorite(db, current_user.id, media_id))


@router.post("/{media_id}/toggle", response_model=FavoriteStatusResponse)
def toggle(
    media_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FavoriteStatusResponse:
    try:
        now_favorite = toggle_favorite(db, current_user.id, media_id)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FavoriteStatusResponse(is_favorite=now_favorite)
