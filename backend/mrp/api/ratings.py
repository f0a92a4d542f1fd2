"""
Ratings API — /api/ratings
──────────────────────────
Endpoints:
  GET    /api/ratings/pending          — Moderation queue
  PUT    /api/ratings/{id}             — Author edits stars and/or comment
  DELETE /api/ratings/{id}             — Author deletes
  POST   /api/ratings/{id}/approve     — pending -> approved
  POST   /api/ratings/{id}/reject      — pending -> rejected

Repeating a decision returns 200 unchanged; approving a rejected rating
(or rejecting an approved one) returns 409.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mrp.db.models import User
from mrp.db.session import get_db
from mrp.deps.auth import get_current_user, require_moderator
from mrp.schemas.ratings import RatingResponse, RatingUpdateRequest
from mrp.services.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from mrp.services.rating_service import (
    approve_rating,
    delete_rating,
    list_pending_ratings,
    reject_rating,
    update_rating,
)

router = APIRouter()


@router.get("/pending", response_model=list[RatingResponse])
def pending_ratings(
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> list[RatingResponse]:
    return [RatingResponse.model_validate(r) for r in list_pending_ratings(db)]


@router.put("/{rating_id}", response_model=RatingResponse)
def update_rating_endpoint(
    rating_id: UUID,
    payload: RatingUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RatingResponse:
    try:
        rating = update_rating(db, rating_id, current_user.id, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return RatingResponse.model_validate(rating)


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rating_endpoint(
    rating_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_rating(db, rating_id, current_user.id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


def _moderation_response(action, db: Session, rating_id: UUID) -> RatingResponse:
    try:
        rating = action(db, rating_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return RatingResponse.model_validate(rating)


@router.post("/{rating_id}/approve", response_model=RatingResponse)
def approve(
    rating_id: UUID,
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> RatingResponse:
    return _moderation_response(approve_rating, db, rating_id)


@router.post("/{rating_id}/reject", response_model=RatingResponse)
def reject(
    rating_id: UUID,
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> RatingResponse:
    return _moderation_response(reject_rating, db, rating_id)
