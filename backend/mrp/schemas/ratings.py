"""
Rating request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import StrictInt

from mrp.schemas.media import CamelModel


class RatingCreateRequest(CamelModel):
    """Payload for POST /api/media/{id}/ratings."""

    stars: StrictInt
    comment: str | None = None


class RatingUpdateRequest(CamelModel):
    """
    Payload for PUT /api/ratings/{id}.

    Omitted keys are left untouched; see ``model_fields_set``.
    """

    stars: StrictInt | None = None
    comment: str | None = None


class RatingCreatedResponse(CamelModel):
    id: UUID


class RatingResponse(CamelModel):
    """A single rating."""

    id: UUID
    media_id: UUID
    user_id: UUID
    stars: int
    comment: str | None = None
    approval_status: str
    created_at: datetime
