"""
Favorite request/response schemas.
"""
from uuid import UUID

from mrp.schemas.media import CamelModel


class FavoriteRequest(CamelModel):
    """Payload for POST /api/favorites."""

    media_id: UUID


class FavoriteStatusResponse(CamelModel):
    is_favorite: bool
