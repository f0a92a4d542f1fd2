"""
Profile statistics/activity schemas.
"""
from uuid import UUID

from mrp.schemas.media import CamelModel


class UserStatisticsResponse(CamelModel):
    total_ratings_given: int
    average_score_given: float
    total_media_created: int
    total_favorites: int
    favorite_genre: str
    top_genres: list[str]
    average_rating_received: float


class RecentRating(CamelModel):
    id: UUID
    media_id: UUID
    stars: int
    comment: str | None = None


class UserActivityResponse(CamelModel):
    """
    Latest rating plus a stars -> count map.

    JSON object keys are strings ("1".."5"). Star values the user never gave
    are absent, not 0.
    """

    most_recent_rating: RecentRating | None = None
    ratings_distribution: dict[int, int]
