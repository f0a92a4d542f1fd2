"""
Per-user profile statistics and activity summaries.
"""
from collections import Counter
from uuid import UUID

from sqlalchemy.orm import Session

from mrp.db.models import MediaEntry
from mrp.services.favorite_service import list_favorites
from mrp.services.media_service import average_score
from mrp.services.rating_service import list_ratings_by_user


def _genre_counts(entries: list[MediaEntry]) -> Counter:
    counts: Counter = Counter()
    for entry in entries:
        if not entry.genres:
            continue
        for genre in entry.genres.split(","):
            cleaned = genre.strip().lower()
            if cleaned:
                counts[cleaned] += 1
    return counts


def get_user_statistics(db: Session, user_id: UUID) -> dict:
    """Totals and averages shown on a user's own profile page."""
    ratings = list_ratings_by_user(db, user_id)
    created = (
        db.query(MediaEntry)
        .filter(MediaEntry.owner_id == user_id)
        .order_by(MediaEntry.title.asc())
        .all()
    )
    favorites = list_favorites(db, user_id)

    if ratings:
        average_given = round(sum(r.stars for r in ratings) / len(ratings), 2)
    else:
        average_given = 0.0

    # most_common breaks ties by first occurrence, i.e. most recent favorite
    genre_counts = _genre_counts(favorites)
    top_genres = [genre for genre, _ in genre_counts.most_common(3)]

    received = [score for score in (average_score(db, m.id) for m in created) if score > 0]
    average_received = round(sum(received) / len(received), 2) if received else 0.0

    return {
        "total_ratings_given": len(ratings),
        "average_score_given": average_given,
        "total_media_created": len(created),
        "total_favorites": len(favorites),
        "favorite_genre": top_genres[0] if top_genres else "none",
        "top_genres": top_genres,
        "average_rating_received": average_received,
    }


def get_user_activity(db: Session, user_id: UUID) -> dict:
    """Latest rating plus how often the user gave each star value."""
    ratings = list_ratings_by_user(db, user_id)

    most_recent = None
    if ratings:
        latest = ratings[0]
        most_recent = {
            "id": latest.id,
            "media_id": latest.media_id,
            "stars": latest.stars,
            "comment": latest.comment,
        }

    distribution = Counter(r.stars for r in ratings)
    return {
        "most_recent_rating": most_recent,
        "ratings_distribution": dict(sorted(distribution.items())),
    }
