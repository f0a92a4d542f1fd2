"""
SQLAlchemy ORM models.

Four tables: users, media_entries, ratings, favorites. Identity is UUID v4
everywhere. The generic ``Uuid`` type maps to the native UUID column on
Postgres and to CHAR(32) on SQLite, which the test-suite runs against.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class MediaTypeEnum(str, PyEnum):
    MOVIE = "movie"
    SERIES = "series"
    GAME = "game"


class ApprovalStatusEnum(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Platform user.

    ``token`` holds the single bearer token currently accepted for this user;
    it is replaced on every login.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    token = Column(String(1024), unique=True, nullable=True)
    is_moderator = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("length(username) > 0", name="chk_username_not_empty"),
    )

    # Relationships
    media_entries = relationship(
        "MediaEntry",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    ratings = relationship(
        "Rating",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class MediaEntry(Base):
    """
    A movie, series or game in the catalog.

    genres is a comma-separated string ("sci-fi,action"); filtering by genre
    is a case-insensitive substring match on it.
    """
    __tablename__ = "media_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(500), nullable=False, index=True)
    description = Column(Text, nullable=True)
    media_type = Column(String(16), nullable=False)
    release_year = Column(Integer, nullable=True)
    genres = Column(String(500), nullable=True)
    age_restriction = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "media_type IN ('movie', 'series', 'game')",
            name="chk_media_type",
        ),
        CheckConstraint(
            "age_restriction IS NULL OR age_restriction >= 0",
            name="chk_age_restriction",
        ),
    )

    # Relationships
    owner = relationship("User", back_populates="media_entries")
    ratings = relationship(
        "Rating",
        back_populates="media_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    favorites = relationship(
        "Favorite",
        back_populates="media_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<MediaEntry id={self.id} title={self.title!r} type={self.media_type}>"


class Rating(Base):
    """
    One user's 1-5 star rating of a media entry.

    approval_status moves pending → approved / rejected by moderation and
    back to pending when the author changes the comment text.
    """
    __tablename__ = "ratings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    media_id = Column(
        Uuid,
        ForeignKey("media_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stars = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    approval_status = Column(
        String(16),
        nullable=False,
        default=ApprovalStatusEnum.PENDING.value,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("stars BETWEEN 1 AND 5", name="chk_stars_1_5"),
        CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="chk_approval_status",
        ),
    )

    # Relationships
    media_entry = relationship("MediaEntry", back_populates="ratings")
    user = relationship("User", back_populates="ratings")

    def __repr__(self) -> str:
        return (
            f"<Rating id={self.id} media={self.media_id} user={self.user_id} "
            f"stars={self.stars} status={self.approval_status}>"
        )


class Favorite(Base):
    """A (user, media) bookmark. At most one row per pair."""
    __tablename__ = "favorites"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    media_id = Column(
        Uuid,
        ForeignKey("media_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "media_id", name="uq_favorite_user_media"),
    )

    # Relationships
    media_entry = relationship("MediaEntry", back_populates="favorites")
    user = relationship("User")

    def __repr__(self) -> str:
        return f"<Favorite user={self.user_id} media={self.media_id}>"
