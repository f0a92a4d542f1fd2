"""
Shared fixtures for the SQLite-backed tests.
"""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from mrp.db.models import ApprovalStatusEnum, Base, MediaEntry, Rating, User
from mrp.db.session import build_engine


def make_engine() -> Engine:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


class DatabaseTestMixin:
    """unittest mixin: fresh in-memory database per test."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.db: Session = make_session_factory(self.engine)()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


def add_user(db: Session, username: str) -> User:
    user = User(username=username, password_hash="0:AA==:AA==")
    db.add(user)
    db.commit()
    return user


def add_media(db: Session, owner_id: UUID, title: str, **fields) -> MediaEntry:
    row = MediaEntry(
        owner_id=owner_id,
        title=title,
        description=fields.pop("description", None),
        media_type=fields.pop("media_type", "movie"),
        **fields,
    )
    db.add(row)
    db.commit()
    return row


def add_rating(
    db: Session,
    media_id: UUID,
    user_id: UUID,
    stars: int,
    status: ApprovalStatusEnum = ApprovalStatusEnum.PENDING,
    comment: str | None = None,
    minutes_ago: int = 0,
) -> Rating:
    rating = Rating(
        media_id=media_id,
        user_id=user_id,
        stars=stars,
        comment=comment,
        approval_status=ApprovalStatusEnum(status).value,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    db.add(rating)
    db.commit()
    return rating
