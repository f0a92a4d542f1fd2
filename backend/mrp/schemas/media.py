"""
Media request/response schemas.

Wire format is camelCase (``mediaType``, ``releaseYear``); Python attributes
stay snake_case.
"""
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every JSON body: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MediaWriteRequest(CamelModel):
    """Payload for POST /api/media and PUT /api/media/{id}."""

    title: str
    description: str | None = None
    media_type: str
    release_year: int | None = None
    genres: str | None = None
    age_restriction: int | None = None


class MediaCreatedResponse(CamelModel):
    id: UUID


class MediaResponse(CamelModel):
    """A catalog entry as listed."""

    id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    media_type: str
    release_year: int | None = None
    genres: str | None = None
    age_restriction: int | None = None


class MediaDetailResponse(MediaResponse):
    """Single entry with its aggregates."""

    average_score: float = 0.0
    favorite_count: int = 0


class MediaFilters(CamelModel):
    """Query-string filters for GET /api/media."""

    query: str | None = None
    genre: str | None = None
    media_type: str | None = Field(default=None, alias="type")
    year: int | None = None
    min_year: int | None = None
    max_year: int | None = None
    max_age: int | None = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())
