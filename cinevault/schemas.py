"""
Data schemas for the CineVault API.

This module defines Pydantic models for request validation and response
serialization. Both API generations share the same DTOs; v2 additionally
wraps them in the ApiRequest / ApiResponse envelopes.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PrivateAttr, field_validator


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class MovieRequest(BaseModel):
    """Payload for creating or replacing a movie."""
    title: str = Field(..., min_length=1, max_length=150, description="Unique movie title")
    description: Optional[str] = Field(None, max_length=1000)
    release_date: Optional[date] = Field(None, description="Release date (YYYY-MM-DD)")
    genre: Optional[str] = Field(None, max_length=50)
    director: Optional[str] = Field(None, max_length=100)

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Title must not be blank')
        return v.strip()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Inception",
                "description": "A thief who steals corporate secrets through dream-sharing technology.",
                "release_date": "2010-07-16",
                "genre": "Sci-Fi",
                "director": "Christopher Nolan"
            }
        }
    )


class ActorRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    birth_date: Optional[date] = None
    biography: Optional[str] = Field(None, max_length=2000)
    # When given, replaces the actor's filmography
    movie_ids: Optional[List[int]] = None


class UserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)

    @field_validator('email')
    @classmethod
    def email_length(cls, v):
        if len(v) > 100:
            raise ValueError('Email must be at most 100 characters')
        return v


class ReviewRequest(BaseModel):
    movie_id: int
    user_id: int
    rating: int = Field(..., ge=0, le=10, description="Rating from 0 to 10")
    comment: Optional[str] = Field(None, max_length=1000)


class LikeRequest(BaseModel):
    review_id: int
    user_id: int


class SearchMoviesRequest(BaseModel):
    """Field-by-field movie search (v2 SearchMovies)."""
    genre: Optional[str] = None
    title: Optional[str] = None
    director: Optional[str] = None
    release_date: Optional[date] = None
    avg_rating: Optional[float] = Field(None, ge=0, le=10, description="Minimum average rating")


class SearchMoviesAltRequest(BaseModel):
    """Free-text movie search (v2 SearchMoviesAlt)."""
    text: Optional[str] = None
    genre: Optional[str] = None
    min_rating: Optional[float] = Field(None, ge=0, le=10)
    release_date: Optional[date] = None


USER_SORT_FIELDS = ("username", "email", "created_at")


class SearchUsersRequest(BaseModel):
    search_term: Optional[str] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page_number: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)

    @field_validator('sort_by')
    @classmethod
    def validate_sort_by(cls, v):
        """Accept snake_case or PascalCase field names (CreatedAt -> created_at)."""
        if v is None:
            return v
        normalized = v.strip().lower().replace("_", "")
        for field in USER_SORT_FIELDS:
            if field.replace("_", "") == normalized:
                return field
        raise ValueError(f"sort_by must be one of: {', '.join(USER_SORT_FIELDS)}")

    @field_validator('sort_order')
    @classmethod
    def validate_sort_order(cls, v):
        if v is None:
            return v
        v = v.strip().lower()
        if v not in ("asc", "desc"):
            raise ValueError("sort_order must be 'asc' or 'desc'")
        return v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class MovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    release_date: Optional[date] = None
    genre: Optional[str] = None
    director: Optional[str] = None
    average_rating: float = 0.0
    review_count: int = 0

    @classmethod
    def from_movie(cls, movie, average_rating=None, review_count=None) -> "MovieResponse":
        return cls(
            id=movie.id,
            title=movie.title,
            description=movie.description,
            release_date=movie.release_date,
            genre=movie.genre,
            director=movie.director,
            average_rating=float(average_rating or 0.0),
            review_count=int(review_count or 0),
        )


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None


class ReviewUserResponse(BaseModel):
    """A review as listed inside movie details."""
    review_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    user: UserResponse


class ActorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str


class MovieDetailsResponse(MovieResponse):
    last_reviews: List[ReviewUserResponse] = Field(default_factory=list)
    actors: List[ActorSummary] = Field(default_factory=list)


class ActorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    birth_date: Optional[date] = None
    biography: Optional[str] = None
    movie_ids: List[int] = Field(default_factory=list)

    @classmethod
    def from_actor(cls, actor) -> "ActorResponse":
        return cls(
            id=actor.id,
            full_name=actor.full_name,
            birth_date=actor.birth_date,
            biography=actor.biography,
            movie_ids=sorted(movie.id for movie in actor.movies if not movie.is_deleted),
        )


class ReviewResponse(BaseModel):
    id: int
    movie_id: int
    movie_title: Optional[str] = None
    user_id: int
    username: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_review(cls, review) -> "ReviewResponse":
        return cls(
            id=review.id,
            movie_id=review.movie_id,
            movie_title=review.movie.title if review.movie else None,
            user_id=review.user_id,
            username=review.user.username if review.user else None,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
        )


class LikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    review_id: int
    user_id: int


class UserStatsResponse(BaseModel):
    total_reviews: int
    average_rating: float
    genre_stats: Dict[str, int] = Field(default_factory=dict)
    last_activity: Optional[datetime] = None


class PagedResponse(BaseModel):
    items: List[Any]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int


# ---------------------------------------------------------------------------
# v2 envelopes
# ---------------------------------------------------------------------------

class ApiRequest(BaseModel):
    """
    Request envelope used by every v2 action.

    Caller metadata is optional; ``data`` carries the action payload and is
    validated separately against the action's own schema.
    """
    username: Optional[str] = None
    secret_code: Optional[str] = None
    additional_properties: Dict[str, str] = Field(default_factory=dict)
    name_of_server: Optional[str] = None
    data: Any = None

    _request_id: uuid.UUID = PrivateAttr(default_factory=uuid.uuid4)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "admin",
                "secret_code": "s3cr3t",
                "additional_properties": {"client": "web"},
                "name_of_server": "cinevault-01",
                "data": {"title": "Inception"}
            }
        }
    )

    @property
    def request_id(self) -> uuid.UUID:
        """Server-assigned id; a ``request_id`` sent by the client is ignored."""
        return self._request_id


class ApiResponse(BaseModel):
    """Response envelope used by every v2 action."""
    status_code: int
    message: str
    response_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dictionary. ``data`` is omitted when the
        action carries no payload.
        """
        body = self.model_dump(mode="json")
        if self.data is None:
            body.pop("data")
        return body
