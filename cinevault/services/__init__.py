"""
Entity services shared by the v1 and v2 route handlers.

Each service holds the queries and mutations for one entity and maps rows
to the response schemas.
"""

from cinevault.services.actor_service import actor_service
from cinevault.services.like_service import like_service
from cinevault.services.movie_service import movie_service
from cinevault.services.review_service import review_service
from cinevault.services.user_service import user_service

__all__ = [
    "actor_service",
    "like_service",
    "movie_service",
    "review_service",
    "user_service",
]
