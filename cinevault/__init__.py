"""
CineVault - movie review catalog API

A Flask application exposing movies, actors, users, reviews and likes
through two API generations: v1 with plain DTOs and v2 with request and
response envelopes, soft delete, search and statistics.
"""

__version__ = "2.0.0"

from .exceptions import (
    CineVaultError,
    NotFoundError,
    BadRequestError,
    ConflictError,
)

__all__ = [
    "CineVaultError",
    "NotFoundError",
    "BadRequestError",
    "ConflictError",
]
