"""
Database models for the CineVault catalog.

This module defines the SQLAlchemy models for the catalog:
- Movie: titles with their reviews and cast
- Actor: people linked to movies through the movie_actors table
- User: accounts that write reviews and like them
- Review: a user's 0-10 rating of a movie (one per user and movie)
- Like: a user's like of a review (one per user and review)

Every model carries an is_deleted flag. Soft-deleted rows are filtered out
of every ORM SELECT unless the statement is executed with the
``include_deleted`` execution option.
"""

import sqlite3
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, with_loader_criteria

db = SQLAlchemy()


def utcnow():
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SoftDeleteMixin:
    """Adds the is_deleted flag hidden by the global query filter."""

    is_deleted = db.Column(db.Boolean, default=False, nullable=False)

    def soft_delete(self):
        self.is_deleted = True


movie_actors = db.Table(
    "movie_actors",
    db.Column("movie_id", db.Integer, db.ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True),
    db.Column("actor_id", db.Integer, db.ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True),
)


class Movie(SoftDeleteMixin, db.Model):
    __tablename__ = 'movies'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(150), nullable=False, unique=True)
    description = db.Column(db.String(1000), nullable=True)
    release_date = db.Column(db.Date, nullable=True)
    genre = db.Column(db.String(50), nullable=True)
    director = db.Column(db.String(100), nullable=True)

    reviews = db.relationship(
        "Review", back_populates="movie",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    actors = db.relationship("Actor", secondary=movie_actors, back_populates="movies")

    def __repr__(self):
        return f'<Movie {self.id} {self.title!r}>'


class Actor(SoftDeleteMixin, db.Model):
    __tablename__ = 'actors'

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    birth_date = db.Column(db.Date, nullable=True)
    biography = db.Column(db.String(2000), nullable=True)

    movies = db.relationship("Movie", secondary=movie_actors, back_populates="actors")

    def __repr__(self):
        return f'<Actor {self.id} {self.full_name!r}>'


class User(SoftDeleteMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True)
    email = db.Column(db.String(100), nullable=False, unique=True)
    # werkzeug password hash, never the raw password
    password = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    reviews = db.relationship(
        "Review", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    likes = db.relationship(
        "Like", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f'<User {self.id} {self.username!r}>'


class Review(SoftDeleteMixin, db.Model):
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    movie_id = db.Column(db.Integer, db.ForeignKey("movies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.String(1000), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    movie = db.relationship("Movie", back_populates="reviews")
    user = db.relationship("User", back_populates="reviews")
    likes = db.relationship(
        "Like", back_populates="review",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        db.UniqueConstraint('user_id', 'movie_id', name='uq_reviews_user_movie'),
        db.CheckConstraint('rating >= 0 AND rating <= 10', name='ck_reviews_rating_range'),
    )

    def __repr__(self):
        return f'<Review {self.id} movie={self.movie_id} user={self.user_id}>'


class Like(SoftDeleteMixin, db.Model):
    __tablename__ = 'likes'

    id = db.Column(db.Integer, primary_key=True)
    review_id = db.Column(db.Integer, db.ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    review = db.relationship("Review", back_populates="likes")
    user = db.relationship("User", back_populates="likes")

    __table_args__ = (
        db.UniqueConstraint('user_id', 'review_id', name='uq_likes_user_review'),
    )

    def __repr__(self):
        return f'<Like {self.id} review={self.review_id} user={self.user_id}>'


@event.listens_for(Session, "do_orm_execute")
def _filter_soft_deleted(execute_state):
    """Hide soft-deleted rows from ORM SELECTs and the lazy loads they trigger."""
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
        and not execute_state.execution_options.get("include_deleted", False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.is_deleted == False,  # noqa: E712
                include_aliases=True,
            )
        )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
