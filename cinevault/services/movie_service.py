import structlog
from typing import List, Optional, Tuple

from sqlalchemy import func, or_

from cinevault.exceptions import ConflictError, NotFoundError
from cinevault.metrics import observe_search, track_entity_operation
from cinevault.models import db, Movie, Review, Like, User
from cinevault.schemas import (
    ActorSummary,
    MovieDetailsResponse,
    MovieRequest,
    MovieResponse,
    ReviewUserResponse,
    SearchMoviesAltRequest,
    SearchMoviesRequest,
    UserResponse,
)

logger = structlog.get_logger()

LAST_REVIEWS_LIMIT = 5


def _review_stats():
    """Per-movie average rating and review count over live reviews."""
    return (
        db.session.query(
            Review.movie_id.label("movie_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .filter(Review.is_deleted == False)  # noqa: E712
        .group_by(Review.movie_id)
        .subquery()
    )


class MovieService:
    """Movie reads, searches and mutations shared by both API versions."""

    def _query_with_stats(self):
        stats = _review_stats()
        query = db.session.query(
            Movie,
            func.coalesce(stats.c.average_rating, 0.0),
            func.coalesce(stats.c.review_count, 0),
        ).outerjoin(stats, stats.c.movie_id == Movie.id)
        return query, stats

    @staticmethod
    def _to_responses(rows) -> List[MovieResponse]:
        return [MovieResponse.from_movie(movie, avg, count) for movie, avg, count in rows]

    def _get_or_404(self, movie_id: int) -> Movie:
        movie = Movie.query.filter_by(id=movie_id).first()
        if movie is None:
            logger.warning("movie_not_found", movie_id=movie_id)
            raise NotFoundError("Movie is not found")
        return movie

    def _ensure_title_free(self, title: str, exclude_id: Optional[int] = None):
        # Soft-deleted movies keep their title
        query = db.session.query(Movie.id).filter(Movie.title == title)
        if exclude_id is not None:
            query = query.filter(Movie.id != exclude_id)
        if query.execution_options(include_deleted=True).first() is not None:
            logger.info("movie_title_conflict", title=title)
            raise ConflictError(f"Movie with title '{title}' already exists")

    def list_movies(self) -> List[MovieResponse]:
        logger.info("movies_list_start")
        query, _ = self._query_with_stats()
        movies = self._to_responses(query.order_by(Movie.id).all())
        logger.info("movies_list_success", count=len(movies))
        return movies

    def get_movie(self, movie_id: int) -> MovieResponse:
        logger.info("movie_get_start", movie_id=movie_id)
        query, _ = self._query_with_stats()
        row = query.filter(Movie.id == movie_id).first()
        if row is None:
            logger.warning("movie_not_found", movie_id=movie_id)
            raise NotFoundError("Movie is not found")
        logger.info("movie_get_success", movie_id=movie_id)
        return MovieResponse.from_movie(*row)

    def get_movie_details(self, movie_id: int) -> MovieDetailsResponse:
        """
        Movie with rating stats, its newest reviews (with their authors)
        and its cast.
        """
        logger.info("movie_details_start", movie_id=movie_id)
        summary = self.get_movie(movie_id)

        last_reviews = (
            db.session.query(Review, User)
            .join(User, Review.user_id == User.id)
            .filter(Review.movie_id == movie_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(LAST_REVIEWS_LIMIT)
            .all()
        )
        movie = self._get_or_404(movie_id)
        actors = sorted((actor for actor in movie.actors if not actor.is_deleted), key=lambda a: a.id)

        details = MovieDetailsResponse(
            **summary.model_dump(),
            last_reviews=[
                ReviewUserResponse(
                    review_id=review.id,
                    rating=review.rating,
                    comment=review.comment,
                    created_at=review.created_at,
                    user=UserResponse.model_validate(user),
                )
                for review, user in last_reviews
            ],
            actors=[ActorSummary.model_validate(actor) for actor in actors],
        )
        logger.info(
            "movie_details_success",
            movie_id=movie_id,
            review_count=details.review_count,
            actor_count=len(details.actors),
        )
        return details

    def search_movies(self, criteria: SearchMoviesRequest) -> List[MovieResponse]:
        """
        Field-by-field search. Every given criterion must match:
        title and director by substring, genre exactly (case-insensitive),
        release date exactly, and a minimum average rating over movies that
        have at least one review.
        """
        logger.info("movies_search_start", filters=criteria.model_dump(exclude_none=True, mode="json"))
        query, stats = self._query_with_stats()

        if criteria.title and criteria.title.strip():
            query = query.filter(Movie.title.icontains(criteria.title.strip(), autoescape=True))
        if criteria.genre and criteria.genre.strip():
            query = query.filter(func.lower(Movie.genre) == criteria.genre.strip().lower())
        if criteria.director and criteria.director.strip():
            query = query.filter(Movie.director.icontains(criteria.director.strip(), autoescape=True))
        if criteria.release_date is not None:
            query = query.filter(Movie.release_date == criteria.release_date)
        if criteria.avg_rating is not None:
            query = query.filter(stats.c.review_count > 0, stats.c.average_rating >= criteria.avg_rating)

        movies = self._to_responses(query.order_by(Movie.id).all())
        observe_search("movie", len(movies))
        logger.info("movies_search_success", count=len(movies))
        return movies

    def search_movies_alt(self, criteria: SearchMoviesAltRequest) -> List[MovieResponse]:
        """
        Free-text search: ``text`` matches title, description or director
        (case-insensitive); genre, minimum rating and release date narrow it.
        """
        logger.info("movies_search_alt_start", filters=criteria.model_dump(exclude_none=True, mode="json"))
        query, stats = self._query_with_stats()

        if criteria.text and criteria.text.strip():
            text = criteria.text.strip()
            query = query.filter(
                or_(
                    Movie.title.icontains(text, autoescape=True),
                    Movie.description.icontains(text, autoescape=True),
                    Movie.director.icontains(text, autoescape=True),
                )
            )
        if criteria.genre and criteria.genre.strip():
            query = query.filter(Movie.genre == criteria.genre.strip())
        if criteria.min_rating is not None:
            query = query.filter(stats.c.review_count > 0, stats.c.average_rating >= criteria.min_rating)
        if criteria.release_date is not None:
            query = query.filter(Movie.release_date == criteria.release_date)

        movies = self._to_responses(query.order_by(Movie.id).all())
        observe_search("movie", len(movies))
        logger.info("movies_search_alt_success", count=len(movies))
        return movies

    def create_movie(self, payload: MovieRequest) -> MovieResponse:
        logger.info("movie_create_start", title=payload.title)
        self._ensure_title_free(payload.title)

        movie = Movie(**payload.model_dump())
        db.session.add(movie)
        db.session.commit()

        track_entity_operation("movie", "create")
        logger.info("movie_create_success", movie_id=movie.id)
        return MovieResponse.from_movie(movie)

    def create_movies(self, payloads: List[MovieRequest]) -> List[int]:
        """Create several movies in one transaction and return their ids."""
        logger.info("movies_create_start", count=len(payloads))
        seen = set()
        for payload in payloads:
            if payload.title in seen:
                raise ConflictError(f"Movie with title '{payload.title}' appears more than once")
            seen.add(payload.title)
            self._ensure_title_free(payload.title)

        movies = [Movie(**payload.model_dump()) for payload in payloads]
        db.session.add_all(movies)
        db.session.commit()

        ids = [movie.id for movie in movies]
        track_entity_operation("movie", "create", count=len(ids))
        logger.info("movies_create_success", movie_ids=ids)
        return ids

    def update_movie(self, movie_id: int, payload: MovieRequest) -> MovieResponse:
        logger.info("movie_update_start", movie_id=movie_id)
        movie = self._get_or_404(movie_id)
        self._ensure_title_free(payload.title, exclude_id=movie_id)

        for field, value in payload.model_dump().items():
            setattr(movie, field, value)
        db.session.commit()

        track_entity_operation("movie", "update")
        logger.info("movie_update_success", movie_id=movie_id)
        return self.get_movie(movie_id)

    def delete_movie(self, movie_id: int):
        """Remove the row; the database cascades to its reviews and likes."""
        logger.info("movie_delete_start", movie_id=movie_id)
        movie = self._get_or_404(movie_id)
        db.session.delete(movie)
        db.session.commit()

        track_entity_operation("movie", "delete")
        logger.info("movie_delete_success", movie_id=movie_id)

    def _soft_delete_cascade(self, movie: Movie) -> Tuple[int, int]:
        reviews = Review.query.filter_by(movie_id=movie.id).all()
        review_ids = [review.id for review in reviews]
        likes = Like.query.filter(Like.review_id.in_(review_ids)).all() if review_ids else []

        movie.soft_delete()
        for review in reviews:
            review.soft_delete()
        for like in likes:
            like.soft_delete()
        return len(reviews), len(likes)

    def soft_delete_movie(self, movie_id: int):
        """Hide the movie together with its reviews and their likes."""
        logger.info("movie_soft_delete_start", movie_id=movie_id)
        movie = self._get_or_404(movie_id)
        review_count, like_count = self._soft_delete_cascade(movie)
        db.session.commit()

        track_entity_operation("movie", "soft_delete")
        if review_count:
            track_entity_operation("review", "soft_delete", count=review_count)
        if like_count:
            track_entity_operation("like", "soft_delete", count=like_count)
        logger.info(
            "movie_soft_delete_success",
            movie_id=movie_id,
            reviews_hidden=review_count,
            likes_hidden=like_count,
        )

    def soft_delete_movies(self, movie_ids: List[int]) -> Tuple[int, List[str]]:
        """
        Soft-delete several movies at once.

        Duplicate ids are collapsed. Movies that still have reviews are
        skipped and ids that match no movie are reported; both leave the
        rest of the batch untouched.

        Returns:
            Tuple of (number of movies deleted, per-id result messages)
        """
        unique_ids = list(dict.fromkeys(movie_ids))
        logger.info("movies_soft_delete_start", movie_ids=unique_ids)

        results = []
        to_delete = []
        found_ids = set()
        movies = Movie.query.filter(Movie.id.in_(unique_ids)).order_by(Movie.id).all() if unique_ids else []
        for movie in movies:
            found_ids.add(movie.id)
            has_reviews = db.session.query(Review.id).filter_by(movie_id=movie.id, is_deleted=False).first() is not None
            if has_reviews:
                message = f"Movie with ID {movie.id} ('{movie.title}') skipped: Has associated reviews"
                logger.warning("movie_soft_delete_skipped", movie_id=movie.id, reason="has_reviews")
                results.append(message)
            else:
                to_delete.append(movie)

        for movie_id in unique_ids:
            if movie_id not in found_ids:
                logger.warning("movie_soft_delete_skipped", movie_id=movie_id, reason="not_found")
                results.append(f"Movie with ID {movie_id} not found")

        if to_delete:
            for movie in to_delete:
                movie.soft_delete()
                results.append(f"Movie with ID {movie.id} deleted successfully.")
            db.session.commit()
            track_entity_operation("movie", "soft_delete", count=len(to_delete))

        logger.info("movies_soft_delete_success", deleted_count=len(to_delete))
        return len(to_delete), results


# Singleton instance
movie_service = MovieService()
