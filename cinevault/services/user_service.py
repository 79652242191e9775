import math
import structlog
from typing import List, Optional

from sqlalchemy import func, or_
from werkzeug.security import generate_password_hash

from cinevault.exceptions import ConflictError, NotFoundError
from cinevault.metrics import observe_search, track_entity_operation
from cinevault.models import db, Like, Movie, Review, User
from cinevault.schemas import (
    PagedResponse,
    SearchUsersRequest,
    UserRequest,
    UserResponse,
    UserStatsResponse,
)

logger = structlog.get_logger()

UNKNOWN_GENRE = "Unknown"

SORT_COLUMNS = {
    "username": User.username,
    "email": User.email,
    "created_at": User.created_at,
}


class UserService:
    """User accounts, user search and per-user review statistics."""

    def _get_or_404(self, user_id: int) -> User:
        user = User.query.filter_by(id=user_id).first()
        if user is None:
            logger.warning("user_not_found", user_id=user_id)
            raise NotFoundError("Not Found")
        return user

    def _ensure_unique(self, payload: UserRequest, exclude_id: Optional[int] = None):
        # Soft-deleted accounts keep their username and email
        for column, value, label in (
            (User.username, payload.username, "Username"),
            (User.email, payload.email, "Email"),
        ):
            query = db.session.query(User.id).filter(column == value)
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            if query.execution_options(include_deleted=True).first() is not None:
                logger.info("user_conflict", field=label.lower())
                raise ConflictError(f"{label} '{value}' is already taken")

    def list_users(self) -> List[UserResponse]:
        logger.info("users_list_start")
        users = User.query.order_by(User.id).all()
        logger.info("users_list_success", count=len(users))
        return [UserResponse.model_validate(user) for user in users]

    def get_user(self, user_id: int) -> UserResponse:
        logger.info("user_get_start", user_id=user_id)
        user = self._get_or_404(user_id)
        logger.info("user_get_success", user_id=user_id)
        return UserResponse.model_validate(user)

    def create_user(self, payload: UserRequest) -> UserResponse:
        logger.info("user_create_start", username=payload.username)
        self._ensure_unique(payload)

        user = User(
            username=payload.username,
            email=payload.email,
            password=generate_password_hash(payload.password),
        )
        db.session.add(user)
        db.session.commit()

        track_entity_operation("user", "create")
        logger.info("user_create_success", user_id=user.id)
        return UserResponse.model_validate(user)

    def update_user(self, user_id: int, payload: UserRequest) -> UserResponse:
        logger.info("user_update_start", user_id=user_id)
        user = self._get_or_404(user_id)
        self._ensure_unique(payload, exclude_id=user_id)

        user.username = payload.username
        user.email = payload.email
        user.password = generate_password_hash(payload.password)
        db.session.commit()

        track_entity_operation("user", "update")
        logger.info("user_update_success", user_id=user_id)
        return UserResponse.model_validate(user)

    def delete_user(self, user_id: int):
        logger.info("user_delete_start", user_id=user_id)
        user = self._get_or_404(user_id)
        db.session.delete(user)
        db.session.commit()

        track_entity_operation("user", "delete")
        logger.info("user_delete_success", user_id=user_id)

    def soft_delete_user(self, user_id: int):
        """Hide the user, their reviews (with the likes on them) and their likes."""
        logger.info("user_soft_delete_start", user_id=user_id)
        user = self._get_or_404(user_id)

        reviews = Review.query.filter_by(user_id=user_id).all()
        review_ids = [review.id for review in reviews]
        like_filter = Like.user_id == user_id
        if review_ids:
            like_filter = or_(like_filter, Like.review_id.in_(review_ids))
        likes = Like.query.filter(like_filter).all()

        user.soft_delete()
        for review in reviews:
            review.soft_delete()
        for like in likes:
            like.soft_delete()
        db.session.commit()

        track_entity_operation("user", "soft_delete")
        if reviews:
            track_entity_operation("review", "soft_delete", count=len(reviews))
        if likes:
            track_entity_operation("like", "soft_delete", count=len(likes))
        logger.info(
            "user_soft_delete_success",
            user_id=user_id,
            reviews_hidden=len(reviews),
            likes_hidden=len(likes),
        )

    def search_users(self, criteria: SearchUsersRequest) -> PagedResponse:
        """
        Filter, sort and page users.

        ``search_term`` matches username or email (case-insensitive
        substring). Results are ordered by ``sort_by`` when given and by id
        otherwise; ``sort_order`` defaults to ascending.
        """
        logger.info(
            "users_search_start",
            search_term=criteria.search_term,
            sort_by=criteria.sort_by,
            sort_order=criteria.sort_order,
            page_number=criteria.page_number,
            page_size=criteria.page_size,
        )
        query = User.query.filter(User.is_deleted == False)  # noqa: E712

        if criteria.search_term and criteria.search_term.strip():
            term = criteria.search_term.strip()
            query = query.filter(
                or_(User.username.icontains(term, autoescape=True), User.email.icontains(term, autoescape=True))
            )
        if criteria.created_after is not None:
            query = query.filter(User.created_at >= criteria.created_after)
        if criteria.created_before is not None:
            query = query.filter(User.created_at <= criteria.created_before)

        total_count = query.count()

        column = SORT_COLUMNS.get(criteria.sort_by, User.id)
        descending = criteria.sort_order == "desc"
        ordering = [column.desc() if descending else column.asc()]
        if column is not User.id:
            ordering.append(User.id.asc())

        users = (
            query.order_by(*ordering)
            .offset((criteria.page_number - 1) * criteria.page_size)
            .limit(criteria.page_size)
            .all()
        )

        page = PagedResponse(
            items=[UserResponse.model_validate(user).model_dump(mode="json") for user in users],
            total_count=total_count,
            page_number=criteria.page_number,
            page_size=criteria.page_size,
            total_pages=math.ceil(total_count / criteria.page_size),
        )
        observe_search("user", len(users))
        logger.info("users_search_success", total_count=total_count, returned=len(users))
        return page

    def get_user_stats(self, user_id: int) -> UserStatsResponse:
        """
        Review statistics for one user: count, average rating, reviews per
        movie genre (movies without a genre count as "Unknown") and the time
        of the newest review.
        """
        logger.info("user_stats_start", user_id=user_id)
        self._get_or_404(user_id)

        total_reviews, average_rating, last_activity = (
            db.session.query(
                func.count(Review.id),
                func.avg(Review.rating),
                func.max(Review.created_at),
            )
            .filter(Review.user_id == user_id, Review.is_deleted == False)  # noqa: E712
            .one()
        )

        genre = func.coalesce(func.nullif(Movie.genre, ""), UNKNOWN_GENRE)
        genre_rows = (
            db.session.query(genre, func.count(Review.id))
            .join(Movie, Review.movie_id == Movie.id)
            .filter(Review.user_id == user_id, Review.is_deleted == False)  # noqa: E712
            .group_by(genre)
            .all()
        )

        stats = UserStatsResponse(
            total_reviews=total_reviews or 0,
            average_rating=float(average_rating or 0.0),
            genre_stats={name: count for name, count in genre_rows},
            last_activity=last_activity,
        )
        logger.info("user_stats_success", user_id=user_id, total_reviews=stats.total_reviews)
        return stats


# Singleton instance
user_service = UserService()
