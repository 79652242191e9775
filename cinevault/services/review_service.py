import structlog
from typing import List, Optional

from sqlalchemy.orm import joinedload

from cinevault.exceptions import ConflictError, NotFoundError
from cinevault.metrics import track_entity_operation
from cinevault.models import db, Like, Movie, Review, User
from cinevault.schemas import ReviewRequest, ReviewResponse

logger = structlog.get_logger()


class ReviewService:
    """Reviews: one per user and movie, rated 0-10."""

    def _get_or_404(self, review_id: int) -> Review:
        review = (
            Review.query.options(joinedload(Review.movie), joinedload(Review.user))
            .filter_by(id=review_id)
            .first()
        )
        if review is None:
            logger.warning("review_not_found", review_id=review_id)
            raise NotFoundError("Not Found")
        return review

    def _ensure_references(self, payload: ReviewRequest):
        if Movie.query.filter_by(id=payload.movie_id).first() is None:
            logger.warning("review_movie_not_found", movie_id=payload.movie_id)
            raise NotFoundError(f"Movie {payload.movie_id} is not found")
        if User.query.filter_by(id=payload.user_id).first() is None:
            logger.warning("review_user_not_found", user_id=payload.user_id)
            raise NotFoundError(f"User {payload.user_id} is not found")

    def _ensure_unique(self, payload: ReviewRequest, exclude_id: Optional[int] = None):
        query = db.session.query(Review.id).filter(
            Review.user_id == payload.user_id,
            Review.movie_id == payload.movie_id,
        )
        if exclude_id is not None:
            query = query.filter(Review.id != exclude_id)
        if query.execution_options(include_deleted=True).first() is not None:
            logger.info("review_conflict", movie_id=payload.movie_id, user_id=payload.user_id)
            raise ConflictError("User has already reviewed this movie")

    def list_reviews(self) -> List[ReviewResponse]:
        logger.info("reviews_list_start")
        reviews = (
            Review.query.options(joinedload(Review.movie), joinedload(Review.user))
            .order_by(Review.id)
            .all()
        )
        logger.info("reviews_list_success", count=len(reviews))
        return [ReviewResponse.from_review(review) for review in reviews]

    def get_review(self, review_id: int) -> ReviewResponse:
        logger.info("review_get_start", review_id=review_id)
        review = self._get_or_404(review_id)
        logger.info("review_get_success", review_id=review_id)
        return ReviewResponse.from_review(review)

    def create_review(self, payload: ReviewRequest) -> ReviewResponse:
        logger.info("review_create_start", movie_id=payload.movie_id, user_id=payload.user_id)
        self._ensure_references(payload)
        self._ensure_unique(payload)

        review = Review(
            movie_id=payload.movie_id,
            user_id=payload.user_id,
            rating=payload.rating,
            comment=payload.comment,
        )
        db.session.add(review)
        db.session.commit()

        track_entity_operation("review", "create")
        logger.info("review_create_success", review_id=review.id, movie_id=review.movie_id, user_id=review.user_id)
        return self.get_review(review.id)

    def update_review(self, review_id: int, payload: ReviewRequest) -> ReviewResponse:
        logger.info("review_update_start", review_id=review_id)
        review = self._get_or_404(review_id)
        self._ensure_references(payload)
        self._ensure_unique(payload, exclude_id=review_id)

        review.movie_id = payload.movie_id
        review.user_id = payload.user_id
        review.rating = payload.rating
        review.comment = payload.comment
        db.session.commit()

        track_entity_operation("review", "update")
        logger.info("review_update_success", review_id=review_id)
        return self.get_review(review_id)

    def delete_review(self, review_id: int):
        logger.info("review_delete_start", review_id=review_id)
        review = self._get_or_404(review_id)
        db.session.delete(review)
        db.session.commit()

        track_entity_operation("review", "delete")
        logger.info("review_delete_success", review_id=review_id)

    def soft_delete_review(self, review_id: int):
        """Hide the review and the likes it received."""
        logger.info("review_soft_delete_start", review_id=review_id)
        review = self._get_or_404(review_id)
        likes = Like.query.filter_by(review_id=review_id).all()

        review.soft_delete()
        for like in likes:
            like.soft_delete()
        db.session.commit()

        track_entity_operation("review", "soft_delete")
        if likes:
            track_entity_operation("like", "soft_delete", count=len(likes))
        logger.info("review_soft_delete_success", review_id=review_id, likes_hidden=len(likes))


# Singleton instance
review_service = ReviewService()
