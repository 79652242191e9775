import structlog
from typing import List

from cinevault.exceptions import ConflictError, NotFoundError
from cinevault.metrics import track_entity_operation
from cinevault.models import db, Like, Review, User
from cinevault.schemas import LikeRequest, LikeResponse

logger = structlog.get_logger()


class LikeService:
    """Likes on reviews, at most one per user and review."""

    def _get_or_404(self, like_id: int) -> Like:
        like = Like.query.filter_by(id=like_id).first()
        if like is None:
            logger.warning("like_not_found", like_id=like_id)
            raise NotFoundError("Not Found")
        return like

    def list_likes(self) -> List[LikeResponse]:
        logger.info("likes_list_start")
        likes = Like.query.order_by(Like.id).all()
        logger.info("likes_list_success", count=len(likes))
        return [LikeResponse.model_validate(like) for like in likes]

    def get_like(self, like_id: int) -> LikeResponse:
        logger.info("like_get_start", like_id=like_id)
        like = self._get_or_404(like_id)
        logger.info("like_get_success", like_id=like_id)
        return LikeResponse.model_validate(like)

    def create_like(self, payload: LikeRequest) -> LikeResponse:
        logger.info("like_create_start", review_id=payload.review_id, user_id=payload.user_id)
        if Review.query.filter_by(id=payload.review_id).first() is None:
            logger.warning("like_review_not_found", review_id=payload.review_id)
            raise NotFoundError(f"Review {payload.review_id} is not found")
        if User.query.filter_by(id=payload.user_id).first() is None:
            logger.warning("like_user_not_found", user_id=payload.user_id)
            raise NotFoundError(f"User {payload.user_id} is not found")

        existing = (
            db.session.query(Like.id)
            .filter(Like.user_id == payload.user_id, Like.review_id == payload.review_id)
            .execution_options(include_deleted=True)
            .first()
        )
        if existing is not None:
            logger.info("like_conflict", review_id=payload.review_id, user_id=payload.user_id)
            raise ConflictError("User has already liked this review")

        like = Like(review_id=payload.review_id, user_id=payload.user_id)
        db.session.add(like)
        db.session.commit()

        track_entity_operation("like", "create")
        logger.info("like_create_success", like_id=like.id)
        return LikeResponse.model_validate(like)

    def delete_like(self, like_id: int):
        logger.info("like_delete_start", like_id=like_id)
        like = self._get_or_404(like_id)
        db.session.delete(like)
        db.session.commit()

        track_entity_operation("like", "delete")
        logger.info("like_delete_success", like_id=like_id)

    def soft_delete_like(self, like_id: int):
        logger.info("like_soft_delete_start", like_id=like_id)
        like = self._get_or_404(like_id)
        like.soft_delete()
        db.session.commit()

        track_entity_operation("like", "soft_delete")
        logger.info("like_soft_delete_success", like_id=like_id)


# Singleton instance
like_service = LikeService()
