from flask import Blueprint, url_for

from cinevault.routes.responses import dto, ok, parse_body, parse_envelope
from cinevault.schemas import ReviewRequest
from cinevault.services import review_service

READ_METHODS = ["GET", "OPTIONS"]

bp_v1 = Blueprint("reviews", __name__, url_prefix="/Reviews")
bp_v2 = Blueprint("reviews", __name__, url_prefix="/Reviews")


# --- v1 ---

@bp_v1.route("/GetReviews", methods=["GET"])
def get_reviews_v1():
    return dto(review_service.list_reviews())


@bp_v1.route("/GetReviewById/<int:review_id>", methods=["GET"])
def get_review_by_id_v1(review_id):
    return dto(review_service.get_review(review_id))


@bp_v1.route("/CreateReview", methods=["POST"])
def create_review_v1():
    """
    POST /api/v1/Reviews/CreateReview
    The movie and user must exist; a user reviews a movie at most once.
    """
    payload = parse_body(ReviewRequest)
    return dto(review_service.create_review(payload), 201)


@bp_v1.route("/UpdateReview/<int:review_id>", methods=["PUT"])
def update_review_v1(review_id):
    payload = parse_body(ReviewRequest)
    return dto(review_service.update_review(review_id, payload))


@bp_v1.route("/DeleteReview/<int:review_id>", methods=["DELETE"])
def delete_review_v1(review_id):
    review_service.delete_review(review_id)
    return "", 204


# --- v2 ---

@bp_v2.route("/GetReviews", methods=READ_METHODS)
def get_reviews_v2():
    parse_envelope(required=False)
    return ok(review_service.list_reviews())


@bp_v2.route("/GetReviewById/<int:review_id>", methods=READ_METHODS)
def get_review_by_id_v2(review_id):
    parse_envelope(required=False)
    return ok(review_service.get_review(review_id))


@bp_v2.route("/CreateReview", methods=["POST"])
def create_review_v2():
    _, payload = parse_envelope(ReviewRequest)
    review = review_service.create_review(payload)
    location = url_for(".get_review_by_id_v2", review_id=review.id)
    return ok(review, "Created", 201, headers={"Location": location})


@bp_v2.route("/UpdateReview/<int:review_id>", methods=["PUT"])
def update_review_v2(review_id):
    _, payload = parse_envelope(ReviewRequest)
    return ok(review_service.update_review(review_id, payload))


@bp_v2.route("/DeleteReview/<int:review_id>", methods=["DELETE"])
def delete_review_v2(review_id):
    """DELETE /api/v2/Reviews/DeleteReview/<id> hides the review and its likes."""
    parse_envelope(required=False)
    review_service.soft_delete_review(review_id)
    return ok("Deleted")
