from flask import Blueprint, url_for

from cinevault.routes.responses import dto, ok, parse_body, parse_envelope
from cinevault.schemas import LikeRequest
from cinevault.services import like_service

READ_METHODS = ["GET", "OPTIONS"]

bp_v1 = Blueprint("likes", __name__, url_prefix="/Likes")
bp_v2 = Blueprint("likes", __name__, url_prefix="/Likes")


# --- v1 ---

@bp_v1.route("/GetLikes", methods=["GET"])
def get_likes_v1():
    return dto(like_service.list_likes())


@bp_v1.route("/GetLikeById/<int:like_id>", methods=["GET"])
def get_like_by_id_v1(like_id):
    return dto(like_service.get_like(like_id))


@bp_v1.route("/CreateLike", methods=["POST"])
def create_like_v1():
    payload = parse_body(LikeRequest)
    return dto(like_service.create_like(payload), 201)


@bp_v1.route("/DeleteLike/<int:like_id>", methods=["DELETE"])
def delete_like_v1(like_id):
    like_service.delete_like(like_id)
    return "", 204


# --- v2 ---

@bp_v2.route("/GetLikes", methods=READ_METHODS)
def get_likes_v2():
    parse_envelope(required=False)
    return ok(like_service.list_likes())


@bp_v2.route("/GetLikeById/<int:like_id>", methods=READ_METHODS)
def get_like_by_id_v2(like_id):
    parse_envelope(required=False)
    return ok(like_service.get_like(like_id))


@bp_v2.route("/CreateLike", methods=["POST"])
def create_like_v2():
    _, payload = parse_envelope(LikeRequest)
    like = like_service.create_like(payload)
    location = url_for(".get_like_by_id_v2", like_id=like.id)
    return ok(like, "Created", 201, headers={"Location": location})


@bp_v2.route("/DeleteLike/<int:like_id>", methods=["DELETE"])
def delete_like_v2(like_id):
    parse_envelope(required=False)
    like_service.soft_delete_like(like_id)
    return ok("Deleted")
