from flask import Blueprint, url_for

from cinevault.routes.responses import dto, ok, parse_body, parse_envelope
from cinevault.schemas import SearchUsersRequest, UserRequest
from cinevault.services import user_service

READ_METHODS = ["GET", "OPTIONS"]

bp_v1 = Blueprint("users", __name__, url_prefix="/Users")
bp_v2 = Blueprint("users", __name__, url_prefix="/Users")


# --- v1 ---

@bp_v1.route("/GetUsers", methods=["GET"])
def get_users_v1():
    return dto(user_service.list_users())


@bp_v1.route("/GetUserById/<int:user_id>", methods=["GET"])
def get_user_by_id_v1(user_id):
    return dto(user_service.get_user(user_id))


@bp_v1.route("/CreateUser", methods=["POST"])
def create_user_v1():
    payload = parse_body(UserRequest)
    return dto(user_service.create_user(payload), 201)


@bp_v1.route("/UpdateUser/<int:user_id>", methods=["PUT"])
def update_user_v1(user_id):
    payload = parse_body(UserRequest)
    return dto(user_service.update_user(user_id, payload))


@bp_v1.route("/DeleteUser/<int:user_id>", methods=["DELETE"])
def delete_user_v1(user_id):
    user_service.delete_user(user_id)
    return "", 204


# --- v2 ---

@bp_v2.route("/GetUsers", methods=READ_METHODS)
def get_users_v2():
    parse_envelope(required=False)
    return ok(user_service.list_users())


@bp_v2.route("/GetUserById/<int:user_id>", methods=READ_METHODS)
def get_user_by_id_v2(user_id):
    parse_envelope(required=False)
    return ok(user_service.get_user(user_id))


@bp_v2.route("/SearchUsers", methods=READ_METHODS)
def search_users():
    """
    GET|OPTIONS /api/v2/Users/SearchUsers?search_term=ann&sort_by=created_at&sort_order=desc

    Returns one page of users:
        {"items": [...], "total_count": 42, "page_number": 1,
         "page_size": 10, "total_pages": 5}
    """
    _, criteria = parse_envelope(SearchUsersRequest, fallback_to_args=True)
    return ok(user_service.search_users(criteria))


@bp_v2.route("/GetUserStats/<int:user_id>", methods=READ_METHODS)
def get_user_stats(user_id):
    parse_envelope(required=False)
    return ok(user_service.get_user_stats(user_id))


@bp_v2.route("/CreateUser", methods=["POST"])
def create_user_v2():
    _, payload = parse_envelope(UserRequest)
    user = user_service.create_user(payload)
    location = url_for(".get_user_by_id_v2", user_id=user.id)
    return ok(user, "Created", 201, headers={"Location": location})


@bp_v2.route("/UpdateUser/<int:user_id>", methods=["PUT"])
def update_user_v2(user_id):
    _, payload = parse_envelope(UserRequest)
    return ok(user_service.update_user(user_id, payload))


@bp_v2.route("/DeleteUser/<int:user_id>", methods=["DELETE"])
def delete_user_v2(user_id):
    """DELETE /api/v2/Users/DeleteUser/<id> hides the user with their reviews and likes."""
    parse_envelope(required=False)
    user_service.soft_delete_user(user_id)
    return ok("Deleted")
