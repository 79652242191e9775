from flask import Blueprint, current_app, jsonify

bp_v1 = Blueprint("app_info", __name__)
bp_v2 = Blueprint("app_info", __name__)


def environment():
    """GET /api/v{1,2}/environment"""
    return jsonify({"environment_name": current_app.config["APP_ENV"]})


def throw_exception():
    """GET /api/v{1,2}/throw-exception surfaces as a 500."""
    raise NotImplementedError("This method should never be called")


for bp in (bp_v1, bp_v2):
    bp.add_url_rule("/environment", view_func=environment, methods=["GET"])
    bp.add_url_rule("/throw-exception", view_func=throw_exception, methods=["GET"])


@bp_v1.route("/old-endpoint", methods=["GET"])
def old_endpoint():
    return jsonify("Old version endpoint")


@bp_v2.route("/new-endpoint", methods=["GET"])
def new_endpoint():
    return jsonify("New version endpoint")
