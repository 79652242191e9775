"""
Versioned API blueprints.

Routes follow ``/api/v{version}/{Controller}/{Action}[/{id}]``. Each
controller module provides a child blueprint per version it serves; the
children are nested under the ``v1`` and ``v2`` parents so endpoint names
read ``v2.movies.get_movie_details`` and the served version is the root of
``request.blueprint``.
"""

from flask import Blueprint

from cinevault.routes import actors, app_info, likes, movies, reviews, users

api_v1 = Blueprint("v1", __name__, url_prefix="/api/v1")
api_v2 = Blueprint("v2", __name__, url_prefix="/api/v2")

for module in (movies, reviews, users, likes, app_info):
    api_v1.register_blueprint(module.bp_v1)

for module in (movies, actors, reviews, users, likes, app_info):
    api_v2.register_blueprint(module.bp_v2)

__all__ = ["api_v1", "api_v2"]
