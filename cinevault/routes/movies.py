from typing import List

from flask import Blueprint

from cinevault.routes.responses import dto, ok, parse_body, parse_envelope
from cinevault.schemas import MovieRequest, SearchMoviesAltRequest, SearchMoviesRequest
from cinevault.services import movie_service

READ_METHODS = ["GET", "OPTIONS"]

bp_v1 = Blueprint("movies", __name__, url_prefix="/Movies")
bp_v2 = Blueprint("movies", __name__, url_prefix="/Movies")


# --- v1 ---

@bp_v1.route("/GetMovies", methods=["GET"])
def get_movies_v1():
    """
    GET /api/v1/Movies/GetMovies
    All movies with their average rating and review count.
    """
    return dto(movie_service.list_movies())


@bp_v1.route("/GetMovieById/<int:movie_id>", methods=["GET"])
def get_movie_by_id_v1(movie_id):
    return dto(movie_service.get_movie(movie_id))


@bp_v1.route("/CreateMovie", methods=["POST"])
def create_movie_v1():
    payload = parse_body(MovieRequest)
    return dto(movie_service.create_movie(payload), 201)


@bp_v1.route("/UpdateMovie/<int:movie_id>", methods=["PUT"])
def update_movie_v1(movie_id):
    payload = parse_body(MovieRequest)
    return dto(movie_service.update_movie(movie_id, payload))


@bp_v1.route("/DeleteMovie/<int:movie_id>", methods=["DELETE"])
def delete_movie_v1(movie_id):
    """DELETE /api/v1/Movies/DeleteMovie/<id> removes the row for good."""
    movie_service.delete_movie(movie_id)
    return "", 204


# --- v2 ---

@bp_v2.route("/GetMovies", methods=READ_METHODS)
def get_movies_v2():
    parse_envelope(required=False)
    return ok(movie_service.list_movies(), "Movies are received")


@bp_v2.route("/SearchMovies", methods=READ_METHODS)
def search_movies():
    """
    GET|OPTIONS /api/v2/Movies/SearchMovies?genre=Drama&avg_rating=7
    Criteria come from the envelope data or, without it, the query string.
    """
    _, criteria = parse_envelope(SearchMoviesRequest, fallback_to_args=True)
    return ok(movie_service.search_movies(criteria), "Movies are received")


@bp_v2.route("/SearchMoviesAlt", methods=READ_METHODS)
def search_movies_alt():
    """GET|OPTIONS /api/v2/Movies/SearchMoviesAlt?text=nolan"""
    _, criteria = parse_envelope(SearchMoviesAltRequest, fallback_to_args=True)
    return ok(movie_service.search_movies_alt(criteria), "Movies are received")


@bp_v2.route("/GetMovieDetails/<int:movie_id>", methods=READ_METHODS)
def get_movie_details(movie_id):
    parse_envelope(required=False)
    return ok(movie_service.get_movie_details(movie_id), "Movie details are received")


@bp_v2.route("/GetMovieById/<int:movie_id>", methods=READ_METHODS)
def get_movie_by_id_v2(movie_id):
    parse_envelope(required=False)
    return ok(movie_service.get_movie(movie_id))


@bp_v2.route("/CreateMovie", methods=["POST"])
def create_movie_v2():
    _, payload = parse_envelope(MovieRequest)
    movie = movie_service.create_movie(payload)
    return ok(movie.id, "Movie is created")


@bp_v2.route("/CreateMovies", methods=["POST"])
def create_movies():
    _, payloads = parse_envelope(List[MovieRequest])
    return ok(movie_service.create_movies(payloads), "Movies are created")


@bp_v2.route("/UpdateMovie/<int:movie_id>", methods=["PUT"])
def update_movie_v2(movie_id):
    _, payload = parse_envelope(MovieRequest)
    return ok(movie_service.update_movie(movie_id, payload), "Movie is updated")


@bp_v2.route("/DeleteMovie/<int:movie_id>", methods=["DELETE"])
def delete_movie_v2(movie_id):
    """DELETE /api/v2/Movies/DeleteMovie/<id> hides the movie with its reviews and likes."""
    parse_envelope(required=False)
    movie_service.soft_delete_movie(movie_id)
    return ok(message="Movie is deleted")


@bp_v2.route("/DeleteMovies", methods=["DELETE"])
def delete_movies():
    """
    DELETE /api/v2/Movies/DeleteMovies
    Envelope data is a list of movie ids; the response data reports what
    happened to each of them.
    """
    _, movie_ids = parse_envelope(List[int])
    deleted_count, results = movie_service.soft_delete_movies(movie_ids)
    return ok(results, f"Movies are deleted. Check data. Actually deleted: {deleted_count}.")
