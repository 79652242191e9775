"""
Tests for request/response schemas and the v2 envelopes.
"""

import uuid

import pytest
from pydantic import ValidationError

from cinevault.schemas import (
    ApiRequest,
    ApiResponse,
    MovieRequest,
    ReviewRequest,
    SearchUsersRequest,
    UserRequest,
)


class TestMovieRequest:
    """Test MovieRequest validation."""

    def test_valid_movie(self):
        movie = MovieRequest(title="  Inception ", release_date="2010-07-16", genre="Sci-Fi")
        assert movie.title == "Inception"
        assert movie.release_date.year == 2010

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            MovieRequest(title="   ")

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            MovieRequest(title="x" * 151)

    def test_description_limit(self):
        MovieRequest(title="Ok", description="d" * 1000)
        with pytest.raises(ValidationError):
            MovieRequest(title="Too long", description="d" * 1001)


class TestReviewRequest:

    @pytest.mark.parametrize("rating", [0, 5, 10])
    def test_rating_in_range(self, rating):
        assert ReviewRequest(movie_id=1, user_id=1, rating=rating).rating == rating

    @pytest.mark.parametrize("rating", [-1, 11])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            ReviewRequest(movie_id=1, user_id=1, rating=rating)


class TestUserRequest:

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserRequest(username="bob", email="not-an-email", password="pw")

    def test_email_length_limit(self):
        long_email = "a" * 60 + "@" + "b" * 40 + ".com"
        with pytest.raises(ValidationError):
            UserRequest(username="bob", email=long_email, password="pw")

    def test_username_limit(self):
        with pytest.raises(ValidationError):
            UserRequest(username="u" * 51, email="bob@example.com", password="pw")


class TestSearchUsersRequest:

    def test_defaults(self):
        criteria = SearchUsersRequest()
        assert criteria.page_number == 1
        assert criteria.page_size == 10
        assert criteria.sort_by is None

    def test_sort_by_accepts_pascal_case(self):
        assert SearchUsersRequest(sort_by="CreatedAt").sort_by == "created_at"
        assert SearchUsersRequest(sort_by="USERNAME").sort_by == "username"

    def test_unknown_sort_field(self):
        with pytest.raises(ValidationError):
            SearchUsersRequest(sort_by="password")

    def test_sort_order_normalized(self):
        assert SearchUsersRequest(sort_order="DESC").sort_order == "desc"
        with pytest.raises(ValidationError):
            SearchUsersRequest(sort_order="sideways")

    @pytest.mark.parametrize("page_size", [0, 101])
    def test_page_size_bounds(self, page_size):
        with pytest.raises(ValidationError):
            SearchUsersRequest(page_size=page_size)

    def test_page_number_minimum(self):
        with pytest.raises(ValidationError):
            SearchUsersRequest(page_number=0)


class TestEnvelopes:
    """Test the v2 ApiRequest / ApiResponse wrappers."""

    def test_request_metadata_optional(self):
        envelope = ApiRequest.model_validate({"data": {"title": "Heat"}})
        assert envelope.username is None
        assert envelope.additional_properties == {}
        assert isinstance(envelope.request_id, uuid.UUID)

    def test_each_request_gets_its_own_id(self):
        assert ApiRequest().request_id != ApiRequest().request_id

    def test_client_request_id_ignored(self):
        client_id = str(uuid.uuid4())
        envelope = ApiRequest.model_validate({"request_id": client_id})
        assert str(envelope.request_id) != client_id

        envelope = ApiRequest.model_validate({"request_id": "client-123"})
        assert isinstance(envelope.request_id, uuid.UUID)
        assert "request_id" not in envelope.model_dump()

    def test_response_omits_missing_data(self):
        body = ApiResponse(status_code=200, message="Movie is deleted").to_dict()
        assert body["status_code"] == 200
        assert body["message"] == "Movie is deleted"
        assert "data" not in body
        uuid.UUID(body["response_id"])

    def test_response_keeps_falsy_data(self):
        body = ApiResponse(status_code=200, message="OK", data=[]).to_dict()
        assert body["data"] == []
