import pytest

from cinevault.app import create_app
from cinevault.config import TestingConfig
from cinevault.logging_context import clear_context
from cinevault.models import db


@pytest.fixture(autouse=True)
def clean_log_context():
    """Ensure no logging context leaks between tests."""
    clear_context()

    yield

    clear_context()


@pytest.fixture(scope='function')
def app():
    """Create a fresh app with an in-memory database for each test."""
    flask_app = create_app(TestingConfig)

    with flask_app.app_context():
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def build_envelope(data=None, **metadata):
    """Build a v2 ApiRequest body."""
    body = {
        "username": "tester",
        "secret_code": "s3cr3t",
        "name_of_server": "test-server",
    }
    body.update(metadata)
    if data is not None:
        body["data"] = data
    return body


@pytest.fixture
def envelope():
    return build_envelope


@pytest.fixture
def make_movie(client):
    """Create a movie through the v1 API and return its JSON."""
    def _make(title="Inception", **fields):
        payload = {"title": title, "genre": "Sci-Fi", "director": "Christopher Nolan"}
        payload.update(fields)
        response = client.post("/api/v1/Movies/CreateMovie", json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make


@pytest.fixture
def make_user(client):
    """Create a user through the v1 API and return its JSON."""
    def _make(username="alice", email=None, password="pa55word"):
        payload = {
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        }
        response = client.post("/api/v1/Users/CreateUser", json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make


@pytest.fixture
def make_review(client):
    """Create a review through the v1 API and return its JSON."""
    def _make(movie_id, user_id, rating=8, comment="Great"):
        payload = {"movie_id": movie_id, "user_id": user_id, "rating": rating, "comment": comment}
        response = client.post("/api/v1/Reviews/CreateReview", json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make
