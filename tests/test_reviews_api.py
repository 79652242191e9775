"""
Tests for the Reviews controller (v1 and v2).
"""

import pytest


@pytest.fixture
def movie_and_user(make_movie, make_user):
    return make_movie("Heat"), make_user("alice")


class TestReviewsV1:

    def test_create_review(self, client, movie_and_user):
        movie, user = movie_and_user
        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": movie["id"], "user_id": user["id"], "rating": 9, "comment": "Tense"},
        )

        assert response.status_code == 201
        review = response.get_json()
        assert review["movie_title"] == "Heat"
        assert review["username"] == "alice"
        assert review["rating"] == 9
        assert review["comment"] == "Tense"
        assert review["created_at"] is not None

        fetched = client.get(f"/api/v1/Reviews/GetReviewById/{review['id']}").get_json()
        assert fetched == review

    @pytest.mark.parametrize("rating", [-1, 11])
    def test_rating_out_of_range(self, client, movie_and_user, rating):
        movie, user = movie_and_user
        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": movie["id"], "user_id": user["id"], "rating": rating},
        )
        assert response.status_code == 400

    def test_unknown_movie(self, client, movie_and_user):
        _, user = movie_and_user
        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": 999, "user_id": user["id"], "rating": 5},
        )

        assert response.status_code == 404
        assert response.get_json()["error"] == "Movie 999 is not found"

    def test_unknown_user(self, client, movie_and_user):
        movie, _ = movie_and_user
        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": movie["id"], "user_id": 999, "rating": 5},
        )
        assert response.status_code == 404

    def test_second_review_conflicts(self, client, movie_and_user, make_review):
        movie, user = movie_and_user
        make_review(movie["id"], user["id"])

        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": movie["id"], "user_id": user["id"], "rating": 3},
        )
        assert response.status_code == 409

    def test_update_review(self, client, movie_and_user, make_movie, make_review):
        movie, user = movie_and_user
        other = make_movie("Ronin")
        review = make_review(movie["id"], user["id"], rating=4)

        response = client.put(
            f"/api/v1/Reviews/UpdateReview/{review['id']}",
            json={"movie_id": other["id"], "user_id": user["id"], "rating": 10, "comment": "Better"},
        )

        assert response.status_code == 200
        updated = response.get_json()
        assert updated["movie_title"] == "Ronin"
        assert updated["rating"] == 10

    def test_list_and_delete(self, client, movie_and_user, make_review):
        movie, user = movie_and_user
        review = make_review(movie["id"], user["id"])

        assert len(client.get("/api/v1/Reviews/GetReviews").get_json()) == 1
        assert client.delete(f"/api/v1/Reviews/DeleteReview/{review['id']}").status_code == 204
        assert client.get("/api/v1/Reviews/GetReviews").get_json() == []
        assert client.delete(f"/api/v1/Reviews/DeleteReview/{review['id']}").status_code == 404


class TestReviewsV2:

    def test_create_review_location(self, client, movie_and_user, envelope):
        movie, user = movie_and_user
        response = client.post(
            "/api/v2/Reviews/CreateReview",
            json=envelope({"movie_id": movie["id"], "user_id": user["id"], "rating": 7}),
        )

        assert response.status_code == 201
        body = response.get_json()
        assert body["status_code"] == 201
        assert body["message"] == "Created"
        review_id = body["data"]["id"]
        assert response.headers["Location"].endswith(f"/api/v2/Reviews/GetReviewById/{review_id}")

    def test_get_reviews(self, client, movie_and_user, make_review, envelope):
        movie, user = movie_and_user
        make_review(movie["id"], user["id"])

        body = client.options("/api/v2/Reviews/GetReviews", json=envelope()).get_json()
        assert body["message"] == "OK"
        assert body["data"][0]["username"] == "alice"

    def test_get_missing_review(self, client):
        response = client.get("/api/v2/Reviews/GetReviewById/4")

        assert response.status_code == 404
        assert response.get_json()["status_code"] == 404
        assert response.get_json()["message"] == "Not Found"

    def test_soft_delete_review(self, client, movie_and_user, make_review, envelope):
        movie, user = movie_and_user
        review = make_review(movie["id"], user["id"], rating=2)
        like = client.post(
            "/api/v1/Likes/CreateLike", json={"review_id": review["id"], "user_id": user["id"]}
        ).get_json()

        response = client.delete(f"/api/v2/Reviews/DeleteReview/{review['id']}", json=envelope())

        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "OK"
        assert body["data"] == "Deleted"

        assert client.get("/api/v2/Reviews/GetReviews").get_json()["data"] == []
        assert client.get(f"/api/v1/Likes/GetLikeById/{like['id']}").status_code == 404
        # Hidden reviews no longer count towards the movie rating
        stats = client.get(f"/api/v1/Movies/GetMovieById/{movie['id']}").get_json()
        assert stats["review_count"] == 0
        assert stats["average_rating"] == 0.0

    def test_soft_deleted_review_still_blocks_duplicate(self, client, movie_and_user, make_review):
        movie, user = movie_and_user
        review = make_review(movie["id"], user["id"])
        client.delete(f"/api/v2/Reviews/DeleteReview/{review['id']}")

        response = client.post(
            "/api/v1/Reviews/CreateReview",
            json={"movie_id": movie["id"], "user_id": user["id"], "rating": 6},
        )
        assert response.status_code == 409
