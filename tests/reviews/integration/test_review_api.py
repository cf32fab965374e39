"""Integration tests for the review endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.reviews.api import review_router
from storefront.utils.http import register_error_handlers

COMMENT = "Comfortable mouse and the battery lasts for weeks."


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(review_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def author_headers(purchase, auth_header):
    return auth_header(purchase["user_id"])


@pytest.fixture()
def admin_headers(admin_id, auth_header):
    return auth_header(admin_id, role="admin")


def _submit(client, purchase, headers, rating=4):
    return client.post(
        "/reviews",
        json={
            "product_id": purchase["product_id"],
            "order_id": purchase["order_id"],
            "rating": rating,
            "title": "Great mouse",
            "comment": COMMENT,
        },
        headers=headers,
    )


class TestReviewAPI:
    def test_submit_returns_201(self, client, purchase, author_headers):
        response = _submit(client, purchase, author_headers)
        assert response.status_code == 201
        assert response.json()["review_id"]

    def test_submit_requires_session(self, client, purchase):
        assert _submit(client, purchase, {}).status_code == 401

    def test_duplicate_returns_400(self, client, purchase, author_headers):
        _submit(client, purchase, author_headers)
        assert _submit(client, purchase, author_headers, rating=1).status_code == 400

    def test_public_listing_shows_only_approved(self, client, purchase, author_headers, admin_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        assert client.get("/reviews", params={"product_id": purchase["product_id"]}).json() == []

        pending = client.get("/reviews/pending", headers=admin_headers).json()
        assert [r["id"] for r in pending] == [review_id]

        response = client.put(f"/reviews/{review_id}/moderation", json={"status": "approved"}, headers=admin_headers)
        assert response.status_code == 200

        listing = client.get("/reviews", params={"product_id": purchase["product_id"]}).json()
        assert [r["id"] for r in listing] == [review_id]

    def test_moderation_requires_admin(self, client, purchase, author_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        response = client.put(f"/reviews/{review_id}/moderation", json={"status": "approved"}, headers=author_headers)
        assert response.status_code == 403

    def test_invalid_moderation_returns_409(self, client, purchase, author_headers, admin_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        client.put(f"/reviews/{review_id}/moderation", json={"status": "approved"}, headers=admin_headers)
        response = client.put(f"/reviews/{review_id}/moderation", json={"status": "approved"}, headers=admin_headers)
        assert response.status_code == 409

    def test_author_cannot_vote_on_own_review(self, client, purchase, author_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        response = client.post(f"/reviews/{review_id}/votes", json={"vote_type": "helpful"}, headers=author_headers)
        assert response.status_code == 400

    def test_vote(self, client, purchase, author_headers, admin_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        response = client.post(f"/reviews/{review_id}/votes", json={"vote_type": "helpful"}, headers=admin_headers)
        assert response.status_code == 201

    def test_edit_and_delete(self, client, purchase, author_headers):
        review_id = _submit(client, purchase, author_headers).json()["review_id"]
        assert client.put(f"/reviews/{review_id}", json={"rating": 2}, headers=author_headers).status_code == 200
        assert client.delete(f"/reviews/{review_id}", headers=author_headers).status_code == 200

    def test_recalculate_rating(self, client, purchase, author_headers, admin_headers):
        review_id = _submit(client, purchase, author_headers, rating=5).json()["review_id"]
        client.put(f"/reviews/{review_id}/moderation", json={"status": "approved"}, headers=admin_headers)

        response = client.post(f"/reviews/products/{purchase['product_id']}/rating", headers=admin_headers)
        assert response.json() == {"product_id": purchase["product_id"], "average_rating": 5.0, "review_count": 1}
