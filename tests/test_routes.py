"""
Book Review Service — API Endpoint Tests
=========================================

What:  The HTTP surface end to end: access gate, status codes, headers and
       error envelopes.
How:   HTTPX AsyncClient on the ASGI app; the in-memory database and the
       fake auth provider replace the real backends.
"""

import uuid

import pytest

from bookreview.services.catalog_service import MAX_CATALOG_PAGE
from bookreview.services.session import default_fallback


class TestSessionEndpoints:

    @pytest.mark.asyncio
    async def test_signed_out_gets_fallback(self, test_client):
        response = await test_client.get("/api/session")

        assert response.status_code == 200
        body = response.json()
        assert body["state"] == "unauthenticated"
        assert body["view"] == "fallback"
        assert body["fallback"]["sign_in_url"] == "/auth/login"
        assert body["redirect_url"] is None

    @pytest.mark.asyncio
    async def test_signed_in_redirects_to_catalog(self, test_client, auth_headers):
        response = await test_client.get("/api/session", headers=auth_headers)

        body = response.json()
        assert body["view"] == "content"
        assert body["display_name"] == "Ada Reader"
        assert body["redirect_url"] == "/books"
        assert body["fallback"] is None

    @pytest.mark.asyncio
    async def test_sign_out(self, test_client, auth_headers):
        response = await test_client.post("/api/session/sign-out", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Signed out"


class TestAccessGateOnBooks:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/books", "/api/books/filters", f"/api/books/{uuid.uuid4()}"])
    async def test_requires_session(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "authentication_required"
        assert body["details"]["fallback"]["title"] == "Authentication Required"

    @pytest.mark.asyncio
    async def test_rejected_token(self, test_client):
        response = await test_client.get("/api/books", headers={"Authorization": "Bearer expired"})
        assert response.status_code == 401


class TestBookEndpoints:

    @pytest.mark.asyncio
    async def test_list_books(self, test_client, auth_headers, make_book):
        await make_book("Dune", minutes=1)
        await make_book("Emma", minutes=2)

        response = await test_client.get(
            "/api/books", params={"sort": "title", "seq": 3}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert "X-Request-ID" in response.headers
        body = response.json()
        assert [b["title"] for b in body["books"]] == ["Dune", "Emma"]
        assert body["seq"] == 3
        assert body["page_size"] == 12

    @pytest.mark.asyncio
    async def test_invalid_sort_rejected(self, test_client, auth_headers):
        response = await test_client.get("/api/books", params={"sort": "price"}, headers=auth_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_page_upper_bound(self, test_client, auth_headers):
        response = await test_client.get(
            "/api/books", params={"page": 10**18}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_last_allowed_page_is_empty(self, test_client, auth_headers, make_book):
        await make_book("Dune")

        response = await test_client.get(
            "/api/books", params={"page": MAX_CATALOG_PAGE}, headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["books"] == []
        assert body["empty_state"]["kind"] == "out_of_range"

    @pytest.mark.asyncio
    async def test_signed_out_session_carries_default_prompt(self, test_client):
        body = (await test_client.get("/api/session")).json()
        assert body["fallback"] == default_fallback()

    @pytest.mark.asyncio
    async def test_filter_options(self, test_client, auth_headers, make_book):
        await make_book("Dune", author="Frank Herbert", genre="SF")

        response = await test_client.get("/api/books/filters", headers=auth_headers)

        assert response.json() == {"genres": ["SF"], "authors": ["Frank Herbert"]}

    @pytest.mark.asyncio
    async def test_create_book(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/books",
            json={"title": "Dune", "author": "Frank Herbert", "genre": "SF"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert response.headers["Location"] == f"/books/{body['book']['id']}"
        assert body["book"]["review_count"] == 0

    @pytest.mark.asyncio
    async def test_create_book_missing_field(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/books", json={"title": "Dune", "genre": "SF"}, headers=auth_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "All fields are required: title, author, genre."
        assert body["details"]["fields"] == ["author"]

    @pytest.mark.asyncio
    async def test_detail_not_found(self, test_client, auth_headers):
        response = await test_client.get(f"/api/books/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["details"]["recovery_url"] == "/books"

    @pytest.mark.asyncio
    async def test_review_round_trip(self, test_client, auth_headers, make_book):
        book = await make_book("Dune")
        url = f"/api/books/{book.id}/reviews"

        created = await test_client.post(
            url, json={"review_text": "Great", "rating": 4}, headers=auth_headers
        )
        updated = await test_client.post(
            url, json={"review_text": "Even better", "rating": 5}, headers=auth_headers
        )

        assert created.status_code == 200
        assert created.json()["mode"] == "created"
        assert updated.json()["mode"] == "updated"
        assert updated.json()["book"]["review_count"] == 1
        assert updated.json()["book"]["average_rating"] == 5

        detail = await test_client.get(f"/api/books/{book.id}", headers=auth_headers)
        assert detail.json()["review_form"]["mode"] == "update"

    @pytest.mark.asyncio
    async def test_review_without_rating(self, test_client, auth_headers, make_book):
        book = await make_book("Dune")

        response = await test_client.post(
            f"/api/books/{book.id}/reviews", json={"review_text": "Great"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please select a rating"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client, db_engine, monkeypatch):
        monkeypatch.setattr("bookreview.database.engine", db_engine)

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["auth"] == "available"
