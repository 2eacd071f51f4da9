"""
Tests for Books API Endpoints

This module tests the catalogue endpoints under /api/v1/books.

TEST NAMING CONVENTION:
- test_<action>_<scenario>
- Examples: test_create_book_success, test_get_book_not_found

TESTING BEST PRACTICES:
1. Arrange: Set up test data and conditions
2. Act: Perform the action being tested
3. Assert: Verify the expected outcome
"""

from fastapi import status

from catalogue.models import Borrowing


class TestListBooks:
    """Tests for GET /api/v1/books/ endpoint."""

    def test_list_books_empty(self, client):
        """Test listing books when database is empty."""
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["page"] == 1
        assert data["pages"] == 0

    def test_list_books_with_data(self, client, sample_book):
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["title"] == "1984"
        assert data["items"][0]["available"] is True

    def test_list_books_pagination(self, client, multiple_books):
        response = client.get("/api/v1/books/?page=1&per_page=5")
        data = response.json()
        assert len(data["items"]) == 5
        assert data["total"] == 15
        assert data["pages"] == 3

        response = client.get("/api/v1/books/?page=3&per_page=5")
        data = response.json()
        assert len(data["items"]) == 5
        assert data["page"] == 3

    def test_list_books_newest_first(self, client, multiple_books):
        response = client.get("/api/v1/books/?per_page=100")

        ids = [item["id"] for item in response.json()["items"]]
        assert ids == sorted(ids, reverse=True)

    def test_list_books_invalid_pagination(self, client):
        response = client.get("/api/v1/books/?page=0")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = client.get("/api/v1/books/?per_page=101")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_search_matches_title_case_insensitive(self, client, sample_book, multiple_books):
        response = client.get("/api/v1/books/?search=19")

        titles = [item["title"] for item in response.json()["items"]]
        assert titles == ["1984"]

    def test_search_matches_author(self, client, sample_book, multiple_books):
        response = client.get("/api/v1/books/?search=ORWELL")

        assert response.json()["total"] == 1

    def test_search_matches_isbn(self, client, sample_book):
        response = client.get("/api/v1/books/?search=9780451524935")

        assert response.json()["total"] == 1

    def test_filter_by_genre(self, client, multiple_books):
        response = client.get("/api/v1/books/?genre=History&per_page=100")

        items = response.json()["items"]
        assert len(items) == 5
        assert all(item["genre"] == "History" for item in items)

    def test_filter_by_availability(self, client, multiple_books):
        unavailable = client.get("/api/v1/books/?available=false&per_page=100").json()
        available = client.get("/api/v1/books/?available=true&per_page=100").json()

        assert unavailable["total"] == 3
        assert available["total"] == 12
        assert all(item["available"] is False for item in unavailable["items"])

    def test_combined_filters(self, client, multiple_books):
        response = client.get("/api/v1/books/?genre=Fiction&available=true&per_page=100")

        items = response.json()["items"]
        assert all(item["genre"] == "Fiction" and item["available"] for item in items)
        assert len(items) == 4


class TestGenres:
    """Tests for GET /api/v1/books/meta/genres."""

    def test_genres_empty(self, client):
        response = client.get("/api/v1/books/meta/genres")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_genres_distinct_and_sorted(self, client, multiple_books, book_factory):
        book_factory(title="No Genre")

        response = client.get("/api/v1/books/meta/genres")

        assert response.json() == ["Fiction", "History", "Science"]


class TestGetBook:
    """Tests for GET /api/v1/books/{book_id} endpoint."""

    def test_get_book_success(self, client, sample_book):
        response = client.get(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_book.id
        assert data["author"] == "George Orwell"
        assert data["isbn"] == "9780451524935"

    def test_get_book_not_found(self, client):
        response = client.get("/api/v1/books/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Book not found"

    def test_get_book_invalid_id(self, client):
        response = client.get("/api/v1/books/not-a-number")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestCreateBook:
    """Tests for POST /api/v1/books/ endpoint."""

    def test_create_book_success(self, client, admin_headers):
        book_data = {
            "title": "Brave New World",
            "author": "Aldous Huxley",
            "isbn": "978-0-06-085052-4",
            "genre": "Dystopian",
            "publication_year": 1932,
        }

        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "Brave New World"
        assert data["isbn"] == "9780060850524"
        assert data["available"] is True
        assert "id" in data

    def test_create_book_ignores_available(self, client, admin_headers):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Dune", "author": "Frank Herbert", "available": False},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["available"] is True

    def test_create_book_duplicate_isbn(self, client, admin_headers, sample_book):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Copy", "author": "Someone", "isbn": sample_book.isbn},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "ISBN already exists"

    def test_create_book_missing_title(self, client, admin_headers):
        response = client.post(
            "/api/v1/books/", json={"author": "Nobody"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_blank_author(self, client, admin_headers):
        response = client.post(
            "/api/v1/books/", json={"title": "Untitled", "author": "   "}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_invalid_isbn(self, client, admin_headers):
        response = client.post(
            "/api/v1/books/",
            json={"title": "Bad", "author": "Isbn", "isbn": "12345"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_requires_auth(self, client):
        response = client.post("/api/v1/books/", json={"title": "X", "author": "Y"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_book_requires_admin(self, client, user_headers):
        response = client.post(
            "/api/v1/books/", json={"title": "X", "author": "Y"}, headers=user_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestUpdateBook:
    """Tests for PUT /api/v1/books/{book_id} endpoint."""

    def test_update_book_partial(self, client, admin_headers, sample_book):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"genre": "Political Fiction"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["genre"] == "Political Fiction"
        assert data["title"] == "1984"

    def test_update_book_cannot_change_availability(self, client, admin_headers, sample_book):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"available": False},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["available"] is True

    def test_update_book_null_title_rejected(self, client, admin_headers, sample_book):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"title": None},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_update_book_duplicate_isbn(self, client, admin_headers, sample_book, book_factory):
        other = book_factory(title="Other", isbn="0306406152")

        response = client.put(
            f"/api/v1/books/{other.id}",
            json={"isbn": sample_book.isbn},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_update_book_not_found(self, client, admin_headers):
        response = client.put(
            "/api/v1/books/99999", json={"title": "Ghost"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_book_requires_admin(self, client, user_headers, sample_book):
        response = client.put(
            f"/api/v1/books/{sample_book.id}", json={"title": "Mine"}, headers=user_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{book_id} endpoint."""

    def test_delete_book_success(self, client, admin_headers, sample_book):
        response = client.delete(f"/api/v1/books/{sample_book.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get(f"/api/v1/books/{sample_book.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_removes_borrowings(
        self, client, admin_headers, user_headers, sample_book, db_session
    ):
        borrowing_id = client.post(
            "/api/v1/borrowings/borrow",
            json={"book_id": sample_book.id},
            headers=user_headers,
        ).json()["borrowing"]["id"]

        response = client.delete(f"/api/v1/books/{sample_book.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        db_session.expire_all()
        assert db_session.get(Borrowing, borrowing_id) is None

    def test_delete_book_not_found(self, client, admin_headers):
        response = client.delete("/api/v1/books/99999", headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_requires_admin(self, client, user_headers, sample_book):
        response = client.delete(f"/api/v1/books/{sample_book.id}", headers=user_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
