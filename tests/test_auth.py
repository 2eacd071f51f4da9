"""
Tests for User Authentication

Tests the authentication endpoints under /api/v1/auth:
- Registration
- Login (username or email)
- Token verification
- Current user (/me)

Coverage includes:
- Successful flows
- Error handling
- Security validations
"""

from datetime import timedelta

from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from catalogue.config import get_settings
from catalogue.models import User
from catalogue.services.security import (
    ALGORITHM,
    issue_access_token,
    read_access_token,
    verify_password,
)


REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"
TEST_PASSWORD = "TestPass123"


def registration(**overrides) -> dict:
    data = {
        "username": "newreader",
        "email": "newreader@example.com",
        "password": "SecurePass123",
        "first_name": "New",
        "last_name": "Reader",
        "student_id": "S2024001",
    }
    data.update(overrides)
    return data


class TestRegistration:
    """Tests for POST /api/v1/auth/register"""

    def test_register_success(self, client: TestClient, db_session: Session):
        response = client.post(REGISTER_URL, json=registration())

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["expires_in"] == 7 * 24 * 60 * 60
        user = data["user"]
        assert user["username"] == "newreader"
        assert user["student_id"] == "S2024001"
        assert user["is_admin"] is False
        # Password should NEVER be in response
        assert "password" not in user
        assert "hashed_password" not in user

        stored = db_session.execute(
            select(User).where(User.username == "newreader")
        ).scalar_one()
        assert stored.hashed_password != "SecurePass123"
        assert verify_password("SecurePass123", stored.hashed_password)

    def test_register_token_is_usable(self, client: TestClient):
        token = client.post(REGISTER_URL, json=registration()).json()["access_token"]

        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == "newreader"

    def test_register_normalizes_username(self, client: TestClient):
        response = client.post(REGISTER_URL, json=registration(username="NewReader"))

        assert response.json()["user"]["username"] == "newreader"

    def test_register_optional_fields(self, client: TestClient):
        data = registration()
        del data["student_id"]

        response = client.post(REGISTER_URL, json=data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["student_id"] is None

    def test_register_duplicate_username(self, client: TestClient, sample_user: User):
        response = client.post(REGISTER_URL, json=registration(username="alice"))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Username already taken"

    def test_register_duplicate_email(self, client: TestClient, sample_user: User):
        response = client.post(REGISTER_URL, json=registration(email=sample_user.email))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Email already registered"

    def test_register_duplicate_student_id(self, client: TestClient, sample_user: User):
        response = client.post(REGISTER_URL, json=registration(student_id="S1001"))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["detail"] == "Student ID already registered"

    def test_register_weak_password(self, client: TestClient):
        response = client.post(REGISTER_URL, json=registration(password="weakpass"))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_invalid_email(self, client: TestClient):
        response = client.post(REGISTER_URL, json=registration(email="not-an-email"))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_invalid_username(self, client: TestClient):
        response = client.post(REGISTER_URL, json=registration(username="1reader"))

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_missing_name(self, client: TestClient):
        data = registration()
        del data["last_name"]

        response = client.post(REGISTER_URL, json=data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_register_cannot_become_admin(self, client: TestClient):
        response = client.post(REGISTER_URL, json=registration(is_admin=True))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["is_admin"] is False


class TestLogin:
    """Tests for POST /api/v1/auth/login"""

    def test_login_with_username(self, client: TestClient, sample_user: User):
        response = client.post(
            LOGIN_URL, json={"username": "alice", "password": TEST_PASSWORD}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["access_token"]
        assert data["user"]["id"] == sample_user.id

    def test_login_with_email(self, client: TestClient, sample_user: User):
        response = client.post(
            LOGIN_URL, json={"username": sample_user.email, "password": TEST_PASSWORD}
        )

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, client: TestClient, sample_user: User):
        response = client.post(
            LOGIN_URL, json={"username": "alice", "password": "WrongPass999"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid username or password"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_login_unknown_user(self, client: TestClient):
        response = client.post(
            LOGIN_URL, json={"username": "ghost", "password": TEST_PASSWORD}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, client: TestClient, inactive_user: User):
        response = client.post(
            LOGIN_URL, json={"username": "dormant", "password": TEST_PASSWORD}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_password(self, client: TestClient):
        response = client.post(LOGIN_URL, json={"username": "alice"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestTokens:
    """Tests for GET /api/v1/auth/verify and /api/v1/auth/me"""

    def test_verify_valid_token(self, client: TestClient, user_headers, sample_user):
        response = client.get("/api/v1/auth/verify", headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["valid"] is True
        assert data["user"]["username"] == sample_user.username

    def test_verify_without_token(self, client: TestClient):
        response = client.get("/api/v1/auth/verify")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_verify_expired_token(self, client: TestClient, sample_user: User):
        token = issue_access_token(sample_user.id, expires_delta=timedelta(seconds=-1))

        response = client.get(
            "/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Could not validate credentials"

    def test_token_for_deleted_user(self, client: TestClient):
        token = issue_access_token(424242)

        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_me(self, client: TestClient, user_headers, sample_user: User):
        response = client.get("/api/v1/auth/me", headers=user_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["email"] == sample_user.email
        assert data["first_name"] == "Alice"

    def test_token_of_wrong_type(self, client: TestClient, sample_user: User):
        token = jwt.encode(
            {"sub": str(sample_user.id), "type": "refresh"},
            get_settings().secret_key,
            algorithm=ALGORITHM,
        )

        response = client.get(
            "/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestAccessTokens:
    """Tests for the token helpers in catalogue.services.security"""

    def test_issued_token_reads_back_user_id(self):
        assert read_access_token(issue_access_token(7, username="alice")) == 7

    def test_tampered_token_is_rejected(self):
        token = issue_access_token(7)

        header_and_claims = token.rsplit(".", 1)[0]

        assert read_access_token(f"{header_and_claims}.bm90LWEtc2lnbmF0dXJl") is None

    def test_non_numeric_subject_is_rejected(self):
        token = jwt.encode(
            {"sub": "alice", "type": "access"},
            get_settings().secret_key,
            algorithm=ALGORITHM,
        )

        assert read_access_token(token) is None
