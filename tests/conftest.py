"""
pytest Fixtures for Library Catalogue API Tests

This file contains shared fixtures used across all test files.

FIXTURE SCOPES:
- session scope for the engine (expensive to create)
- function scope for sessions (isolation between tests)

Isolation
=========
Every test runs inside one outer transaction that is rolled back at the
end. The Session joins it with join_transaction_mode="create_savepoint",
so commits and rollbacks done by the code under test (the ledger opens
its own transaction scopes) only release or roll back SAVEPOINTs and
never escape the test.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting and sets a test secret key
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"

from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from catalogue.database import Database, get_db
from catalogue.dependencies import get_clock
from catalogue.main import app
from catalogue.models import Book, User
from catalogue.services.security import hash_password, issue_access_token

TEST_PASSWORD = "TestPass123"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def database() -> Generator[Database, None, None]:
    """
    In-memory SQLite database shared by the whole test session.

    Database uses a StaticPool for in-memory URLs, so every checkout
    sees the same tables.
    """
    database = Database("sqlite://")
    database.create_tables()

    yield database

    database.drop_tables()
    database.dispose()


@pytest.fixture(scope="session")
def engine(database: Database):
    return database.engine


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Changes are rolled back after each test, so tests don't affect
    each other.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    We override the get_db dependency to use our test session.
    The app still opens its own Database in the lifespan (DATABASE_URL
    is an in-memory SQLite URL), which the health check pings.
    """

    def override_get_db():
        """Provide test database session instead of real one."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# CLOCK FIXTURES
# =============================================================================
class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def frozen_client(client: TestClient, clock: FakeClock) -> TestClient:
    """Test client whose ledger reads time from the fake clock."""
    app.dependency_overrides[get_clock] = lambda: clock
    return client


# =============================================================================
# USER FIXTURES
# =============================================================================
def make_user(
    db_session: Session,
    username: str,
    *,
    is_admin: bool = False,
    is_active: bool = True,
    student_id: str | None = None,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=hash_password(TEST_PASSWORD),
        first_name=username.capitalize(),
        last_name="Tester",
        student_id=student_id,
        is_admin=is_admin,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """A regular, active library member."""
    return make_user(db_session, "alice", student_id="S1001")


@pytest.fixture
def second_user(db_session: Session) -> User:
    return make_user(db_session, "bob", student_id="S1002")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return make_user(db_session, "librarian", is_admin=True)


@pytest.fixture
def inactive_user(db_session: Session) -> User:
    return make_user(db_session, "dormant", is_active=False)


def auth_headers(user: User) -> dict[str, str]:
    """Authorization header carrying a fresh access token for user."""
    token = issue_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(sample_user: User) -> dict[str, str]:
    return auth_headers(sample_user)


@pytest.fixture
def second_user_headers(second_user: User) -> dict[str, str]:
    return auth_headers(second_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def inactive_headers(inactive_user: User) -> dict[str, str]:
    return auth_headers(inactive_user)


# =============================================================================
# BOOK FIXTURES
# =============================================================================
@pytest.fixture
def sample_book(db_session: Session) -> Book:
    """An available book."""
    book = Book(
        title="1984",
        author="George Orwell",
        isbn="9780451524935",
        genre="Dystopian",
        publication_year=1949,
        publisher="Secker & Warburg",
        description="A dystopian novel set in a totalitarian society.",
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session) -> list[Book]:
    """Create several books for pagination and filter tests."""
    books = []
    genres = ["Fiction", "History", "Science"]
    for i in range(15):
        book = Book(
            title=f"Test Book {i + 1}",
            author=f"Author {i % 4}",
            isbn=f"978045152493{i}" if i < 10 else None,
            genre=genres[i % 3],
            publication_year=1950 + i,
            # Set directly so the availability filter has something to find
            available=i % 5 != 0,
        )
        books.append(book)
        db_session.add(book)

    db_session.commit()
    for book in books:
        db_session.refresh(book)
    return books


@pytest.fixture
def book_factory(db_session: Session) -> Callable[..., Book]:
    """Create additional books on demand."""

    def create(title: str = "Extra Book", author: str = "Anon", **fields) -> Book:
        book = Book(title=title, author=author, **fields)
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return create
