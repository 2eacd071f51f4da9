"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Library Catalogue API.

Storage Handle
==============
The engine and session factory live on a Database object instead of
module-level globals. main.py opens one Database in the application
lifespan, stores it on app.state, and disposes it at shutdown.
Route handlers receive a per-request Session through get_db().

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives → create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

Transactions
============
transaction() wraps a read-check-write sequence in one atomic unit
and rolls it back on any failure. IntegrityErrors raised inside it are
translated into the typed ConstraintViolation error.
"""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import Engine, UniqueConstraint, create_engine, event, make_url, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalogue.errors import ConstraintViolation

logger = logging.getLogger(__name__)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    The Base class:
    1. Provides the SQLAlchemy mapper registry
    2. Enables table/model relationship tracking
    3. Is used by Alembic to discover models for migrations
    """
    pass


# =============================================================================
# SQLite Support
# =============================================================================
def enable_sqlite_transactions(engine: Engine, *, immediate: bool = False) -> None:
    """
    Make SQLite transactions behave like the ones on PostgreSQL.

    pysqlite defers BEGIN until the first write and does not support
    SAVEPOINT correctly in that mode. Here the driver's own transaction
    handling is switched off and SQLAlchemy emits BEGIN itself.

    With immediate=True every transaction starts with BEGIN IMMEDIATE, so
    it takes the database write lock up front. Concurrent writers then
    queue on the lock (up to the driver's busy timeout) instead of both
    reading stale state.

    Foreign keys are also switched on so ON DELETE CASCADE works.

    SQLite is meant for tests and local development only. Every
    transaction takes the write lock, read-only requests included (the
    bearer-token lookup opens one), so requests run one at a time. An
    in-memory URL shares a single connection between all requests and
    is only safe for a single-threaded test client. Deploy on PostgreSQL,
    where reads take no lock and the ledger locks just the rows it edits.
    """
    begin_statement = "BEGIN IMMEDIATE" if immediate else "BEGIN"

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql(begin_statement)


# =============================================================================
# Storage Handle
# =============================================================================
class Database:
    """
    Owns the engine and session factory for one database.

    Usage:
        database = Database(settings.database_url)
        with database.session() as db:
            ...
        database.dispose()

    Key parameters:
    - pool_size / max_overflow: connection pool sizing (ignored for SQLite)
    - echo: Log all SQL statements (useful for debugging)
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
    ) -> None:
        self.url = make_url(url)

        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees
                # a different empty in-memory database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow

        self.engine = create_engine(self.url, **engine_kwargs)
        if self.is_sqlite:
            # Tests and development only, see enable_sqlite_transactions
            enable_sqlite_transactions(self.engine, immediate=True)

        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    def session(self) -> Session:
        """Create a new Session bound to this database."""
        return self.session_factory()

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.error(f"Database connection error: {exc}")
            return False

    def create_tables(self) -> None:
        """
        Create all database tables.

        WARNING: In production, use Alembic migrations instead!
        """
        import catalogue.models  # noqa: F401 - registers every model

        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        """
        Drop all database tables.

        DANGER: This deletes all data! Never use in production.
        """
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Pulls the Database opened by the application lifespan from
    app.state, yields a fresh Session and closes it when the request
    ends. Closing an uncommitted session rolls its transaction back.

    Usage in Routes:
        @router.get("/books/")
        def get_books(db: DbSession):
            ...

    Yields:
        SQLAlchemy Session instance
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Transactions and Constraint Translation
# =============================================================================
def _unique_constraints() -> list[tuple[str, tuple[str, ...]]]:
    """
    List every unique constraint and unique index known to the models.

    Returns (label, ("table.column", ...)) pairs, widest first so a
    composite constraint wins over a single-column one.
    """
    found = []
    for table in Base.metadata.tables.values():
        candidates = [
            c for c in table.constraints if isinstance(c, UniqueConstraint)
        ] + [i for i in table.indexes if i.unique]
        for candidate in candidates:
            columns = tuple(f"{table.name}.{column.name}" for column in candidate.columns)
            name = candidate.name if isinstance(candidate.name, str) else None
            label = name or f"uq_{table.name}_" + "_".join(c.name for c in candidate.columns)
            found.append((label, columns))
    return sorted(found, key=lambda item: len(item[1]), reverse=True)


def identify_constraint(exc: IntegrityError) -> str | None:
    """
    Work out which unique constraint an IntegrityError refers to.

    Matches the constraint name (PostgreSQL reports it) or the column
    list (SQLite reports "table.column", PostgreSQL "Key (column)").
    """
    message = str(exc.orig)
    for label, columns in _unique_constraints():
        if label in message:
            return label
        if all(column in message for column in columns):
            return label
        short_names = ", ".join(column.split(".", 1)[1] for column in columns)
        if f"({short_names})" in message:
            return label
    return None


@contextmanager
def translate_integrity_errors() -> Iterator[None]:
    """Re-raise IntegrityError as ConstraintViolation."""
    try:
        yield
    except IntegrityError as exc:
        constraint = identify_constraint(exc)
        logger.warning(f"Constraint violation: {constraint or exc.orig}")
        raise ConstraintViolation(constraint) from exc


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Run a block of work as one atomic unit.

    If the session already has a transaction open (for example after the
    request looked up the current user), the work runs in a SAVEPOINT and
    the outer transaction is committed afterwards. Otherwise a new
    transaction is started and committed on exit.

    Any exception rolls the block back and propagates.
    """
    with translate_integrity_errors():
        if session.in_transaction():
            with session.begin_nested():
                yield session
            session.commit()
        else:
            with session.begin():
                yield session
