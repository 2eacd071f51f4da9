"""
Due-date arithmetic and overdue classification.

Classification happens once, when a loan is returned. Nothing moves an
outstanding loan to "overdue" while the book is still out; read
endpoints expose is_past_due() as a computed hint instead.
"""

from datetime import UTC, datetime, timedelta

from catalogue.models.borrowing import BorrowingStatus

DEFAULT_LOAN_DAYS = 14


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def compute_due_date(borrowed_at: datetime, loan_days: int = DEFAULT_LOAN_DAYS) -> datetime:
    return ensure_utc(borrowed_at) + timedelta(days=loan_days)


def classify(due_date: datetime, returned_date: datetime) -> BorrowingStatus:
    """
    Final status of a loan returned at returned_date.

    Returning exactly at the due instant still counts as on time.

    >>> due = datetime(2024, 1, 15, tzinfo=UTC)
    >>> classify(due, due).value
    'returned'
    >>> classify(due, due + timedelta(days=1)).value
    'overdue'
    """
    if ensure_utc(returned_date) > ensure_utc(due_date):
        return BorrowingStatus.OVERDUE
    return BorrowingStatus.RETURNED


def is_past_due(due_date: datetime, now: datetime | None = None) -> bool:
    return ensure_utc(now or utcnow()) > ensure_utc(due_date)
