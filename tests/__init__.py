"""
Test Suite for the Library Catalogue API

Test Organization:
- conftest.py: Shared fixtures (test database, client, users, books, clock)
- test_auth.py: /api/v1/auth endpoints
- test_books.py: /api/v1/books endpoints
- test_borrowings.py: /api/v1/borrowings endpoints
- test_ledger.py: BorrowingLedger against a session
- test_ledger_concurrency.py: competing borrows on a file database
- test_due_dates.py: due date arithmetic and return classification
- test_database.py: SQLite setup, transaction scopes, constraint translation
- test_rate_limiter.py: client keying and the 429 response
- test_health.py: /health, / and error rendering

Running Tests:
    pytest
    pytest --cov=catalogue --cov-report=html
    pytest tests/test_ledger.py -v
"""
