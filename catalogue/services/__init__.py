"""
Services Package

Business logic kept separate from HTTP handling (routers), so it can be
reused and tested in isolation.

Current services:
- due_dates.py: Loan period arithmetic and overdue classification
- ledger.py: Borrow/return state machine (BorrowingLedger)
- rate_limiter.py: Rate limiting with slowapi
- security.py: Password hashing and JWT utilities
"""
