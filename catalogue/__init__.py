"""
Library Catalogue API Package

Backend for a library catalogue: books, user accounts and a
borrow/return ledger with due dates.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: Storage handle, sessions and transaction scopes
- errors.py: Domain errors and their HTTP status codes
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (ledger, due dates, security, rate limiting)
"""

__version__ = "1.0.0"
