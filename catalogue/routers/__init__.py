"""
API Routers Package

Router Structure:
- auth.py: /api/v1/auth/* endpoints (registration, login, token checks)
- books.py: /api/v1/books/* endpoints (catalogue)
- borrowings.py: /api/v1/borrowings/* endpoints (borrow/return ledger)

Each router is imported and registered in main.py.
"""

from catalogue.routers.auth import router as auth_router
from catalogue.routers.books import router as books_router
from catalogue.routers.borrowings import router as borrowings_router

__all__ = [
    "auth_router",
    "books_router",
    "borrowings_router",
]
