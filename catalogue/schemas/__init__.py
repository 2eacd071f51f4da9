"""
Pydantic Schemas Package

WHY Separate Schemas from SQLAlchemy Models?
============================================
1. Security: Control exactly what data is exposed in API responses
2. Validation: Different rules for create vs update vs response
3. Decoupling: Database schema can evolve independently of API
4. Documentation: Schemas generate OpenAPI documentation

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
- XxxSummary: Compact form embedded in another resource
"""

from catalogue.schemas.book import (
    BookBase,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
)
from catalogue.schemas.borrowing import (
    BookSummary,
    BorrowingActionResponse,
    BorrowingDetail,
    BorrowingResponse,
    BorrowingWithBook,
    BorrowRequest,
)
from catalogue.schemas.user import (
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserSummary,
    VerifyResponse,
)

__all__ = [
    # Book schemas
    "BookBase",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookListResponse",
    # Borrowing schemas
    "BorrowRequest",
    "BookSummary",
    "BorrowingResponse",
    "BorrowingWithBook",
    "BorrowingDetail",
    "BorrowingActionResponse",
    # User / auth schemas
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "LoginRequest",
    "TokenResponse",
    "VerifyResponse",
]
