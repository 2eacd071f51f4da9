"""
Authentication Router

Handles user authentication endpoints:
- Registration (username/email/password → JWT access token)
- Login (username or email + password → JWT access token)
- Token verification
- Get current user (from JWT token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Access tokens are valid for 7 days by default
"""

import logging

from fastapi import APIRouter, Request, status
from sqlalchemy import or_, select

from catalogue.config import get_settings
from catalogue.database import transaction
from catalogue.dependencies import ActiveUser, CurrentUser, DbSession
from catalogue.errors import Conflict, ConstraintViolation, Forbidden, Unauthorized
from catalogue.models import User
from catalogue.schemas.user import (
    LoginRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    VerifyResponse,
)
from catalogue.services.rate_limiter import limiter
from catalogue.services.security import (
    hash_password,
    issue_access_token,
    token_lifetime,
    verify_password,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized"},
        409: {"description": "Conflict (username/email/student ID already exists)"},
    },
)


def issue_token(user: User) -> TokenResponse:
    """Build the token response for an authenticated user."""
    access_token = issue_access_token(user.id, username=user.username)
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=int(token_lifetime().total_seconds()),
        user=UserResponse.model_validate(user),
    )


def duplicate_message(constraint: str | None) -> str:
    """Map a unique constraint on users to a readable message."""
    if constraint and "username" in constraint:
        return "Username already taken"
    if constraint and "email" in constraint:
        return "Email already registered"
    if constraint and "student_id" in constraint:
        return "Student ID already registered"
    return "Username, email, or student ID already exists"


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new user account and receive an access token.

    **Password Requirements:**
    - Minimum 8 characters
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 number

    **Username Requirements:**
    - 3-100 characters
    - Must start with a letter
    - Only letters, numbers, and underscores
    """,
)
@limiter.limit(settings.rate_limit_auth)
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> TokenResponse:
    """
    Register a new user.

    1. Validates input (handled by Pydantic)
    2. Checks for duplicate username/email/student ID
    3. Hashes password with bcrypt
    4. Creates the user (never an admin)
    5. Returns an access token and the user
    """
    stmt = select(User).where(User.username == user_data.username)
    if db.execute(stmt).scalar_one_or_none():
        raise Conflict("Username already taken")

    stmt = select(User).where(User.email == user_data.email)
    if db.execute(stmt).scalar_one_or_none():
        raise Conflict("Email already registered")

    if user_data.student_id:
        stmt = select(User).where(User.student_id == user_data.student_id)
        if db.execute(stmt).scalar_one_or_none():
            raise Conflict("Student ID already registered")

    user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        student_id=user_data.student_id,
        phone=user_data.phone,
        is_active=True,
        is_admin=False,
    )

    # A concurrent registration can still slip past the checks above
    try:
        with transaction(db):
            db.add(user)
            db.flush()
    except ConstraintViolation as exc:
        raise Conflict(duplicate_message(exc.constraint)) from exc

    db.refresh(user)
    logger.info(f"New user registered: {user.username}")

    return issue_token(user)


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with username or email",
    description="""
    Authenticate with username (or email) and password.

    **Usage:**
    Include the access token in the Authorization header:
    ```
    Authorization: Bearer <access_token>
    ```
    """,
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    credentials: LoginRequest,
    db: DbSession,
) -> TokenResponse:
    """Authenticate a user and return an access token."""
    identifier = credentials.username.strip()

    stmt = select(User).where(
        or_(User.username == identifier.lower(), User.email == identifier)
    )
    user = db.execute(stmt).scalars().first()

    if user is None or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Login failed for {identifier}")
        raise Unauthorized("Invalid username or password")

    if not user.is_active:
        logger.warning(f"Login rejected for inactive user {user.username}")
        raise Forbidden("Account is inactive")

    logger.info(f"User logged in: {user.username}")

    return issue_token(user)


# -------------------------------------------------------------------------
# Token Verification
# -------------------------------------------------------------------------
@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify access token",
    description="Check that the bearer token is valid and return its user.",
)
def verify(current_user: CurrentUser) -> VerifyResponse:
    return VerifyResponse(valid=True, user=UserResponse.model_validate(current_user))


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the profile of the currently authenticated user.",
)
def get_me(current_user: ActiveUser) -> UserResponse:
    """
    Get the current user's profile.

    Requires a valid access token in the Authorization header.
    """
    return UserResponse.model_validate(current_user)
