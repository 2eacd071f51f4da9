"""
User Pydantic Schemas

Schemas:
- UserCreate: Registration data
- LoginRequest: Username-or-email plus password
- UserResponse: Public user data (never exposes password)
- TokenResponse: Access token plus the authenticated user
- UserSummary: Compact user data embedded in borrowing responses

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- EmailStr: Built-in email validation
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    """
    Schema for user registration.

    Requires username, email, password and name; student_id and phone
    are optional.
    """

    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Unique username (letters, numbers and underscores)",
        examples=["jdoe", "jane_doe123"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jdoe@example.com"],
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include uppercase, lowercase and number)",
        examples=["SecurePass123"],
    )

    first_name: str = Field(..., min_length=1, max_length=100, examples=["John"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["Doe"])

    student_id: str | None = Field(
        default=None,
        max_length=50,
        examples=["S2024001"],
    )
    phone: str | None = Field(default=None, max_length=20)

    @field_validator("username")
    @classmethod
    def username_must_be_valid(cls, v: str) -> str:
        """
        Validate username format.

        Rules:
        - Only alphanumeric and underscores
        - Must start with a letter
        """
        if not re.match(r"^[a-zA-Z][a-zA-Z0-9_]*$", v):
            raise ValueError(
                "Username must start with a letter and contain only "
                "letters, numbers, and underscores"
            )
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        """
        Validate password strength.

        Requirements:
        - At least 8 characters (enforced by min_length)
        - At least 1 uppercase letter
        - At least 1 lowercase letter
        - At least 1 number
        """
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one number")
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip()

    @field_validator("student_id", "phone")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class LoginRequest(BaseModel):
    """Login with username or email."""

    username: str = Field(
        ...,
        min_length=1,
        description="Username or email address",
        examples=["jdoe", "jdoe@example.com"],
    )
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """
    Schema for user responses.

    SECURITY: Never includes password.
    """

    id: int = Field(..., description="Unique user identifier")
    username: str
    email: EmailStr
    first_name: str
    last_name: str
    student_id: str | None = None
    phone: str | None = None
    is_admin: bool = Field(..., description="Whether the user has admin privileges")
    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """User fields shown next to a borrowing."""

    id: int
    username: str
    first_name: str
    last_name: str
    student_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """
    Returned by register and login.

    Use the token in the Authorization header:
        Authorization: Bearer <access_token>
    """

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse


class VerifyResponse(BaseModel):
    valid: bool = True
    user: UserResponse
