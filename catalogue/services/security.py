"""
Credentials for library members.

Member passwords are stored as bcrypt hashes (passlib). A successful
login or registration hands the member a signed access token
(python-jose, HS256) whose subject is the member's user id; every
authenticated request reads the id back out of that token.
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from catalogue.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

ALGORITHM = "HS256"
TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def token_lifetime() -> timedelta:
    """How long a freshly issued member token stays valid."""
    return timedelta(minutes=settings.access_token_expire_minutes)


def issue_access_token(
    user_id: int,
    username: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign an access token for a library member.

    Args:
        user_id: The member the token belongs to (stored as "sub")
        username: Carried along for clients that display it
        expires_delta: Override the configured lifetime (tests use a
            negative delta to mint an already expired token)
    """
    if expires_delta is None:
        expires_delta = token_lifetime()
    issued_at = datetime.now(UTC)
    claims = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if username is not None:
        claims["username"] = username

    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def read_access_token(token: str) -> int | None:
    """
    Return the member id a token was issued to.

    None means the token cannot be trusted: bad signature, expired,
    not an access token, or a subject that is not a user id.
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        return None

    if claims.get("type") != TOKEN_TYPE:
        logger.warning("Rejected token that is not an access token")
        return None

    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        return None

    return int(subject)
