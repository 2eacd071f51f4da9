"""
Per-client request throttling for the catalogue (slowapi).

Three tiers, all configurable:
- rate_limit_default: browsing the catalogue and reading loans
- rate_limit_write: borrowing, returning and catalogue edits
- rate_limit_auth: login and registration

Counters live in process memory unless RATE_LIMIT_STORAGE_URI points at
a shared backend such as redis://.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from catalogue.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def client_address(request: Request) -> str:
    """
    Key requests by the address of the member's machine.

    Behind a reverse proxy the socket peer is the proxy itself, so the
    first X-Forwarded-For hop (or X-Real-IP) wins over it.
    """
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop

    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip

    return get_remote_address(request)


limiter = Limiter(
    key_func=client_address,
    default_limits=[settings.rate_limit_default],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer 429 in the same {"detail": ...} shape as every other error."""
    retry_after = exc.limit.limit.get_expiry()

    logger.warning(f"Rate limit {exc.detail} exceeded by {client_address(request)}")

    return JSONResponse(
        status_code=429,
        content={"detail": f"Too many requests ({exc.detail}). Please slow down."},
        headers={"Retry-After": str(retry_after)},
    )
