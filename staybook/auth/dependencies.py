"""FastAPI authentication dependencies for route protection."""

import logging
import secrets
import uuid

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from staybook.auth.identity import SYSTEM_CALLER, CallerIdentity, Role
from staybook.auth.jwt import decode_token
from staybook.config import settings

logger = logging.getLogger(__name__)

# Strict bearer, rejects requests without a token
_bearer_scheme = HTTPBearer()

# Optional bearer, yields None when no token is sent
_bearer_scheme_optional = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def identity_from_token(token: str) -> CallerIdentity:
    """Verify a bearer token and build the caller identity from its claims.

    Raises:
        HTTPException 401: If the token is invalid, expired, of the wrong type,
            or carries an unknown subject or role.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise _credentials_exception() from None

    # Only accept access tokens
    if payload.get("type") != "access":
        raise _credentials_exception("Invalid token type")

    sub: str | None = payload.get("sub")
    role: str | None = payload.get("role")
    if sub is None or role is None:
        raise _credentials_exception()

    try:
        return CallerIdentity(id=uuid.UUID(sub), role=Role(role))
    except ValueError:
        raise _credentials_exception() from None


async def get_caller(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
) -> CallerIdentity:
    """Resolve the authenticated caller from the Bearer token."""
    return identity_from_token(credentials.credentials)


async def require_host(caller: CallerIdentity = Depends(get_caller)) -> CallerIdentity:
    """Return the caller only if they act as a host.

    Raises:
        HTTPException 403: If the caller's role is not ``host``.
    """
    if caller.role != Role.HOST:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="not permitted",
        )
    return caller


async def verify_payment_webhook(
    x_webhook_secret: str | None = Header(None),
) -> CallerIdentity:
    """Authenticate the payment processor callback by its shared secret."""
    expected = settings.payment_webhook_secret
    if not expected or not x_webhook_secret or not secrets.compare_digest(x_webhook_secret, expected):
        logger.warning("Payment webhook rejected: invalid secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret",
        )
    return SYSTEM_CALLER


async def verify_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
) -> None:
    """Authenticate the external scheduler.

    When ``cron_secret`` is not configured the endpoint is open, which is only
    acceptable in development.
    """
    expected = settings.cron_secret
    if not expected:
        if settings.environment == "production":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        logger.warning("CRON_SECRET not configured, running hold sweep unauthenticated")
        return

    if credentials is None or not secrets.compare_digest(credentials.credentials, expected):
        logger.warning("Unauthorized hold sweep attempt")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
