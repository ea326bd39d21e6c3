"""JWT access token creation and verification.

Tokens are issued by the identity service; this module mirrors its format so
the API can verify them (and so tests and local tooling can mint them).
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from staybook.auth.identity import Role
from staybook.config import settings


def create_access_token(subject: str, role: Role | str, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        subject: The caller's UUID as a string (``sub`` claim).
        role: The caller's role (``role`` claim).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode = {
        "sub": subject,
        "role": Role(role).value,
        "exp": expire,
        "iat": now,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
