"""JWT token creation and verification for access and refresh tokens.

Tokens are issued on login; ``sub`` holds the account UUID and ``role`` the
account type at issue time (informational only, authorization always re-reads
the account).
"""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ACCESS = "access"
REFRESH = "refresh"


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + lifetime, "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        data: Payload claims. Must include ``sub`` (account UUID as string).
        expires_delta: Custom lifetime. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(data, ACCESS, lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token (``settings.jwt_refresh_token_expire_days``)."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(data, REFRESH, lifetime)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def subject_from_token(token: str, expected_type: str = ACCESS) -> uuid.UUID:
    """Return the account id carried by a token of the expected type.

    Raises:
        jose.JWTError: On a bad signature, expiry, wrong ``type`` claim, or a
            ``sub`` that is not a UUID.
    """
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise JWTError("Token subject is not an account id") from None


def create_token_pair(user_id: str, user_type: str = "customer") -> dict[str, str]:
    """Create both access and refresh tokens for an account.

    Returns:
        Dictionary with ``access_token``, ``refresh_token``, and ``token_type``.
    """
    claims = {"sub": user_id, "role": user_type}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }
