"""FastAPI authentication dependencies for route protection."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import ACCESS, subject_from_token
from app.database import get_db
from app.exceptions import ForbiddenError
from app.models.user import User
from app.services.account_service import get_user

# Strict bearer: rejects requests without an Authorization header
_bearer_scheme = HTTPBearer()

# Optional bearer: returns None if no token provided
_bearer_scheme_optional = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the Bearer access token to an account.

    Raises:
        HTTPException 401: If the token is invalid, expired, not an access
            token, or names an account that no longer exists.
    """
    try:
        user_id = subject_from_token(credentials.credentials, ACCESS)
    except JWTError:
        raise _unauthorized() from None

    user = await get_user(db, user_id)
    if user is None:
        raise _unauthorized()
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Return the current account only if it is active and not blocked.

    Raises:
        HTTPException 401: If the account is blocked or deactivated.
    """
    if user.is_blocked or not user.is_active:
        raise _unauthorized(f"User account is {user.account_status}")
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_active_user`` but returns ``None`` instead of raising.

    Lets public endpoints (listings, booking submission) log who is calling
    when a token happens to be present.
    """
    if credentials is None:
        return None
    try:
        user_id = subject_from_token(credentials.credentials, ACCESS)
    except JWTError:
        return None
    user = await get_user(db, user_id)
    if user is None or user.is_blocked or not user.is_active:
        return None
    return user


async def require_admin(user: User = Depends(get_current_active_user)) -> User:
    """Shorthand for admin-only endpoints."""
    if not user.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return user


def require_permission(permission: str):
    """Factory returning a dependency that demands an admin holding ``permission``.

    Usage:
        @router.get("/bookings")
        async def route(user = Depends(require_permission("can_manage_bookings"))):
            ...
    """

    async def _dep(user: User = Depends(require_admin)) -> User:
        if not user.has_permission(permission):
            raise ForbiddenError(f"Access denied. Missing permission: {permission}")
        return user

    return _dep
