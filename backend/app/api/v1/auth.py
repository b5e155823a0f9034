"""Auth API router — signup, login, tokens and account management."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, require_admin
from app.auth.jwt import REFRESH, create_token_pair, subject_from_token
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    SignupRequest,
    SignupResponse,
    SignupUser,
    TokenResponse,
)
from app.schemas.user import (
    ProfileUpdate,
    UserEnvelope,
    UserListResponse,
    UserResponse,
    UserTypeUpdate,
)
from app.services import account_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

CUSTOMER_NEXT_STEPS = [
    "Complete your profile with additional information",
    "Verify your email address",
    "Set your booking preferences",
    "Start browsing available estates",
]
ADMIN_NEXT_STEPS = [
    "Complete your admin profile",
    "Set your admin permissions",
    "Access admin dashboard",
    "Start managing the system",
]


def _signup_user(user: User) -> SignupUser:
    """Signup summary with only the sub-structure that belongs to the account's role."""
    fields = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "user_type": user.user_type,
        "account_status": user.account_status,
        "created_at": user.created_at,
        "is_verified": user.is_verified,
    }
    if user.is_customer:
        fields["booking_preferences"] = user.get_booking_preferences()
        fields["next_steps"] = CUSTOMER_NEXT_STEPS
    else:
        fields["admin_permissions"] = user.admin_permissions
        fields["next_steps"] = ADMIN_NEXT_STEPS
    return SignupUser(**fields)


# ---------------------------------------------------------------------------
# POST /signup, /login, /refresh and GET /me
# ---------------------------------------------------------------------------


@router.post(
    "/signup",
    response_model=SignupResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_db)) -> SignupResponse:
    """Register a customer or admin account."""
    user = await account_service.register(db, body)
    return SignupResponse(
        message=f"Account created successfully! Welcome to EstatePro as a {user.role_display}.",
        user=_signup_user(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    """Authenticate with email and password and receive a token pair."""
    user = await account_service.authenticate(db, body.email, body.password)
    tokens = create_token_pair(str(user.id), user.user_type)
    return LoginResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**tokens),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    try:
        user_id = subject_from_token(body.refresh_token, REFRESH)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = await account_service.get_user(db, user_id)
    if user is None or user.is_blocked or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(**create_token_pair(str(user.id), user.user_type))


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    """Return the currently authenticated account."""
    return UserResponse.model_validate(current_user)


# ---------------------------------------------------------------------------
# User management (admin only)
# ---------------------------------------------------------------------------


@router.get("/users", response_model=UserListResponse)
async def get_all_users(
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_admin),
) -> UserListResponse:
    users = [UserResponse.model_validate(u) for u in await account_service.list_users(db)]
    return UserListResponse(message="Users retrieved successfully", users=users, total=len(users))


@router.get("/users/type/{user_type}", response_model=UserListResponse)
async def get_users_by_type(
    user_type: str,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_admin),
) -> UserListResponse:
    users = [UserResponse.model_validate(u) for u in await account_service.list_users_by_type(db, user_type)]
    return UserListResponse(
        message=f"{user_type.capitalize()}s retrieved successfully",
        users=users,
        total=len(users),
    )


@router.put("/users/{user_id}/type", response_model=UserEnvelope)
async def update_user_type(
    user_id: uuid.UUID,
    body: UserTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> UserEnvelope:
    """Switch an account between customer and admin.

    Switching to customer clears every admin permission.
    """
    permissions = body.admin_permissions.model_dump() if body.admin_permissions else None
    user = await account_service.set_role(db, current_user, user_id, body.user_type, permissions)
    return UserEnvelope(message="User type updated successfully", user=UserResponse.model_validate(user))


# ---------------------------------------------------------------------------
# Profiles (self or admin)
# ---------------------------------------------------------------------------


@router.get("/users/{user_id}/profile", response_model=UserEnvelope)
async def get_user_profile(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UserEnvelope:
    user = await account_service.get_profile(db, current_user, user_id)
    return UserEnvelope(message="User profile retrieved successfully", user=UserResponse.model_validate(user))


@router.put("/users/{user_id}/profile", response_model=UserEnvelope)
async def update_user_profile(
    user_id: uuid.UUID,
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UserEnvelope:
    """Update profile fields. Password, role, permissions and status flags are ignored here."""
    user = await account_service.update_profile(db, current_user, user_id, body)
    return UserEnvelope(message="User profile updated successfully", user=UserResponse.model_validate(user))
