"""Account directory — registration, authentication, roles and profiles.

Email and phone uniqueness is enforced by the ``users`` table's unique
constraints. The explicit look-ups before insert only exist to pick the
right conflict message; if two registrations race past them, the losing
insert hits the constraint and is reported as the same ``ConflictError``.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.passwords import hash_password, needs_rehash, verify_password
from app.config import settings
from app.exceptions import (
    AccountLockedError,
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationFailed,
)
from app.models.user import (
    ADMIN,
    CUSTOMER,
    USER_TYPES,
    User,
    default_admin_permissions,
    default_booking_preferences,
    default_preferences,
)
from app.schemas.auth import SignupRequest
from app.schemas.user import ProfileUpdate, normalize_email, normalize_phone

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already in use. Please use a different email or sign in."
PHONE_TAKEN = "Phone number already in use. Please use a different phone number."
INVALID_USER_TYPE = "Invalid user type. Must be 'customer' or 'admin'"

# Columns a profile patch may not null out.
_NOT_NULL_PROFILE_FIELDS = ("name", "email", "phone", "gender", "nationality", "preferences")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Look-ups
# ---------------------------------------------------------------------------


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user_by_phone(db: AsyncSession, phone: str) -> User | None:
    result = await db.execute(select(User).where(User.phone == normalize_phone(phone)))
    return result.scalar_one_or_none()


async def _ensure_unique(
    db: AsyncSession,
    email: str | None,
    phone: str | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise ``ConflictError`` if another account already holds the email or phone."""
    if email is not None:
        existing = await get_user_by_email(db, email)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(EMAIL_TAKEN)
    if phone is not None:
        existing = await get_user_by_phone(db, phone)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(PHONE_TAKEN)


async def _flush_unique(
    db: AsyncSession,
    email: str,
    phone: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Flush pending changes, turning a unique-constraint hit into ``ConflictError``.

    Args:
        db: Session holding the pending account write.
        email: Email the write stores.
        phone: Phone number the write stores.
        exclude_id: Account being updated. Its own row never counts as the
            holder of the email or phone.
    """
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info("Unique constraint rejected account write for %s", email)
        holder = await get_user_by_email(db, email)
        if holder is not None and holder.id != exclude_id:
            raise ConflictError(EMAIL_TAKEN) from None
        holder = await get_user_by_phone(db, phone)
        if holder is not None and holder.id != exclude_id:
            raise ConflictError(PHONE_TAKEN) from None
        raise


def _require_admin(actor: User) -> None:
    if not actor.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")


def _require_self_or_admin(actor: User, user_id: uuid.UUID, action: str) -> None:
    if actor.id != user_id and not actor.is_admin:
        raise ForbiddenError(f"Access denied. You can only {action} your own profile.")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register(db: AsyncSession, data: SignupRequest, now: datetime | None = None) -> User:
    """Create an account from a validated signup payload.

    The password is hashed before it reaches the model. Customers get
    booking preferences (defaults unless supplied); admins get the supplied
    permission flags, all off otherwise.

    Args:
        db: Session the new account is flushed into.
        data: Signup payload, already shape-checked by pydantic.
        now: Timestamp for ``last_password_change`` and ``last_activity``.

    Returns:
        The persisted account, refreshed from the database.

    Raises:
        ForbiddenError: An admin signup while ``settings.allow_admin_signup``
            is off.
        ConflictError: The email or phone already belongs to an account.
    """
    if data.user_type == ADMIN and not settings.allow_admin_signup:
        raise ForbiddenError("Admin accounts cannot be created through signup")
    now = now or _utcnow()
    email = normalize_email(data.email)
    phone = normalize_phone(data.phone)
    await _ensure_unique(db, email, phone)

    user = User(
        name=data.name,
        email=email,
        phone=phone,
        user_type=data.user_type,
        hashed_password=hash_password(data.password),
        date_of_birth=data.date_of_birth,
        gender=data.gender or "prefer-not-to-say",
        nationality=data.nationality or "Local",
        address=data.address.model_dump() if data.address else None,
        emergency_contact=data.emergency_contact.model_dump() if data.emergency_contact else None,
        occupation=data.occupation,
        company=data.company,
        student_id=data.student_id,
        preferences=default_preferences(),
        admin_permissions=default_admin_permissions(),
        booking_preferences=None,
        last_password_change=now,
        last_activity=now,
    )

    if data.user_type == CUSTOMER:
        supplied = data.booking_preferences.model_dump() if data.booking_preferences else {}
        user.booking_preferences = {**default_booking_preferences(), **supplied}
    elif data.user_type == ADMIN and data.admin_permissions is not None:
        user.admin_permissions = data.admin_permissions.model_dump()

    db.add(user)
    await _flush_unique(db, email, phone)
    await db.refresh(user)

    logger.info("Registered %s account %s", user.user_type, user.id)
    return user


async def create_admin(db: AsyncSession, name: str, email: str, phone: str, password: str) -> User:
    """Create a verified admin holding every permission, or return the existing account."""
    existing = await get_user_by_email(db, email)
    if existing is not None:
        logger.info("Admin user already exists with email %s", existing.email)
        return existing

    now = _utcnow()
    user = User(
        name=name,
        email=normalize_email(email),
        phone=normalize_phone(phone),
        user_type=ADMIN,
        hashed_password=hash_password(password),
        admin_permissions=default_admin_permissions(granted=True),
        preferences=default_preferences(),
        is_verified=True,
        is_active=True,
        last_password_change=now,
        last_activity=now,
    )
    db.add(user)
    await _flush_unique(db, user.email, user.phone)
    await db.refresh(user)
    logger.info("Created admin account %s", user.id)
    return user


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def authenticate(db: AsyncSession, email: str, password: str, now: datetime | None = None) -> User:
    """Check credentials, applying the failed-login lockout.

    Raises:
        NotFoundError: No account has this email.
        AccountLockedError: The account is inside its lock window.
        InvalidCredentialsError: The password does not match. The failure is
            committed before raising so it survives the request rollback.
        ForbiddenError: The password matched but the account is blocked or
            deactivated.
    """
    now = now or _utcnow()
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("User not found")

    if user.is_locked(now):
        logger.warning("Login attempt on locked account %s", user.id)
        raise AccountLockedError()

    if not verify_password(password, user.hashed_password):
        user.register_failed_login(
            now,
            max_attempts=settings.max_login_attempts,
            lock_for=timedelta(hours=settings.lock_duration_hours),
        )
        attempts, locked = user.login_attempts, user.is_locked(now)
        await db.commit()
        if locked:
            logger.warning("Account %s locked after %d failed logins", user.id, attempts)
        else:
            logger.info("Failed login for account %s (%d attempts)", user.id, attempts)
        raise InvalidCredentialsError()

    if user.is_blocked:
        raise ForbiddenError("Account is blocked")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    if needs_rehash(user.hashed_password):
        user.hashed_password = hash_password(password)
        logger.info("Upgraded password hash cost for account %s", user.id)

    user.reset_login_attempts()
    user.last_login = now
    user.last_activity = now
    await db.flush()
    await db.refresh(user)
    logger.info("Account %s logged in", user.id)
    return user


# ---------------------------------------------------------------------------
# Directory queries
# ---------------------------------------------------------------------------


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def list_users_by_type(db: AsyncSession, user_type: str) -> list[User]:
    if user_type not in USER_TYPES:
        raise ValidationFailed({"userType": INVALID_USER_TYPE}, message=INVALID_USER_TYPE)
    result = await db.execute(select(User).where(User.user_type == user_type).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def find_verified_users(db: AsyncSession) -> list[User]:
    result = await db.execute(
        select(User).where(
            User.is_verified.is_(True),
            User.is_active.is_(True),
            User.is_blocked.is_(False),
        )
    )
    return list(result.scalars().all())


async def find_by_preferences(
    db: AsyncSession,
    room_type: str | None = None,
    block: str | None = None,
    budget: str | None = None,
) -> list[User]:
    """Customers whose stored booking preferences match every given criterion."""
    wanted = {
        "preferred_room_type": room_type,
        "preferred_block": block,
        "budget_range": budget,
    }
    wanted = {key: value for key, value in wanted.items() if value is not None}
    customers = await list_users_by_type(db, CUSTOMER)
    return [
        user
        for user in customers
        if all((user.get_booking_preferences() or {}).get(key) == value for key, value in wanted.items())
    ]


# ---------------------------------------------------------------------------
# Role & profile management
# ---------------------------------------------------------------------------


async def set_role(
    db: AsyncSession,
    actor: User,
    user_id: uuid.UUID,
    user_type: str,
    permissions: dict[str, bool] | None = None,
) -> User:
    """Change an account's type (admin only).

    Demoting to customer clears every admin permission; promoting to admin
    applies ``permissions`` when given.

    Args:
        actor: Account making the change. Must be an admin.
        user_id: Account whose type changes.
        user_type: ``"customer"`` or ``"admin"``.
        permissions: Admin permission flags to set when promoting. Omitted
            flags keep their stored value.
    """
    _require_admin(actor)
    if user_type not in USER_TYPES:
        raise ValidationFailed({"userType": INVALID_USER_TYPE}, message=INVALID_USER_TYPE)

    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    previous = user.user_type
    user.apply_role(user_type, permissions)
    await db.flush()
    await db.refresh(user)
    logger.info("Account %s type %s -> %s by %s", user.id, previous, user_type, actor.id)
    return user


async def get_profile(db: AsyncSession, actor: User, user_id: uuid.UUID) -> User:
    _require_self_or_admin(actor, user_id, "view")
    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def update_profile(db: AsyncSession, actor: User, user_id: uuid.UUID, patch: ProfileUpdate) -> User:
    """Apply self-service profile changes.

    Email and phone stay unique. Booking preferences only apply to customer
    accounts and are merged over the stored ones.
    """
    _require_self_or_admin(actor, user_id, "update")
    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    changes = patch.model_dump(exclude_unset=True)
    for name in _NOT_NULL_PROFILE_FIELDS:
        if changes.get(name, ...) is None:
            del changes[name]
    await _ensure_unique(db, changes.get("email"), changes.get("phone"), exclude_id=user.id)

    booking_preferences = changes.pop("booking_preferences", None)
    if booking_preferences is not None and user.is_customer:
        user.booking_preferences = {**(user.get_booking_preferences() or {}), **booking_preferences}

    for name, value in changes.items():
        setattr(user, name, value)
    user.last_activity = _utcnow()

    await _flush_unique(db, user.email, user.phone, exclude_id=user.id)
    await db.refresh(user)
    logger.info("Profile of %s updated by %s: %s", user.id, actor.id, sorted(changes))
    return user
