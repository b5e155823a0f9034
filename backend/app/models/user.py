"""User model — credentials, profile, role and account status."""

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

CUSTOMER = "customer"
ADMIN = "admin"
USER_TYPES = (CUSTOMER, ADMIN)

PERMISSIONS = (
    "can_manage_users",
    "can_manage_bookings",
    "can_manage_rooms",
    "can_view_reports",
    "can_manage_settings",
)


def default_admin_permissions(granted: bool = False) -> dict[str, bool]:
    return {name: granted for name in PERMISSIONS}


def default_booking_preferences() -> dict:
    return {
        "preferred_block": None,
        "preferred_room_type": "single",
        "preferred_floor": None,
        "budget_range": "medium",
        "special_requirements": [],
        "preferred_check_in_time": "afternoon",
    }


def default_preferences() -> dict:
    return {
        "notifications": {"email": True, "sms": True, "push": True},
        "language": "en",
        "timezone": "UTC",
        "currency": "USD",
    }


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An EstatePro account, either a customer or an administrator."""

    __tablename__ = "users"

    # Basic information
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), default=CUSTOMER, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    profile_picture: Mapped[str | None] = mapped_column(String(512), default=None)
    date_of_birth: Mapped[date | None] = mapped_column(Date, default=None)
    gender: Mapped[str] = mapped_column(String(30), default="prefer-not-to-say")
    nationality: Mapped[str] = mapped_column(String(100), default="Local")
    address: Mapped[dict | None] = mapped_column(JSON, default=None)
    emergency_contact: Mapped[dict | None] = mapped_column(JSON, default=None)
    occupation: Mapped[str | None] = mapped_column(String(100), default=None)
    company: Mapped[str | None] = mapped_column(String(100), default=None)
    student_id: Mapped[str | None] = mapped_column(String(50), default=None)
    government_id: Mapped[str | None] = mapped_column(String(50), default=None)
    government_id_type: Mapped[str | None] = mapped_column(String(30), default=None)
    preferences: Mapped[dict] = mapped_column(JSON, default=default_preferences)

    # Role-specific sub-structures
    booking_preferences: Mapped[dict | None] = mapped_column(JSON, default=None)
    admin_permissions: Mapped[dict] = mapped_column(JSON, default=lambda: default_admin_permissions())

    # Account status & verification
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, index=True, nullable=False)
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Activity
    login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lock_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    last_password_change: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    # ------------------------------------------------------------------
    # Derived attributes
    # ------------------------------------------------------------------

    @property
    def is_admin(self) -> bool:
        return self.user_type == ADMIN

    @property
    def is_customer(self) -> bool:
        return self.user_type == CUSTOMER

    @property
    def role_display(self) -> str:
        return "Administrator" if self.is_admin else "Customer"

    @property
    def account_status(self) -> str:
        """Status label, evaluated as blocked > inactive > pending-verification > active."""
        if self.is_blocked:
            return "blocked"
        if not self.is_active:
            return "inactive"
        if not self.is_verified:
            return "pending-verification"
        return "active"

    @property
    def age(self) -> int | None:
        return self.age_on(date.today())

    def age_on(self, today: date) -> int | None:
        if self.date_of_birth is None:
            return None
        born = self.date_of_birth
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years

    def has_permission(self, permission: str) -> bool:
        if not self.is_admin:
            return False
        return bool((self.admin_permissions or {}).get(permission, False))

    def get_booking_preferences(self) -> dict | None:
        if not self.is_customer:
            return None
        return {**default_booking_preferences(), **(self.booking_preferences or {})}

    def apply_role(self, user_type: str, permissions: dict[str, bool] | None = None) -> None:
        """Switch the account type, keeping permissions consistent with it.

        Customers never hold admin permissions: every flag is reset to False.
        Admins get the supplied flags merged over the current ones.
        """
        self.user_type = user_type
        if user_type == CUSTOMER:
            self.admin_permissions = default_admin_permissions()
            if self.booking_preferences is None:
                self.booking_preferences = default_booking_preferences()
        elif permissions is not None:
            current = {**default_admin_permissions(), **(self.admin_permissions or {})}
            current.update({k: bool(v) for k, v in permissions.items() if k in PERMISSIONS})
            self.admin_permissions = current

    # ------------------------------------------------------------------
    # Login lockout
    # ------------------------------------------------------------------

    def is_locked(self, now: datetime | None = None) -> bool:
        if self.lock_until is None:
            return False
        now = now or datetime.now(timezone.utc)
        return _as_utc(self.lock_until) > _as_utc(now)

    def register_failed_login(
        self,
        now: datetime,
        max_attempts: int = 5,
        lock_for: timedelta = timedelta(hours=2),
    ) -> None:
        """Count a failed login, locking the account once ``max_attempts`` is hit.

        A lock that has already expired is cleared and the counter restarts at
        one, since the failure being recorded is itself the first of the new run.
        """
        if self.lock_until is not None and _as_utc(self.lock_until) < _as_utc(now):
            self.lock_until = None
            self.login_attempts = 1
            return

        attempts = (self.login_attempts or 0) + 1
        self.login_attempts = attempts
        if attempts >= max_attempts and not self.is_locked(now):
            self.lock_until = now + lock_for

    def reset_login_attempts(self) -> None:
        self.login_attempts = 0
        self.lock_until = None

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} user_type={self.user_type!r}>"
