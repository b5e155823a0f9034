"""Create the schema, the default admin account and sample bookings.

The admin comes from the ``DEFAULT_ADMIN_*`` settings; change the password
before using it anywhere real. Sample bookings are only written when the
booking store is empty.

Run from the ``backend`` directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.api.deps import build_booking_store
from app.config import settings
from app.database import Base, async_session_factory, engine
from app.schemas.booking import Booking
from app.services.account_service import create_admin

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

SAMPLE_BOOKINGS = [
    Booking(
        id="B001",
        room_id="r-101",
        room_title="KARJEL HOMES",
        room_type="Student Hostel",
        customer_name="John Doe",
        email="john.doe@email.com",
        phone="+233 54 123 4567",
        id_number="GH-123456789-0",
        check_in_date=date(2024, 2, 15),
        check_out_date=date(2024, 3, 15),
        number_of_guests=2,
        special_requests="Early check-in preferred",
        booking_date=date(2024, 1, 20),
        status="confirmed",
        total_amount="Ghc950",
        location="Sunyani Tonsoum Estate, Ghana",
        distance="5.5KM from UENR",
    ),
    Booking(
        id="B002",
        room_id="r-103",
        room_title="PARENT ESTATE LIMITED",
        room_type="Luxury Apartment",
        customer_name="Sarah Johnson",
        email="sarah.j@email.com",
        phone="+233 55 987 6543",
        id_number="GH-987654321-0",
        check_in_date=date(2024, 2, 20),
        check_out_date=date(2024, 4, 20),
        number_of_guests=1,
        special_requests="Quiet room preferred",
        booking_date=date(2024, 1, 22),
        status="pending",
        total_amount="Ghc1500",
        location="Accra, Sunyani Notre Dame",
        distance="8.5KM from UENR",
    ),
    Booking(
        id="B003",
        room_id="r-104",
        room_title="EUSBETT HOTEL",
        room_type="Hotel",
        customer_name="Michael Chen",
        email="m.chen@email.com",
        phone="+233 56 456 7890",
        id_number="GH-456789123-0",
        check_in_date=date(2024, 2, 25),
        check_out_date=date(2024, 2, 28),
        number_of_guests=3,
        special_requests="Extra towels needed",
        booking_date=date(2024, 1, 25),
        status="confirmed",
        total_amount="$228",
        location="Berekum road, Sunyani",
        distance="1.1KM from UENR",
    ),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ Schema ready")

    async with async_session_factory() as session:
        admin = await create_admin(
            session,
            name=settings.default_admin_name,
            email=settings.default_admin_email,
            phone=settings.default_admin_phone,
            password=settings.default_admin_password,
        )
        await session.commit()
        print(f"✅ Admin account: {admin.email} (id={admin.id})")

    store = build_booking_store()
    written = await store.seed(SAMPLE_BOOKINGS)
    if written:
        print(f"✅ Seeded {written} sample bookings under '{store.key}'")
    else:
        print(f"⚠️  Booking store '{store.key}' already has bookings, left untouched")

    await engine.dispose()
    print("🎉 Done! You can now log in at /api/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
