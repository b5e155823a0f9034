"""SQLAlchemy models for EstatePro.

All models are imported here so that ``Base.metadata.create_all`` (and any
future migration tooling) can discover them. If you add a new model, import
it in this file.

Bookings are not a SQL model of their own: the booking store keeps the whole
collection as one document in ``storage_items`` (``app.booking.storage``).
"""

from app.models.storage_item import StorageItem
from app.models.user import User

__all__ = [
    "StorageItem",
    "User",
]
