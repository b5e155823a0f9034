"""Key-value row backing the booking store's durable storage."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin


class StorageItem(TimestampMixin, Base):
    """One stored document, addressed by its key."""

    __tablename__ = "storage_items"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<StorageItem key={self.key!r} size={len(self.value or '')}>"
