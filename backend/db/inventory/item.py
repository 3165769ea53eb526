import uuid
from datetime import datetime, timezone

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from ..database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    category_id = Column(
        Integer,
        ForeignKey("inventory_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    name = Column(String, nullable=True)
    asset_tag = Column(String, nullable=True, unique=True, index=True)
    serial_number = Column(String, nullable=True, index=True)

    # 'active' | 'checked_out' | 'lost' | 'disposed' | 'archived'
    status = Column(Text, nullable=False, default="active", index=True)

    # Holder: a location, a person, both or neither
    holder_location_id = Column(
        Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    holder_organizer_id = Column(
        GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def label(self) -> str:
        return self.name or self.asset_tag or "Unknown Item"

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "asset_tag": self.asset_tag,
            "serial_number": self.serial_number,
            "status": self.status,
            "holder_location_id": self.holder_location_id,
            "holder_organizer_id": self.holder_organizer_id,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
