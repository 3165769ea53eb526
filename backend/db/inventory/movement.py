import uuid

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID

from ..database import Base
from .item import utcnow


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    item_id = Column(
        UUID(as_uuid=True),
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    from_location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    from_organizer_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    to_location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True)
    to_organizer_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # 'checkout' | 'return' | 'transfer' | 'lost' | 'disposed' | 'repair' | 'other'
    reason = Column(Text, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    moved_by_organizer_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "item_id": self.item_id,
            "from_location_id": self.from_location_id,
            "from_organizer_id": self.from_organizer_id,
            "to_location_id": self.to_location_id,
            "to_organizer_id": self.to_organizer_id,
            "reason": self.reason,
            "notes": self.notes,
            "moved_by_organizer_id": self.moved_by_organizer_id,
            "created_at": self.created_at,
        }
