from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator


InventoryItemStatus = Literal["active", "checked_out", "lost", "disposed", "archived"]
MovementReason = Literal["checkout", "return", "transfer", "lost", "disposed", "repair", "other"]
# Statuses a new item may start in; archiving only happens through delete.
InitialItemStatus = Literal["active", "checked_out", "lost", "disposed"]


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# ----- Categories -----

class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("description")
    @classmethod
    def _strip_description(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class CategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None


# ----- Locations -----

class LocationCreate(BaseModel):
    name: str
    capacity: int = 0

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("capacity")
    @classmethod
    def _capacity_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("capacity must be >= 0")
        return v


class LocationUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = None

    @field_validator("name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("capacity")
    @classmethod
    def _capacity_optional(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("capacity must be >= 0")
        return v


class LocationRead(BaseModel):
    id: int
    name: str
    capacity: int


# ----- Items -----

class InventoryItemCreate(BaseModel):
    category_id: int
    name: Optional[str] = None
    asset_tag: Optional[str] = None
    serial_number: Optional[str] = None
    notes: Optional[str] = None
    status: InitialItemStatus = "active"
    holder_location_id: int
    holder_organizer_id: Optional[UUID] = None

    @field_validator("name", "asset_tag", "serial_number", "notes")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @model_validator(mode="after")
    def _name_or_asset_tag(self):
        if not self.name and not self.asset_tag:
            raise ValueError("Either name or asset_tag must be provided")
        return self


class InventoryItemUpdate(BaseModel):
    """Only descriptive fields; holder and status change through movements."""
    name: Optional[str] = None
    asset_tag: Optional[str] = None
    serial_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name", "asset_tag", "serial_number", "notes")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)


class InventoryItemRead(BaseModel):
    id: UUID
    category_id: int
    name: Optional[str] = None
    asset_tag: Optional[str] = None
    serial_number: Optional[str] = None
    status: InventoryItemStatus
    holder_location_id: Optional[int] = None
    holder_organizer_id: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AssetTagOut(BaseModel):
    asset_tag: str


# ----- Movements -----

class InventoryMovementCreate(BaseModel):
    item_id: UUID
    reason: MovementReason
    from_location_id: Optional[int] = None
    from_organizer_id: Optional[UUID] = None
    to_location_id: Optional[int] = None
    to_organizer_id: Optional[UUID] = None
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @model_validator(mode="after")
    def _has_destination(self):
        if self.to_location_id is None and self.to_organizer_id is None:
            raise ValueError("Either to_location_id or to_organizer_id must be specified")
        return self


class BulkMoveCreate(BaseModel):
    item_ids: List[UUID]
    to_location_id: int
    to_organizer_id: Optional[UUID] = None
    reason: MovementReason = "transfer"
    notes: Optional[str] = None

    @field_validator("item_ids")
    @classmethod
    def _dedupe_ids(cls, v: List[UUID]) -> List[UUID]:
        if not v:
            raise ValueError("at least one item is required")
        return list(dict.fromkeys(v))

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)


class InventoryMovementRead(BaseModel):
    id: UUID
    item_id: UUID
    from_location_id: Optional[int] = None
    from_organizer_id: Optional[UUID] = None
    to_location_id: Optional[int] = None
    to_organizer_id: Optional[UUID] = None
    reason: MovementReason
    notes: Optional[str] = None
    moved_by_organizer_id: Optional[UUID] = None
    created_at: datetime
