import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_superuser, current_active_user
from core.holders import (
    SOURCE_FIELDS,
    Holder,
    HolderConflict,
    MovementError,
    apply_movement,
    describe_holder,
    parse_holder_filter,
    resolve_movement,
)
from core.lookup import find_by_code, generate_asset_tag
from db.database import get_async_session
from db.inventory.category import InventoryCategory as CategoryModel
from db.inventory.item import InventoryItem as InventoryItemModel
from db.inventory.location import Location as LocationModel
from db.inventory.movement import InventoryMovement as InventoryMovementModel
from db.users import User
from schemas.inventory import (
    AssetTagOut,
    BulkMoveCreate,
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemStatus,
    InventoryItemUpdate,
    InventoryMovementCreate,
    InventoryMovementRead,
)

logger = logging.getLogger("backend.inventory")

router = APIRouter()

ASSET_TAG_ATTEMPTS = 10


async def _get_item(db: AsyncSession, item_id: UUID) -> InventoryItemModel:
    res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id == item_id))
    it = res.scalar_one_or_none()
    if not it:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return it


async def _ensure_category(db: AsyncSession, category_id: int) -> None:
    res = await db.execute(select(CategoryModel.id).where(CategoryModel.id == category_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")


async def _ensure_location(db: AsyncSession, location_id: Optional[int]) -> None:
    if location_id is None:
        return
    res = await db.execute(select(LocationModel.id).where(LocationModel.id == location_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Location {location_id} not found")


async def _ensure_organizer(db: AsyncSession, organizer_id: Optional[UUID]) -> None:
    if organizer_id is None:
        return
    res = await db.execute(select(User.id).where(User.id == organizer_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Person {organizer_id} not found")


async def _ensure_asset_tag_free(db: AsyncSession, asset_tag: Optional[str], item_id: Optional[UUID] = None) -> None:
    if not asset_tag:
        return
    stmt = select(InventoryItemModel.id).where(InventoryItemModel.asset_tag == asset_tag)
    if item_id is not None:
        stmt = stmt.where(InventoryItemModel.id != item_id)
    res = await db.execute(stmt)
    if res.first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Asset tag {asset_tag} is already in use")


async def _holder_names(db: AsyncSession) -> tuple[dict, dict]:
    lres = await db.execute(select(LocationModel.id, LocationModel.name))
    location_names = {row.id: row.name for row in lres.all()}
    ures = await db.execute(select(User))
    organizer_names = {u.id: u.display_name for u in ures.scalars().all()}
    return location_names, organizer_names


# ----------------------------
# Items
# ----------------------------

@router.get("/items", response_model=List[InventoryItemRead])
async def list_inventory_items(
    q: Optional[str] = None,
    category_id: Optional[int] = None,
    item_status: Optional[InventoryItemStatus] = Query(None, alias="status"),
    holder: Optional[str] = None,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List inventory items with optional filters.

    - q matches name or asset tag (case-insensitive substring).
    - holder is 'all' | 'unassigned' | 'loc:<location id>' | 'org:<person id>'.
    """
    try:
        holder_kind, holder_value = parse_holder_filter(holder)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    stmt = select(InventoryItemModel)
    if q and q.strip():
        qq = f"%{q.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(InventoryItemModel.name).like(qq),
                func.lower(InventoryItemModel.asset_tag).like(qq),
            )
        )
    if category_id is not None:
        stmt = stmt.where(InventoryItemModel.category_id == category_id)
    if item_status:
        stmt = stmt.where(InventoryItemModel.status == item_status)
    if holder_kind == "unassigned":
        stmt = stmt.where(
            InventoryItemModel.holder_location_id.is_(None),
            InventoryItemModel.holder_organizer_id.is_(None),
        )
    elif holder_kind == "loc":
        stmt = stmt.where(InventoryItemModel.holder_location_id == holder_value)
    elif holder_kind == "org":
        stmt = stmt.where(InventoryItemModel.holder_organizer_id == holder_value)

    stmt = stmt.order_by(
        func.lower(func.coalesce(InventoryItemModel.name, InventoryItemModel.asset_tag)).asc()
    )
    res = await db.execute(stmt)
    return [InventoryItemRead(**it.to_schema) for it in res.scalars().all()]


@router.post("/items", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    await _ensure_category(db, payload.category_id)
    await _ensure_location(db, payload.holder_location_id)
    await _ensure_organizer(db, payload.holder_organizer_id)
    await _ensure_asset_tag_free(db, payload.asset_tag)

    model = InventoryItemModel(
        category_id=payload.category_id,
        name=payload.name,
        asset_tag=payload.asset_tag,
        serial_number=payload.serial_number,
        notes=payload.notes,
        status=payload.status,
        holder_location_id=payload.holder_location_id,
        holder_organizer_id=payload.holder_organizer_id,
    )
    db.add(model)
    await db.commit()
    await db.refresh(model)
    logger.info("Item %s (%s) created by %s", model.id, model.label, user.id)
    return InventoryItemRead(**model.to_schema)


@router.get("/items/asset-tag", response_model=AssetTagOut)
async def new_asset_tag(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Generate an asset tag that no item uses yet."""
    for _ in range(ASSET_TAG_ATTEMPTS):
        tag = generate_asset_tag()
        res = await db.execute(select(InventoryItemModel.id).where(InventoryItemModel.asset_tag == tag))
        if res.first() is None:
            return AssetTagOut(asset_tag=tag)
    logger.error("Could not find a free asset tag after %d attempts", ASSET_TAG_ATTEMPTS)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not generate an asset tag")


@router.get("/items/lookup", response_model=InventoryItemRead)
async def lookup_item(
    code: str = Query(..., min_length=1),
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Resolve a scanned barcode to an item (asset tag, serial number, name or id)."""
    code = code.strip()
    conditions = [
        InventoryItemModel.asset_tag == code,
        InventoryItemModel.serial_number == code,
        InventoryItemModel.name == code,
    ]
    try:
        conditions.append(InventoryItemModel.id == UUID(code))
    except ValueError:
        pass

    res = await db.execute(select(InventoryItemModel).where(or_(*conditions)))
    found = find_by_code(res.scalars().all(), code)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No item found with code: {code}")
    return InventoryItemRead(**found.to_schema)


@router.get("/items/{item_id}", response_model=InventoryItemRead)
async def get_inventory_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    it = await _get_item(db, item_id)
    return InventoryItemRead(**it.to_schema)


@router.patch("/items/{item_id}", response_model=InventoryItemRead)
async def update_inventory_item(
    item_id: UUID,
    payload: InventoryItemUpdate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    model = await _get_item(db, item_id)

    data = payload.model_dump(exclude_unset=True)
    name = data.get("name", model.name)
    asset_tag = data.get("asset_tag", model.asset_tag)
    if not name and not asset_tag:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Either name or asset_tag must be provided",
        )
    if "asset_tag" in data:
        await _ensure_asset_tag_free(db, data["asset_tag"], item_id=model.id)

    for field in ("name", "asset_tag", "serial_number", "notes"):
        if field in data:
            setattr(model, field, data[field])

    await db.commit()
    await db.refresh(model)
    return InventoryItemRead(**model.to_schema)


@router.delete("/items/{item_id}", response_model=InventoryItemRead)
async def soft_delete_inventory_item(
    item_id: UUID,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Archive the item; its movement history is kept."""
    model = await _get_item(db, item_id)
    model.status = "archived"
    await db.commit()
    await db.refresh(model)
    logger.info("Item %s archived by %s", model.id, user.id)
    return InventoryItemRead(**model.to_schema)


# ----------------------------
# Movements
# ----------------------------

def _record_movement(
    db: AsyncSession,
    *,
    user: User,
    item: InventoryItemModel,
    reason: str,
    destination: Holder,
    claimed_source: Dict,
    notes: Optional[str],
) -> InventoryMovementModel:
    try:
        resolved = resolve_movement(
            item,
            reason=reason,
            destination=destination,
            claimed_source=claimed_source,
        )
    except HolderConflict as e:
        logger.warning("Rejected movement of item %s: %s", item.id, e)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except MovementError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    movement = InventoryMovementModel(
        item_id=item.id,
        from_location_id=resolved.source.location_id,
        from_organizer_id=resolved.source.organizer_id,
        to_location_id=resolved.destination.location_id,
        to_organizer_id=resolved.destination.organizer_id,
        reason=reason,
        notes=notes,
        moved_by_organizer_id=user.id,
    )
    db.add(movement)
    apply_movement(item, resolved)
    return movement


@router.get("/movements", response_model=List[Dict])
async def list_movements(
    q: Optional[str] = None,
    item_id: Optional[UUID] = None,
    limit: int = Query(200, ge=1, le=1000),
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(InventoryMovementModel, InventoryItemModel).outerjoin(
        InventoryItemModel, InventoryMovementModel.item_id == InventoryItemModel.id
    )
    if item_id:
        stmt = stmt.where(InventoryMovementModel.item_id == item_id)
    if q and q.strip():
        qq = f"%{q.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(InventoryItemModel.name).like(qq),
                func.lower(InventoryItemModel.asset_tag).like(qq),
            )
        )
    stmt = stmt.order_by(InventoryMovementModel.created_at.desc()).limit(limit)

    res = await db.execute(stmt)
    rows = res.all()
    location_names, organizer_names = await _holder_names(db)

    out = []
    for (mv, it) in rows:
        row_out = InventoryMovementRead(**mv.to_schema).model_dump()
        row_out["item_label"] = it.label if it else "Unknown Item"
        row_out["from_holder"] = describe_holder(
            Holder(mv.from_location_id, mv.from_organizer_id), location_names, organizer_names
        )
        row_out["to_holder"] = describe_holder(
            Holder(mv.to_location_id, mv.to_organizer_id), location_names, organizer_names
        )
        row_out["moved_by"] = organizer_names.get(mv.moved_by_organizer_id)
        out.append(row_out)
    return out


@router.post("/movements", response_model=InventoryMovementRead, status_code=status.HTTP_201_CREATED)
async def create_movement(
    payload: InventoryMovementCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Record a holder change for one item.

    Omitted from_* fields are filled from the item's current holder; the item is
    then handed over to the destination.
    """
    try:
        it = await _get_item(db, payload.item_id)
        await _ensure_location(db, payload.to_location_id)
        await _ensure_organizer(db, payload.to_organizer_id)

        claimed = {f: getattr(payload, f) for f in SOURCE_FIELDS if f in payload.model_fields_set}
        await _ensure_location(db, claimed.get("from_location_id"))
        await _ensure_organizer(db, claimed.get("from_organizer_id"))
        movement = _record_movement(
            db,
            user=user,
            item=it,
            reason=payload.reason,
            destination=Holder(payload.to_location_id, payload.to_organizer_id),
            claimed_source=claimed,
            notes=payload.notes,
        )
        await db.commit()
        await db.refresh(movement)
    except HTTPException:
        raise
    except Exception:
        await db.rollback()
        logger.exception("create_movement failed for item %s", payload.item_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create movement")

    logger.info(
        "Item %s moved (%s) to location=%s person=%s by %s",
        it.id, payload.reason, payload.to_location_id, payload.to_organizer_id, user.id,
    )
    return InventoryMovementRead(**movement.to_schema)


@router.post("/movements/bulk", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def bulk_move(
    payload: BulkMoveCreate,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Move several items to one destination location in a single transaction.

    Each item's source is taken from its current holder. If any item is missing or
    cannot be moved, nothing is recorded.
    """
    try:
        await _ensure_location(db, payload.to_location_id)
        await _ensure_organizer(db, payload.to_organizer_id)

        res = await db.execute(select(InventoryItemModel).where(InventoryItemModel.id.in_(payload.item_ids)))
        items_by_id = {it.id: it for it in res.scalars().all()}
        missing = [str(i) for i in payload.item_ids if i not in items_by_id]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Items not found: {', '.join(missing)}",
            )

        destination = Holder(payload.to_location_id, payload.to_organizer_id)
        movements = [
            _record_movement(
                db,
                user=user,
                item=items_by_id[item_id],
                reason=payload.reason,
                destination=destination,
                claimed_source={},
                notes=payload.notes,
            )
            for item_id in payload.item_ids
        ]
        await db.commit()
        for mv in movements:
            await db.refresh(mv)
    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("bulk_move failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to move items")

    logger.info("%d items moved to location %s by %s", len(movements), payload.to_location_id, user.id)
    return {
        "moved": len(movements),
        "to_location_id": payload.to_location_id,
        "to_organizer_id": payload.to_organizer_id,
        "reason": payload.reason,
        "movements": [InventoryMovementRead(**mv.to_schema) for mv in movements],
    }


@router.delete("/movements/{movement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movement(
    movement_id: UUID,
    user: User = Depends(current_active_superuser),
    db: AsyncSession = Depends(get_async_session),
):
    """Delete a movement record. The item's current holder is left as is."""
    res = await db.execute(select(InventoryMovementModel).where(InventoryMovementModel.id == movement_id))
    mv = res.scalar_one_or_none()
    if not mv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movement not found")

    await db.delete(mv)
    await db.commit()
    logger.info("Movement %s deleted by %s", movement_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
