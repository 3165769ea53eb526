from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.analytics import build_catalog, summarize_inventory, top_counts
from core.auth import current_active_user
from core.config import settings
from db.database import get_async_session
from db.inventory.category import InventoryCategory as CategoryModel
from db.inventory.item import InventoryItem as InventoryItemModel, utcnow
from db.inventory.location import Location as LocationModel
from db.inventory.movement import InventoryMovement as InventoryMovementModel
from db.users import User
from schemas.inventory import CategoryRead, InventoryItemRead

router = APIRouter()


async def _load(db: AsyncSession, model, order_by=None) -> list:
    stmt = select(model)
    if order_by is not None:
        stmt = stmt.order_by(order_by)
    res = await db.execute(stmt)
    return list(res.scalars().all())


@router.get("/analytics", response_model=Dict)
async def inventory_analytics(
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Dashboard numbers: status/category/location distribution and movement activity."""
    items = await _load(db, InventoryItemModel)
    categories = await _load(db, CategoryModel)
    locations = await _load(db, LocationModel)
    movements = await _load(db, InventoryMovementModel)

    summary = summarize_inventory(
        items,
        categories,
        locations,
        movements,
        now=utcnow(),
        recent_days=settings.recent_movement_days,
    )
    summary["top_categories"] = top_counts(summary["category_counts"])
    summary["top_locations"] = top_counts(summary["location_counts"])
    summary["top_movement_reasons"] = top_counts(summary["movement_reasons"])
    return summary


@router.get("/catalog", response_model=List[Dict])
async def inventory_catalog(
    category_id: Optional[int] = None,
    user: User = Depends(current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Browse items grouped by category. Categories without items are left out."""
    items = await _load(
        db,
        InventoryItemModel,
        func.lower(func.coalesce(InventoryItemModel.name, InventoryItemModel.asset_tag)).asc(),
    )
    categories = await _load(db, CategoryModel, func.lower(CategoryModel.name).asc())
    locations = await _load(db, LocationModel)

    catalog = build_catalog(items, categories, locations)
    if category_id is not None:
        catalog = [entry for entry in catalog if entry["category"].id == category_id]
        if not catalog:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category has no items")

    return [
        {
            "category": CategoryRead(**entry["category"].to_schema),
            "total_items": entry["total_items"],
            "location_counts": entry["location_counts"],
            "status_counts": entry["status_counts"],
            "items_with_people": entry["items_with_people"],
            "items": [InventoryItemRead(**it.to_schema) for it in entry["items"]],
        }
        for entry in catalog
    ]
