import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_superuser, current_active_user
from db.database import get_async_session
from db.inventory.item import InventoryItem as InventoryItemModel
from db.inventory.location import Location as LocationModel
from db.users import User
from schemas.inventory import LocationCreate, LocationRead, LocationUpdate

logger = logging.getLogger("backend.locations")

router = APIRouter()


async def _get_location(db: AsyncSession, location_id: int) -> LocationModel:
    res = await db.execute(select(LocationModel).where(LocationModel.id == location_id))
    loc = res.scalar_one_or_none()
    if not loc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return loc


async def _name_taken(db: AsyncSession, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(LocationModel.id).where(func.lower(LocationModel.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(LocationModel.id != exclude_id)
    res = await db.execute(stmt)
    return res.first() is not None


@router.get("/", response_model=List[LocationRead])
async def list_locations(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    res = await db.execute(select(LocationModel).order_by(func.lower(LocationModel.name).asc()))
    return [LocationRead(**loc.to_schema) for loc in res.scalars().all()]


@router.post("/", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
async def create_location(
    payload: LocationCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    if await _name_taken(db, payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Location already exists")

    loc = LocationModel(name=payload.name, capacity=payload.capacity)
    db.add(loc)
    await db.commit()
    await db.refresh(loc)
    logger.info("Location %s (%s) created by %s", loc.id, loc.name, user.id)
    return LocationRead(**loc.to_schema)


@router.get("/{location_id}", response_model=LocationRead)
async def get_location(
    location_id: int,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    loc = await _get_location(db, location_id)
    return LocationRead(**loc.to_schema)


@router.patch("/{location_id}", response_model=LocationRead)
async def update_location(
    location_id: int,
    payload: LocationUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    loc = await _get_location(db, location_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        if await _name_taken(db, data["name"], exclude_id=loc.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Location already exists")
        loc.name = data["name"]
    if data.get("capacity") is not None:
        loc.capacity = data["capacity"]

    await db.commit()
    await db.refresh(loc)
    return LocationRead(**loc.to_schema)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: int,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_superuser),
):
    loc = await _get_location(db, location_id)

    held = await db.execute(
        select(func.count()).select_from(InventoryItemModel).where(InventoryItemModel.holder_location_id == location_id)
    )
    count = held.scalar_one()
    if count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Location still holds {count} item(s)",
        )

    await db.delete(loc)
    await db.commit()
    logger.info("Location %s deleted by %s", location_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
