import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_superuser, current_active_user
from db.database import get_async_session
from db.inventory.category import InventoryCategory as CategoryModel
from db.inventory.item import InventoryItem as InventoryItemModel
from db.users import User
from schemas.inventory import CategoryCreate, CategoryRead, CategoryUpdate

logger = logging.getLogger("backend.categories")

router = APIRouter()


async def _name_taken(db: AsyncSession, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(CategoryModel.id).where(func.lower(CategoryModel.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(CategoryModel.id != exclude_id)
    res = await db.execute(stmt)
    return res.first() is not None


@router.get("/", response_model=List[CategoryRead])
async def list_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    res = await db.execute(select(CategoryModel).order_by(func.lower(CategoryModel.name).asc()))
    return [CategoryRead(**c.to_schema) for c in res.scalars().all()]


@router.post("/", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    if await _name_taken(db, payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists")

    m = CategoryModel(name=payload.name, description=payload.description)
    db.add(m)
    await db.commit()
    await db.refresh(m)
    logger.info("Category %s (%s) created by %s", m.id, m.name, user.id)
    return CategoryRead(**m.to_schema)


@router.patch("/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    res = await db.execute(select(CategoryModel).where(CategoryModel.id == category_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        if await _name_taken(db, data["name"], exclude_id=m.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category already exists")
        m.name = data["name"]
    if "description" in data:
        m.description = (data["description"] or "").strip() or None

    await db.commit()
    await db.refresh(m)
    return CategoryRead(**m.to_schema)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_superuser),
):
    res = await db.execute(select(CategoryModel).where(CategoryModel.id == category_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    in_use = await db.execute(
        select(func.count()).select_from(InventoryItemModel).where(InventoryItemModel.category_id == category_id)
    )
    count = in_use.scalar_one()
    if count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category is used by {count} item(s)",
        )

    await db.delete(m)
    await db.commit()
    logger.info("Category %s deleted by %s", category_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
