from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import current_active_user
from db.database import get_async_session
from db.users import User
from schemas.users import OrganizerRead

router = APIRouter()

# Auth and /users routes come from fastapi-users (see main.py); this lists people who can hold items.


@router.get("/", response_model=List[OrganizerRead])
async def list_organizers(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_active_user),
):
    res = await db.execute(
        select(User)
        .where(User.is_active.is_(True))
        .order_by(func.lower(func.coalesce(User.first_name, User.email)).asc())
    )
    return [OrganizerRead(**u.to_schema) for u in res.scalars().all()]
