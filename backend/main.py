import logging

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from core.config import settings
from db.database import create_db_and_tables
from routers.analytics import router as analytics_router
from routers.categories import router as categories_router
from routers.inventory import router as inventory_router
from routers.locations import router as locations_router
from routers.users import router as organizers_router
from core.auth import fastapi_users, auth_backend
from contextlib import asynccontextmanager
from schemas.users import UserRead, UserCreate, UserUpdate

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title="Inventory Tracker API",
    description="API for tracking inventory items, their holders and movements",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Authentication routes (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"],)
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_reset_password_router(), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])

# People who can hold items
app.include_router(organizers_router, prefix="/organizers", tags=["organizers"])

# Inventory routes
app.include_router(locations_router, prefix="/locations", tags=["locations"])
app.include_router(categories_router, prefix="/inventory/categories", tags=["categories"])
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(analytics_router, prefix="/inventory", tags=["analytics"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
