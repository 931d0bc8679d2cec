"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from maison.api import catalog, drafts, health
from maison.core.config import settings
from maison.core.logging import setup_logging
from maison.db.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    init_db()
    yield


app = FastAPI(
    title=f"{settings.bakery_name} Orders",
    description="Order drafting service: dictated and scanned orders into the new-order form",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(catalog.router, tags=["catalog"])
app.include_router(drafts.router, tags=["drafts"])


@app.get("/")
async def root():
    """Service information."""
    return {
        "message": f"{settings.bakery_name} Orders API",
        "version": "0.1.0",
    }
