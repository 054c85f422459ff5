"""
Plantlog API - Main application entry point.

Houseplant watering tracker.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plantlog.core.config import get_settings
from plantlog.core.database import Database
from plantlog.core.middleware import MaxBodySizeMiddleware
from plantlog.notifications.router import NotificationRouter
from plantlog.notifications.views import router as notifications_router
from plantlog.plants.views import router as plants_router

settings = get_settings()
API_PREFIX = "/api/v1/plantlog"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await Database.connect()
    yield
    # Shutdown
    await Database.disconnect()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Plantlog API

Track houseplants and when to water them.

### Features

- 🌱 **Plants**: name, species, photo and a watering cadence
- 📅 **Schedules**: every N days, or on a specific weekday
- 💧 **Watering log**: each watering re-anchors the schedule
- 🔔 **Reminders**: one pending reminder per plant, kept in sync on every change
    """,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
)

app.state.notification_router = NotificationRouter()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Base64 photos make bodies large; cap them
app.add_middleware(MaxBodySizeMiddleware)

# Include routers
routers = [
    plants_router,
    notifications_router,
]

for router in routers:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if Database.client else "disconnected",
        "version": settings.APP_VERSION,
    }
