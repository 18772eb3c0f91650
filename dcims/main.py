# dcims/main.py

from pathlib import Path
from dotenv import load_dotenv

# -------------------------------------------------------------------
# Load .env BEFORE importing anything that relies on environment vars
# -------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dcims.core.config import settings
from dcims.core.exceptions import register_exception_handlers
from dcims.core.logging import setup_logging
from dcims.events.bus import bus

# Routers
from dcims.activity.router import router as activity_router
from dcims.activity.service import register_activity_logging
from dcims.dashboards.router import router as dashboards_router
from dcims.enum_colors.router import router as enum_colors_router
from dcims.locations.router import router as locations_router
from dcims.servers.router import router as servers_router
from dcims.widgets.router import router as widgets_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    register_activity_logging(bus)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    logger.info("%s shutting down", settings.PROJECT_NAME)


# -------------------------------------------------------------------
# FastAPI APP CONFIG
# -------------------------------------------------------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Data center inventory: servers, locations, dashboards and widget data.",
    lifespan=lifespan,
)


# -------------------------------------------------------------------
# MIDDLEWARE
# -------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# -------------------------------------------------------------------
# ROUTES
# -------------------------------------------------------------------
app.include_router(dashboards_router, prefix=settings.API_V1_STR, tags=["Dashboards"])
app.include_router(widgets_router, prefix=settings.API_V1_STR, tags=["Widget Data"])
app.include_router(servers_router, prefix=settings.API_V1_STR, tags=["Servers"])
app.include_router(locations_router, prefix=settings.API_V1_STR, tags=["Locations"])
app.include_router(enum_colors_router, prefix=settings.API_V1_STR, tags=["Enum Colors"])
app.include_router(activity_router, prefix=settings.API_V1_STR, tags=["Activity"])


# -------------------------------------------------------------------
# ROOT PING / HEALTHCHECK
# -------------------------------------------------------------------
@app.get("/")
def read_root():
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
    }
