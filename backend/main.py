"""Locations service: FastAPI backend."""
import logging
import os
import subprocess
import sys

from fastapi import FastAPI

from utils.config import LOG_LEVEL, PORT, RUN_MIGRATIONS, SEED_LOCATIONS

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

from fastapi.middleware.cors import CORSMiddleware

from api.envelope import register_error_handlers
from api.locations import router as locations_router
from db import SessionLocal
from repositories.location_repository import count_locations, create_location as repo_create_location
from schemas.health import HealthResponse

app = FastAPI(
    title="Locations Service",
    description="Per-user geographic locations behind bearer-token auth",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(locations_router)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint (no auth)."""
    return HealthResponse()


@app.on_event("startup")
def startup() -> None:
    """Run DB migrations and optionally seed a location."""
    if RUN_MIGRATIONS:
        _run_migrations()
    if SEED_LOCATIONS:
        _seed_locations_if_empty()


def _run_migrations() -> None:
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")
    logger.info("Database migrated to head")


def _seed_locations_if_empty() -> None:
    """Seed one location for user 1 so a fresh stack has data to list."""
    db = SessionLocal()
    try:
        if count_locations(db) > 0:
            return
        repo_create_location(db, user_id=1, lat=39.7392, long=-104.9903)
        logger.info("Seeded default location for user 1")
    finally:
        db.close()


@app.get("/")
def root() -> dict:
    """Root info."""
    return {"service": "locations", "docs": "/docs", "health": "/health"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
