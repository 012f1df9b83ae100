"""Location API routes. Every route requires a bearer token."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from api.envelope import success
from auth.credentials import Identity, require_identity
from db import get_db
from repositories.location_repository import create_location as repo_create_location
from repositories.location_repository import delete_location as repo_delete_location
from repositories.location_repository import get_location as repo_get_location
from repositories.location_repository import list_locations as repo_list_locations
from repositories.location_repository import update_location as repo_update_location
from schemas.locations import LocationResponse, LocationWrite
from utils.errors import LocationNotFound, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])


def _required_coordinates(body: Optional[LocationWrite]) -> tuple[float, float]:
    """Return (lat, long) or raise ValidationError naming what is missing."""
    body = body or LocationWrite()
    missing = [name for name in ("lat", "long") if getattr(body, name) is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    return body.lat, body.long


@router.get("")
def list_locations(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """List all locations."""
    locations = repo_list_locations(db)
    return success([LocationResponse.model_validate(loc) for loc in locations])


@router.get("/{location_id}")
def get_location(
    location_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Return one location; 404 envelope if the id is unknown."""
    loc = repo_get_location(db, location_id)
    if loc is None:
        raise LocationNotFound()
    return success(LocationResponse.model_validate(loc))


@router.post("")
def create_location(
    body: Optional[LocationWrite] = None,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Create a location owned by the caller. user_id never comes from the body."""
    lat, long = _required_coordinates(body)
    loc = repo_create_location(db, user_id=identity.user_id, lat=lat, long=long)
    logger.info("User %s added location %s", identity.user_id, loc.id)
    return success("Location Added!")


@router.put("/{location_id}")
def update_location(
    location_id: int,
    body: Optional[LocationWrite] = None,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Overwrite lat/long. Any logged-in caller may update any id.

    Unlike GET, an unknown id is not a 404: the update is a no-op that still
    reports success.
    """
    lat, long = _required_coordinates(body)
    if not repo_update_location(db, location_id, lat=lat, long=long):
        logger.info("User %s updated unknown location %s (no-op)", identity.user_id, location_id)
    else:
        logger.info("User %s updated location %s", identity.user_id, location_id)
    return success("Location Updated!")


@router.delete("/{location_id}")
def delete_location(
    location_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
) -> JSONResponse:
    """Delete a location. Any logged-in caller may delete any id.

    Unlike GET, an unknown id is not a 404: deletes are idempotent and an
    unknown id still reports success.
    """
    removed = repo_delete_location(db, location_id)
    logger.info("User %s removed location %s (deleted=%s)", identity.user_id, location_id, removed)
    return success("Location Removed!")
