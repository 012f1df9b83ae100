"""Location repository: list, get, create, update, delete.

Every function takes the request's session explicitly. SQLAlchemy failures are
rolled back and re-raised as ``StorageError``.
"""
import logging
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.location import Location
from utils.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

# Signed 64-bit INTEGER range; ids outside it cannot exist in the table.
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def _storable_id(location_id: int) -> bool:
    return MIN_ID <= location_id <= MAX_ID


def _storage_failure(session: Session, action: str, exc: SQLAlchemyError) -> StorageError:
    session.rollback()
    logger.error("Location %s failed: %s", action, exc, exc_info=True)
    return StorageError(f"Could not {action} location")


def list_locations(session: Session) -> list[Location]:
    """Return all locations ordered by id."""
    try:
        result = session.execute(select(Location).order_by(Location.id))
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        raise _storage_failure(session, "list", e) from e


def get_location(session: Session, location_id: int) -> Optional[Location]:
    """Return a location by id or None."""
    if not _storable_id(location_id):
        return None
    try:
        return session.get(Location, location_id)
    except SQLAlchemyError as e:
        raise _storage_failure(session, "read", e) from e


def create_location(session: Session, *, user_id: int, lat: float | None, long: float | None) -> Location:
    """Create a location owned by user_id, commit, and return it.

    Raises ValidationError without touching the store when lat or long is missing.
    """
    missing = [name for name, value in (("lat", lat), ("long", long)) if value is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    loc = Location(user_id=user_id, lat=lat, long=long)
    try:
        session.add(loc)
        session.commit()
        session.refresh(loc)
    except SQLAlchemyError as e:
        raise _storage_failure(session, "create", e) from e
    return loc


def update_location(session: Session, location_id: int, *, lat: float, long: float) -> bool:
    """Overwrite lat/long of a location. Returns False if no row matched."""
    if not _storable_id(location_id):
        return False
    try:
        result = session.execute(
            update(Location).where(Location.id == location_id).values(lat=lat, long=long)
        )
        session.commit()
    except SQLAlchemyError as e:
        raise _storage_failure(session, "update", e) from e
    return result.rowcount > 0


def delete_location(session: Session, location_id: int) -> bool:
    """Delete a location by id. Returns True if deleted, False if not found."""
    if not _storable_id(location_id):
        return False
    try:
        result = session.execute(delete(Location).where(Location.id == location_id))
        session.commit()
    except SQLAlchemyError as e:
        raise _storage_failure(session, "delete", e) from e
    return result.rowcount > 0


def count_locations(session: Session) -> int:
    """Return the number of locations (for seeding)."""
    result = session.execute(select(func.count()).select_from(Location))
    return result.scalar() or 0
