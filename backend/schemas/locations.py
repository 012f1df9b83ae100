"""Pydantic schemas for location API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class LocationWrite(BaseModel):
    """Payload for creating or updating a location.

    Fields are optional here so a missing lat/long is reported as a
    ValidationError by the handler. Unknown keys (e.g. user_id) are ignored.
    Coordinates must be finite JSON numbers; booleans and strings are rejected.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    lat: Optional[float] = None
    long: Optional[float] = None

    @field_validator("lat", "long", mode="before")
    @classmethod
    def _numbers_only(cls, v):
        if v is None:
            return v
        # bool is an int subclass
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be a number")
        return v


class LocationResponse(BaseModel):
    """Location in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    lat: float
    long: float
    created_at: datetime
