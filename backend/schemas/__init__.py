# Schemas package
from .health import HealthResponse
from .locations import LocationResponse, LocationWrite

__all__ = [
    "HealthResponse",
    "LocationResponse",
    "LocationWrite",
]
