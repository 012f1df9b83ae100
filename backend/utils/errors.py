"""Error taxonomy for the locations service.

Raised by the repository, the credential validator and the route handlers;
translated into response envelopes only by ``api.envelope``.
"""


class LocationServiceError(Exception):
    """Base class for errors the API shapes into an envelope."""

    default_message = "error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(LocationServiceError):
    """Bearer credential missing, malformed, or rejected by the users service."""

    default_message = "Please log in"


class ValidationError(LocationServiceError):
    """Required mutation fields are absent."""

    default_message = "lat and long are required"


class StorageError(LocationServiceError):
    """Backing store unavailable or a constraint violated."""

    default_message = "Storage failure"


class LocationNotFound(LocationServiceError):
    """No location with the requested id."""

    default_message = "Location not found"
