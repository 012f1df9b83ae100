"""Configuration from environment."""
import os

PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./locations.db",
    )

# Users service that issued the bearer tokens; GET /users/user resolves one to a user.
USERS_SERVICE_URL = os.environ.get("USERS_SERVICE_URL", "http://users-service:3000")
AUTH_TIMEOUT_S = float(os.environ.get("AUTH_TIMEOUT_S", "5.0"))


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


RUN_MIGRATIONS = _flag("RUN_MIGRATIONS", "false" if os.environ.get("TESTING") == "true" else "true")
SEED_LOCATIONS = _flag("SEED_LOCATIONS", "false")
