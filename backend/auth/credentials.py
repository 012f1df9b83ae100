"""Bearer credential validation against the users service.

Protected routes depend on ``require_identity``. The token is forwarded on
every call to the users service (``GET /users/user``); nothing is cached.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
from fastapi import Depends, Header, Request

from utils.config import AUTH_TIMEOUT_S, USERS_SERVICE_URL
from utils.errors import Unauthenticated

logger = logging.getLogger(__name__)

USER_PATH = "/users/user"


@dataclass(frozen=True)
class Identity:
    """User resolved from a bearer token."""

    user_id: int
    username: Optional[str] = None


class CredentialValidator(Protocol):
    def validate(self, token: str) -> Identity:
        """Return the identity for token or raise Unauthenticated."""
        ...


def parse_bearer(header: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not header:
        raise Unauthenticated()
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthenticated()
    return token


def _identity_from_body(body) -> Identity:
    if not isinstance(body, dict) or body.get("status") != "success":
        raise Unauthenticated()
    user = body.get("user")
    if isinstance(user, dict):
        user_id, username = user.get("id"), user.get("username")
    else:
        user_id, username = user, None
    # bool is an int subclass; reject it explicitly.
    if isinstance(user_id, bool) or not isinstance(user_id, (int, str)):
        raise Unauthenticated()
    try:
        return Identity(user_id=int(user_id), username=username)
    except ValueError as e:
        raise Unauthenticated() from e


class UsersServiceValidator:
    """Resolves tokens by asking the users service who they belong to."""

    def __init__(
        self,
        base_url: str = USERS_SERVICE_URL,
        timeout: float = AUTH_TIMEOUT_S,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get(self, token: str) -> httpx.Response:
        url = f"{self.base_url}{USER_PATH}"
        headers = {"Authorization": f"Bearer {token}"}
        if self._client is not None:
            return self._client.get(url, headers=headers, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, headers=headers)

    def validate(self, token: str) -> Identity:
        try:
            resp = self._get(token)
        except httpx.HTTPError as e:
            logger.warning("Users service unreachable at %s: %s", self.base_url, e)
            raise Unauthenticated() from e
        if resp.status_code != 200:
            logger.info("Users service rejected token (HTTP %s)", resp.status_code)
            raise Unauthenticated()
        try:
            body = resp.json()
        except ValueError as e:
            logger.warning("Users service returned a non-JSON body")
            raise Unauthenticated() from e
        return _identity_from_body(body)


def get_credential_validator() -> CredentialValidator:
    """FastAPI dependency: the validator used by protected routes (override in tests)."""
    return UsersServiceValidator()


def require_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    validator: CredentialValidator = Depends(get_credential_validator),
) -> Identity:
    """FastAPI dependency: resolve the caller or raise Unauthenticated.

    The identity is also kept on ``request.state`` for the error handlers.
    """
    token = parse_bearer(authorization)
    identity = validator.validate(token)
    request.state.identity = identity
    return identity


def identity_for_request(request: Request) -> Identity:
    """Resolve the caller of a request that failed before its dependencies ran.

    Reuses an identity already resolved by ``require_identity``; otherwise
    validates the header with the app's (possibly overridden) validator.
    """
    identity = getattr(request.state, "identity", None)
    if identity is not None:
        return identity
    token = parse_bearer(request.headers.get("authorization"))
    factory = request.app.dependency_overrides.get(get_credential_validator, get_credential_validator)
    return factory().validate(token)
