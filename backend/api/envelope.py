"""Response envelope: every body is {status, data} or {status}.

``status`` is "success", "error", or "Please log in"; nothing else is used.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.credentials import identity_for_request
from utils.errors import LocationNotFound, StorageError, Unauthenticated, ValidationError

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_LOGIN = "Please log in"

# Every route under this prefix requires a bearer token.
PROTECTED_PREFIX = "/locations"


def success(data: Any) -> JSONResponse:
    """200 with {status: "success", data}."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": STATUS_SUCCESS, "data": jsonable_encoder(data)},
    )


def failure(status_code: int, status_text: str = STATUS_ERROR, data: Any = None) -> JSONResponse:
    """Error envelope; data is omitted when None."""
    content: dict[str, Any] = {"status": status_text}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    """Translate every error into the envelope."""

    @app.exception_handler(Unauthenticated)
    async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
        logger.info("Unauthenticated %s %s", request.method, request.url.path)
        return failure(status.HTTP_400_BAD_REQUEST, STATUS_LOGIN)

    # 500 for a client input problem matches the existing client contract.
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning("Validation error on %s: %s", request.url.path, exc.message)
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, data=exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed JSON is rejected before route dependencies run; login still comes first.
        if request.url.path.startswith(PROTECTED_PREFIX):
            try:
                await run_in_threadpool(identity_for_request, request)
            except Unauthenticated:
                logger.info("Unauthenticated %s %s", request.method, request.url.path)
                return failure(status.HTTP_400_BAD_REQUEST, STATUS_LOGIN)
        logger.warning("Invalid request on %s: %s", request.url.path, exc.errors())
        details = [
            {"field": ".".join(str(part) for part in e["loc"]), "message": e["msg"]}
            for e in exc.errors()
        ]
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, data=details)

    @app.exception_handler(LocationNotFound)
    async def not_found_handler(request: Request, exc: LocationNotFound) -> JSONResponse:
        return failure(status.HTTP_404_NOT_FOUND, data=exc.message)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return failure(exc.status_code, data=exc.detail)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR)
