import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from collabhub.storage import StorageError
from collabhub.store import ConstraintViolation, NotFound, PermissionDenied, StoreError, TransportError

logger = logging.getLogger(__name__)

STORE_ERROR_STATUS = {
    NotFound: 404,
    PermissionDenied: 403,
    ConstraintViolation: 400,
    TransportError: 503,
}


def register_error_handlers(app: FastAPI):
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        sentry_sdk.capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "type": type(exc).__name__,
            },
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        status_code = STORE_ERROR_STATUS.get(type(exc), 500)
        if status_code >= 500:
            sentry_sdk.capture_exception(exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "type": type(exc).__name__},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        sentry_sdk.capture_exception(exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )
