"""Structured error responses: consistent JSON format for all errors."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.management_api import ManagementApiError
from app.services.revocation_service import RevocationInProgressError

logger = logging.getLogger("session_console")


def _upstream_status(exc: ManagementApiError) -> int:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_502_BAD_GATEWAY


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_id": request_id,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": "Validation error",
                "errors": exc.errors(),
                "request_id": request_id,
            },
        )

    @app.exception_handler(ManagementApiError)
    async def management_api_exception_handler(request: Request, exc: ManagementApiError):
        request_id = getattr(request.state, "request_id", None)
        status_code = _upstream_status(exc)
        return JSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "status_code": status_code,
                "detail": exc.message,
                "code": exc.code,
                "retryable": status_code != status.HTTP_404_NOT_FOUND,
                "request_id": request_id,
            },
        )

    @app.exception_handler(RevocationInProgressError)
    async def revocation_in_progress_handler(request: Request, exc: RevocationInProgressError):
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": True,
                "status_code": 409,
                "detail": str(exc),
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None)
        logger.exception("unhandled error request_id=%s", request_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
