"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MgnregaError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(MgnregaError):
    """data.gov.in failed: network error, timeout, bad status or malformed body."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class NoCacheError(MgnregaError):
    """Nothing on disk to serve."""

    def __init__(self, message: str = "No cached data found", status_code: int = 404):
        super().__init__(message, status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(MgnregaError)
    async def handle_mgnrega_error(_request: Request, exc: MgnregaError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
