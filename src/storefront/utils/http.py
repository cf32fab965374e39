"""HTTP error mapping for the FastAPI application."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConcurrencyConflict,
    InvalidTransitionError,
)

logger = structlog.get_logger(__name__)


async def _invalid_transition(request: Request, exc: InvalidTransitionError):
    return JSONResponse(
        status_code=409,
        content={"error": exc.messages, "current": exc.current, "target": exc.target},
    )


async def _concurrency_conflict(request: Request, exc: ConcurrencyConflict):
    logger.warning("concurrency_conflict", path=request.url.path, attempts=exc.attempts, error=str(exc))
    return JSONResponse(status_code=503, content={"error": str(exc)}, headers={"Retry-After": "1"})


async def _authentication_failed(request: Request, exc: AuthenticationError):
    return JSONResponse(
        status_code=401,
        content={"error": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _access_denied(request: Request, exc: AccessDeniedError):
    return JSONResponse(status_code=403, content={"error": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Protean's handlers for validation and lookup errors, plus the storefront kinds."""
    register_exception_handlers(app)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(ConcurrencyConflict, _concurrency_conflict)
    app.add_exception_handler(AuthenticationError, _authentication_failed)
    app.add_exception_handler(AccessDeniedError, _access_denied)
