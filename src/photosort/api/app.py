"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from photosort.api.admin import router as admin_router
from photosort.api.events import router as events_router
from photosort.api.photos import router as photos_router
from photosort.app_logging import configure_logging
from photosort.containers import AppContainer
from photosort.errors import (
    InvalidTransitionError,
    NotFoundError,
    PartialBulkUpdateError,
    PermissionDeniedError,
)

_ERROR_STATUS: dict[type[Exception], int] = {
    InvalidTransitionError: 409,
    PartialBulkUpdateError: 409,
    NotFoundError: 404,
    PermissionDeniedError: 403,
    ValueError: 422,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(events_router)
    app.include_router(photos_router)
    app.include_router(admin_router)

    async def domain_error(request: Request, exc: Exception) -> JSONResponse:
        status_code = next(
            code for kind, code in _ERROR_STATUS.items() if isinstance(exc, kind)
        )
        logger.info(
            "%s %s rejected: %s %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for error_type in _ERROR_STATUS:
        app.add_exception_handler(error_type, domain_error)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
