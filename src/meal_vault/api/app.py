"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_vault.api.meal_plans import router as meal_plans_router
from meal_vault.app_logging import configure_logging
from meal_vault.containers import AppContainer
from meal_vault.domain.errors import (
    DayConflictError,
    DayNotFoundError,
    LibraryItemNotFoundError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Serving vault at %s", container.settings.vault_path)
        yield
        logger.info("Shutting down vault at %s", container.settings.vault_path)

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(meal_plans_router)

    @app.exception_handler(LibraryItemNotFoundError)
    async def library_item_not_found(
        request: Request, exc: LibraryItemNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(DayNotFoundError)
    async def day_not_found(request: Request, exc: DayNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(DayConflictError)
    async def day_conflict(request: Request, exc: DayConflictError) -> JSONResponse:
        logger.warning("Rejected stale write: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc), "updated_at": exc.actual},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
