"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from vault.config import get_settings
from vault.domain.exceptions import BackendError, RecordValidationError, StorageError
from vault.infrastructure.dependencies import open_vault
from vault.infrastructure.logging.log_config import setup_logging
from vault.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: open the vault for the life of the server."""
    setup_logging()
    async with open_vault(get_settings()) as vault:
        app.state.vault = vault
        yield
    logger.info("Vault closed")


async def _validation_error_handler(request: Request, exc: RecordValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "field": exc.field, "operation": exc.operation},
    )


async def _backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    logger.error("Backend failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "operation": exc.operation},
    )


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "operation": exc.operation},
    )


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_exception_handler(RecordValidationError, _validation_error_handler)
    app.add_exception_handler(BackendError, _backend_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vault.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
