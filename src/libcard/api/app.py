"""FastAPI application setup."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from libcard.api.models import APIResponse, student_to_response
from libcard.api.routes import activity, archived, settings, students
from libcard.lifecycle import DuplicateIdentifierError, LifecycleManager, PartialArchiveError
from libcard.logging import setup_logging
from libcard.record_store import (
    RecordNotFoundError,
    RecordStore,
    RecordStoreError,
    StorageUnavailableError,
)
from libcard.record_store.database import DEFAULT_DB_PATH

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and open the record store on startup; close it on shutdown.

    Log directory and level come from LIBCARD_LOG_DIR and LIBCARD_LOG_LEVEL.
    """
    setup_logging()
    store = RecordStore(app.state.db_path)
    app.state.manager = LifecycleManager(store)
    try:
        yield
    finally:
        app.state.manager = None
        store.close()
        logger.info("Record store closed")


def register_exception_handlers(app: FastAPI) -> None:
    """Map lifecycle and storage errors to HTTP responses."""

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(_request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(DuplicateIdentifierError)
    async def duplicate_handler(_request: Request, exc: DuplicateIdentifierError) -> JSONResponse:
        existing = student_to_response(exc.existing) if exc.existing is not None else None
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse(data=existing, error="duplicate").model_dump(mode="json"),
        )

    @app.exception_handler(PartialArchiveError)
    async def partial_archive_handler(
        _request: Request, exc: PartialArchiveError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](
                data=None, error=f"{exc}; manual reconciliation required"
            ).model_dump(),
        )

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(
        _request: Request, _exc: StorageUnavailableError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=APIResponse[None](data=None, error="Storage unavailable").model_dump(),
        )

    @app.exception_handler(RecordStoreError)
    async def record_store_error_handler(
        _request: Request, _exc: RecordStoreError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )


def create_app(db_path: str | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: SQLite file to use. Falls back to the LIBCARD_DB_PATH
            environment variable, then to 'library.db'.
    """
    app = FastAPI(
        title="libcard API",
        description="REST API for libcard - Library student card records",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.db_path = db_path or os.environ.get("LIBCARD_DB_PATH", DEFAULT_DB_PATH)
    app.state.manager = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(students.router, prefix="/api/v1")
    app.include_router(archived.router, prefix="/api/v1")
    app.include_router(activity.router, prefix="/api/v1")
    app.include_router(settings.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
