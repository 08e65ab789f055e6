"""FastAPI application with lifespan, error mapping and router mounting."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gridrecon.api.routes import catalog, health, mapping, projects
from gridrecon.core.config import AppSettings
from gridrecon.core.exceptions import (
    CommitConflictError,
    CommitError,
    GridReconError,
    MalformedRecordError,
    MappingConfigurationError,
    SchemaError,
    StoreError,
    UnknownCategoryError,
)
from gridrecon.core.logging import configure_logging
from gridrecon.services.project_service import ProjectReconciliationService

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[GridReconError], int]] = [
    (UnknownCategoryError, 404),
    (CommitConflictError, 409),
    (CommitError, 422),
    (MappingConfigurationError, 422),
    (MalformedRecordError, 422),
    (SchemaError, 422),
    (StoreError, 503),
]


async def _gridrecon_error(request: Request, exc: GridReconError) -> JSONResponse:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status = 500
    body: dict = {"error": type(exc).__name__, "detail": str(exc)}
    if isinstance(exc, MappingConfigurationError):
        body["errors"] = exc.errors
    return JSONResponse(status_code=status, content=body)


def create_app(service: ProjectReconciliationService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``service`` replaces the one built from AppSettings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = AppSettings()
        configure_logging(settings)
        app.state.settings = settings
        app.state.service = service or ProjectReconciliationService.from_settings(settings)
        logger.info("GridRecon API started (environment=%s, backend=%s)", settings.environment, settings.backend)
        yield

    app = FastAPI(
        title="GridRecon Equipment Data Reconciliation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(GridReconError, _gridrecon_error)
    app.include_router(health.router)
    app.include_router(catalog.router, prefix="/catalog")
    app.include_router(mapping.router)
    app.include_router(projects.router, prefix="/projects")
    return app
