"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medication_tracker.api.medications import router as medications_router
from medication_tracker.app_logging import configure_logging
from medication_tracker.config import parse_allowed_origins
from medication_tracker.containers import AppContainer
from medication_tracker.domain.errors import (
    CourseCompleteError,
    MedicationError,
    MedicationNotFoundError,
    RejectedDoseError,
    ScheduleValidationError,
    StorageError,
)

_UNPROCESSABLE = 422

_ERROR_STATUS: tuple[tuple[type[MedicationError], int], ...] = (
    (ScheduleValidationError, _UNPROCESSABLE),
    (RejectedDoseError, _UNPROCESSABLE),
    (MedicationNotFoundError, status.HTTP_404_NOT_FOUND),
    (CourseCompleteError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


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
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allowed_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(medications_router)

    @app.exception_handler(MedicationError)
    async def medication_error(request: Request, exc: MedicationError) -> JSONResponse:
        status_code = error_status(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.exception("Request failed: %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def error_status(exc: MedicationError) -> int:
    """Return the HTTP status for a domain error."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST
