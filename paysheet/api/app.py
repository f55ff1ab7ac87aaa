"""
HTTP Application

Builds the FastAPI app around an AppComponents bundle.

DESIGN DECISION: Flows raise domain exceptions and never build
responses themselves. The handlers below are the single place where
an exception kind becomes a status code, so every error leaves the
API in the same ``{success: false, message, errors?}`` envelope.

Route handlers are plain ``def`` functions. FastAPI runs them in its
worker threadpool, so a slow spreadsheet call blocks one worker
thread, not the event loop.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from paysheet.api.responses import error
from paysheet.api.routes import ROUTERS
from paysheet.audit import configure_logging
from paysheet.auth import ForbiddenError, UnauthorizedError
from paysheet.orchestrator import AppComponents, bootstrap, create_app_components
from paysheet.reports import InvalidPeriodError
from paysheet.services.storage import (
    BackendUnavailableError,
    DuplicateError,
    NotFoundError,
    StorageError,
)
from paysheet.validation import ValidationFailedError


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_in_threadpool(bootstrap, app.state.components)
    logger.info("api_started")
    yield


def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ValidationFailedError)
    async def handle_validation(request: Request, exc: ValidationFailedError):
        return error(
            400,
            "Validation failed",
            errors=[issue.model_dump() for issue in exc.issues],
        )

    @app.exception_handler(InvalidPeriodError)
    async def handle_period(request: Request, exc: InvalidPeriodError):
        return error(
            400,
            exc.message,
            errors=[{
                "field": exc.field,
                "issue_type": "invalid_value",
                "message": exc.message,
            }],
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error(
            400,
            "Invalid request",
            errors=[
                {
                    "field": ".".join(str(part) for part in err.get("loc", ())),
                    "issue_type": err.get("type", "invalid_value"),
                    "message": err.get("msg", ""),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return error(401, str(exc))

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return error(403, str(exc))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error(404, str(exc))

    @app.exception_handler(DuplicateError)
    async def handle_duplicate(request: Request, exc: DuplicateError):
        return error(409, str(exc))

    @app.exception_handler(BackendUnavailableError)
    async def handle_backend(request: Request, exc: BackendUnavailableError):
        logger.warning("backend_unavailable", path=request.url.path, error=str(exc))
        return error(503, "Storage backend unavailable")

    @app.exception_handler(StorageError)
    async def handle_storage(request: Request, exc: StorageError):
        logger.error("storage_error", path=request.url.path, error=str(exc))
        return error(500, "Internal Server Error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error(404, "Route not found")
        return error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return error(500, "Internal Server Error")


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the API.

    Without ``components`` everything is wired from settings. Tables are
    created and the bootstrap admin seeded when the app starts.
    """
    components = components or create_app_components()
    app_settings = components.settings.app

    configure_logging(app_settings.log_level, json_output=app_settings.log_json)

    app = FastAPI(
        title="Paysheet",
        debug=app_settings.debug_mode,
        lifespan=lifespan,
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in ROUTERS:
        app.include_router(router, prefix="/api")

    _register_exception_handlers(app)
    return app
