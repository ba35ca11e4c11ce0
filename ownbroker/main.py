"""OwnBroker Simplified: FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ownbroker.config import get_settings
from ownbroker.connection import ConnectionManager
from ownbroker.errors import (
    ConstraintViolation,
    InitializationError,
    InvalidRequest,
    NotFound,
    OwnBrokerError,
    PolicyViolation,
    SchemaIntegrityError,
    StateConflict,
)
from ownbroker.routers import admin, contact, owners, users

logger = logging.getLogger(__name__)

# Most specific first; lookup walks this list in order
_STATUS_BY_ERROR = (
    (NotFound, 404),
    (StateConflict, 409),
    (ConstraintViolation, 409),
    (PolicyViolation, 403),
    (InvalidRequest, 400),
    (SchemaIntegrityError, 500),
    (InitializationError, 503),
)


def _status_for(exc: OwnBrokerError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def handle_domain_error(request: Request, exc: OwnBrokerError):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = {"detail": exc.message}
    if isinstance(exc, StateConflict) and exc.current_status:
        body["current_status"] = exc.current_status
    if isinstance(exc, ConstraintViolation):
        body["kind"] = exc.kind
    if isinstance(exc, SchemaIntegrityError):
        body["problems"] = exc.problems
    return JSONResponse(status_code=status_code, content=body)


def create_app(connections: ConnectionManager | None = None) -> FastAPI:
    settings = connections.settings if connections else get_settings()
    connections = connections or ConnectionManager(settings)

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.connections = connections

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(OwnBrokerError, handle_domain_error)

    app.include_router(users.router)
    app.include_router(owners.router)
    app.include_router(admin.router)
    app.include_router(contact.router)

    @app.on_event("startup")
    def startup():
        # Uvicorn owns SIGINT/SIGTERM; only hook interpreter exit here
        connections.install_shutdown_hook(signals=())
        try:
            connections.acquire()
        except InitializationError as e:
            # Retryable: the first request will try again
            logger.warning("Database startup failed; will retry on first request. Error: %s", e.message)

    @app.on_event("shutdown")
    def shutdown():
        connections.release()

    @app.get("/")
    def root():
        return {"app": settings.app_name, "status": "ok"}

    @app.get("/health")
    def health():
        db = connections.acquire()
        db.ping()
        return {"status": "healthy", "database": connections.state.value}

    return app


logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app()
