"""
backend/lotato/main.py

Purpose:
    FastAPI application bootstrap: lifespan (database, services, seed),
    middleware and router wiring, and translation of the error taxonomy to
    HTTP responses.

Dependencies:
    - lotato.database
    - lotato.dependencies
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from lotato.config import Settings, settings as default_settings
from lotato.database import connect, ensure_indexes
from lotato.dependencies import build_services
from lotato.errors import LotatoError
from lotato.middleware.logging import StructuredLoggingMiddleware, setup_logging
from lotato.routers.auth import router as auth_router
from lotato.routers.catalog import router as catalog_router
from lotato.routers.results import router as results_router
from lotato.routers.tickets import router as tickets_router
from lotato.routers.users import router as users_router
from lotato.seed import seed_master_user

logger = logging.getLogger("lotato")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LotatoError)
    async def lotato_error_handler(request: Request, exc: LotatoError):
        content = {"detail": exc.message, "code": exc.code}
        if exc.details:
            content["errors"] = exc.details
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(InvalidId)
    async def invalid_object_id_handler(request: Request, exc: InvalidId):
        return JSONResponse(status_code=400, content={"detail": "Invalid ID.", "code": "validation_error"})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Return field-level validation errors without the body/query prefix."""
        errors = []
        for err in exc.errors():
            loc = err.get("loc", ())
            field = ".".join(str(part) for part in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
            errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error.", "code": "validation_error", "errors": errors},
        )

    @app.exception_handler(DuplicateKeyError)
    async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
        return JSONResponse(status_code=409, content={"detail": "Duplicate entry.", "code": "conflict"})

    @app.exception_handler(ServerSelectionTimeoutError)
    async def db_timeout_handler(request: Request, exc: ServerSelectionTimeoutError):
        logger.error("Database timeout: %s %s", request.method, request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})

    @app.exception_handler(ConnectionFailure)
    async def db_connection_handler(request: Request, exc: ConnectionFailure):
        logger.error("Database connection failure: %s %s", request.method, request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})

    @app.exception_handler(OperationFailure)
    async def db_operation_handler(request: Request, exc: OperationFailure):
        logger.error("Database operation error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Catch-all: log the real error, return a safe generic message."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        client, db = connect(settings)
        services = build_services(db, settings)
        await ensure_indexes(db)
        app.state.services = services
        await seed_master_user(services.identity, settings)
        logger.info("LOTATO back office started (db=%s)", settings.MONGO_DB)

        yield

        client.close()

    app = FastAPI(
        title="LOTATO",
        description="Borlette point-of-sale and back-office API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.BACKEND_CORS_ORIGINS.split(",") if o.strip()],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    app.include_router(auth_router)
    app.include_router(tickets_router)
    app.include_router(users_router)
    app.include_router(results_router)
    app.include_router(catalog_router)

    _register_exception_handlers(app)

    @app.get("/health")
    async def health(request: Request):
        """Health check: verifies the database connection."""
        services = getattr(request.app.state, "services", None)
        try:
            result = await services.db.command("ping") if services else {}
            db_ok = result.get("ok") == 1.0
        except (ConnectionFailure, OperationFailure):
            db_ok = False

        return {
            "status": "healthy" if db_ok else "degraded",
            "db": "connected" if db_ok else "disconnected",
        }

    return app


app = create_app()
