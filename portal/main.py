from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from portal.config import get_config
from portal.db.base import get_engine
from portal.db.migrations_runner import apply_migrations
from portal.http.problem import (
    handle_backend_error,
    handle_form_validation_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from portal.http.request_id import RequestIdMiddleware
from portal.logging_setup import configure_logging
from portal.logic.validation import FormValidationError
from portal.middleware.cors import apply_cors
from portal.routes import api_router

logger = logging.getLogger(__name__)


def _health_check() -> dict:
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error("Health DB check failed", exc_info=True)
        return {"status": "degraded", "db": False, "reason": type(e).__name__}
    return {"status": "ok", "db": True}


def create_app() -> FastAPI:
    # Configure global logging before app instantiation so all modules emit
    configure_logging()
    config = get_config()
    app = FastAPI(title="Legislative Portal API")

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(FormValidationError, handle_form_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_backend_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=config.cors_origins)

    # Apply migrations on startup (guarded) to avoid import-time side effects
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not config.database.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        try:
            applied = apply_migrations(get_engine())
        except Exception:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
        logger.info("startup_migrations_applied count=%s", len(applied))

    app.include_router(api_router, prefix="/api/v1")

    # Health endpoint (out of prefix for simplicity in local runs)
    @app.get("/health")
    def health() -> dict:
        return _health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
