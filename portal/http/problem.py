"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and the handler callables registered by
`create_app`, so every error leaves the service as application/problem+json.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from portal.http.error_mapping import problem
from portal.logic.validation import FormValidationError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(body: dict, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(body, status_code=int(body.get("status", 500)), media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        detail = dict(exc.detail)
        detail.setdefault("status", status)
    else:
        detail = {"title": "Error", "status": status, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    body = problem(
        "validation_failed",
        "Request validation failed",
        errors=[{k: v for k, v in e.items() if k in ("loc", "msg", "type")} for e in exc.errors()],
    )
    return problem_response(body)


async def handle_form_validation_error(request: Request, exc: FormValidationError) -> JSONResponse:  # noqa: D401
    logger.info("form_validation_rejected path=%s errors=%s", request.url.path, len(exc.errors))
    return problem_response(problem("validation_failed", str(exc), errors=exc.errors))


async def handle_backend_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:  # noqa: D401
    logger.error("backend_error path=%s", request.url.path, exc_info=exc)
    return problem_response(problem("backend_unavailable", "The data store could not complete the request"))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_form_validation_error",
    "handle_backend_error",
    "handle_unexpected_error",
]
