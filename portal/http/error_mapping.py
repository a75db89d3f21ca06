"""Central error mapping for the portal API.

Single source of truth for problem+json codes, titles and HTTP statuses.
Route and guard modules import from here instead of hardcoding strings or
numbers.
"""

from __future__ import annotations

ERROR_MAP = {
    "access_denied": {"code": "ACCESS_DENIED", "status": 403, "title": "Access denied"},
    "access_unavailable": {"code": "ACCESS_UNAVAILABLE", "status": 503, "title": "Access unavailable"},
    "backend_unavailable": {"code": "BACKEND_UNAVAILABLE", "status": 503, "title": "Service temporarily unavailable"},
    "validation_failed": {"code": "VALIDATION_FAILED", "status": 422, "title": "Unprocessable Entity"},
    "form_incomplete": {"code": "FORM_INCOMPLETE", "status": 422, "title": "Form incomplete"},
    "submission_failed": {"code": "SUBMISSION_FAILED", "status": 503, "title": "Submission failed"},
    "not_found": {"code": "NOT_FOUND", "status": 404, "title": "Not Found"},
    "conflict": {"code": "CONFLICT", "status": 409, "title": "Conflict"},
}


def problem(key: str, detail: str, **extra: object) -> dict:
    """Build a problem+json body for the mapped error `key`."""
    entry = ERROR_MAP[key]
    body: dict = {
        "type": "about:blank",
        "title": entry["title"],
        "status": entry["status"],
        "detail": detail,
        "code": entry["code"],
    }
    body.update(extra)
    return body


__all__ = ["ERROR_MAP", "problem"]
