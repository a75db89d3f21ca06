"""FastAPI application package for the Legislative Portal.

Exposes the application factory. Role resolution, tender form authoring,
form rendering and submission, and the response viewer live in
`portal/logic/`; route handlers in `portal/routes/`.
"""

from __future__ import annotations

from portal.main import create_app

__all__ = ["create_app"]
