"""Feedback (contact form) repository."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sql_text

from portal.db.base import get_engine

logger = logging.getLogger(__name__)

_COLUMNS = (
    "feedback_id, submitter_id, name, email, subject, message, message_type, "
    "status, admin_response, created_at, updated_at"
)


class FeedbackNotFound(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: row[k] for k in row.keys()}


def create_feedback(
    *,
    name: str,
    email: str,
    subject: str,
    message: str,
    message_type: str = "question",
    submitter_id: Optional[str] = None,
) -> Dict[str, Any]:
    item = {
        "feedback_id": str(uuid.uuid4()),
        "submitter_id": submitter_id,
        "name": name.strip(),
        "email": email.strip(),
        "subject": subject.strip(),
        "message": message,
        "message_type": message_type,
        "status": "new",
        "admin_response": None,
        "created_at": _now(),
    }
    item["updated_at"] = item["created_at"]
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    f"""
                    INSERT INTO feedback ({_COLUMNS})
                    VALUES (:feedback_id, :submitter_id, :name, :email, :subject, :message,
                            :message_type, :status, :admin_response, :created_at, :updated_at)
                    """
                ),
                item,
            )
    except Exception:
        logger.error("create_feedback failed message_type=%s", message_type, exc_info=True)
        raise
    logger.info("feedback_created feedback_id=%s message_type=%s", item["feedback_id"], message_type)
    return item


def list_feedback() -> List[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM feedback ORDER BY created_at DESC, feedback_id ASC")
        ).mappings().fetchall()
    return [_row_to_dict(r) for r in rows]


def update_feedback(feedback_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply the fields present in `changes`; absent fields keep their value.

    A null `status` is ignored. A null `admin_response` clears the response.
    """
    assignments = ["updated_at = :ts"]
    params: Dict[str, Any] = {"ts": _now(), "fid": str(feedback_id)}
    status = changes.get("status")
    if status is not None:
        assignments.append("status = :status")
        params["status"] = status
    if "admin_response" in changes:
        assignments.append("admin_response = :resp")
        params["resp"] = changes["admin_response"]
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text(f"UPDATE feedback SET {', '.join(assignments)} WHERE feedback_id = :fid"),
                params,
            )
            if (result.rowcount or 0) == 0:
                raise FeedbackNotFound(feedback_id)
            row = conn.execute(
                sql_text(f"SELECT {_COLUMNS} FROM feedback WHERE feedback_id = :fid"),
                {"fid": str(feedback_id)},
            ).mappings().fetchone()
    except FeedbackNotFound:
        raise
    except Exception:
        logger.error("update_feedback failed feedback_id=%s", feedback_id, exc_info=True)
        raise
    logger.info("feedback_updated feedback_id=%s status=%s", feedback_id, status)
    return _row_to_dict(row)


__all__ = ["FeedbackNotFound", "create_feedback", "list_feedback", "update_feedback"]
