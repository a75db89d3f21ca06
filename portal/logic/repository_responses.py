"""Tender response repository.

A response record is written once, as a single insert carrying the full
answer map, and is never updated or deleted by the portal.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text as sql_text

from portal.db.base import get_engine
from portal.models.question import ResponseRecord, response_from_row

logger = logging.getLogger(__name__)


def insert_response(tender_id: str, submitter_id: Optional[str], answers: Dict[str, Any]) -> ResponseRecord:
    """Persist one submission and return the stored record."""
    record = ResponseRecord(
        response_id=str(uuid.uuid4()),
        tender_id=str(tender_id),
        submitter_id=submitter_id,
        submitted_at=datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z"),
        answers=dict(answers),
    )
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    """
                    INSERT INTO tender_response (response_id, tender_id, submitter_id, answers_json, submitted_at)
                    VALUES (:rid, :tid, :sid, :answers, :ts)
                    """
                ),
                {
                    "rid": record.response_id,
                    "tid": record.tender_id,
                    "sid": record.submitter_id,
                    "answers": json.dumps(record.answers, ensure_ascii=False),
                    "ts": record.submitted_at,
                },
            )
    except Exception:
        logger.error("insert_response failed tender_id=%s", tender_id, exc_info=True)
        raise
    logger.info(
        "response_inserted tender_id=%s response_id=%s anonymous=%s",
        record.tender_id,
        record.response_id,
        record.submitter_id is None,
    )
    return record


def list_responses(tender_id: str) -> List[ResponseRecord]:
    """Return the tender's submissions, newest first."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                """
                SELECT response_id, tender_id, submitter_id, answers_json, submitted_at
                FROM tender_response
                WHERE tender_id = :tid
                ORDER BY submitted_at DESC, response_id ASC
                """
            ),
            {"tid": str(tender_id)},
        ).mappings().fetchall()
    return [response_from_row(r) for r in rows]


__all__ = ["insert_response", "list_responses"]
