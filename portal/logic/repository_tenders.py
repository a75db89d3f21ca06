"""Tender repository.

Tenders are the procurement notices forms hang off. Deleting a tender does
not touch its questions or responses.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sql_text

from portal.db.base import get_engine

logger = logging.getLogger(__name__)

_COLUMNS = "tender_id, title, content, is_active, has_form, created_at, updated_at"
_PATCHABLE = ("title", "content", "is_active", "has_form")


class TenderNotFound(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "tender_id": str(row["tender_id"]),
        "title": str(row["title"]),
        "content": str(row["content"] or ""),
        "is_active": bool(row["is_active"]),
        "has_form": bool(row["has_form"]),
        "created_at": str(row["created_at"]),
        "updated_at": str(row["updated_at"]),
    }


def list_tenders(*, active_only: bool = False, with_form_only: bool = False) -> List[Dict[str, Any]]:
    """Return tenders newest first, optionally only active or form-bearing ones."""
    clauses = []
    if active_only:
        clauses.append("is_active = :true")
    if with_form_only:
        clauses.append("has_form = :true")
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM tender {where} ORDER BY created_at DESC, tender_id ASC"),
            {"true": True},
        ).mappings().fetchall()
    return [_row_to_dict(r) for r in rows]


def find_tender(tender_id: str) -> Optional[Dict[str, Any]]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM tender WHERE tender_id = :tid"),
            {"tid": str(tender_id)},
        ).mappings().fetchone()
    return _row_to_dict(row) if row is not None else None


def create_tender(*, title: str, content: str = "", is_active: bool = True, has_form: bool = False) -> Dict[str, Any]:
    tender_id = str(uuid.uuid4())
    ts = _now()
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    f"""
                    INSERT INTO tender ({_COLUMNS})
                    VALUES (:tid, :title, :content, :active, :form, :ts, :ts)
                    """
                ),
                {
                    "tid": tender_id,
                    "title": title.strip(),
                    "content": content,
                    "active": bool(is_active),
                    "form": bool(has_form),
                    "ts": ts,
                },
            )
    except Exception:
        logger.error("create_tender failed title=%s", title, exc_info=True)
        raise
    logger.info("tender_created tender_id=%s has_form=%s", tender_id, has_form)
    return {
        "tender_id": tender_id,
        "title": title.strip(),
        "content": content,
        "is_active": bool(is_active),
        "has_form": bool(has_form),
        "created_at": ts,
        "updated_at": ts,
    }


def update_tender(tender_id: str, patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply the non-null patch fields and return the stored tender."""
    changes = {k: patch[k] for k in _PATCHABLE if k in patch and patch[k] is not None}
    if "title" in changes:
        changes["title"] = str(changes["title"]).strip()
    assignments = ", ".join(f"{k} = :{k}" for k in changes)
    params: Dict[str, Any] = dict(changes)
    params.update({"tid": str(tender_id), "ts": _now()})
    eng = get_engine()
    try:
        with eng.begin() as conn:
            set_clause = f"{assignments}, updated_at = :ts" if assignments else "updated_at = :ts"
            result = conn.execute(
                sql_text(f"UPDATE tender SET {set_clause} WHERE tender_id = :tid"),
                params,
            )
    except Exception:
        logger.error("update_tender failed tender_id=%s", tender_id, exc_info=True)
        raise
    if (result.rowcount or 0) == 0:
        raise TenderNotFound(tender_id)
    logger.info("tender_updated tender_id=%s fields=%s", tender_id, sorted(changes))
    updated = find_tender(tender_id)
    if updated is None:
        raise TenderNotFound(tender_id)
    return updated


def delete_tender(tender_id: str) -> None:
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text("DELETE FROM tender WHERE tender_id = :tid"),
                {"tid": str(tender_id)},
            )
    except Exception:
        logger.error("delete_tender failed tender_id=%s", tender_id, exc_info=True)
        raise
    if (result.rowcount or 0) == 0:
        raise TenderNotFound(tender_id)
    logger.info("tender_deleted tender_id=%s", tender_id)


__all__ = [
    "TenderNotFound",
    "list_tenders",
    "find_tender",
    "create_tender",
    "update_tender",
    "delete_tender",
]
