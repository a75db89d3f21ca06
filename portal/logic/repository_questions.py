"""Tender form question repository.

Keeps the HTTP layer free of SQL. Positions order questions within a tender;
gaps left by deletes are tolerated, duplicates are never produced by this
module. Store failures are logged at ERROR and re-raised.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from portal.db.base import get_engine
from portal.logic.validation import FormValidationError, apply_question_patch, validate_question_draft
from portal.models.question import ChoiceQuestion, Question, build_question, question_from_row

logger = logging.getLogger(__name__)

_COLUMNS = "question_id, tender_id, question_text, question_kind, choices_json, is_required, position"
_ORDER = "ORDER BY position ASC, created_at ASC, question_id ASC"

UP = "up"
DOWN = "down"


class QuestionNotFound(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _encode_choices(question: Question) -> Optional[str]:
    if isinstance(question, ChoiceQuestion):
        return json.dumps(list(question.choices), ensure_ascii=False)
    return None


def _fetch_ordered(conn: Connection, tender_id: str) -> List[Question]:
    rows = conn.execute(
        sql_text(f"SELECT {_COLUMNS} FROM tender_question WHERE tender_id = :tid {_ORDER}"),
        {"tid": str(tender_id)},
    ).mappings().fetchall()
    return [question_from_row(r) for r in rows]


def list_questions(tender_id: str) -> List[Question]:
    """Return the tender's questions by ascending position; empty when none."""
    eng = get_engine()
    with eng.connect() as conn:
        return _fetch_ordered(conn, tender_id)


def get_question(question_id: str) -> Question:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM tender_question WHERE question_id = :qid"),
            {"qid": str(question_id)},
        ).mappings().fetchone()
    if row is None:
        raise QuestionNotFound(question_id)
    return question_from_row(row)


def next_position(conn: Connection, tender_id: str) -> int:
    """Append-at-end position: the question count, moved past any gap left by deletes."""
    row = conn.execute(
        sql_text("SELECT COUNT(*), COALESCE(MAX(position), -1) FROM tender_question WHERE tender_id = :tid"),
        {"tid": str(tender_id)},
    ).fetchone()
    count = int(row[0]) if row and row[0] is not None else 0
    highest = int(row[1]) if row and row[1] is not None else -1
    return max(count, highest + 1)


def create_question(
    tender_id: str,
    *,
    text: str,
    kind: str,
    choices: Optional[List[str]] = None,
    required: bool = False,
    position: Optional[int] = None,
) -> Question:
    """Validate a draft and insert it; raises FormValidationError on bad input."""
    fields = validate_question_draft(text=text, kind=kind, choices=choices)
    eng = get_engine()
    new_id = str(uuid.uuid4())
    try:
        with eng.begin() as conn:
            if position is None:
                final_position = next_position(conn, tender_id)
            else:
                final_position = int(position)
                taken = conn.execute(
                    sql_text("SELECT 1 FROM tender_question WHERE tender_id = :tid AND position = :pos"),
                    {"tid": str(tender_id), "pos": final_position},
                ).fetchone()
                if taken is not None:
                    raise FormValidationError(
                        "invalid question draft",
                        [{"field": "position", "code": "position_taken", "detail": "position already used in this tender"}],
                    )
            question = build_question(
                question_id=new_id,
                tender_id=str(tender_id),
                text=fields["text"],
                kind=fields["kind"],
                required=bool(required),
                position=final_position,
                choices=tuple(fields["choices"]),
            )
            conn.execute(
                sql_text(
                    """
                    INSERT INTO tender_question (
                        question_id, tender_id, question_text, question_kind,
                        choices_json, is_required, position, created_at
                    )
                    VALUES (:qid, :tid, :qtext, :kind, :choices, :req, :pos, :ts)
                    """
                ),
                {
                    "qid": question.question_id,
                    "tid": question.tender_id,
                    "qtext": question.text,
                    "kind": question.kind,
                    "choices": _encode_choices(question),
                    "req": question.required,
                    "pos": question.position,
                    "ts": _now(),
                },
            )
    except FormValidationError:
        raise
    except Exception:
        logger.error("create_question failed tender_id=%s", tender_id, exc_info=True)
        raise
    logger.info(
        "question_created tender_id=%s question_id=%s kind=%s position=%s",
        question.tender_id,
        question.question_id,
        question.kind,
        question.position,
    )
    return question


def update_question(question_id: str, patch: Mapping[str, Any]) -> Question:
    """Apply a partial update and return the stored question.

    Edits overwrite in place; no history is kept.
    """
    current = get_question(question_id)
    updated = apply_question_patch(current, patch)
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text(
                    """
                    UPDATE tender_question
                    SET question_text = :qtext, question_kind = :kind,
                        choices_json = :choices, is_required = :req
                    WHERE question_id = :qid
                    """
                ),
                {
                    "qtext": updated.text,
                    "kind": updated.kind,
                    "choices": _encode_choices(updated),
                    "req": updated.required,
                    "qid": updated.question_id,
                },
            )
    except Exception:
        logger.error("update_question failed question_id=%s", question_id, exc_info=True)
        raise
    if (result.rowcount or 0) == 0:
        # Deleted between the read and the write
        raise QuestionNotFound(question_id)
    logger.info("question_updated question_id=%s kind=%s", updated.question_id, updated.kind)
    return updated


def delete_question(question_id: str) -> None:
    """Hard delete; remaining positions are not renumbered."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text("DELETE FROM tender_question WHERE question_id = :qid"),
                {"qid": str(question_id)},
            )
    except Exception:
        logger.error("delete_question failed question_id=%s", question_id, exc_info=True)
        raise
    if (result.rowcount or 0) == 0:
        raise QuestionNotFound(question_id)
    logger.info("question_deleted question_id=%s", question_id)


def move_question(tender_id: str, question_id: str, direction: str) -> List[Question]:
    """Swap a question's position with its neighbour and return the new order.

    Moving the first question up or the last one down changes nothing. The
    neighbour lookup and the swap run in one transaction, and the swap is a
    single UPDATE, so both positions change or neither does.
    """
    if direction not in (UP, DOWN):
        raise ValueError(f"direction must be '{UP}' or '{DOWN}'")
    eng = get_engine()
    try:
        with eng.begin() as conn:
            ordered = _fetch_ordered(conn, tender_id)
            index = next((i for i, q in enumerate(ordered) if q.question_id == question_id), None)
            if index is None:
                raise QuestionNotFound(question_id)
            other_index = index - 1 if direction == UP else index + 1
            if other_index < 0 or other_index >= len(ordered):
                logger.info(
                    "question_move_noop tender_id=%s question_id=%s direction=%s",
                    tender_id,
                    question_id,
                    direction,
                )
                return ordered
            moving, other = ordered[index], ordered[other_index]
            new_moving_pos, new_other_pos = other.position, moving.position
            conn.execute(
                sql_text(
                    """
                    UPDATE tender_question
                    SET position = CASE question_id
                        WHEN :a THEN :a_pos
                        WHEN :b THEN :b_pos
                        ELSE position
                    END
                    WHERE tender_id = :tid AND question_id IN (:a, :b)
                    """
                ),
                {
                    "a": moving.question_id,
                    "a_pos": new_moving_pos,
                    "b": other.question_id,
                    "b_pos": new_other_pos,
                    "tid": str(tender_id),
                },
            )
            reordered = _fetch_ordered(conn, tender_id)
    except QuestionNotFound:
        raise
    except Exception:
        logger.error(
            "move_question failed tender_id=%s question_id=%s direction=%s",
            tender_id,
            question_id,
            direction,
            exc_info=True,
        )
        raise
    logger.info(
        "question_reorder_swapped tender_id=%s question_id=%s other_id=%s",
        tender_id,
        moving.question_id,
        other.question_id,
    )
    return reordered


__all__ = [
    "QuestionNotFound",
    "UP",
    "DOWN",
    "list_questions",
    "get_question",
    "next_position",
    "create_question",
    "update_question",
    "delete_question",
    "move_question",
]
