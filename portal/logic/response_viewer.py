"""Administrative view of submitted tender responses.

Each answer is shown against the current text of its question. Answers whose
question no longer exists keep their raw value under a placeholder label;
nothing a submitter sent is ever left out of the view.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from portal.models.question import Question, ResponseRecord

MISSING_QUESTION_LABEL = "question no longer available"
ANONYMOUS_LABEL = "anonymous"


def format_answer(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def build_record_view(
    questions: Sequence[Question],
    record: ResponseRecord,
    *,
    missing_label: str = MISSING_QUESTION_LABEL,
    anonymous_label: str = ANONYMOUS_LABEL,
) -> Dict[str, Any]:
    """Render one record: known questions in schema order, then orphans in record order."""
    by_id = {q.question_id: q for q in questions}
    rows: List[Dict[str, Any]] = []
    for q in questions:
        if q.question_id in record.answers:
            value = record.answers[q.question_id]
            rows.append(
                {
                    "question_id": q.question_id,
                    "label": q.text,
                    "resolved": True,
                    "value": value,
                    "display": format_answer(value),
                }
            )
    for question_id, value in record.answers.items():
        if question_id not in by_id:
            rows.append(
                {
                    "question_id": question_id,
                    "label": missing_label,
                    "resolved": False,
                    "value": value,
                    "display": format_answer(value),
                }
            )
    return {
        "response_id": record.response_id,
        "tender_id": record.tender_id,
        "submitter": record.submitter_id if record.submitter_id is not None else anonymous_label,
        "submitted_at": record.submitted_at,
        "answers": rows,
    }


def build_response_views(
    questions: Sequence[Question],
    records: Iterable[ResponseRecord],
    *,
    missing_label: Optional[str] = None,
    anonymous_label: Optional[str] = None,
) -> List[Dict[str, Any]]:
    return [
        build_record_view(
            questions,
            record,
            missing_label=missing_label or MISSING_QUESTION_LABEL,
            anonymous_label=anonymous_label or ANONYMOUS_LABEL,
        )
        for record in records
    ]


__all__ = [
    "MISSING_QUESTION_LABEL",
    "ANONYMOUS_LABEL",
    "format_answer",
    "build_record_view",
    "build_response_views",
]
