"""Widget rendering for tender application forms.

Maps each question kind to exactly one input affordance and produces a
presentation-neutral field list that a template or a client can draw.
"""

from __future__ import annotations

from typing import Any, Dict, List

from portal.logic.form_session import FormSession
from portal.models.question import ChoiceQuestion, Question, TextQuestion
from portal.models.question_kind import QuestionKind

WIDGET_FOR_KIND: Dict[str, str] = {
    QuestionKind.SHORT_TEXT: "text_input",
    QuestionKind.LONG_TEXT: "textarea",
    QuestionKind.SINGLE_CHOICE_LIST: "select",
    QuestionKind.SINGLE_CHOICE_EXCLUSIVE: "radio_group",
    QuestionKind.MULTI_CHOICE: "checkbox_group",
}


def _empty_value(question: Question) -> Any:
    return [] if question.kind == QuestionKind.MULTI_CHOICE else ""


def render_field(question: Question, value: Any = None) -> Dict[str, Any]:
    field: Dict[str, Any] = {
        "question_id": question.question_id,
        "label": question.text,
        "widget": WIDGET_FOR_KIND[question.kind],
        "required": question.required,
        "value": _empty_value(question) if value is None else value,
    }
    if isinstance(question, ChoiceQuestion):
        field["options"] = list(question.choices)
        if question.kind == QuestionKind.MULTI_CHOICE:
            selected = value if isinstance(value, list) else []
            field["checked"] = [option in selected for option in question.choices]
    elif isinstance(question, TextQuestion):
        field["multiline"] = question.kind == QuestionKind.LONG_TEXT
    return field


def render_form(session: FormSession) -> List[Dict[str, Any]]:
    """Render every question of the session in display order with its current answer."""
    return [render_field(q, session.answers.get(q.question_id)) for q in session.questions]


__all__ = ["WIDGET_FOR_KIND", "render_field", "render_form"]
