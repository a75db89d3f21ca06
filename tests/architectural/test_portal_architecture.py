"""Architectural tests for the portal package layout.

All checks use static filesystem/AST inspection to avoid import-time side
effects.
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
APP_DIR = PROJECT_ROOT / "portal"
ROUTES_DIR = APP_DIR / "routes"
LOGIC_DIR = APP_DIR / "logic"
MODELS_DIR = APP_DIR / "models"
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"


@dataclass
class ParsedModule:
    path: Path
    tree: ast.AST


def parse_module(path: Path) -> ParsedModule:
    try:
        return ParsedModule(path=path, tree=ast.parse(path.read_text(encoding="utf-8"), filename=str(path)))
    except (OSError, SyntaxError) as exc:  # pragma: no cover - explicit failure in test
        pytest.fail(f"Failed to parse {path}: {exc}")


def py_files_under(root: Path) -> list[Path]:
    return sorted(p for p in root.rglob("*.py") if "__pycache__" not in p.parts)


def imported_modules(parsed: ParsedModule) -> set[str]:
    names: set[str] = set()
    for node in ast.walk(parsed.tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _string_constants(parsed: ParsedModule) -> list[str]:
    return [n.value for n in ast.walk(parsed.tree) if isinstance(n, ast.Constant) and isinstance(n.value, str)]


def test_route_handlers_hold_no_sql() -> None:
    sql = re.compile(r"\bSELECT\b.+\bFROM\b|\bINSERT INTO\b|\bDELETE FROM\b|\bUPDATE\s+\w+\s+SET\b", re.DOTALL)
    for path in py_files_under(ROUTES_DIR):
        parsed = parse_module(path)
        assert "sqlalchemy" not in {m.split(".")[0] for m in imported_modules(parsed) if m != "sqlalchemy.exc"}, path
        offenders = [s for s in _string_constants(parsed) if sql.search(s)]
        assert not offenders, f"{path.name} embeds SQL: {offenders}"


def test_question_kinds_are_centralised() -> None:
    parsed = parse_module(MODELS_DIR / "question_kind.py")
    classes = [n for n in ast.walk(parsed.tree) if isinstance(n, ast.ClassDef) and n.name == "QuestionKind"]
    assert classes, "QuestionKind constants class missing"
    values = {
        node.value.value
        for node in classes[0].body
        if isinstance(node, ast.Assign) and isinstance(node.value, ast.Constant)
    }
    assert values == {"short_text", "long_text", "single_choice_list", "single_choice_exclusive", "multi_choice"}


def test_logic_layer_does_not_import_fastapi() -> None:
    for path in py_files_under(LOGIC_DIR):
        modules = imported_modules(parse_module(path))
        assert not any(m.split(".")[0] in {"fastapi", "starlette"} for m in modules), path


def test_every_router_operation_declares_an_operation_id() -> None:
    for path in py_files_under(ROUTES_DIR):
        if path.name == "__init__.py":
            continue
        parsed = parse_module(path)
        for node in ast.walk(parsed.tree):
            if not isinstance(node, ast.FunctionDef):
                continue
            for deco in node.decorator_list:
                if isinstance(deco, ast.Call) and isinstance(deco.func, ast.Attribute) and deco.func.attr in {"get", "post", "patch", "delete"}:
                    keywords = {k.arg for k in deco.keywords}
                    assert "operation_id" in keywords, f"{path.name}:{node.name}"


def _migration_table(name: str) -> Optional[str]:
    sql = "\n".join(p.read_text(encoding="utf-8") for p in sorted(MIGRATIONS_DIR.glob("*.sql")))
    match = re.search(rf"CREATE TABLE IF NOT EXISTS {name} \((.*?)\n\);", sql, re.DOTALL)
    return match.group(1) if match else None


def test_role_assignment_is_a_set_of_known_roles() -> None:
    body = _migration_table("role_assignment")
    assert body is not None
    assert "UNIQUE (identity_id, role)" in body
    for role in ("administrator", "tender_manager", "legal_manager"):
        assert f"'{role}'" in body


def test_questions_and_responses_do_not_cascade_from_tenders() -> None:
    for table in ("tender_question", "tender_response"):
        body = _migration_table(table)
        assert body is not None
        assert "REFERENCES" not in body.upper()
