"""
schemas/validation.py

Generic interpreter for the FieldSpec trees in schemas/plan_schemas.py.

Every issue in the payload is collected (path + expected type + what was
found) and reported together through one SchemaViolation. Any issue
rejects the whole payload.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from errors import SchemaIssue, SchemaViolation
from schemas.plan_schemas import FieldSpec


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def collect_issues(value: Any, spec: FieldSpec, path: str = "$") -> list[SchemaIssue]:
    got = _type_name(value)

    if spec.kind == "string":
        return [] if got == "string" else [SchemaIssue(path, "string", got)]

    if spec.kind == "number":
        if got == "number" and not math.isfinite(value):
            return [SchemaIssue(path, "finite number", repr(value))]
        return [] if got == "number" else [SchemaIssue(path, "number", got)]

    if spec.kind == "date":
        if _is_iso_date(value):
            return []
        shown = repr(value) if got == "string" else got
        return [SchemaIssue(path, "date (YYYY-MM-DD)", shown)]

    if spec.kind == "array":
        if got != "array":
            return [SchemaIssue(path, "array", got)]
        issues: list[SchemaIssue] = []
        for i, item in enumerate(value):
            issues.extend(collect_issues(item, spec.item, f"{path}[{i}]"))
        return issues

    if spec.kind == "object":
        if got != "object":
            return [SchemaIssue(path, "object", got)]
        issues = []
        for name, child in spec.fields.items():
            child_path = f"{path}.{name}"
            if name not in value or value[name] is None:
                if child.required:
                    issues.append(SchemaIssue(child_path, child.kind, "missing"))
                continue
            issues.extend(collect_issues(value[name], child, child_path))
        for name in value:
            if name not in spec.fields:
                issues.append(SchemaIssue(f"{path}.{name}", "no such field", _type_name(value[name])))
        return issues

    raise ValueError(f"Unknown schema kind: {spec.kind!r}")


def validate(value: Any, spec: FieldSpec) -> Any:
    """Return `value` unchanged if it conforms, else raise SchemaViolation."""
    issues = collect_issues(value, spec)
    if issues:
        raise SchemaViolation(issues)
    return value
