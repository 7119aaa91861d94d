"""
agents/response_parser.py

Raw model text → validated typed plan.

Steps:
1. Strip Markdown code fences (```json ... ```)
2. Wrap the array in a {"days": ...} envelope
3. json.loads — failure (NaN/Infinity included) is MalformedResponse
4. Declarative schema check — failure is SchemaViolation (whole batch rejected)
5. Build the Pydantic tree
"""

from __future__ import annotations

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from errors import MalformedResponse, SchemaIssue, SchemaViolation
from schemas.plan_schemas import FieldSpec
from schemas.validation import validate

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not a JSON number")


def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw).strip()


def parse_and_validate(raw: str, schema: FieldSpec, model: type[T]) -> T:
    body = strip_code_fences(raw)

    try:
        payload = json.loads(f'{{ "days": {body} }}', parse_constant=_reject_constant)
    except ValueError as e:
        logger.warning("Model output is not JSON (%s): %.500s", e, body)
        raise MalformedResponse(f"Response is not valid JSON: {getattr(e, 'msg', e)}") from e

    try:
        validate(payload, schema)
    except SchemaViolation as e:
        for issue in e.issues[:20]:
            logger.warning("Schema violation: %s", issue)
        raise

    return build_model(payload, model)


def build_model(payload: dict, model: type[T]) -> T:
    """Schema-checked payload → typed tree. Pydantic errors become SchemaViolation."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        issues = [
            SchemaIssue(".".join(str(p) for p in err["loc"]), err["type"], str(err.get("input"))[:50])
            for err in e.errors()
        ]
        raise SchemaViolation(issues) from e
