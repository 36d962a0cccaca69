"""
Schema Validation Utilities

Validates paper documents before they are turned into content models.

Two levels:
- Basic checks (always): required fields, question types, choice placement.
  These produce precise dotted paths like ``groups[0].sub_questions[2].type``.
- Strict mode: full JSON Schema validation against ``paper.schema.json``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


PAPER_SCHEMA_VERSION = 1

QUESTION_TYPES = ("multiple-choice", "short-answer", "essay", "fill-in-blank")

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_paper(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a paper document.

    Args:
        data: Parsed JSON document
        strict: If True, also validate against the JSON schema

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Paper document must be an object")

    version = data.get("schema_version")
    if version != PAPER_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported paper schema version: {version} (expected {PAPER_SCHEMA_VERSION})",
            path="schema_version",
        )

    groups = data.get("groups")
    if not isinstance(groups, list):
        raise ValidationError("groups must be a list", path="groups")

    seen: set[str] = set()
    for i, group in enumerate(groups):
        validate_group(group, path=f"groups[{i}]")
        if group["id"] in seen:
            raise ValidationError(
                f"Duplicate group id: {group['id']!r}",
                path=f"groups[{i}].id",
            )
        seen.add(group["id"])

    if strict:
        schema = _load_schema("paper")
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message],
            ) from e


def validate_group(data: dict[str, Any], path: str = "") -> None:
    """Validate a single content group dictionary."""
    if not isinstance(data, dict):
        raise ValidationError("group must be an object", path=path)

    missing = [f for f in ("id", "sub_questions") if f not in data]
    if missing:
        raise ValidationError(
            f"Group missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )

    passage = data.get("passage")
    if passage is not None and not isinstance(passage, dict):
        raise ValidationError("passage must be an object", path=f"{path}.passage")

    questions = data["sub_questions"]
    if not isinstance(questions, list):
        raise ValidationError("sub_questions must be a list", path=f"{path}.sub_questions")
    for i, question in enumerate(questions):
        _validate_question(question, f"{path}.sub_questions[{i}]")


def _validate_question(data: dict[str, Any], path: str) -> None:
    """Validate a sub-question dictionary."""
    missing = [f for f in ("id", "number", "type") if f not in data]
    if missing:
        raise ValidationError(
            f"Question missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )

    kind = data["type"]
    if kind not in QUESTION_TYPES:
        raise ValidationError(f"Invalid question type: {kind!r}", path=f"{path}.type")

    choices = data.get("choices") or []
    if choices and kind != "multiple-choice":
        raise ValidationError(
            f"Only multiple-choice questions may have choices (got {kind!r})",
            path=f"{path}.choices",
        )
    for i, choice in enumerate(choices):
        if "id" not in choice or "number" not in choice:
            raise ValidationError(
                "Choice requires id and number",
                path=f"{path}.choices[{i}]",
            )

    height = data.get("height")
    if height is not None and (not isinstance(height, (int, float)) or height < 0):
        raise ValidationError(
            f"Invalid height override: {height!r} (must be non-negative number)",
            path=f"{path}.height",
        )
