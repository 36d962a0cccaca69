"""
Serialization Utilities

Provides to/from JSON utilities for paper documents.

- `serialize_group` / `deserialize_group` wrap the model `to_dict()` /
  `from_dict()` methods, validating before deserialization.
- `load_paper_json` / `save_paper_json` read and write a whole paper
  document: groups plus the layout settings a caller needs to re-run
  pagination (layout type, column height, tuning constants).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..models.content import ContentGroup
from ..schemas.validator import PAPER_SCHEMA_VERSION, validate_group, validate_paper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaperDocument:
    """
    Parsed paper document.

    Attributes:
        groups: Content groups in document order
        title: Optional paper title
        layout: "single" or "double"
        column_height: Container height in pixels, if stored
        settings: Raw tuning constants (see layout.config.FlowConfig.from_dict)
    """

    groups: tuple[ContentGroup, ...]
    title: str = ""
    layout: str = "double"
    column_height: Optional[float] = None
    settings: dict[str, Any] = field(default_factory=dict)

    @property
    def question_count(self) -> int:
        return sum(len(g.sub_questions) for g in self.groups)


# ─────────────────────────────────────────────────────────────────────────────
# Group Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_group(group: ContentGroup) -> dict[str, Any]:
    """Serialize a ContentGroup to a JSON-ready dictionary."""
    return group.to_dict()


def deserialize_group(data: dict[str, Any], *, validate: bool = True) -> ContentGroup:
    """
    Deserialize a ContentGroup from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to run basic validation first

    Raises:
        ValidationError: If validate=True and data is invalid
        ValueError: If model invariants are violated
    """
    if validate:
        validate_group(data)
    return ContentGroup.from_dict(data)


# ─────────────────────────────────────────────────────────────────────────────
# Paper Documents
# ─────────────────────────────────────────────────────────────────────────────

def load_paper_json(path: Path, *, strict: bool = False) -> PaperDocument:
    """
    Load a paper document from a JSON file.

    Args:
        path: Path to the JSON document
        strict: Validate against the JSON schema as well

    Returns:
        PaperDocument with parsed groups

    Raises:
        ValidationError: If the document is invalid
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    validate_paper(data, strict=strict)
    groups = tuple(ContentGroup.from_dict(g) for g in data["groups"])

    document = PaperDocument(
        groups=groups,
        title=data.get("title", ""),
        layout=data.get("layout", "double"),
        column_height=data.get("column_height"),
        settings=dict(data.get("settings") or {}),
    )
    logger.info(
        f"Loaded {len(groups)} groups ({document.question_count} questions) from {path.name}"
    )
    return document


def save_paper_json(path: Path, document: PaperDocument) -> None:
    """Write a paper document to a JSON file (UTF-8, not ASCII-escaped)."""
    data: dict[str, Any] = {
        "schema_version": PAPER_SCHEMA_VERSION,
        "title": document.title,
        "layout": document.layout,
        "settings": document.settings,
        "groups": [serialize_group(g) for g in document.groups],
    }
    if document.column_height is not None:
        data["column_height"] = document.column_height

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
