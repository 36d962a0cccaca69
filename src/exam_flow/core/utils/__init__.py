"""Utility helpers for the core package."""

from .serialization import (
    serialize_group,
    deserialize_group,
    load_paper_json,
    save_paper_json,
    PaperDocument,
)

__all__ = [
    "serialize_group",
    "deserialize_group",
    "load_paper_json",
    "save_paper_json",
    "PaperDocument",
]
