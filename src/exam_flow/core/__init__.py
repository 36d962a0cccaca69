"""
Exam Flow Core Package

Shared content models, schema validation and serialization used by the
layout engine and its callers.
"""

from .models import Choice, ContentGroup, Passage, QuestionType, SubQuestion

__all__ = [
    "Choice",
    "ContentGroup",
    "Passage",
    "QuestionType",
    "SubQuestion",
]
