"""
Core Models Package

Immutable content models supplied to a pagination run.

All models in this package are frozen dataclasses. The layout engine reads
them as snapshots and never mutates them, so the same groups can be
paginated repeatedly (e.g. once per container height) without copying.
"""

from .content import (
    Choice,
    ContentGroup,
    Passage,
    QuestionType,
    SubQuestion,
    choice_symbol,
)

__all__ = [
    "Choice",
    "ContentGroup",
    "Passage",
    "QuestionType",
    "SubQuestion",
    "choice_symbol",
]
