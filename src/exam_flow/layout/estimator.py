"""
Module: layout.estimator

Purpose:
    Estimate rendered heights of passages, stems, choices and whole
    questions without a rendering engine. Heights come from a
    characters-per-line heuristic: every literal line contributes
    ceil(len / chars_per_line) wrapped lines (at least one).

    Estimates are deterministic (same input, same output) and monotonic
    (longer text never yields a smaller estimate).

Key Functions:
    - html_to_plain_with_breaks(): HTML to text, block ends become newlines
    - estimate_text_height(): Plain text height capped by a container
    - estimate_html_height(): Same for an HTML fragment
    - estimate_choice_height(): Height of one multiple-choice option
    - estimate_question_height(): Height of a whole question

Dependencies:
    - html (std): Entity decoding
    - layout.config: FlowConfig

Used By:
    - layout.html_splitter: Part line counts
    - layout.paginator: Item heights
"""

from __future__ import annotations

import html
import math
import re
from typing import Optional

from ..core.models.content import QuestionType, SubQuestion
from .config import FlowConfig

_BR_RE = re.compile(r"<\s*br\s*/?\s*>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(r"<\s*/(p|div|li|h[1-6]|ul|ol|blockquote|pre|table|tr)\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")

_DEFAULT_CONFIG = FlowConfig()


def html_to_plain_with_breaks(fragment: str) -> str:
    """
    Convert HTML to plain text, keeping line structure.

    ``<br>`` and closing block tags become newlines, remaining tags are
    stripped and entities decoded (``&nbsp;`` becomes a plain space).

    Example:
        >>> html_to_plain_with_breaks("<p>One</p><p>Two<br>Three</p>")
        'One\\nTwo\\nThree\\n'
    """
    if not fragment:
        return ""
    text = _BR_RE.sub("\n", fragment)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    return html.unescape(text).replace("\xa0", " ")


def wrapped_line_count(text: str, chars_per_line: int) -> int:
    """Number of wrapped lines for text split on literal newlines."""
    return sum(
        max(1, math.ceil(len(line) / chars_per_line))
        for line in text.split("\n")
    )


def estimate_text_height(
    text: str,
    container_height: float,
    config: Optional[FlowConfig] = None,
) -> float:
    """
    Estimate the pixel height of plain text.

    Args:
        text: Plain text, literal newlines separate lines
        container_height: Height of the column/page; caps the estimate
        config: Font metrics (defaults to FlowConfig())

    Returns:
        Line count (capped at floor(container_height / line_height)) times
        line height.
    """
    config = config or _DEFAULT_CONFIG
    line_px = config.line_height_px
    max_lines = max(0, math.floor(container_height / line_px))
    lines = wrapped_line_count(text, config.chars_per_line)
    return min(lines, max_lines) * line_px


def estimate_html_height(
    fragment: str,
    container_height: float,
    config: Optional[FlowConfig] = None,
) -> float:
    """Estimate the pixel height of an HTML fragment."""
    return estimate_text_height(html_to_plain_with_breaks(fragment), container_height, config)


def estimate_choice_height(content: str, config: Optional[FlowConfig] = None) -> float:
    """
    Estimate the height of one multiple-choice option.

    Line count comes from the total plain-text length, plus a fixed
    per-choice spacing.
    """
    config = config or _DEFAULT_CONFIG
    text = html_to_plain_with_breaks(content)
    lines = max(1, math.ceil(len(text) / config.chars_per_line))
    return lines * config.line_height_px + config.choice_spacing_px


def estimate_question_height(question: SubQuestion, config: Optional[FlowConfig] = None) -> float:
    """
    Estimate the height of a whole question.

    A manual height override always wins and is returned verbatim plus
    the override gap. Otherwise the stem height is combined with a
    type-specific addition (choice list or answer area) and a safety margin.

    Example:
        >>> q = SubQuestion("q1", 1, QuestionType.ESSAY, "Explain.", height=800)
        >>> estimate_question_height(q)
        808
    """
    config = config or _DEFAULT_CONFIG
    if question.height is not None:
        return question.height + config.override_gap_px

    stem_text = html_to_plain_with_breaks(question.content)
    height = wrapped_line_count(stem_text, config.chars_per_line) * config.line_height_px

    if question.type is QuestionType.MULTIPLE_CHOICE:
        height += sum(estimate_choice_height(c.content, config) for c in question.choices)
        height += config.choice_container_padding_px
    elif question.type is QuestionType.SHORT_ANSWER:
        height += config.short_answer_area_px
    elif question.type is QuestionType.ESSAY:
        height += config.essay_area_px
    elif question.type is QuestionType.FILL_IN_BLANK:
        height += config.fill_blank_area_px

    return height + config.safety_margin_px
