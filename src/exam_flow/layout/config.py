"""
Module: layout.config

Purpose:
    Configuration for the flow layout engine. Holds the font metrics and
    the heuristic constants used by the height estimator, the HTML block
    splitter and the paginators.

Key Classes:
    - FlowConfig: Immutable estimator/paginator configuration
    - LayoutType: Single page column or two columns per page
    - QuestionMode: Fragment questions or place them whole

Dependencies:
    - dataclasses (std)

Used By:
    - layout.estimator: Line height and answer-area constants
    - layout.html_splitter: Characters-per-line budget
    - layout.paginator: Advance thresholds
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any


DEFAULT_FONT_SIZE_PX = 14
DEFAULT_LINE_HEIGHT = 1.6
DEFAULT_CHARS_PER_LINE = 20  # Narrow exam columns


class LayoutType(str, Enum):
    """Page layout: one column per page or two."""
    SINGLE = "single"
    DOUBLE = "double"

    def __str__(self) -> str:
        return self.value


class QuestionMode(str, Enum):
    """How questions are placed by the paginators."""
    FRAGMENT = "fragment"  # Stem parts + choice ranges
    WHOLE = "whole"        # One question-range per run of whole questions

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FlowConfig:
    """
    Configuration for flow layout (immutable).

    Heights are estimated from character counts, not font metrics, so the
    constants below are tuning knobs rather than measurements.

    Attributes:
        font_size_px: Body font size
        line_height_multiplier: Unitless CSS line-height
        chars_per_line: Characters assumed to fit on one column line
        item_gap_px: Breathing room added to every emitted item
        choice_spacing_px: Spacing added per multiple-choice option
        choice_container_padding_px: Padding around a choice list
        short_answer_area_px: Answer area below short-answer questions
        essay_area_px: Answer area below essay questions
        fill_blank_area_px: Answer area below fill-in-blank questions
        safety_margin_px: Added to whole-question estimates
        override_gap_px: Added to manual height overrides
        orphan_factor: Lines of leftover budget treated as an orphan
        passage_min_lines: Passage parts are only started with more budget than this
        start_min_lines: Stem parts / choice ranges need at least this budget to start
        continue_min_lines: Advance after a part when budget drops to this
        question_mode: FRAGMENT or WHOLE question placement

    Example:
        >>> config = FlowConfig()
        >>> round(config.line_height_px, 1)
        22.4
    """

    # Font metrics
    font_size_px: float = DEFAULT_FONT_SIZE_PX
    line_height_multiplier: float = DEFAULT_LINE_HEIGHT
    chars_per_line: int = DEFAULT_CHARS_PER_LINE

    # Spacing
    item_gap_px: float = 8
    choice_spacing_px: float = 6
    choice_container_padding_px: float = 12

    # Answer areas
    short_answer_area_px: float = 60
    essay_area_px: float = 200
    fill_blank_area_px: float = 40

    # Estimation error allowances
    safety_margin_px: float = 16
    override_gap_px: float = 8

    # Split / advance thresholds (in lines)
    orphan_factor: float = 1.5
    passage_min_lines: float = 2.0
    start_min_lines: float = 1.2
    continue_min_lines: float = 2.0

    # Behavior
    question_mode: QuestionMode = QuestionMode.FRAGMENT

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.font_size_px <= 0:
            raise ValueError(f"font_size_px must be positive: {self.font_size_px}")
        if self.line_height_multiplier <= 0:
            raise ValueError(
                f"line_height_multiplier must be positive: {self.line_height_multiplier}"
            )
        if self.chars_per_line < 1:
            raise ValueError(f"chars_per_line must be >= 1: {self.chars_per_line}")
        if self.orphan_factor < 1:
            raise ValueError(f"orphan_factor must be >= 1: {self.orphan_factor}")
        if not isinstance(self.question_mode, QuestionMode):
            object.__setattr__(self, "question_mode", QuestionMode(self.question_mode))

    @property
    def line_height_px(self) -> float:
        """Height of one rendered line in pixels."""
        return self.font_size_px * self.line_height_multiplier

    @property
    def orphan_threshold_chars(self) -> int:
        """Leftover character budget considered too small to start a block in."""
        return max(self.chars_per_line, int(self.chars_per_line * self.orphan_factor))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["question_mode"] = self.question_mode.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlowConfig:
        """Build a config from a settings mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
