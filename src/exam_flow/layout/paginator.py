"""
Module: layout.paginator

Purpose:
    Flow content groups into fixed-height columns/pages, producing a typed
    stream of render items. Greedy: every unit goes into the active column
    while budget remains, otherwise the column advances.

Key Functions:
    - paginate_double(): Two columns per page (left, right)
    - paginate_single(): One column per page
    - flow_pages(): Shared driver, also returns forced-placement warnings

Algorithm:
    Per group, in document order:
    1. Passage: pull fragments sized to the active column's remaining
       budget while more than ``passage_min_lines`` remain; advance when
       the budget runs low and HTML remains, or when the next block would
       not fit. Every item is charged its height plus ``item_gap_px``, so
       the gap is reserved before a fragment or choice range is sized.
    2. Each question:
       - fragmented (multiple-choice, no height override): stem fragments
         like the passage, then choices packed greedily into maximal
         ranges that fit the remaining budget
       - whole (override or non-multiple-choice, or WHOLE mode): placed by
         estimate_question_height(); consecutive whole questions of a group
         in the same column merge into one question range
    3. A unit taller than a whole column is placed alone, consumes the full
       column budget, and the column advances.

    Every loop iteration either places an item or advances away from a
    non-empty column, so a run always terminates.

Dependencies:
    - layout.estimator: Heights
    - layout.html_splitter: HtmlPartCursor
    - layout.models: Render items and pages

Used By:
    - layout.composer: compose_flow()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Sequence, TypeVar

from ..core.models.content import ContentGroup, SubQuestion
from .config import FlowConfig, LayoutType, QuestionMode
from .estimator import (
    estimate_choice_height,
    estimate_html_height,
    estimate_question_height,
    html_to_plain_with_breaks,
    wrapped_line_count,
)
from .html_splitter import HtmlPartCursor
from .models import (
    ChoiceRange,
    FlowPageDouble,
    FlowPageSingle,
    PassagePart,
    QuestionRange,
    QuestionStemPart,
    RenderItem,
)

logger = logging.getLogger(__name__)

PageT = TypeVar("PageT", FlowPageDouble, FlowPageSingle)


# ─────────────────────────────────────────────────────────────────────────────
# Column state
# ─────────────────────────────────────────────────────────────────────────────

class _FlowState(ABC, Generic[PageT]):
    """Mutable accumulator for a single pagination run."""

    def __init__(self, container_height: float):
        if container_height <= 0:
            raise ValueError(f"container height must be positive: {container_height}")
        self.container_height = container_height
        self.pages: List[PageT] = []
        self.warnings: List[str] = []

    @property
    @abstractmethod
    def remaining(self) -> float:
        """Budget left in the active column."""

    @property
    def is_fresh(self) -> bool:
        """True when nothing has been placed in the active column."""
        return not self._active()

    @abstractmethod
    def _active(self) -> List[RenderItem]:
        """Items of the active column."""

    @abstractmethod
    def _consume(self, height: float) -> None:
        """Charge height against the active column (negative refunds)."""

    @abstractmethod
    def advance(self) -> None:
        """Move to the next column, flushing a page when needed."""

    @abstractmethod
    def finish(self) -> List[PageT]:
        """Flush any partial page and return all pages."""

    def push(self, item: RenderItem) -> None:
        self._active().append(item)
        self._consume(item.est_height)

    def pop(self) -> Optional[RenderItem]:
        """Remove the last item of the active column, restoring its budget."""
        items = self._active()
        if not items:
            return None
        item = items.pop()
        self._consume(-item.est_height)
        return item

    def last(self) -> Optional[RenderItem]:
        items = self._active()
        return items[-1] if items else None

    def warn(self, reason: str) -> None:
        self.warnings.append(reason)
        logger.warning(reason)

    def force_place(self, item: RenderItem, reason: str) -> None:
        """Place an oversized unit alone in a column, then move on."""
        if not self.is_fresh:
            self.advance()
        self.push(item)
        self.warn(reason)
        self.advance()


class _DoubleColumnState(_FlowState[FlowPageDouble]):
    """Two budgets per page; advancing from the right column starts a page."""

    def __init__(self, container_height: float):
        super().__init__(container_height)
        self.side = "left"
        self._columns: dict[str, List[RenderItem]] = {"left": [], "right": []}
        self._remaining = {"left": container_height, "right": container_height}

    @property
    def remaining(self) -> float:
        return self._remaining[self.side]

    def _active(self) -> List[RenderItem]:
        return self._columns[self.side]

    def _consume(self, height: float) -> None:
        self._remaining[self.side] -= height

    def _flush(self) -> None:
        self.pages.append(FlowPageDouble(
            left=tuple(self._columns["left"]),
            right=tuple(self._columns["right"]),
        ))
        self._columns = {"left": [], "right": []}
        self._remaining = {"left": self.container_height, "right": self.container_height}

    def advance(self) -> None:
        if self.side == "left":
            self.side = "right"
        else:
            self._flush()
            self.side = "left"
        logger.debug(f"Advance to {self.side} column of page {len(self.pages) + 1}")

    def finish(self) -> List[FlowPageDouble]:
        if self._columns["left"] or self._columns["right"]:
            self._flush()
        return self.pages


class _SinglePageState(_FlowState[FlowPageSingle]):
    """One budget; every advance starts a new page."""

    def __init__(self, container_height: float):
        super().__init__(container_height)
        self._items: List[RenderItem] = []
        self._remaining = container_height

    @property
    def remaining(self) -> float:
        return self._remaining

    def _active(self) -> List[RenderItem]:
        return self._items

    def _consume(self, height: float) -> None:
        self._remaining -= height

    def advance(self) -> None:
        self.pages.append(FlowPageSingle(items=tuple(self._items)))
        self._items = []
        self._remaining = self.container_height
        logger.debug(f"Advance to page {len(self.pages) + 1}")

    def finish(self) -> List[FlowPageSingle]:
        if self._items:
            self.advance()
        return self.pages


# ─────────────────────────────────────────────────────────────────────────────
# Placement
# ─────────────────────────────────────────────────────────────────────────────

def _part_height(fragment: str, state: _FlowState, config: FlowConfig, label: str) -> float:
    h = state.container_height
    lines = wrapped_line_count(html_to_plain_with_breaks(fragment), config.chars_per_line)
    if lines * config.line_height_px > h:
        state.warn(f"{label} block needs {lines} lines, column is {h:.0f}px")
    return min(estimate_html_height(fragment, h, config) + config.item_gap_px, h)


def _next_block_fits(cursor: HtmlPartCursor, state: _FlowState, config: FlowConfig) -> bool:
    needed = cursor.peek_lines() * config.line_height_px + config.item_gap_px
    return state.is_fresh or needed <= state.remaining


def _flow_passage(group: ContentGroup, state: _FlowState, config: FlowConfig) -> None:
    passage = group.passage
    cursor = HtmlPartCursor(passage.content, config)
    min_budget = config.line_height_px * config.passage_min_lines
    title = passage.title or group.title
    part_index = 0

    while part_index == 0 or not cursor.exhausted:
        if state.remaining <= min_budget and not state.is_fresh:
            state.advance()
            continue
        if not _next_block_fits(cursor, state, config):
            state.advance()
            continue
        # The item gap is charged with the part, so it comes off the budget
        fragment = cursor.take(state.remaining - config.item_gap_px)
        state.push(PassagePart(
            group_id=group.id,
            content=fragment,
            part_index=part_index,
            is_first_part=part_index == 0,
            is_last_part=cursor.exhausted,
            est_height=_part_height(fragment, state, config, f"Passage of {group.id}"),
            title=title if part_index == 0 else None,
        ))
        part_index += 1


def _flow_stem(
    group: ContentGroup,
    question: SubQuestion,
    state: _FlowState,
    config: FlowConfig,
) -> None:
    cursor = HtmlPartCursor(question.content, config)
    start_budget = config.line_height_px * config.start_min_lines
    continue_budget = config.line_height_px * config.continue_min_lines
    part_index = 0

    while part_index == 0 or not cursor.exhausted:
        if state.remaining < start_budget and not state.is_fresh:
            state.advance()
            continue
        if not _next_block_fits(cursor, state, config):
            state.advance()
            continue
        fragment = cursor.take(state.remaining - config.item_gap_px)
        state.push(QuestionStemPart(
            group_id=group.id,
            question_id=question.id,
            number=question.number,
            content=fragment,
            is_first_part=part_index == 0,
            is_last_part=cursor.exhausted,
            est_height=_part_height(fragment, state, config, f"Stem of {question.id}"),
        ))
        part_index += 1
        if not cursor.exhausted and state.remaining <= continue_budget:
            state.advance()


def _flow_choices(
    group: ContentGroup,
    question: SubQuestion,
    state: _FlowState,
    config: FlowConfig,
) -> None:
    heights = [estimate_choice_height(c.content, config) for c in question.choices]
    h = state.container_height
    start_budget = config.line_height_px * config.start_min_lines
    continue_budget = config.line_height_px * config.continue_min_lines
    index = 0

    while index < len(heights):
        if heights[index] > h:
            state.force_place(
                ChoiceRange(group.id, question.id, index, index, est_height=h),
                f"Choice {index + 1} of question {question.id} needs "
                f"{heights[index]:.0f}px, column is {h:.0f}px",
            )
            index += 1
            continue

        available = state.remaining
        if available < start_budget and not state.is_fresh:
            state.advance()
            continue

        budget = available - config.item_gap_px
        end = index
        total = heights[index]
        if total > budget and not state.is_fresh:
            state.advance()
            continue
        while end + 1 < len(heights) and total + heights[end + 1] <= budget:
            end += 1
            total += heights[end]

        state.push(ChoiceRange(
            group_id=group.id,
            question_id=question.id,
            start_index=index,
            end_index=end,
            est_height=min(total + config.item_gap_px, h),
        ))
        index = end + 1
        if index < len(heights) and state.remaining <= continue_budget:
            state.advance()


def _place_whole(
    group: ContentGroup,
    index: int,
    question: SubQuestion,
    state: _FlowState,
    config: FlowConfig,
) -> None:
    height = estimate_question_height(question, config)
    h = state.container_height

    if height > h:
        source = "manual height" if question.has_height_override else "estimated height"
        state.force_place(
            QuestionRange(group.id, index, index, est_height=h),
            f"Question {question.id} {source} {height:.0f}px exceeds column {h:.0f}px",
        )
        return

    if height > state.remaining and not state.is_fresh:
        state.advance()

    last = state.last()
    if (
        isinstance(last, QuestionRange)
        and last.group_id == group.id
        and last.end_index == index - 1
    ):
        state.pop()
        state.push(QuestionRange(
            group_id=group.id,
            start_index=last.start_index,
            end_index=index,
            est_height=last.est_height + height,
        ))
    else:
        state.push(QuestionRange(group.id, index, index, est_height=height))


def _is_placed_whole(question: SubQuestion, config: FlowConfig) -> bool:
    if config.question_mode is QuestionMode.WHOLE:
        return True
    return question.has_height_override or not question.is_multiple_choice


def _flow_groups(groups: Sequence[ContentGroup], state: _FlowState, config: FlowConfig) -> None:
    for group in groups:
        if group.passage is not None:
            _flow_passage(group, state, config)
        for index, question in enumerate(group.sub_questions):
            if _is_placed_whole(question, config):
                _place_whole(group, index, question, state, config)
            else:
                _flow_stem(group, question, state, config)
                _flow_choices(group, question, state, config)


# ─────────────────────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────────────────────

def flow_pages(
    groups: Sequence[ContentGroup],
    container_height: float,
    config: Optional[FlowConfig] = None,
    layout: LayoutType = LayoutType.DOUBLE,
) -> tuple[list, list[str]]:
    """
    Run the paginator for a layout type.

    Args:
        groups: Content groups in document order (not modified)
        container_height: Column height (double) or page height (single)
        config: Estimator/paginator configuration
        layout: DOUBLE or SINGLE

    Returns:
        (pages, warnings) where warnings describe forced placements

    Raises:
        ValueError: If container_height is not positive
    """
    config = config or FlowConfig()
    layout = LayoutType(layout)
    if layout is LayoutType.DOUBLE:
        state: _FlowState = _DoubleColumnState(container_height)
    else:
        state = _SinglePageState(container_height)

    _flow_groups(groups, state, config)
    pages = state.finish()

    logger.info(
        f"Paginated {len(groups)} groups into {len(pages)} {layout.value}-column pages"
    )
    return pages, state.warnings


def paginate_double(
    groups: Sequence[ContentGroup],
    column_height: float,
    config: Optional[FlowConfig] = None,
) -> list[FlowPageDouble]:
    """
    Flow groups into pages of two columns.

    Both column budgets reset to ``column_height`` on every page. Items in
    each column keep source order; pages are in document order.

    Example:
        >>> pages = paginate_double(groups, column_height=950)
        >>> [item.kind.value for item in pages[0].left]
        ['passage-part', 'question-stem-part', 'choice-range']
    """
    pages, _ = flow_pages(groups, column_height, config, LayoutType.DOUBLE)
    return pages


def paginate_single(
    groups: Sequence[ContentGroup],
    page_height: float,
    config: Optional[FlowConfig] = None,
) -> list[FlowPageSingle]:
    """Flow groups into single-column pages of ``page_height``."""
    pages, _ = flow_pages(groups, page_height, config, LayoutType.SINGLE)
    return pages
