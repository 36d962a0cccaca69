"""
Module: layout.composer

Purpose:
    Single entry point for callers: run the paginator matching a layout
    type and package pages, forced-placement warnings and a question to
    page map into a FlowResult.

Key Functions:
    - compose_flow(): Main entry point for flow layout

Dependencies:
    - layout.paginator: flow_pages()
    - layout.models: FlowResult

Used By:
    - scripts/preview_layout.py
    - Rendering layers (external)
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.models.content import ContentGroup
from .config import FlowConfig, LayoutType
from .models import FlowResult, QuestionRange
from .paginator import flow_pages

logger = logging.getLogger(__name__)


def compose_flow(
    groups: Sequence[ContentGroup],
    container_height: float,
    config: Optional[FlowConfig] = None,
    layout: LayoutType = LayoutType.DOUBLE,
) -> FlowResult:
    """
    Lay out content groups onto pages.

    The call is a pure function of its arguments: callers re-invoke it
    whenever content, container height or configuration change.

    Args:
        groups: Content groups in document order
        container_height: Column height (double) or page height (single), px
        config: Estimator/paginator configuration
        layout: DOUBLE (two columns per page) or SINGLE

    Returns:
        FlowResult with pages, warnings and question→page map

    Example:
        >>> result = compose_flow(groups, 950)
        >>> result.page_count, result.question_page_map["q1"]
        (1, [0])
    """
    layout = LayoutType(layout)
    pages, warnings = flow_pages(groups, container_height, config, layout)
    result = FlowResult(
        layout=layout,
        pages=tuple(pages),
        warnings=list(warnings),
        question_page_map=_question_page_map(groups, pages),
    )
    if warnings:
        logger.info(f"Flow layout finished with {len(warnings)} forced placements")
    return result


def _question_page_map(
    groups: Sequence[ContentGroup],
    pages: Sequence,
) -> dict[str, list[int]]:
    by_group = {group.id: group for group in groups}
    page_map: dict[str, list[int]] = {}

    for page_index, page in enumerate(pages):
        for _, items in page.columns():
            for item in items:
                if isinstance(item, QuestionRange):
                    questions = by_group[item.group_id].sub_questions
                    ids = [q.id for q in questions[item.start_index:item.end_index + 1]]
                else:
                    ids = [getattr(item, "question_id", None)]
                for question_id in ids:
                    if question_id is not None:
                        _track_question(page_map, question_id, page_index)
    return page_map


def _track_question(
    question_page_map: dict[str, list[int]],
    question_id: str,
    page_index: int,
) -> None:
    """Track which pages a question appears on."""
    if question_id not in question_page_map:
        question_page_map[question_id] = []
    if page_index not in question_page_map[question_id]:
        question_page_map[question_id].append(page_index)
