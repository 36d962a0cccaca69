"""
Module: layout.diagnostics

Re-checks a produced layout against its source groups and reports
problems as FlowIssue records:

- passage/stem fragments reassemble to the source markup
- first/last-part flags sit on the first/last fragment only
- every question appears (stem parts or a question range), once
- choice ranges cover 0..N-1 in order without gaps or overlaps
- column totals within the container height (overflow, non-fatal)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..core.models.content import ContentGroup
from .html_splitter import parse_html_blocks, reassemble_html_parts
from .models import ChoiceRange, PassagePart, QuestionRange, QuestionStemPart

logger = logging.getLogger(__name__)

OVERFLOW_TOLERANCE_PX = 0.5


class IssueKind(str, Enum):
    PASSAGE_LOSS = "passage-loss"
    STEM_LOSS = "stem-loss"
    PART_FLAGS = "part-flags"
    MISSING_QUESTION = "missing-question"
    DUPLICATE_QUESTION = "duplicate-question"
    CHOICE_COVERAGE = "choice-coverage"
    OVERFLOW = "overflow"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FlowIssue:
    """A single problem found in a layout."""
    kind: IssueKind
    message: str
    group_id: Optional[str] = None
    question_id: Optional[str] = None
    page_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.group_id is not None:
            d["group_id"] = self.group_id
        if self.question_id is not None:
            d["question_id"] = self.question_id
        if self.page_index is not None:
            d["page_index"] = self.page_index
        return d


def check_flow(
    groups: Sequence[ContentGroup],
    pages: Sequence,
    container_height: Optional[float] = None,
) -> List[FlowIssue]:
    """
    Verify a layout produced for ``groups``.

    Args:
        groups: Source content groups
        pages: FlowPageDouble or FlowPageSingle pages
        container_height: If given, also report overflowing columns

    Returns:
        List of issues (empty when the layout is sound)
    """
    passage_parts: Dict[str, List[PassagePart]] = defaultdict(list)
    stem_parts: Dict[str, List[QuestionStemPart]] = defaultdict(list)
    choice_ranges: Dict[str, List[ChoiceRange]] = defaultdict(list)
    question_hits: Dict[str, int] = defaultdict(int)
    issues: List[FlowIssue] = []
    by_group = {g.id: g for g in groups}

    for page_index, page in enumerate(pages):
        for column, items in page.columns():
            for item in items:
                if isinstance(item, PassagePart):
                    passage_parts[item.group_id].append(item)
                elif isinstance(item, QuestionStemPart):
                    if item.is_first_part:
                        question_hits[item.question_id] += 1
                    stem_parts[item.question_id].append(item)
                elif isinstance(item, ChoiceRange):
                    choice_ranges[item.question_id].append(item)
                elif isinstance(item, QuestionRange):
                    group = by_group.get(item.group_id)
                    if group is None:
                        continue
                    for q in group.sub_questions[item.start_index:item.end_index + 1]:
                        question_hits[q.id] += 1

            if container_height is not None:
                used = sum(item.est_height for item in items)
                if used > container_height + OVERFLOW_TOLERANCE_PX:
                    issues.append(FlowIssue(
                        IssueKind.OVERFLOW,
                        f"Page {page_index + 1} {column} column uses {used:.0f}px "
                        f"of {container_height:.0f}px",
                        page_index=page_index,
                    ))

    for group in groups:
        if group.passage is not None:
            issues.extend(_check_fragments(
                group.passage.content,
                passage_parts.get(group.id, []),
                IssueKind.PASSAGE_LOSS,
                group_id=group.id,
            ))

        for question in group.sub_questions:
            hits = question_hits.get(question.id, 0)
            if hits == 0:
                issues.append(FlowIssue(
                    IssueKind.MISSING_QUESTION,
                    f"Question {question.id} is not placed",
                    group_id=group.id, question_id=question.id,
                ))
            elif hits > 1:
                issues.append(FlowIssue(
                    IssueKind.DUPLICATE_QUESTION,
                    f"Question {question.id} is placed {hits} times",
                    group_id=group.id, question_id=question.id,
                ))

            if question.id in stem_parts:
                issues.extend(_check_fragments(
                    question.content,
                    stem_parts[question.id],
                    IssueKind.STEM_LOSS,
                    group_id=group.id,
                    question_id=question.id,
                ))
                issues.extend(_check_choices(group, question, choice_ranges.get(question.id, [])))

    if issues:
        logger.debug(f"check_flow found {len(issues)} issues")
    return issues


def _check_fragments(
    source: str,
    parts: Sequence,
    loss_kind: IssueKind,
    group_id: str,
    question_id: Optional[str] = None,
) -> List[FlowIssue]:
    issues: List[FlowIssue] = []
    if not parts:
        issues.append(FlowIssue(loss_kind, "No fragments emitted", group_id, question_id))
        return issues

    parsed = parse_html_blocks(source)
    joined = reassemble_html_parts([p.content for p in parts], parsed.is_wrapped)
    if joined != parsed.inner_markup:
        issues.append(FlowIssue(
            loss_kind,
            f"Fragments reassemble to {len(joined)} chars, source has {len(parsed.inner_markup)}",
            group_id, question_id,
        ))

    firsts = [i for i, p in enumerate(parts) if p.is_first_part]
    lasts = [i for i, p in enumerate(parts) if p.is_last_part]
    if firsts != [0] or lasts != [len(parts) - 1]:
        issues.append(FlowIssue(
            IssueKind.PART_FLAGS,
            f"First-part flags at {firsts}, last-part flags at {lasts} of {len(parts)} parts",
            group_id, question_id,
        ))
    return issues


def _check_choices(group: ContentGroup, question, ranges: Sequence[ChoiceRange]) -> List[FlowIssue]:
    expected = 0
    for choice_range in ranges:
        if choice_range.start_index != expected or choice_range.end_index < choice_range.start_index:
            return [FlowIssue(
                IssueKind.CHOICE_COVERAGE,
                f"Choice range {choice_range.start_index}..{choice_range.end_index} "
                f"does not continue at {expected}",
                group.id, question.id,
            )]
        expected = choice_range.end_index + 1
    if expected != len(question.choices):
        return [FlowIssue(
            IssueKind.CHOICE_COVERAGE,
            f"Choice ranges cover {expected} of {len(question.choices)} choices",
            group.id, question.id,
        )]
    return []
