"""
Module: layout.models

Purpose:
    Data models for flow layout output. Immutable dataclasses representing
    render items, pages and the overall layout result.

Key Classes:
    - PassagePart: Fragment of a group's passage HTML
    - QuestionStemPart: Fragment of a question stem HTML
    - ChoiceRange: Inclusive run of a question's choices
    - QuestionRange: Inclusive run of whole questions of a group
    - FlowPageDouble: Page with left/right columns
    - FlowPageSingle: Page with a single column
    - FlowResult: Pages plus warnings and question→page map

Dependencies:
    - dataclasses (std)

Used By:
    - layout.paginator: Creates items and pages
    - layout.composer: Creates FlowResult
    - layout.diagnostics / layout.visualizer: Inspect layouts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional, Union

from .config import LayoutType


class ItemKind(str, Enum):
    """Render item discriminator."""
    PASSAGE_PART = "passage-part"
    QUESTION_STEM_PART = "question-stem-part"
    CHOICE_RANGE = "choice-range"
    QUESTION_RANGE = "question-range"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PassagePart:
    """
    Fragment of a passage placed in one column.

    Attributes:
        group_id: Owning group
        content: HTML fragment (wrapper tag re-applied if the source had one)
        part_index: 0-based fragment index within the passage
        is_first_part: True only on the first fragment
        is_last_part: True only on the last fragment
        est_height: Height consumed from the column budget at pack time
        title: Heading, attached to the first fragment only
    """

    kind: ClassVar[ItemKind] = ItemKind.PASSAGE_PART

    group_id: str
    content: str
    part_index: int
    is_first_part: bool
    is_last_part: bool
    est_height: float
    title: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "group_id": self.group_id,
            "title": self.title,
            "content": self.content,
            "part_index": self.part_index,
            "is_first_part": self.is_first_part,
            "is_last_part": self.is_last_part,
            "est_height": self.est_height,
        }


@dataclass(frozen=True, slots=True)
class QuestionStemPart:
    """Fragment of a question stem placed in one column."""

    kind: ClassVar[ItemKind] = ItemKind.QUESTION_STEM_PART

    group_id: str
    question_id: str
    number: int
    content: str
    is_first_part: bool
    is_last_part: bool
    est_height: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "group_id": self.group_id,
            "question_id": self.question_id,
            "number": self.number,
            "content": self.content,
            "is_first_part": self.is_first_part,
            "is_last_part": self.is_last_part,
            "est_height": self.est_height,
        }


@dataclass(frozen=True, slots=True)
class ChoiceRange:
    """
    Inclusive run of choices of one question.

    Example:
        >>> ChoiceRange("g1", "q1", start_index=0, end_index=3, est_height=120).count
        4
    """

    kind: ClassVar[ItemKind] = ItemKind.CHOICE_RANGE

    group_id: str
    question_id: str
    start_index: int
    end_index: int
    est_height: float

    @property
    def count(self) -> int:
        return self.end_index - self.start_index + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "group_id": self.group_id,
            "question_id": self.question_id,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "est_height": self.est_height,
        }


@dataclass(frozen=True, slots=True)
class QuestionRange:
    """Inclusive run of whole questions (indices into the group's sub_questions)."""

    kind: ClassVar[ItemKind] = ItemKind.QUESTION_RANGE

    group_id: str
    start_index: int
    end_index: int
    est_height: float

    @property
    def count(self) -> int:
        return self.end_index - self.start_index + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "group_id": self.group_id,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "est_height": self.est_height,
        }


RenderItem = Union[PassagePart, QuestionStemPart, ChoiceRange, QuestionRange]


def _column_height(items: tuple[RenderItem, ...]) -> float:
    return sum(item.est_height for item in items)


@dataclass(frozen=True)
class FlowPageDouble:
    """
    Page with two independent columns.

    Attributes:
        left: Items in the left column, in source order
        right: Items in the right column, in source order
    """

    left: tuple[RenderItem, ...] = ()
    right: tuple[RenderItem, ...] = ()

    @property
    def items(self) -> tuple[RenderItem, ...]:
        """All items in reading order (left column first)."""
        return self.left + self.right

    @property
    def is_empty(self) -> bool:
        return not self.left and not self.right

    @property
    def left_height(self) -> float:
        return _column_height(self.left)

    @property
    def right_height(self) -> float:
        return _column_height(self.right)

    def columns(self) -> Iterator[tuple[str, tuple[RenderItem, ...]]]:
        yield "left", self.left
        yield "right", self.right

    def to_dict(self) -> dict[str, Any]:
        return {
            "left": [item.to_dict() for item in self.left],
            "right": [item.to_dict() for item in self.right],
        }


@dataclass(frozen=True)
class FlowPageSingle:
    """Page with a single column."""

    items: tuple[RenderItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def height_used(self) -> float:
        return _column_height(self.items)

    def columns(self) -> Iterator[tuple[str, tuple[RenderItem, ...]]]:
        yield "main", self.items

    def to_dict(self) -> dict[str, Any]:
        return {"items": [item.to_dict() for item in self.items]}


FlowPage = Union[FlowPageDouble, FlowPageSingle]


@dataclass(frozen=True)
class FlowResult:
    """
    Final flow layout output.

    Attributes:
        layout: Layout type the pages were produced for
        pages: Pages in document order
        warnings: Forced placements and other non-fatal conditions
        question_page_map: question_id -> 0-based page indices it appears on

    Example:
        >>> result = FlowResult(LayoutType.SINGLE, pages=(page1, page2))
        >>> result.page_count
        2
    """

    layout: LayoutType
    pages: tuple[FlowPage, ...]
    warnings: list[str] = field(default_factory=list)
    question_page_map: dict[str, list[int]] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def item_count(self) -> int:
        return sum(len(items) for _, _, items in self._iter_columns())

    def _iter_columns(self) -> Iterator[tuple[int, str, tuple[RenderItem, ...]]]:
        for index, page in enumerate(self.pages):
            for column, items in page.columns():
                yield index, column, items

    def iter_items(self) -> Iterator[tuple[int, str, RenderItem]]:
        """Yield (page_index, column, item) in emission order."""
        for index, column, items in self._iter_columns():
            for item in items:
                yield index, column, item

    def to_dict(self) -> dict[str, Any]:
        return {
            "layout": self.layout.value,
            "pages": [page.to_dict() for page in self.pages],
            "warnings": list(self.warnings),
            "question_page_map": dict(self.question_page_map),
        }
