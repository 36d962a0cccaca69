"""
Module: content

Purpose:
    Provides the read-only content models supplied to a pagination run:
    ContentGroup (optional passage + ordered sub-questions), SubQuestion,
    Passage and Choice. All models are frozen; the layout engine never
    mutates them.

Key Classes:
    - QuestionType: Kind of sub-question (drives answer-area estimates)
    - Choice: Single multiple-choice option
    - Passage: Instructional passage HTML shared by a group
    - SubQuestion: One numbered question with HTML stem
    - ContentGroup: Top-level unit of an exam paper

Key Functions:
    - choice_symbol(): Circled-digit glyph for a choice number
    - *.to_dict() / *.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - layout.estimator: Height estimates
    - layout.paginator: Flow layout
    - core.utils.serialization: JSON loading
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


CHOICE_SYMBOLS = ("①", "②", "③", "④", "⑤", "⑥", "⑦", "⑧", "⑨", "⑩")
FALLBACK_CHOICE_SYMBOL = "⑪"


def choice_symbol(number: int) -> str:
    """
    Return the circled-digit glyph for a 1-based choice number.

    Numbers past the tenth symbol share a single fallback glyph.

    Example:
        >>> choice_symbol(3)
        '③'
        >>> choice_symbol(12)
        '⑪'
    """
    if 1 <= number <= len(CHOICE_SYMBOLS):
        return CHOICE_SYMBOLS[number - 1]
    return FALLBACK_CHOICE_SYMBOL


class QuestionType(str, Enum):
    """Type of sub-question."""
    MULTIPLE_CHOICE = "multiple-choice"
    SHORT_ANSWER = "short-answer"
    ESSAY = "essay"
    FILL_IN_BLANK = "fill-in-blank"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Choice:
    """
    Multiple-choice option (immutable).

    Attributes:
        id: Stable identifier
        number: 1-based display number (rendered as a circled digit)
        content: Option HTML
    """

    id: str
    number: int
    content: str = ""

    def __post_init__(self) -> None:
        """Validate choice on construction."""
        if not self.id:
            raise ValueError("Choice id must be non-empty")
        if self.number < 1:
            raise ValueError(f"Choice number must be >= 1: {self.number}")

    @property
    def symbol(self) -> str:
        """Circled-digit glyph for this choice."""
        return choice_symbol(self.number)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "number": self.number, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Choice:
        return cls(
            id=str(data["id"]),
            number=int(data["number"]),
            content=data.get("content") or "",
        )


@dataclass(frozen=True, slots=True)
class Passage:
    """
    Instructional passage shared by the questions of a group.

    Attributes:
        id: Stable identifier
        content: Passage HTML (may be empty)
        title: Optional passage heading
    """

    id: str
    content: str = ""
    title: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "content": self.content}
        if self.title is not None:
            data["title"] = self.title
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Passage:
        return cls(
            id=str(data.get("id") or ""),
            content=data.get("content") or "",
            title=data.get("title"),
        )


@dataclass(frozen=True, slots=True)
class SubQuestion:
    """
    Single numbered question (immutable).

    Attributes:
        id: Stable identifier
        number: Display number on the paper
        type: QuestionType
        content: Stem HTML
        choices: Ordered options (multiple-choice only)
        height: Manual height override in pixels. When set, estimators use
            it verbatim instead of recomputing from content.

    Invariants:
        - choices is empty unless type is MULTIPLE_CHOICE
        - height, when present, is non-negative
    """

    id: str
    number: int
    type: QuestionType
    content: str = ""
    choices: tuple[Choice, ...] = ()
    height: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("SubQuestion id must be non-empty")
        if not isinstance(self.type, QuestionType):
            # Accept raw strings ("essay") from callers
            object.__setattr__(self, "type", QuestionType(self.type))
        if self.choices and self.type is not QuestionType.MULTIPLE_CHOICE:
            raise ValueError(
                f"Question {self.id!r} of type {self.type} cannot have choices"
            )
        if self.height is not None and self.height < 0:
            raise ValueError(f"height override must be non-negative: {self.height}")

    @property
    def is_multiple_choice(self) -> bool:
        return self.type is QuestionType.MULTIPLE_CHOICE

    @property
    def has_height_override(self) -> bool:
        """True when a user has manually resized this question."""
        return self.height is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "number": self.number,
            "type": self.type.value,
            "content": self.content,
        }
        if self.choices:
            data["choices"] = [choice.to_dict() for choice in self.choices]
        if self.height is not None:
            data["height"] = self.height
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubQuestion:
        return cls(
            id=str(data["id"]),
            number=int(data["number"]),
            type=QuestionType(data["type"]),
            content=data.get("content") or "",
            choices=tuple(Choice.from_dict(c) for c in data.get("choices") or []),
            height=data.get("height"),
        )


@dataclass(frozen=True, slots=True)
class ContentGroup:
    """
    Top-level content unit: optional passage followed by its questions.

    Attributes:
        id: Stable identifier
        sub_questions: Ordered questions belonging to the group
        title: Optional group heading (e.g. "[1-3] Read the passage...")
        passage: Optional shared passage

    Example:
        >>> group = ContentGroup(
        ...     id="group-1",
        ...     sub_questions=(SubQuestion("q1", 1, QuestionType.ESSAY, "Discuss."),),
        ... )
        >>> group.question_ids
        ('q1',)
    """

    id: str
    sub_questions: tuple[SubQuestion, ...] = ()
    title: Optional[str] = None
    passage: Optional[Passage] = None

    def __post_init__(self) -> None:
        """Validate group on construction."""
        if not self.id:
            raise ValueError("ContentGroup id must be non-empty")
        ids = [q.id for q in self.sub_questions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate sub-question ids in group {self.id!r}")

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(q.id for q in self.sub_questions)

    def get_question(self, question_id: str) -> Optional[SubQuestion]:
        """Find a sub-question by id."""
        for question in self.sub_questions:
            if question.id == question_id:
                return question
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "sub_questions": [q.to_dict() for q in self.sub_questions],
        }
        if self.title is not None:
            data["title"] = self.title
        if self.passage is not None:
            data["passage"] = self.passage.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentGroup:
        passage = data.get("passage")
        return cls(
            id=str(data["id"]),
            sub_questions=tuple(
                SubQuestion.from_dict(q) for q in data.get("sub_questions") or []
            ),
            title=data.get("title"),
            passage=Passage.from_dict(passage) if passage else None,
        )
