import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import exam_flow
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from exam_flow.core.models import Choice, ContentGroup, Passage, QuestionType, SubQuestion


# Common test fixtures
@pytest.fixture
def mc_question_factory():
    """Factory for multiple-choice questions with short choices."""
    def _create(
        question_id: str = "q1",
        number: int = 1,
        content: str = "<p>Which is correct?</p>",
        choice_count: int = 4,
        choice_text: str = "Option",
        height=None,
    ) -> SubQuestion:
        choices = tuple(
            Choice(id=f"{question_id}-c{i + 1}", number=i + 1, content=f"{choice_text} {i + 1}")
            for i in range(choice_count)
        )
        return SubQuestion(
            id=question_id,
            number=number,
            type=QuestionType.MULTIPLE_CHOICE,
            content=content,
            choices=choices,
            height=height,
        )
    return _create


@pytest.fixture
def group_factory():
    """Factory for content groups with an optional passage."""
    def _create(
        group_id: str = "g1",
        questions=(),
        passage_html=None,
        title=None,
        passage_title=None,
    ) -> ContentGroup:
        passage = None
        if passage_html is not None:
            passage = Passage(id=f"{group_id}-p", content=passage_html, title=passage_title)
        return ContentGroup(
            id=group_id,
            sub_questions=tuple(questions),
            title=title,
            passage=passage,
        )
    return _create


@pytest.fixture
def long_passage_html():
    """Passage of 60 paragraphs of 40 characters (two lines each at 20 cpl)."""
    return "".join(f"<p>{'Sentence %02d ' % i:<40}</p>" for i in range(60))
