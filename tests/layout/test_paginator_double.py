"""
Unit tests for the two-column paginator.

Heights below use the default metrics: one line is 22.4px, a short
choice is 28.4px, every emitted item adds an 8px gap.
"""

import pytest

from exam_flow.core.models import QuestionType, SubQuestion
from exam_flow.layout import (
    ChoiceRange,
    FlowConfig,
    FlowPageDouble,
    PassagePart,
    QuestionMode,
    QuestionRange,
    QuestionStemPart,
    check_flow,
    flow_pages,
    paginate_double,
)
from exam_flow.layout.diagnostics import IssueKind


def _passage_parts(pages):
    return [
        (page_index, column, item)
        for page_index, page in enumerate(pages)
        for column, items in page.columns()
        for item in items
        if isinstance(item, PassagePart)
    ]


class TestBasicPlacement:
    def test_when_no_groups_then_no_pages(self):
        assert paginate_double([], 950) == []

    @pytest.mark.parametrize("height", [0, -10])
    def test_when_height_not_positive_then_raises(self, group_factory, height):
        with pytest.raises(ValueError, match="container height"):
            paginate_double([group_factory()], height)

    def test_single_short_answer_is_one_question_range(self, group_factory):
        # Arrange: override 42 + 8 gap = 50px estimate
        question = SubQuestion("q1", 1, QuestionType.SHORT_ANSWER, "Name it.", height=42)
        groups = [group_factory(questions=[question])]

        # Act
        pages = paginate_double(groups, 950)

        # Assert
        assert len(pages) == 1
        assert pages[0].left == (QuestionRange("g1", 0, 0, est_height=50),)
        assert pages[0].right == ()

    def test_returns_double_pages(self, group_factory, mc_question_factory):
        pages = paginate_double([group_factory(questions=[mc_question_factory()])], 950)
        assert all(isinstance(page, FlowPageDouble) for page in pages)

    def test_mc_question_becomes_stem_then_choices(self, group_factory, mc_question_factory):
        pages = paginate_double([group_factory(questions=[mc_question_factory()])], 950)

        stem, choices = pages[0].left
        assert isinstance(stem, QuestionStemPart)
        assert stem.is_first_part and stem.is_last_part
        assert stem.number == 1
        assert choices == ChoiceRange("g1", "q1", 0, 3, est_height=pytest.approx(4 * 28.4 + 8))

    def test_groups_keep_document_order(self, group_factory):
        groups = [
            group_factory(f"g{i}", questions=[
                SubQuestion(f"q{i}", i, QuestionType.ESSAY, height=100),
            ])
            for i in range(1, 4)
        ]

        pages = paginate_double(groups, 950)

        assert [item.group_id for item in pages[0].items] == ["g1", "g2", "g3"]


class TestPassageFragmentation:
    def test_long_passage_flows_across_columns_and_pages(self, group_factory, long_passage_html):
        # Arrange
        groups = [group_factory(passage_html=long_passage_html)]

        # Act
        pages = paginate_double(groups, 950)
        parts = _passage_parts(pages)

        # Assert
        assert len(parts) >= 3
        assert parts[0][:2] == (0, "left")
        assert (0, "right") in {p[:2] for p in parts}
        assert len(pages) >= 2
        assert [p[2].part_index for p in parts] == list(range(len(parts)))

    def test_first_and_last_flags(self, group_factory, long_passage_html):
        pages = paginate_double([group_factory(passage_html=long_passage_html)], 950)
        items = [p[2] for p in _passage_parts(pages)]

        assert [i.is_first_part for i in items] == [True] + [False] * (len(items) - 1)
        assert [i.is_last_part for i in items] == [False] * (len(items) - 1) + [True]

    def test_fragments_reassemble_losslessly(self, group_factory, long_passage_html):
        groups = [group_factory(passage_html=long_passage_html)]
        pages = paginate_double(groups, 950)

        issues = check_flow(groups, pages, container_height=950)
        assert issues == []

    def test_title_is_attached_to_first_part_only(self, group_factory, long_passage_html):
        groups = [group_factory(passage_html=long_passage_html, title="[1-3] Read")]
        items = [p[2] for p in _passage_parts(paginate_double(groups, 950))]

        assert items[0].title == "[1-3] Read"
        assert all(item.title is None for item in items[1:])

    def test_passage_title_wins_over_group_title(self, group_factory):
        groups = [group_factory(passage_html="<p>Text</p>", title="Group", passage_title="Passage")]
        (part,) = paginate_double(groups, 950)[0].left
        assert part.title == "Passage"

    def test_empty_passage_emits_one_empty_part(self, group_factory):
        (part,) = paginate_double([group_factory(passage_html="")], 950)[0].left

        assert part.content == ""
        assert part.is_first_part and part.is_last_part

    def test_column_items_never_repeat_passage_parts(self, group_factory, long_passage_html):
        pages = paginate_double([group_factory(passage_html=long_passage_html)], 950)
        contents = [p[2].content for p in _passage_parts(pages)]
        assert len(contents) == len(set(contents))


class TestChoiceRanges:
    def test_choices_split_across_columns(self, group_factory, mc_question_factory):
        # Arrange: stem takes 52.8px of 240px; six 28.4px choices plus the 8px
        # gap fit in the 187.2px left, a seventh does not
        groups = [group_factory(questions=[mc_question_factory(choice_count=10)])]

        # Act
        pages = paginate_double(groups, 240)

        # Assert
        assert len(pages) == 1
        stem, first = pages[0].left
        (second,) = pages[0].right
        assert isinstance(stem, QuestionStemPart)
        assert (first.start_index, first.end_index) == (0, 5)
        assert (second.start_index, second.end_index) == (6, 9)

    def test_choice_ranges_cover_all_choices(self, group_factory, mc_question_factory):
        groups = [group_factory(questions=[mc_question_factory(choice_count=10, choice_text="x" * 50)])]
        pages = paginate_double(groups, 200)

        ranges = [i for page in pages for i in page.items if isinstance(i, ChoiceRange)]
        covered = [n for r in ranges for n in range(r.start_index, r.end_index + 1)]
        assert covered == list(range(10))

    def test_oversized_choice_is_forced_alone(self, group_factory, mc_question_factory):
        # 2000 chars is 100 lines, far more than a 300px column
        groups = [group_factory(questions=[mc_question_factory(choice_count=2, choice_text="x" * 2000)])]

        pages, warnings = flow_pages(groups, 300)

        ranges = [i for page in pages for i in page.items if isinstance(i, ChoiceRange)]
        assert [r.count for r in ranges] == [1, 1]
        assert all(r.est_height == 300 for r in ranges)
        assert len(warnings) == 2


class TestColumnBudget:
    def test_passage_after_tall_question_stays_within_column(self, group_factory):
        # Arrange: 650px whole question leaves 300px for the passage
        groups = [
            group_factory("g1", questions=[SubQuestion("q1", 1, QuestionType.ESSAY, height=642)]),
            group_factory("g2", passage_html="<p>x</p>" * 30),
        ]

        # Act
        pages = paginate_double(groups, 950)

        # Assert
        assert check_flow(groups, pages, container_height=950) == []
        first = pages[0].left[1]
        assert isinstance(first, PassagePart) and first.content.count("<p>") == 10

    def test_many_short_mc_questions_stay_within_column(self, group_factory, mc_question_factory):
        questions = [
            mc_question_factory(f"q{i}", i, content=f"<p>What is the answer to question {i}?</p>")
            for i in range(1, 30)
        ]
        groups = [group_factory(questions=questions)]

        pages = paginate_double(groups, 950)

        assert check_flow(groups, pages, container_height=950) == []

    @pytest.mark.parametrize("height", [180, 237, 500, 950])
    def test_realistic_paper_never_overflows(self, group_factory, mc_question_factory, long_passage_html, height):
        groups = [
            group_factory("g1", passage_html=long_passage_html, questions=[
                mc_question_factory("q1", 1, content="<p>Which statement best matches the passage?</p>"),
                mc_question_factory("q2", 2, choice_count=5, choice_text="A longer option " * 3),
            ]),
            group_factory("g2", passage_html="<div><p>Short note.</p>" + "line<br>" * 25 + "</div>", questions=[
                SubQuestion("q3", 3, QuestionType.SHORT_ANSWER, "<p>Name one cause.</p>"),
                mc_question_factory("q4", 4, choice_count=8),
            ]),
        ]

        pages, warnings = flow_pages(groups, height)

        assert warnings == []
        assert check_flow(groups, pages, container_height=height) == []


class TestWholeQuestions:
    def test_height_override_is_used_verbatim(self, group_factory):
        question = SubQuestion("q1", 1, QuestionType.ESSAY, "x" * 5000, height=800)

        (item,) = paginate_double([group_factory(questions=[question])], 950)[0].left

        assert item == QuestionRange("g1", 0, 0, est_height=808)

    def test_override_on_mc_places_question_whole(self, group_factory, mc_question_factory):
        groups = [group_factory(questions=[mc_question_factory(height=120)])]
        (item,) = paginate_double(groups, 950)[0].left
        assert item == QuestionRange("g1", 0, 0, est_height=128)

    def test_consecutive_whole_questions_merge(self, group_factory):
        questions = [SubQuestion(f"q{i}", i, QuestionType.ESSAY, height=100) for i in range(1, 4)]

        (item,) = paginate_double([group_factory(questions=questions)], 950)[0].left

        assert item == QuestionRange("g1", 0, 2, est_height=324)

    def test_merge_stops_at_column_boundary(self, group_factory):
        questions = [SubQuestion(f"q{i}", i, QuestionType.ESSAY, height=400) for i in range(1, 4)]

        page = paginate_double([group_factory(questions=questions)], 950)[0]

        assert page.left == (QuestionRange("g1", 0, 1, est_height=816),)
        assert page.right == (QuestionRange("g1", 2, 2, est_height=408),)

    def test_mc_between_whole_questions_breaks_range(self, group_factory, mc_question_factory):
        questions = [
            SubQuestion("q1", 1, QuestionType.ESSAY, height=100),
            mc_question_factory("q2", 2),
            SubQuestion("q3", 3, QuestionType.ESSAY, height=100),
        ]
        items = paginate_double([group_factory(questions=questions)], 950)[0].left

        ranges = [i for i in items if isinstance(i, QuestionRange)]
        assert [(r.start_index, r.end_index) for r in ranges] == [(0, 0), (2, 2)]

    def test_oversized_override_is_forced_with_warning(self, group_factory):
        questions = [
            SubQuestion("q1", 1, QuestionType.ESSAY, height=100),
            SubQuestion("q2", 2, QuestionType.ESSAY, height=2000),
            SubQuestion("q3", 3, QuestionType.ESSAY, height=100),
        ]

        pages, warnings = flow_pages([group_factory(questions=questions)], 950)

        assert pages[0].left == (QuestionRange("g1", 0, 0, est_height=108),)
        assert pages[0].right == (QuestionRange("g1", 1, 1, est_height=950),)
        assert pages[1].left == (QuestionRange("g1", 2, 2, est_height=108),)
        assert len(warnings) == 1
        assert "q2" in warnings[0]

    def test_whole_mode_places_mc_as_range(self, group_factory, mc_question_factory):
        config = FlowConfig(question_mode=QuestionMode.WHOLE)
        groups = [group_factory(questions=[mc_question_factory(), mc_question_factory("q2", 2)])]

        (item,) = paginate_double(groups, 950, config)[0].left

        assert isinstance(item, QuestionRange)
        assert (item.start_index, item.end_index) == (0, 1)


class TestTermination:
    def test_tiny_column_still_places_everything(self, group_factory, mc_question_factory, long_passage_html):
        groups = [
            group_factory(
                passage_html=long_passage_html,
                questions=[
                    mc_question_factory(),
                    SubQuestion("q2", 2, QuestionType.ESSAY, "Discuss."),
                ],
            )
        ]

        pages, warnings = flow_pages(groups, 10)

        assert pages
        assert warnings
        issues = [i for i in check_flow(groups, pages) if i.kind is not IssueKind.OVERFLOW]
        assert issues == []

    def test_input_groups_are_not_modified(self, group_factory, mc_question_factory, long_passage_html):
        group = group_factory(passage_html=long_passage_html, questions=[mc_question_factory()])
        before = group.to_dict()

        paginate_double([group], 300)

        assert group.to_dict() == before
