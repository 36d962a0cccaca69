"""
Unit tests for height estimation.
"""

import pytest

from exam_flow.core.models import Choice, QuestionType, SubQuestion
from exam_flow.layout import FlowConfig
from exam_flow.layout.estimator import (
    estimate_choice_height,
    estimate_html_height,
    estimate_question_height,
    estimate_text_height,
    html_to_plain_with_breaks,
    wrapped_line_count,
)

LINE = FlowConfig().line_height_px


class TestHtmlToPlain:
    def test_breaks_and_block_ends_become_newlines(self):
        assert html_to_plain_with_breaks("<p>One</p><p>Two<br>Three</p>") == "One\nTwo\nThree\n"

    def test_entities_are_decoded_and_nbsp_is_a_space(self):
        assert html_to_plain_with_breaks("a&amp;b&nbsp;c") == "a&b c"

    def test_inline_tags_are_stripped(self):
        assert html_to_plain_with_breaks('<b>bold</b> <span class="u">under</span>') == "bold under"

    def test_self_closing_br_variants(self):
        assert html_to_plain_with_breaks("a<br/>b<BR />c") == "a\nb\nc"

    def test_empty(self):
        assert html_to_plain_with_breaks("") == ""


class TestTextHeight:
    def test_lines_wrap_at_chars_per_line(self):
        assert wrapped_line_count("x" * 45, 20) == 3

    def test_each_newline_starts_a_line(self):
        assert wrapped_line_count("a\n\nb", 20) == 3

    def test_height_is_lines_times_line_height(self):
        assert estimate_text_height("x" * 45, 950) == pytest.approx(3 * LINE)

    def test_when_text_taller_than_container_then_capped(self):
        # floor(100 / 22.4) = 4 lines
        assert estimate_text_height("x" * 2000, 100) == pytest.approx(4 * LINE)

    def test_when_container_below_one_line_then_zero(self):
        assert estimate_text_height("text", 10) == 0

    def test_html_height_uses_plain_text(self):
        assert estimate_html_height("<p>One</p><p>Two</p>", 950) == pytest.approx(3 * LINE)

    def test_custom_chars_per_line(self):
        config = FlowConfig(chars_per_line=10)
        assert estimate_text_height("x" * 45, 950, config) == pytest.approx(5 * LINE)


class TestChoiceHeight:
    def test_short_choice_is_one_line_plus_spacing(self):
        assert estimate_choice_height("Option 1") == pytest.approx(LINE + 6)

    def test_long_choice_wraps(self):
        assert estimate_choice_height("x" * 45) == pytest.approx(3 * LINE + 6)

    def test_empty_choice_still_takes_a_line(self):
        assert estimate_choice_height("") == pytest.approx(LINE + 6)


class TestQuestionHeight:
    def test_when_height_override_then_used_verbatim_plus_gap(self):
        question = SubQuestion("q1", 1, QuestionType.ESSAY, "x" * 5000, height=800)
        assert estimate_question_height(question) == 808

    def test_zero_override_is_still_an_override(self):
        question = SubQuestion("q1", 1, QuestionType.ESSAY, "x" * 5000, height=0)
        assert estimate_question_height(question) == 8

    @pytest.mark.parametrize(
        "question_type, area",
        [
            (QuestionType.SHORT_ANSWER, 60),
            (QuestionType.ESSAY, 200),
            (QuestionType.FILL_IN_BLANK, 40),
        ],
    )
    def test_answer_area_by_type(self, question_type, area):
        question = SubQuestion("q1", 1, question_type, "Explain.")
        assert estimate_question_height(question) == pytest.approx(LINE + area + 16)

    def test_multiple_choice_adds_choices_and_padding(self):
        question = SubQuestion(
            "q1", 1, QuestionType.MULTIPLE_CHOICE, "Which?",
            choices=tuple(Choice(f"c{i}", i, f"Option {i}") for i in range(1, 5)),
        )
        expected = LINE + 4 * (LINE + 6) + 12 + 16
        assert estimate_question_height(question) == pytest.approx(expected)


GROWING_TEXTS = ["", "a", "a" * 19, "a" * 20, "a" * 21, "a" * 45, "a" * 45 + "\nb", "a" * 400]


class TestMonotonicity:
    @pytest.mark.parametrize(
        "estimate",
        [
            lambda text: estimate_text_height(text, 10_000),
            lambda text: estimate_text_height(text, 100),
            lambda text: estimate_html_height(f"<p>{text}</p>", 10_000),
            lambda text: estimate_choice_height(text),
            lambda text: estimate_question_height(SubQuestion("q1", 1, QuestionType.ESSAY, text)),
            lambda text: estimate_question_height(SubQuestion(
                "q1", 1, QuestionType.MULTIPLE_CHOICE, text,
                choices=(Choice("c1", 1, "Option"),),
            )),
        ],
        ids=["text", "text-capped", "html", "choice", "essay", "multiple-choice"],
    )
    def test_longer_text_is_never_shorter(self, estimate):
        heights = [estimate(text) for text in GROWING_TEXTS]
        assert heights == sorted(heights)

    def test_more_choices_are_never_shorter(self):
        heights = [
            estimate_question_height(SubQuestion(
                "q1", 1, QuestionType.MULTIPLE_CHOICE, "Which?",
                choices=tuple(Choice(f"c{i}", i, f"Option {i}") for i in range(1, count + 1)),
            ))
            for count in range(0, 6)
        ]
        assert heights == sorted(heights)
