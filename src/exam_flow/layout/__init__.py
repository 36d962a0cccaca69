"""
Module: exam_flow.layout

Purpose:
    Flow layout for exam papers. Estimates content heights, cuts passages
    and question stems into HTML fragments, and flows them into
    fixed-height columns (double) or pages (single).

Key Functions:
    - compose_flow(): Main entry point for layout
    - paginate_double(), paginate_single(): Page streams only
    - split_html_by_estimated_height(): Standalone fragment splitter
    - check_flow(): Verify a produced layout against its source

Key Classes:
    - FlowConfig: Estimator and paginator parameters
    - FlowPageDouble, FlowPageSingle: Pages of render items
    - FlowResult: Pages plus warnings and question→page map

Dependencies:
    - bs4: HTML fragment parsing
    - PIL: Debug page rendering
    - exam_flow.core.models: ContentGroup, SubQuestion

Used By:
    - scripts/preview_layout.py
    - Rendering layers (external)
"""

from .config import FlowConfig, LayoutType, QuestionMode
from .models import (
    ItemKind,
    PassagePart,
    QuestionStemPart,
    ChoiceRange,
    QuestionRange,
    FlowPageDouble,
    FlowPageSingle,
    FlowResult,
)
from .estimator import (
    html_to_plain_with_breaks,
    estimate_text_height,
    estimate_html_height,
    estimate_choice_height,
    estimate_question_height,
)
from .html_splitter import (
    HtmlPartCursor,
    HtmlSplit,
    parse_html_blocks,
    take_first_html_part_by_height,
    split_html_by_estimated_height,
    reassemble_html_parts,
)
from .paginator import flow_pages, paginate_double, paginate_single
from .composer import compose_flow
from .diagnostics import FlowIssue, IssueKind, check_flow
from .visualizer import render_debug_pages, save_debug_pages

__all__ = [
    # Config
    "FlowConfig",
    "LayoutType",
    "QuestionMode",
    # Models
    "ItemKind",
    "PassagePart",
    "QuestionStemPart",
    "ChoiceRange",
    "QuestionRange",
    "FlowPageDouble",
    "FlowPageSingle",
    "FlowResult",
    # Estimation
    "html_to_plain_with_breaks",
    "estimate_text_height",
    "estimate_html_height",
    "estimate_choice_height",
    "estimate_question_height",
    # Splitting
    "HtmlPartCursor",
    "HtmlSplit",
    "parse_html_blocks",
    "take_first_html_part_by_height",
    "split_html_by_estimated_height",
    "reassemble_html_parts",
    # Pagination
    "flow_pages",
    "paginate_double",
    "paginate_single",
    "compose_flow",
    # Diagnostics
    "FlowIssue",
    "IssueKind",
    "check_flow",
    "render_debug_pages",
    "save_debug_pages",
]
