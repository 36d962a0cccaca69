"""
Module: layout.html_splitter

Purpose:
    Split an HTML fragment into parts that fit a height budget, cutting
    only between top-level blocks so that no element markup is ever cut.

Algorithm:
    1. Parse the fragment. If it is a single root element with children,
       unwrap it and remember the wrapper tag/attributes.
    2. Classify each child as a block: text run, <br> line break, or an
       opaque element (full outer markup, never divided).
    3. Accumulate blocks while the wrapped line count of the part (its
       plain text, wrapper included, measured exactly as the estimator
       measures it) stays within floor(budget / line_height) lines.
    4. Orphan avoidance: end the part before a block that would leave less
       than ~1.5 lines of budget unused.
    5. A block larger than the whole budget is placed alone.
    6. Re-apply the wrapper to every produced part.

Key Functions:
    - parse_html_blocks(): Fragment -> ParsedFragment (blocks + wrapper)
    - HtmlPartCursor: Pulls parts one at a time with varying budgets
    - take_first_html_part_by_height(): First fitting part + untouched rest
    - split_html_by_estimated_height(): All parts for a fixed budget
    - reassemble_html_parts(): Inverse of splitting, wrappers removed

Dependencies:
    - bs4: HTML parsing (html.parser backend)
    - layout.estimator: Plain-text conversion and wrapped line counts

Used By:
    - layout.paginator: Passage and stem fragmentation
    - layout.diagnostics: Losslessness checks
"""

from __future__ import annotations

import html
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

from .config import FlowConfig
from .estimator import html_to_plain_with_breaks, wrapped_line_count

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = FlowConfig()


class BlockKind(str, Enum):
    """Indivisible unit of HTML content."""
    TEXT = "text"
    LINE_BREAK = "line-break"
    ELEMENT = "element"

    def __str__(self) -> str:
        return self.value


class Block(NamedTuple):
    """
    One block of a parsed fragment.

    Attributes:
        kind: TEXT, LINE_BREAK or ELEMENT
        markup: Serialized markup, concatenation of all blocks is lossless
        text: Plain text of the markup; concatenating block texts gives the
            plain text of the joined markup
    """
    kind: BlockKind
    markup: str
    text: str


class HtmlSplit(NamedTuple):
    """First fitting part and the untouched remainder ('' when consumed)."""
    first: str
    rest: str


@dataclass(frozen=True)
class ParsedFragment:
    """
    Fragment as a flat block list plus an optional wrapper.

    Attributes:
        blocks: Top-level blocks (children of the wrapper if unwrapped)
        wrapper_open: Opening tag of the single root, '' if none
        wrapper_close: Closing tag of the single root, '' if none
    """

    blocks: tuple[Block, ...]
    wrapper_open: str = ""
    wrapper_close: str = ""

    @property
    def is_wrapped(self) -> bool:
        return bool(self.wrapper_open)

    @property
    def inner_markup(self) -> str:
        return "".join(block.markup for block in self.blocks)

    @property
    def close_text(self) -> str:
        """Plain text contributed by the wrapper ('\\n' for block tags)."""
        return html_to_plain_with_breaks(self.wrapper_close)

    def line_count(self, start: int, end: int, chars_per_line: int) -> int:
        """Wrapped lines of the part for blocks[start:end], wrapper included."""
        text = "".join(block.text for block in self.blocks[start:end])
        return wrapped_line_count(text + self.close_text, chars_per_line)

    def wrap(self, inner: str) -> str:
        return f"{self.wrapper_open}{inner}{self.wrapper_close}"

    def join(self, start: int, end: int) -> str:
        """Wrapped markup for blocks[start:end]."""
        return self.wrap("".join(block.markup for block in self.blocks[start:end]))


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────

def _open_tag(tag: Tag) -> str:
    parts = [tag.name]
    for name, value in tag.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        parts.append(f'{name}="{html.escape(str(value), quote=True)}"')
    return f"<{' '.join(parts)}>"


def _node_block(node) -> Block:
    if isinstance(node, Tag):
        markup = str(node)
        if node.name == "br":
            return Block(BlockKind.LINE_BREAK, markup, "\n")
        return Block(BlockKind.ELEMENT, markup, html_to_plain_with_breaks(markup))
    markup = node.output_ready(formatter="minimal")
    if type(node) is not NavigableString:
        # Comments, declarations and the like render nothing
        return Block(BlockKind.ELEMENT, markup, "")
    return Block(BlockKind.TEXT, markup, html_to_plain_with_breaks(markup))


def _to_blocks(nodes: Sequence) -> tuple[Block, ...]:
    """Classify nodes, folding whitespace-only text into a neighbouring block."""
    blocks: list[Block] = []
    pending = ""
    for node in nodes:
        block = _node_block(node)
        if block.kind is BlockKind.TEXT and not block.markup.strip():
            if blocks:
                prev = blocks[-1]
                blocks[-1] = Block(prev.kind, prev.markup + block.markup, prev.text + block.text)
            else:
                pending += block.markup
            continue
        if pending:
            block = Block(block.kind, pending + block.markup, html_to_plain_with_breaks(pending) + block.text)
            pending = ""
        blocks.append(block)
    if pending:
        blocks.append(Block(BlockKind.TEXT, pending, html_to_plain_with_breaks(pending)))
    return tuple(blocks)


def parse_html_blocks(fragment: str) -> ParsedFragment:
    """
    Parse a fragment into blocks.

    A fragment consisting of exactly one element with children is
    unwrapped: its children become the blocks and its tag is kept as the
    wrapper for every produced part.

    Example:
        >>> parsed = parse_html_blocks('<p class="x">One<br>Two</p>')
        >>> parsed.wrapper_open, [b.kind.value for b in parsed.blocks]
        ('<p class="x">', ['text', 'line-break', 'text'])
    """
    if not fragment:
        return ParsedFragment(blocks=())

    soup = BeautifulSoup(fragment, "html.parser")
    nodes = list(soup.contents)

    if len(nodes) == 1 and isinstance(nodes[0], Tag) and nodes[0].contents:
        root = nodes[0]
        return ParsedFragment(
            blocks=_to_blocks(list(root.contents)),
            wrapper_open=_open_tag(root),
            wrapper_close=f"</{root.name}>",
        )
    return ParsedFragment(blocks=_to_blocks(nodes))


# ─────────────────────────────────────────────────────────────────────────────
# Splitting
# ─────────────────────────────────────────────────────────────────────────────

def _line_budget(budget_px: float, config: FlowConfig) -> int:
    """Budget in whole lines; never less than one."""
    return max(1, math.floor(budget_px / config.line_height_px))


def _next_end(
    parsed: ParsedFragment,
    start: int,
    max_lines: int,
    config: FlowConfig,
) -> int:
    """
    Exclusive end index of the part starting at ``start``.

    Lines are counted on the part's joined plain text plus the wrapper's,
    which is what estimate_html_height() sees for the produced markup.
    """
    orphan_lines = config.orphan_threshold_chars / config.chars_per_line
    close_text = parsed.close_text
    text = ""
    for index in range(start, len(parsed.blocks)):
        candidate = text + parsed.blocks[index].text
        lines = wrapped_line_count(candidate + close_text, config.chars_per_line)
        leftover = max_lines - lines
        if index > start and (lines > max_lines or 0 < leftover < orphan_lines):
            return index
        text = candidate
    return len(parsed.blocks)


class HtmlPartCursor:
    """
    Pulls parts off a fragment one at a time with varying budgets.

    The fragment is parsed once; each ``take()`` cuts the next part that
    fits the given budget. Parts keep the source wrapper, so the
    concatenation of all parts' inner markup equals the source's.

    Example:
        >>> cursor = HtmlPartCursor("<p>one</p><p>two</p>")
        >>> cursor.take(1000)
        '<p>one</p><p>two</p>'
        >>> cursor.exhausted
        True
    """

    def __init__(self, fragment: str, config: Optional[FlowConfig] = None):
        self._config = config or _DEFAULT_CONFIG
        self._parsed = parse_html_blocks(fragment)
        self._pos = 0

    @property
    def parsed(self) -> ParsedFragment:
        return self._parsed

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._parsed.blocks)

    @property
    def rest(self) -> str:
        """Remaining markup, re-wrapped; '' once exhausted."""
        if self.exhausted:
            return ""
        return self._parsed.join(self._pos, len(self._parsed.blocks))

    def peek_lines(self) -> int:
        """Wrapped lines of the smallest part the next take() can return."""
        start = self._pos
        end = min(start + 1, len(self._parsed.blocks))
        return self._parsed.line_count(start, end, self._config.chars_per_line)

    def take(self, budget_px: float) -> str:
        """
        Cut the next part.

        A zero or negative budget still yields one block; a block larger
        than the budget is returned alone.
        """
        if self.exhausted:
            return ""
        max_lines = _line_budget(budget_px, self._config)
        start = self._pos
        end = _next_end(self._parsed, start, max_lines, self._config)
        if end == start + 1:
            lines = self._parsed.line_count(start, end, self._config.chars_per_line)
            if lines > max_lines:
                logger.debug(
                    f"Forced oversized block ({lines} lines) into {budget_px:.0f}px budget"
                )
        self._pos = end
        return self._parsed.join(start, end)


def take_first_html_part_by_height(
    fragment: str,
    budget_px: float,
    config: Optional[FlowConfig] = None,
) -> HtmlSplit:
    """
    Cut the first part of a fragment that fits a height budget.

    Only the first part is computed; the remainder is returned as markup
    (re-wrapped when the source had a single root) so callers can ask
    again with a different budget.

    Args:
        fragment: HTML to split
        budget_px: Available height; zero or negative still yields one block
        config: Font metrics and chars-per-line heuristic

    Returns:
        HtmlSplit(first, rest); rest is '' when everything fit.

    Example:
        >>> take_first_html_part_by_height("<p>a</p><p>b</p>", 1000).rest
        ''
    """
    if not fragment:
        return HtmlSplit("", "")
    cursor = HtmlPartCursor(fragment, config)
    first = cursor.take(budget_px)
    return HtmlSplit(first, cursor.rest)


def split_html_by_estimated_height(
    fragment: str,
    container_height: float,
    config: Optional[FlowConfig] = None,
) -> list[str]:
    """
    Split a whole fragment into parts for a fixed container height.

    Returns:
        List of wrapped parts; ``[fragment]`` when there is nothing to split.
    """
    cursor = HtmlPartCursor(fragment, config)
    parts: list[str] = []
    while not cursor.exhausted:
        parts.append(cursor.take(container_height))
    return parts or [fragment]


def reassemble_html_parts(parts: Sequence[str], wrapped: bool) -> str:
    """
    Join parts produced by the splitter back into inner markup.

    Args:
        parts: Parts in emission order
        wrapped: Whether the source fragment had a single root wrapper
            (each part then carries a copy of it, which is removed)
    """
    if not wrapped:
        return "".join(parts)
    return "".join(parse_html_blocks(part).inner_markup for part in parts)
