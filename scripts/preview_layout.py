"""
Preview the flow layout of a paper document.

Loads a paper JSON, composes the flow, prints a per-page summary and any
diagnostics, and optionally writes one debug PNG per page.

Usage:
    python scripts/preview_layout.py paper.json --layout double --height 950
    python scripts/preview_layout.py paper.json --debug-dir out/ --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import exam_flow
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "src"))

from exam_flow.core.schemas import ValidationError
from exam_flow.core.utils import load_paper_json
from exam_flow.layout import (
    FlowConfig,
    IssueKind,
    LayoutType,
    check_flow,
    compose_flow,
    render_debug_pages,
    save_debug_pages,
)

logger = logging.getLogger("preview_layout")

DEFAULT_HEIGHT_PX = 950


def _describe(item) -> str:
    data = item.to_dict()
    kind = data.pop("kind")
    data.pop("content", None)
    fields = ", ".join(f"{k}={v}" for k, v in data.items())
    return f"{kind}({fields})"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Preview exam paper flow layout")
    parser.add_argument("paper", type=Path, help="Paper JSON document")
    parser.add_argument("--layout", choices=[t.value for t in LayoutType], help="Override document layout")
    parser.add_argument("--height", type=float, help="Column/page height in px")
    parser.add_argument("--debug-dir", type=Path, help="Write debug PNGs here")
    parser.add_argument("--strict", action="store_true", help="Validate against the JSON schema")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        document = load_paper_json(args.paper, strict=args.strict)
        config = FlowConfig.from_dict(document.settings)
    except (OSError, ValidationError, ValueError) as e:
        logger.error(f"Could not load {args.paper}: {e}")
        return 1

    layout = LayoutType(args.layout or document.layout)
    height = args.height or document.column_height or DEFAULT_HEIGHT_PX

    result = compose_flow(document.groups, height, config, layout)

    print(f"{document.title or args.paper.name}: {result.page_count} pages ({layout.value})")
    for page_index, page in enumerate(result.pages):
        print(f"Page {page_index + 1}")
        for column, items in page.columns():
            used = sum(item.est_height for item in items)
            print(f"  {column} [{used:.0f}/{height:.0f}px]")
            for item in items:
                print(f"    {_describe(item)}")

    for warning in result.warnings:
        print(f"WARNING: {warning}")

    issues = check_flow(document.groups, result.pages, height)
    for issue in issues:
        print(f"ISSUE [{issue.kind}]: {issue.message}")

    if args.debug_dir:
        images = render_debug_pages(result, height)
        save_debug_pages(images, args.debug_dir)

    # Overflow is expected after forced placements; anything else is a bug
    return 1 if any(i.kind is not IssueKind.OVERFLOW for i in issues) else 0


if __name__ == "__main__":
    sys.exit(main())
