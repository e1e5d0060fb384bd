#!/usr/bin/env python3
"""
run_humanize.py — Humanize template fragments from a file or stdin.

Usage:
    python run_humanize.py email.liquid                 # Table of matches
    python run_humanize.py email.liquid --render        # Text with fragments rewritten
    cat email.liquid | python run_humanize.py --json    # JSON (for CI)
    python run_humanize.py email.liquid --mode technical
    python run_humanize.py email.liquid --catalog my_catalog.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from liquidlens.catalog import CatalogHolder
from liquidlens.logging import get_logger, setup_logging
from liquidlens.matcher import LiquidMatcher, render_text

logger = get_logger("cli")


def format_table(matches) -> str:
    """One line per fragment: span, kind, pattern, original -> rewrite."""
    if not matches:
        return "No template fragments found."
    lines = [f"{len(matches)} fragment(s):", ""]
    for m in matches:
        lines.append(
            f"  [{m.start:>5}-{m.end:<5}] {m.type:<6} {(m.pattern or '-'):<18} "
            f"{m.original}  →  {m.clean}"
        )
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="LiquidLens Humanizer")
    parser.add_argument(
        "file",
        nargs="?",
        help="Text file to read (default: stdin)",
    )
    parser.add_argument(
        "--mode",
        default="friendly",
        choices=["friendly", "technical"],
        help="Display mode (default: friendly)",
    )
    parser.add_argument(
        "--catalog",
        help="Path to a catalog JSON file (default: bundled catalog)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON only (for CI/automation)",
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Print the text with every fragment replaced by its rewrite",
    )
    args = parser.parse_args()

    setup_logging(log_format="text", stream=sys.stderr)

    if args.catalog and not Path(args.catalog).exists():
        print(f"Error: Catalog not found: {args.catalog}")
        sys.exit(1)

    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    matcher = LiquidMatcher(CatalogHolder(path=args.catalog))
    if args.json:
        print(json.dumps(matcher.humanize(text, args.mode), indent=2, ensure_ascii=False))
        sys.exit(0)

    matches = matcher.find_matches(text, args.mode)
    logger.debug("Humanized input", extra={"fragments_count": len(matches), "display_mode": args.mode})

    if args.render:
        print(render_text(text, matches))
    else:
        print(format_table(matches))

    sys.exit(0)


if __name__ == "__main__":
    main()
