"""
Matcher — Scan Orchestrator

One pass: scan -> classify + transduce each fragment -> drop empty
rewrites -> resolve overlaps -> attach highlight metadata.

A pass is a pure function of (text, catalog snapshot, display mode).
LiquidMatcher takes the snapshot from its CatalogHolder once at the
start of each pass, so a concurrent reload never mixes two catalogs
inside one result.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Optional

from liquidlens.catalog import CatalogHolder, PatternCatalog
from liquidlens.classifier import PatternClassifier
from liquidlens.importance import (
    css_class_for,
    importance_for,
    presentation_for,
    tooltip_for,
)
from liquidlens.resolver import resolve_overlaps
from liquidlens.scanner import scan_fragments
from liquidlens.transducer import ContentTransducer, coerce_display_mode

logger = logging.getLogger(__name__)

MODULE_NAMES = ("scanner", "classifier", "transducer", "resolver", "importance")


@dataclass
class FragmentResult:
    """A resolved fragment, ready for the rendering collaborator."""
    start: int
    end: int
    original: str
    clean: str
    type: str                    # "output" | "tag"
    pattern: Optional[str]
    importance: str
    class_name: str
    tooltip: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def find_liquid_matches(
    text: str,
    catalog: PatternCatalog,
    display_mode: str = "friendly",
) -> list[FragmentResult]:
    """All resolved fragments of `text`, ordered by position."""
    started = time.perf_counter()
    display_mode = coerce_display_mode(display_mode)
    classifier = PatternClassifier(catalog)
    transducer = ContentTransducer(catalog, display_mode)

    candidates = []
    for fragment in scan_fragments(text):
        fragment.rewritten = transducer.transduce(fragment.inner, fragment.kind)
        if not fragment.rewritten.strip():
            continue
        fragment.pattern = classifier.classify(fragment.inner, fragment.kind)
        candidates.append(fragment)

    results = [
        FragmentResult(
            start=f.start,
            end=f.end,
            original=f.original,
            clean=f.rewritten,
            type=f.kind,
            pattern=f.pattern,
            importance=importance_for(f.pattern),
            class_name=css_class_for(f.kind),
            tooltip=tooltip_for(f.original, f.pattern, display_mode, catalog),
        )
        for f in resolve_overlaps(candidates)
    ]

    logger.debug(
        "Pass complete",
        extra={
            "fragments_count": len(results),
            "display_mode": display_mode,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return results


def render_text(text: str, matches: list[FragmentResult]) -> str:
    """Replace each resolved fragment in `text` with its rewrite."""
    pieces = []
    cursor = 0
    for match in matches:
        pieces.append(text[cursor:match.start])
        pieces.append(match.clean)
        cursor = match.end
    pieces.append(text[cursor:])
    return "".join(pieces)


class LiquidMatcher:
    """Humanizer bound to a catalog holder."""

    def __init__(self, holder: Optional[CatalogHolder] = None):
        self.holder = holder if holder is not None else CatalogHolder()

    def find_matches(self, text: str, display_mode: str = "friendly") -> list[FragmentResult]:
        return find_liquid_matches(text, self.holder.catalog, display_mode)

    def render_plain(self, text: str, display_mode: str = "friendly") -> str:
        return render_text(text, self.find_matches(text, display_mode))

    def humanize(self, text: str, display_mode: str = "friendly") -> dict:
        """
        Matches, rendered text and the mode's display settings and styling,
        all from one catalog snapshot.
        """
        catalog = self.holder.catalog
        display_mode = coerce_display_mode(display_mode)
        matches = find_liquid_matches(text, catalog, display_mode)
        return {
            "mode": display_mode,
            "matches": [m.to_dict() for m in matches],
            "rendered": render_text(text, matches),
            **presentation_for(display_mode, catalog),
        }

    def diagnose(self) -> dict:
        """Module status and catalog health, for the diagnose endpoint and CLI."""
        catalog = self.holder.catalog
        summary = catalog.summary()
        return {
            "modules": {name: "loaded" for name in MODULE_NAMES},
            "catalog_loaded": summary["patterns_loaded"] > 0 or summary["variables_loaded"] > 0,
            "catalog_version": self.holder.version,
            "catalog": summary,
        }
