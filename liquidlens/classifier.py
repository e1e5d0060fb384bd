"""
Pattern Classifier — Symbolic Names for Fragments

Classification answers "what kind of statement is this?" and drives
styling and importance. It is independent of the textual rewrite.

Tiers, first hit wins:
  tag:    catalog patterns (priority order)
          -> catalog fallbackTagPatterns
          -> built-in keyword table
          -> None
  output: catalog outputPatterns
          -> ${...} personalization form is a "variable"
          -> built-in keyword table
          -> "variable"
"""

from __future__ import annotations

import re
from typing import Optional

from liquidlens.catalog import (
    BUILTIN_OUTPUT_PATTERNS,
    BUILTIN_TAG_PATTERNS,
    PatternCatalog,
    PatternEntry,
)
from liquidlens.fallbacks import DEFAULT_OUTPUT_PATTERN, PERSONALIZATION_PATTERN
from liquidlens.scanner import TAG, normalize_whitespace

_PERSONALIZATION_RE = re.compile(PERSONALIZATION_PATTERN)


def find_best_match(
    content: str, catalog: PatternCatalog
) -> Optional[tuple[PatternEntry, re.Match]]:
    """First catalog pattern (ascending priority) matching the normalized content."""
    normalized = normalize_whitespace(content)
    for entry in catalog.patterns:
        match = entry.compiled.search(normalized)
        if match:
            return entry, match
    return None


def _first_keyword(content: str, table) -> Optional[str]:
    for name, compiled in table:
        if compiled.search(content):
            return name
    return None


class PatternClassifier:
    """Classifies fragment content against one catalog snapshot."""

    def __init__(self, catalog: PatternCatalog):
        self.catalog = catalog

    def classify(self, content: str, kind: str) -> Optional[str]:
        normalized = normalize_whitespace(content)
        if kind == TAG:
            return self._classify_tag(normalized)
        return self._classify_output(normalized)

    def _classify_tag(self, content: str) -> Optional[str]:
        best = find_best_match(content, self.catalog)
        if best:
            return best[0].name
        return (
            _first_keyword(content, self.catalog.fallback_tag_patterns)
            or _first_keyword(content, BUILTIN_TAG_PATTERNS)
        )

    def _classify_output(self, content: str) -> str:
        name = _first_keyword(content, self.catalog.output_patterns)
        if name:
            return name
        if _PERSONALIZATION_RE.search(content):
            return DEFAULT_OUTPUT_PATTERN
        return _first_keyword(content, BUILTIN_OUTPUT_PATTERNS) or DEFAULT_OUTPUT_PATTERN
