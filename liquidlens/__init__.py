"""
LiquidLens — Template Fragment Humanizer

Finds Liquid template fragments ({{ ... }} outputs, {% ... %} tags and
${...} personalization variables) in text and rewrites each one as a
readable description, in friendly or technical display mode.

Public API:
  - find_liquid_matches: One pass over text with a given catalog
  - LiquidMatcher:       Humanizer bound to a reloadable catalog
  - PatternCatalog:      Immutable pattern/variable/filter configuration
  - CatalogHolder:       Owns the current catalog, atomic reload
  - FragmentResult:      One resolved, rewritten fragment

Usage:
    from liquidlens import find_liquid_matches, PatternCatalog
    matches = find_liquid_matches(text, PatternCatalog.default(), "friendly")
"""

__version__ = "1.0.0"

from liquidlens.catalog import (
    PatternCatalog,
    PatternEntry,
    CatalogHolder,
    CatalogError,
)
from liquidlens.scanner import Fragment, scan_fragments
from liquidlens.classifier import PatternClassifier
from liquidlens.transducer import ContentTransducer
from liquidlens.resolver import resolve_overlaps
from liquidlens.importance import importance_for
from liquidlens.matcher import (
    FragmentResult,
    LiquidMatcher,
    find_liquid_matches,
    render_text,
)

__all__ = [
    "PatternCatalog",
    "PatternEntry",
    "CatalogHolder",
    "CatalogError",
    "Fragment",
    "scan_fragments",
    "PatternClassifier",
    "ContentTransducer",
    "resolve_overlaps",
    "importance_for",
    "FragmentResult",
    "LiquidMatcher",
    "find_liquid_matches",
    "render_text",
]
