"""
Fragment Scanner — Locates Template Fragments in Text

Two top-level expressions, one per fragment kind:
  - output: {{ ... }}  tolerating one level of nested braces, so an
            embedded ${...} or {...} survives inside the capture
  - tag:    {% ... %}  whose content never contains a closing %}

Candidates of the two kinds may overlap (an output expression inside a
tag). The scanner does not arbitrate; see resolver.py.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

OUTPUT = "output"
TAG = "tag"

OUTPUT_RE = re.compile(r"\{\{((?:[^{}]|\{[^{}]*\})*)\}\}")
TAG_RE = re.compile(r"\{%\s*((?:[^%]|%(?!\s*\}))*?)\s*%\}")

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class Fragment:
    """One scan match. Enriched by the classifier and transducer, then resolved."""
    start: int
    end: int                         # exclusive
    original: str                    # the full fragment including delimiters
    inner: str                       # captured content, untrimmed
    kind: str                        # "output" | "tag"
    rewritten: str = ""
    pattern: Optional[str] = None

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Fragment") -> bool:
        return self.start < other.end and self.end > other.start


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def scan_fragments(text: str) -> list[Fragment]:
    """All output and tag fragments in `text`, outputs first, each in text order."""
    if not text:
        return []

    fragments = [
        Fragment(m.start(), m.end(), m.group(0), m.group(1), OUTPUT)
        for m in OUTPUT_RE.finditer(text)
    ]
    fragments.extend(
        Fragment(m.start(), m.end(), m.group(0), m.group(1), TAG)
        for m in TAG_RE.finditer(text)
    )
    return fragments
