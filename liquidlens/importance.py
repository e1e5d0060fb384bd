"""
Importance & Styling — Highlight Metadata for the Renderer

Maps a classified pattern name to a visual importance tier and builds
the tooltip, CSS class and styling the rendering collaborator applies.
None of this affects the rewritten text.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from liquidlens.catalog import PatternCatalog
from liquidlens.fallbacks import DEFAULT_DISPLAY_MODES, DEFAULT_STYLING
from liquidlens.scanner import TAG

PRIMARY = "primary"
SECONDARY = "secondary"
TERTIARY = "tertiary"
MINOR = "minor"
UTILITY = "utility"

IMPORTANCE_MAP: dict[str, str] = {
    # Control flow
    "forLoopComplex": PRIMARY,
    "forLoopSimple": PRIMARY,
    "ifStatement": PRIMARY,
    "unless": PRIMARY,
    "case": PRIMARY,

    # Data operations
    "assignment": SECONDARY,
    "capture": SECONDARY,
    "catalogItems": SECONDARY,
    "customAttribute": SECONDARY,

    # Closers and branches
    "endif": TERTIARY,
    "endfor": TERTIARY,
    "endunless": TERTIARY,
    "endcase": TERTIARY,
    "endcapture": TERTIARY,
    "else": TERTIARY,
    "elseif": TERTIARY,
    "when": TERTIARY,

    # Variables
    "variable": MINOR,
    "emailAddress": MINOR,
    "firstName": MINOR,
    "lastName": MINOR,

    # Utilities
    "include": UTILITY,
    "render": UTILITY,
    "comment": UTILITY,
    "endcomment": UTILITY,
}


def importance_for(pattern_name: Optional[str]) -> str:
    return IMPORTANCE_MAP.get(pattern_name or "", MINOR)


def css_class_for(kind: str) -> str:
    return "liquid-tag" if kind == TAG else "liquid-output"


def display_mode_for(display_mode: str, catalog: PatternCatalog) -> Mapping[str, Any]:
    """The catalog's displayModes entry for `display_mode`, or the built-in one."""
    mode = catalog.display_modes.get(display_mode)
    if isinstance(mode, Mapping):
        return mode
    return DEFAULT_DISPLAY_MODES.get(display_mode, DEFAULT_DISPLAY_MODES["friendly"])


def tooltip_for(
    original: str,
    pattern_name: Optional[str],
    display_mode: str,
    catalog: PatternCatalog,
    in_iframe: bool = False,
) -> Optional[str]:
    """Tooltip text, or None when the mode hides tooltips."""
    if not display_mode_for(display_mode, catalog).get("showTooltips"):
        return None
    pattern_info = f" [{pattern_name}]" if pattern_name else ""
    location = " (in iframe)" if in_iframe else ""
    return (
        f"Original: {original}{pattern_info}{location}\n"
        f"Importance: {importance_for(pattern_name)}"
    )


def styling_for(display_mode: str, catalog: PatternCatalog) -> Mapping[str, Any]:
    styling = catalog.styling.get(display_mode)
    return styling if isinstance(styling, Mapping) and styling else DEFAULT_STYLING


def presentation_for(display_mode: str, catalog: PatternCatalog) -> dict:
    """Mode settings and styling, passed through untouched to the renderer."""
    return {
        "display": dict(display_mode_for(display_mode, catalog)),
        "styling": dict(styling_for(display_mode, catalog)),
    }
