"""
Pattern Catalog — Immutable Configuration Value

The catalog is the user-editable description of the template language:
named tag patterns with priorities and mode-specific templates, variable
and filter dictionaries, operators, and fallback tables.

Loading is forgiving by design of the consumer: a pattern whose regex
does not compile is dropped (and logged), a malformed section becomes an
empty mapping, and an unreadable file becomes an empty catalog. The
engine then runs on the hard-coded tiers in fallbacks.py.

A loaded catalog is never mutated. CatalogHolder owns the current
reference and swaps it atomically on reload.

Usage:
    from liquidlens.catalog import CatalogHolder, PatternCatalog
    holder = CatalogHolder()                  # bundled default catalog
    catalog = holder.catalog
    holder.reload("/etc/liquidlens/catalog.json")
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from liquidlens.fallbacks import (
    DEFAULT_DISPLAY_MODES,
    FALLBACK_FILTER_DESCRIPTIONS,
    FALLBACK_OUTPUT_PATTERNS,
    FALLBACK_TAG_PATTERNS,
    FALLBACK_TRANSFORMATIONS,
)

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 999
DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "default_catalog.json"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class CatalogError(ValueError):
    """Raised by the strict loader when a catalog file cannot be used."""


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class PatternEntry:
    """
    A single rewrite rule: a catalog pattern or a fallback transformation.

    placeholder_map maps a template placeholder name to the capture group
    that fills it. When it is empty, templates use numbered placeholders
    ({1}, {2}, ...) filled from the capture groups in order.
    """
    name: str
    regex: str
    compiled: re.Pattern
    priority: int = DEFAULT_PRIORITY
    friendly: str = ""
    technical: str = ""
    placeholder_map: Mapping[str, int] = field(default_factory=lambda: _EMPTY)
    defaults: Mapping[str, str] = field(default_factory=lambda: _EMPTY)

    def template_for(self, display_mode: str, fallback: str) -> str:
        """Mode-appropriate template, falling back to the other mode, then `fallback`."""
        if display_mode == "technical":
            return self.technical or self.friendly or fallback
        return self.friendly or self.technical or fallback


@dataclass(frozen=True)
class OperatorRule:
    """A compiled operator replacement. Word operators match on word boundaries."""
    symbol: str
    friendly: str
    compiled: re.Pattern


@dataclass(frozen=True)
class PatternCatalog:
    patterns: tuple[PatternEntry, ...] = ()
    variables: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)
    filters: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)
    operators: tuple[OperatorRule, ...] = ()
    dynamic_patterns: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)
    common_variable_mappings: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    display_modes: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_DISPLAY_MODES))
    )
    styling: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: _EMPTY)
    fallback_tag_patterns: tuple[tuple[str, re.Pattern], ...] = ()
    output_patterns: tuple[tuple[str, re.Pattern], ...] = ()
    # Catalog-supplied rules first, then the built-in ones
    fallback_transformations: Mapping[str, tuple[PatternEntry, ...]] = field(
        default_factory=lambda: BUILTIN_FALLBACK_TRANSFORMATIONS
    )
    filter_descriptions: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: MappingProxyType(dict(FALLBACK_FILTER_DESCRIPTIONS))
    )
    dropped: tuple[str, ...] = ()
    source: str = "empty"

    # --------------------------------------------------------
    # Construction
    # --------------------------------------------------------

    @classmethod
    def empty(cls, source: str = "empty") -> "PatternCatalog":
        """A catalog with no configured data. Everything runs on fallbacks."""
        return cls(source=source)

    @classmethod
    def from_dict(cls, raw: Any, source: str = "dict") -> "PatternCatalog":
        """Build a catalog from the JSON-like structure. Never raises."""
        if not isinstance(raw, Mapping):
            logger.error(
                "Catalog root is not a mapping; using empty catalog",
                extra={"catalog_section": "root", "error_type": type(raw).__name__},
            )
            return cls.empty(source=source)

        dropped: list[str] = []

        patterns = _build_patterns(_section(raw, "patterns"), dropped)
        fallback_tags = _compile_named(_section(raw, "fallbackTagPatterns"), "fallbackTagPatterns", dropped)
        output_patterns = _compile_named(_section(raw, "outputPatterns"), "outputPatterns", dropped)
        transformations = _build_transformations(raw.get("fallbackTransformations"), dropped)
        operators = _build_operators(_section(raw, "operators"), dropped)

        filter_descriptions = dict(FALLBACK_FILTER_DESCRIPTIONS)
        for name, desc in _section(raw, "fallbackFilterDescriptions").items():
            if isinstance(desc, Mapping):
                filter_descriptions[name] = {k: str(v) for k, v in desc.items()}
            else:
                dropped.append(f"fallbackFilterDescriptions.{name}")

        display_modes = dict(DEFAULT_DISPLAY_MODES)
        display_modes.update(_frozen_modes(_section(raw, "displayModes"), "displayModes", dropped))
        styling = _frozen_modes(_section(raw, "styling"), "styling", dropped)

        common = {
            str(k).lower(): str(v)
            for k, v in _section(raw, "commonVariableMappings").items()
        }

        catalog = cls(
            patterns=patterns,
            variables=_frozen_entries(_section(raw, "variables"), "variables", dropped),
            filters=_frozen_entries(_section(raw, "filters"), "filters", dropped),
            operators=operators,
            dynamic_patterns=_frozen_entries(_section(raw, "dynamicPatterns"), "dynamicPatterns", dropped),
            common_variable_mappings=MappingProxyType(common),
            display_modes=MappingProxyType(display_modes),
            styling=MappingProxyType(styling),
            fallback_tag_patterns=fallback_tags,
            output_patterns=output_patterns,
            fallback_transformations=transformations,
            filter_descriptions=MappingProxyType(filter_descriptions),
            dropped=tuple(dropped),
            source=source,
        )
        logger.debug(
            "Catalog built from %s: %d patterns, %d dropped",
            source, len(patterns), len(dropped),
        )
        return catalog

    @classmethod
    def from_file(cls, path: str | Path, strict: bool = False) -> "PatternCatalog":
        """
        Load a catalog from a JSON file.

        Non-strict (default): any read or parse failure is logged and an
        empty catalog is returned. Strict: the failure raises CatalogError.
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            if strict:
                raise CatalogError(f"Cannot load catalog {path}: {e}") from e
            logger.error(
                "Failed to load catalog; using empty catalog",
                extra={"catalog_section": "root", "error": str(e), "path": str(path)},
            )
            return cls.empty(source=str(path))

        if strict and not isinstance(raw, Mapping):
            raise CatalogError(f"Catalog root in {path} must be a JSON object")
        return cls.from_dict(raw, source=str(path))

    @classmethod
    def default(cls) -> "PatternCatalog":
        """The catalog bundled with the package."""
        return cls.from_file(DEFAULT_CATALOG_PATH)

    # --------------------------------------------------------
    # Introspection
    # --------------------------------------------------------

    def summary(self) -> dict:
        """Counts per section, for diagnostics and the reload endpoint."""
        return {
            "source": self.source,
            "patterns_loaded": len(self.patterns),
            "patterns_dropped": len(self.dropped),
            "dropped": list(self.dropped),
            "variables_loaded": len(self.variables),
            "filters_loaded": len(self.filters),
            "operators_loaded": len(self.operators),
            "modes_available": len(self.display_modes),
        }

    def get_patterns(self) -> list[dict]:
        """Pattern table in priority order, as plain dicts."""
        return [
            {
                "name": p.name,
                "priority": p.priority,
                "regex": p.regex,
                "friendly": p.friendly,
                "technical": p.technical,
                "placeholders": sorted(p.placeholder_map),
            }
            for p in self.patterns
        ]


# ============================================================
# SECTION BUILDERS
# ============================================================

def compile_pattern(regex: Any, name: str, section: str) -> Optional[re.Pattern]:
    """Compile case-insensitively; log and return None on failure."""
    if not isinstance(regex, str) or not regex:
        logger.warning(
            "Catalog entry has no regex; skipped",
            extra={"pattern_name": name, "catalog_section": section},
        )
        return None
    try:
        return re.compile(regex, re.IGNORECASE)
    except re.error as e:
        logger.warning(
            "Catalog regex failed to compile; skipped",
            extra={"pattern_name": name, "catalog_section": section, "error": str(e)},
        )
        return None


def _section(raw: Mapping, key: str) -> Mapping:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        logger.warning(
            "Catalog section is malformed; ignored",
            extra={"catalog_section": key, "error_type": type(value).__name__},
        )
        return {}
    return value


def _frozen_entries(section: Mapping, name: str, dropped: list[str]) -> Mapping:
    entries = {}
    for key, value in section.items():
        if isinstance(value, Mapping):
            entries[str(key)] = MappingProxyType(dict(value))
        elif isinstance(value, str):
            # Shorthand: "first_name": "First Name"
            entries[str(key)] = MappingProxyType({"friendly": value})
        else:
            dropped.append(f"{name}.{key}")
    return MappingProxyType(entries)


def _frozen_modes(section: Mapping, name: str, dropped: list[str]) -> dict:
    """Per-mode mappings (displayModes, styling). Non-mapping values are dropped."""
    modes = {}
    for mode, value in section.items():
        if isinstance(value, Mapping):
            modes[str(mode)] = MappingProxyType(dict(value))
        else:
            logger.warning(
                "Catalog mode entry is not a mapping; dropped",
                extra={"catalog_section": name, "display_mode": str(mode)},
            )
            dropped.append(f"{name}.{mode}")
    return modes


def _build_entry(name: str, raw: Any, section: str, dropped: list[str]) -> Optional[PatternEntry]:
    if not isinstance(raw, Mapping):
        dropped.append(f"{section}.{name}")
        return None
    compiled = compile_pattern(raw.get("regex"), name, section)
    if compiled is None:
        dropped.append(f"{section}.{name}")
        return None

    raw_map = raw.get("placeholderMap") or {}
    raw_defaults = raw.get("defaults") or {}
    for key, value in (("placeholderMap", raw_map), ("defaults", raw_defaults)):
        if not isinstance(value, Mapping):
            logger.warning(
                f"Catalog entry {key} is not a mapping; skipped",
                extra={"pattern_name": name, "catalog_section": section,
                       "error_type": type(value).__name__},
            )
            dropped.append(f"{section}.{name}")
            return None

    placeholder_map: dict[str, int] = {}
    for placeholder, group in raw_map.items():
        try:
            placeholder_map[str(placeholder)] = int(group)
        except (TypeError, ValueError):
            logger.warning(
                "Placeholder group index is not an integer; placeholder ignored",
                extra={"pattern_name": name, "catalog_section": section},
            )

    try:
        priority = int(raw.get("priority", DEFAULT_PRIORITY))
    except (TypeError, ValueError):
        priority = DEFAULT_PRIORITY

    template = raw.get("template")
    return PatternEntry(
        name=name,
        regex=raw["regex"],
        compiled=compiled,
        priority=priority,
        friendly=str(raw.get("friendly") or template or ""),
        technical=str(raw.get("technical") or template or ""),
        placeholder_map=MappingProxyType(placeholder_map),
        defaults=MappingProxyType({str(k): str(v) for k, v in raw_defaults.items()}),
    )


def _build_patterns(section: Mapping, dropped: list[str]) -> tuple[PatternEntry, ...]:
    entries = []
    for name, raw in section.items():
        entry = _build_entry(str(name), raw, "patterns", dropped)
        if entry is not None:
            entries.append(entry)
    # Stable: equal priorities keep catalog order
    entries.sort(key=lambda e: e.priority)
    return tuple(entries)


def _compile_named(section: Mapping, name: str, dropped: list[str]) -> tuple[tuple[str, re.Pattern], ...]:
    compiled = []
    for pattern_name, regex in section.items():
        rx = compile_pattern(regex, str(pattern_name), name)
        if rx is None:
            dropped.append(f"{name}.{pattern_name}")
        else:
            compiled.append((str(pattern_name), rx))
    return tuple(compiled)


def _build_rule_list(items: Any, mode: str, dropped: list[str]) -> list[PatternEntry]:
    rules = []
    if not isinstance(items, list):
        return rules
    for i, raw in enumerate(items):
        entry = _build_entry(f"{mode}[{i}]", raw, "fallbackTransformations", dropped)
        if entry is not None:
            rules.append(entry)
    return rules


def _build_transformations(raw: Any, dropped: list[str]) -> Mapping[str, tuple[PatternEntry, ...]]:
    if raw is not None and not isinstance(raw, Mapping):
        logger.warning(
            "Catalog section is malformed; ignored",
            extra={"catalog_section": "fallbackTransformations"},
        )
        raw = None
    result = {}
    for mode, builtin in BUILTIN_FALLBACK_TRANSFORMATIONS.items():
        custom = _build_rule_list((raw or {}).get(mode), mode, dropped)
        result[mode] = tuple(custom) + builtin
    return MappingProxyType(result)


def _build_operators(section: Mapping, dropped: list[str]) -> tuple[OperatorRule, ...]:
    rules = []
    # Longest symbol first so ">=" is replaced before ">"
    for symbol in sorted(section, key=len, reverse=True):
        config = section[symbol]
        if not symbol.strip():
            logger.warning(
                "Operator with an empty symbol; skipped",
                extra={"catalog_section": "operators"},
            )
            dropped.append(f"operators.{symbol}")
            continue
        friendly = config.get("friendly") if isinstance(config, Mapping) else config
        if not isinstance(friendly, str) or not friendly:
            friendly = symbol
        if re.fullmatch(r"[a-zA-Z]+", symbol):
            regex = rf"\b{re.escape(symbol)}\b"
            flags = re.IGNORECASE
        else:
            regex = rf"\s*{re.escape(symbol)}\s*"
            flags = 0
        try:
            compiled = re.compile(regex, flags)
        except re.error as e:
            logger.warning(
                "Operator regex failed to compile; skipped",
                extra={"pattern_name": symbol, "catalog_section": "operators", "error": str(e)},
            )
            dropped.append(f"operators.{symbol}")
            continue
        rules.append(OperatorRule(symbol=symbol, friendly=friendly, compiled=compiled))
    return tuple(rules)


# ============================================================
# BUILT-IN TABLES (compiled once at import)
# ============================================================

def _compile_builtin() -> tuple:
    scratch: list[str] = []
    tags = _compile_named(FALLBACK_TAG_PATTERNS, "builtinTagPatterns", scratch)
    outputs = _compile_named(FALLBACK_OUTPUT_PATTERNS, "builtinOutputPatterns", scratch)
    transformations = MappingProxyType({
        mode: tuple(_build_rule_list(items, f"builtin.{mode}", scratch))
        for mode, items in FALLBACK_TRANSFORMATIONS.items()
    })
    return tags, outputs, transformations


BUILTIN_TAG_PATTERNS, BUILTIN_OUTPUT_PATTERNS, BUILTIN_FALLBACK_TRANSFORMATIONS = _compile_builtin()


# ============================================================
# HOLDER: owns the current catalog reference
# ============================================================

def load_catalog(path: Optional[str | Path] = None, strict: bool = False) -> PatternCatalog:
    """Load from `path`, or the bundled default when no path is given."""
    if path:
        return PatternCatalog.from_file(path, strict=strict)
    return PatternCatalog.default()


class CatalogHolder:
    """
    Owns the current catalog. Readers take `holder.catalog` once per pass
    and work on that snapshot; reload() builds the replacement off to the
    side and swaps the reference in a single assignment.
    """

    def __init__(
        self,
        catalog: Optional[PatternCatalog] = None,
        path: Optional[str | Path] = None,
    ):
        self._path = str(path) if path else None
        self._catalog = catalog if catalog is not None else load_catalog(self._path)
        self._version = 1
        self._lock = threading.Lock()

    @property
    def catalog(self) -> PatternCatalog:
        return self._catalog

    @property
    def version(self) -> int:
        return self._version

    @property
    def path(self) -> Optional[str]:
        return self._path

    def reload(self, path: Optional[str | Path] = None, strict: bool = False) -> PatternCatalog:
        """Rebuild the catalog and swap it in. Strict mode raises CatalogError instead of degrading."""
        target = str(path) if path else self._path
        new_catalog = load_catalog(target, strict=strict)
        with self._lock:
            self._catalog = new_catalog
            self._version += 1
            if path:
                self._path = str(path)
        logger.info(
            "Catalog reloaded",
            extra={"catalog_version": self._version, "path": new_catalog.source},
        )
        return new_catalog
