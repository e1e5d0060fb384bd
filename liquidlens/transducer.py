"""
Content Transducer — Fragment Content to Prose

Rewrites the inner content of a fragment into a human-readable string
(friendly mode) or a near-verbatim one (technical mode).

Tag content:
  1. Catalog patterns, priority order. A hit fills the entry's template;
     each capture is cleaned (nested {{...}}, ${...}, filters, dot paths)
     and the "condition" placeholder also gets operator humanization.
  2. Fallback transformations for the display mode (catalog first, then
     the built-in list).
  3. The whitespace-normalized content.

Output content:
  main expression | filter | filter ...
  The main expression resolves through the variable table, ${...}
  personalization, dot-path traversal or the identifier prettifier.
  Filters render as a literal pipeline (technical) or a parenthetical,
  comma-joined description (friendly).

The transducer never raises on text input. A catalog entry that fails
while being applied is logged and skipped.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from liquidlens.catalog import PatternCatalog, PatternEntry
from liquidlens.fallbacks import (
    ACRONYMS,
    DISPLAY_MODES,
    FRIENDLY,
    OBJECT_PROPERTY_PHRASES,
    PLATFORM_OBJECTS,
    TECHNICAL,
    URL_HINTS,
)
from liquidlens.scanner import TAG, normalize_whitespace

logger = logging.getLogger(__name__)

# Errors a single catalog entry may raise while being applied
ENTRY_ERRORS = (re.error, TypeError, ValueError, KeyError, IndexError)

_PERSONALIZATION_RE = re.compile(r"\$\{([^}]+)\}")
_OUTPUT_WITH_FILTERS_RE = re.compile(r"\{\{([^}]+)\}\}\s*\|\s*([^|]+(?:\s*\|\s*[^|]+)*)")
_INLINE_OUTPUT_RE = re.compile(r"\{\{([^}]+)\}\}")
_STRAY_FILTER_RE = re.compile(r"\|\s*([^|]+)")
_OBJECT_PROPERTY_RE = re.compile(r"^([^.]+)\.\$\{([^}]+)\}$")
_STANDALONE_RE = re.compile(r"^\$\{([^}]+)\}$")
_BRACED_RE = re.compile(r"\{[^}]+\}")
_NUMBERED_RE = re.compile(r"\{\d+\}")
_QUOTES_RE = re.compile(r"['\"]")

# Identifier prettifier
_CAMEL_RE = re.compile(r"([a-z])([A-Z])")
_LETTER_DIGIT_RE = re.compile(r"([a-z])(\d)")
_TOKEN_SPLIT_RE = re.compile(r"[\s_]+")
_ACRONYM_FORMS = frozenset(ACRONYMS.values())

# Dot-path prose
_PATH = r"([^.\s]+(?:\.[^.\s]+)*)"
_CATALOG_ITEMS_RE = re.compile(r"\bcatalog_items\." + _PATH)
_EVENT_PROPERTIES_RE = re.compile(r"\b(?:event_properties|event data)\." + _PATH)
_EVENT_ARROW_RE = re.compile(r"\bevent:\s*([^.\s]+)\s*→\s*([^.\s]+(?:\s+[^.\s]+)*)")
_CUSTOM_ATTRIBUTE_RE = re.compile(r"\b(?:custom_attribute|Custom attribute)\." + _PATH)
_PLATFORM_OBJECT_RE = re.compile(
    r"\b(" + "|".join(PLATFORM_OBJECTS) + r")\." + _PATH
)
_GENERIC_PATH_RE = re.compile(
    r"\b([a-zA-Z_][a-zA-Z0-9_]*)\.([a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)*)"
)
_URL_CONTEXT = 10


def coerce_display_mode(display_mode: Optional[str]) -> str:
    """Valid mode or "friendly". Unknown modes are logged, never fatal."""
    if display_mode in DISPLAY_MODES:
        return display_mode
    logger.warning(
        "Unknown display mode %r; using friendly", display_mode,
        extra={"display_mode": str(display_mode)},
    )
    return FRIENDLY


def strip_quotes(value: str) -> str:
    return _QUOTES_RE.sub("", value).strip()


def split_pipeline(expression: str) -> list[str]:
    """Split on top-level "|". Pipes inside quoted strings do not split."""
    parts: list[str] = []
    current: list[str] = []
    quote = None
    for char in expression:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
            current.append(char)
        elif char == "|":
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def parse_filter_arguments(arg_string: str) -> list[str]:
    """
    Comma-separated filter arguments. Quotes are kept for display and a
    comma inside a quoted argument does not separate:

        parse_filter_arguments('"a, b", 3')  ->  ['"a, b"', '3']
    """
    args: list[str] = []
    current = ""
    quote = None
    for char in arg_string:
        if quote is None and char in "\"'":
            quote = char
            current += char
        elif quote is not None and char == quote:
            quote = None
            current += char
        elif quote is None and char == ",":
            if current.strip():
                args.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        args.append(current.strip())
    return args


def prettify_identifier(name: str) -> str:
    """
    camelCase / snake_case / digit-suffixed identifier to words.

        first_name   -> First name
        userId       -> User ID
        address2     -> Address 2
    """
    words: list[str] = []
    for token in _TOKEN_SPLIT_RE.split(name.strip()):
        if not token:
            continue
        if token in _ACRONYM_FORMS:
            words.append(token.lower())
            continue
        token = _CAMEL_RE.sub(r"\1 \2", token)
        token = _LETTER_DIGIT_RE.sub(r"\1 \2", token)
        words.extend(token.lower().split())
    text = " ".join(ACRONYMS.get(w, w) for w in words)
    return text[:1].upper() + text[1:]


class ContentTransducer:
    """Rewrites fragment content against one catalog snapshot and one display mode."""

    def __init__(self, catalog: PatternCatalog, display_mode: str = FRIENDLY):
        self.catalog = catalog
        self.display_mode = coerce_display_mode(display_mode)

    @property
    def technical(self) -> bool:
        return self.display_mode == TECHNICAL

    def transduce(self, content: str, kind: str) -> str:
        try:
            if kind == TAG:
                return self.transform_tag(content)
            return self.transform_output(content)
        except ENTRY_ERRORS as e:
            logger.warning(
                "Transduction failed; returning normalized content",
                extra={"fragment_type": kind, "error": str(e), "display_mode": self.display_mode},
            )
            return normalize_whitespace(content)

    # ============================================================
    # TAGS
    # ============================================================

    def transform_tag(self, content: str) -> str:
        normalized = normalize_whitespace(content)

        for entry in self.catalog.patterns:
            match = entry.compiled.search(normalized)
            if not match:
                continue
            try:
                template = entry.template_for(self.display_mode, normalized)
                return self.fill_template(template, match, entry)
            except ENTRY_ERRORS as e:
                logger.warning(
                    "Catalog pattern failed while filling; skipped",
                    extra={"pattern_name": entry.name, "error": str(e)},
                )

        return self.fallback_transformation(normalized)

    def fallback_transformation(self, content: str) -> str:
        for entry in self.catalog.fallback_transformations.get(self.display_mode, ()):
            match = entry.compiled.search(content)
            if not match:
                continue
            try:
                return self.fill_template(entry.template_for(self.display_mode, content), match, entry)
            except ENTRY_ERRORS as e:
                logger.warning(
                    "Fallback transformation failed; skipped",
                    extra={"pattern_name": entry.name, "error": str(e)},
                )
        return content

    def fill_template(self, template: str, match: re.Match, entry: PatternEntry) -> str:
        if not entry.placeholder_map:
            return self._fill_numbered(template, match, entry)

        result = template
        for placeholder, group in entry.placeholder_map.items():
            if placeholder == "items" and "limit" in entry.placeholder_map:
                # Singular noun only when the paired limit is exactly 1
                limit = _group(match, entry.placeholder_map["limit"])
                if limit is not None and limit.strip() == "1":
                    value = entry.defaults.get("item", "item")
                else:
                    value = entry.defaults.get("items", "items")
            else:
                value = _group(match, group) or entry.defaults.get(placeholder, placeholder)
                value = self.clean_liquid_syntax(value)
                if placeholder == "condition":
                    value = self.humanize_condition(value)
            result = result.replace("{%s}" % placeholder, value)

        for placeholder, value in entry.defaults.items():
            result = result.replace("{%s}" % placeholder, value)
        return normalize_whitespace(result)

    def _fill_numbered(self, template: str, match: re.Match, entry: PatternEntry) -> str:
        result = template
        for i in range(1, match.re.groups + 1):
            value = match.group(i) or entry.defaults.get(str(i)) or ""
            result = result.replace("{%d}" % i, value)
        result = _NUMBERED_RE.sub("", result)
        for placeholder, value in entry.defaults.items():
            result = result.replace("{%s}" % placeholder, value)
        return normalize_whitespace(self.humanize_nested(result))

    def humanize_condition(self, expression: str) -> str:
        """Replace operators with their friendly phrases, longest symbol first."""
        if self.technical:
            return expression

        result = expression.strip()
        for rule in self.catalog.operators:
            phrase = f" {rule.friendly} "
            result = rule.compiled.sub(lambda _m: phrase, result)
        return normalize_whitespace(result)

    # ============================================================
    # NESTED SYNTAX CLEANUP (friendly only)
    # ============================================================

    def clean_liquid_syntax(self, value: str) -> str:
        """Full cleanup of a placeholder value: nested syntax, then dot paths."""
        if self.technical or not value:
            return value

        result = self._expand_nested(value.strip())
        result = self.transform_dot_paths(result)
        return self._clean_leftovers(result)

    def humanize_nested(self, text: str) -> str:
        """Expand nested fragments and filters in already-templated text."""
        if self.technical or not text:
            return text
        return self._clean_leftovers(self._expand_nested(text))

    def _expand_nested(self, text: str) -> str:
        result = _PERSONALIZATION_RE.sub(
            lambda m: self.describe_variable(strip_quotes(m.group(1))), text
        )
        result = _OUTPUT_WITH_FILTERS_RE.sub(self._describe_output_with_filters, result)
        result = _INLINE_OUTPUT_RE.sub(lambda m: self.transform_output(m.group(1)), result)
        return _STRAY_FILTER_RE.sub(
            lambda m: f" ({self.describe_filter(m.group(1).strip())})", result
        )

    def _describe_output_with_filters(self, m: re.Match) -> str:
        variable = self.transform_output(m.group(1))
        filters = [self.describe_filter(f.strip()) for f in m.group(2).split("|")]
        return f"{variable} ({', '.join(filters)})"

    def _clean_leftovers(self, text: str) -> str:
        result = _PERSONALIZATION_RE.sub(
            lambda m: self.describe_variable(strip_quotes(m.group(1))), text
        )
        result = _INLINE_OUTPUT_RE.sub(
            lambda m: self.describe_variable(strip_quotes(m.group(1))), result
        )
        return normalize_whitespace(result)

    def transform_dot_paths(self, text: str) -> str:
        """Rewrite dotted variable paths inside free text as prose."""
        if self.technical:
            return text

        result = _CATALOG_ITEMS_RE.sub(self._catalog_items_path, text)
        result = _EVENT_PROPERTIES_RE.sub(
            lambda m: "event: " + self._path_words(m.group(1)).lower(), result
        )
        result = _EVENT_ARROW_RE.sub(
            lambda m: f"event: {m.group(1).lower()} {m.group(2).lower()}", result
        )
        result = _CUSTOM_ATTRIBUTE_RE.sub(
            lambda m: "custom " + self._path_words(m.group(1)).lower(), result
        )
        result = _PLATFORM_OBJECT_RE.sub(self._object_path, result)
        return _GENERIC_PATH_RE.sub(self._generic_path, result)

    def _path_words(self, path: str, separator: str = " ") -> str:
        return separator.join(self.describe_identifier(p) for p in path.split("."))

    def _catalog_items_path(self, m: re.Match) -> str:
        parts = [self.describe_identifier(p) for p in m.group(1).split(".")]
        head = parts[0].lower()
        if len(parts) >= 2 and "custom" in head and "attribute" in head:
            return "products from " + " ".join(parts[1:]).lower()
        return "products from " + " → ".join(parts).lower()

    def _object_path(self, m: re.Match) -> str:
        obj = self.describe_identifier(m.group(1)).lower()
        parts = [self.describe_identifier(p).lower() for p in m.group(2).split(".")]
        if len(parts) == 1:
            return f"{obj} {parts[0]}"
        return f"{obj} → " + " → ".join(parts)

    def _generic_path(self, m: re.Match) -> str:
        text = m.string
        before = text[max(0, m.start() - _URL_CONTEXT):m.start()]
        after = text[m.end():m.end() + _URL_CONTEXT]
        if (
            "http" in before or "://" in before or "/" in after
            or any(hint in m.group(0) for hint in URL_HINTS)
        ):
            return m.group(0)
        return self._object_path(m)

    # ============================================================
    # OUTPUTS
    # ============================================================

    def transform_output(self, content: str) -> str:
        main, *filters = [normalize_whitespace(p) for p in split_pipeline(content)]

        if self.technical:
            result = self._variable_field(main, "technical") or main
        elif _is_quoted(main):
            result = main[1:-1]
        elif "${" in main:
            result = self.describe_personalization(main)
        elif "." in main:
            result = self.describe_path(main)
        else:
            result = self.describe_identifier(main)

        if not self.technical:
            result = _PERSONALIZATION_RE.sub(
                lambda m: self.describe_variable(m.group(1).strip()), result
            )
            result = _INLINE_OUTPUT_RE.sub(
                lambda m: self.describe_variable(m.group(1).strip()), result
            )

        if filters:
            if self.technical:
                result += " | " + " | ".join(filters)
            else:
                result += " (" + ", ".join(self.describe_filter(f) for f in filters) + ")"
        return result

    def describe_path(self, path: str) -> str:
        """object.property.sub -> "Object → Property → Sub", stopping at the first configured prefix."""
        exact = self._variable_field(path)
        if exact:
            return exact
        if "${" in path:
            return self.describe_personalization(path)

        parts = path.split(".")
        description = self._variable_field(parts[0]) or self.describe_identifier(parts[0])
        for i in range(1, len(parts)):
            prefix = self._variable_field(".".join(parts[:i + 1]))
            if prefix:
                return prefix
            description += f" → {self.describe_identifier(parts[i])}"
        return description

    def describe_personalization(self, expression: str) -> str:
        """${...} personalization forms, including object.${property}."""
        working = _PERSONALIZATION_RE.sub(
            lambda m: self.describe_variable(strip_quotes(m.group(1))), expression
        )

        m = _OBJECT_PROPERTY_RE.match(expression)
        if m:
            obj, prop = m.group(1).strip(), strip_quotes(m.group(2))
            exact = self._variable_field(f"{obj}.{prop}")
            if exact:
                return exact

            prop_desc = self.describe_identifier(prop)
            dynamic = self.catalog.dynamic_patterns.get(obj)
            if dynamic:
                template = dynamic.get("friendly") or dynamic.get("pattern")
                if isinstance(template, str) and template:
                    return _BRACED_RE.sub(lambda _m: prop_desc, template)

            phrase = OBJECT_PROPERTY_PHRASES.get(obj)
            if phrase:
                return phrase.replace("{property}", prop_desc)

            obj_desc = self._variable_field(obj) or self.describe_identifier(obj)
            return f"{obj_desc} → {prop_desc}"

        m = _STANDALONE_RE.match(expression)
        if m:
            prop = m.group(1).strip()
            return (
                self._variable_field(prop)
                or self._variable_field(strip_quotes(prop))
                or self.describe_variable(strip_quotes(prop))
            )

        if working != expression:
            return working
        if "." in expression:
            return " → ".join(
                self._variable_field(p) or self.describe_identifier(p)
                for p in expression.split(".")
            )
        return self.describe_identifier(expression)

    def describe_filter(self, segment: str) -> str:
        name, sep, arg_string = segment.partition(":")
        name = name.strip()
        args = parse_filter_arguments(arg_string.strip()) if sep else []

        if self.technical:
            return name + (": " + ", ".join(args) if args else "")

        configured = self.catalog.filters.get(name)
        if configured:
            description = str(configured.get("friendly") or name)
            if args:
                description = description.replace("{value}", args[0])
            return description

        fallback = self.catalog.filter_descriptions.get(name)
        if fallback:
            if args and fallback.get("withArgs"):
                description = fallback["withArgs"]
                for i, arg in enumerate(args):
                    description = description.replace("{%d}" % i, arg)
                return description
            if fallback.get("withoutArgs"):
                return fallback["withoutArgs"]

        return " ".join([name, *args])

    def describe_identifier(self, name: str) -> str:
        """Variables table, then common mappings, then the prettifier."""
        if self.technical:
            return name
        configured = self._variable_field(name)
        if configured:
            return configured
        common = self.catalog.common_variable_mappings.get(name.lower())
        if common:
            return common
        return prettify_identifier(name)

    def describe_variable(self, name: str) -> str:
        """A bare variable reference: dotted names resolve segment by segment."""
        if "." in name and not self.technical:
            return self.describe_path(name)
        return self.describe_identifier(name)

    def _variable_field(self, key: str, field: str = "friendly") -> Optional[str]:
        entry = self.catalog.variables.get(key)
        if not entry:
            return None
        value = entry.get(field)
        return str(value) if value else None


def _group(match: re.Match, index: int) -> Optional[str]:
    if 0 <= index <= match.re.groups:
        return match.group(index)
    return None


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'"
