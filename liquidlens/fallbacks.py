"""
Fallback Tiers — Hard-Coded Tables

Everything in this module is independent of the user-editable catalog.
When the catalog is incomplete, malformed, or fails to load entirely,
these tables are what keeps the engine producing readable output:

  1. Tag keyword table      (classification of {% ... %} statements)
  2. Output keyword table   (classification of {{ ... }} expressions)
  3. Fallback transformations (per display mode, tag rewrites)
  4. Default filter descriptions
  5. Identifier vocabulary (acronyms, platform objects)

The catalog can ADD to the fallback transformations and filter
descriptions. It cannot remove what is defined here.
"""

from __future__ import annotations


# ============================================================
# DISPLAY MODES
# ============================================================

FRIENDLY = "friendly"
TECHNICAL = "technical"
DISPLAY_MODES = (FRIENDLY, TECHNICAL)

DEFAULT_DISPLAY_MODES = {
    "friendly": {"name": "Friendly", "showTechnical": True, "showTooltips": True},
    "technical": {"name": "Technical", "showTechnical": True, "showTooltips": False},
}

DEFAULT_STYLING = {
    "backgroundColor": "rgba(59, 130, 246, 0.08)",
    "color": "#1e40af",
    "fontWeight": "500",
}


# ============================================================
# TAG KEYWORD TABLE (first match wins, order matters)
# ============================================================

FALLBACK_TAG_PATTERNS: dict[str, str] = {
    # Loops
    "forLoopSimple": r"\bfor\s+\w+\s+in\s+",
    "endfor": r"\bendfor\b",

    # Conditionals
    "ifStatement": r"\bif\s+",
    "endif": r"\bendif\b",
    "else": r"\belse\b",
    "elseif": r"\belse?if\s+",
    "unless": r"\bunless\s+",
    "endunless": r"\bendunless\b",
    "case": r"\bcase\s+",
    "when": r"\bwhen\s+",
    "endcase": r"\bendcase\b",

    # Assignment
    "assignment": r"\bassign\s+\w+\s*=",
    "capture": r"\bcapture\s+",
    "endcapture": r"\bendcapture\b",

    # Data fetch
    "catalogItems": r"\bcatalog_items\b",
    "fetch": r"\bfetch\s+",
    "api": r"\bapi\s+",

    # Includes
    "include": r"\binclude\s+",
    "render": r"\brender\s+",

    # Comments
    "comment": r"\bcomment\b",
    "endcomment": r"\bendcomment\b",
}


# ============================================================
# OUTPUT KEYWORD TABLE (first match wins, order matters)
# ============================================================

PERSONALIZATION_PATTERN = r"\$\{[^}]+\}"

FALLBACK_OUTPUT_PATTERNS: dict[str, str] = {
    "customAttribute": r"custom_attribute",
    "emailAddress": r"email_address",
    "firstName": r"first_name",
    "lastName": r"last_name",
    "userId": r"user_id",
    "userName": r"user_name",
    "product": r"\bproduct\b(?!\s*s)",
    "products": r"\bproducts\b",
    "contentBlocks": r"content_blocks",
    "recommendations": r"recommended_products",
    "catalogItems": r"catalog_items",
    "braze": r"braze_id|external_id",
    "timestamp": r"created_at|updated_at|timestamp",
    "currency": r"currency|price|total|amount",
    "location": r"city|country|state|region|timezone",
    "device": r"device|platform|browser|app_version",
    "campaign": r"campaign|canvas|message",
    # Simple identifiers, kept last
    "variable": r"^[a-zA-Z_][a-zA-Z0-9_]*$",
}

DEFAULT_OUTPUT_PATTERN = "variable"


# ============================================================
# FALLBACK TRANSFORMATIONS (tag rewrites, per display mode)
# ============================================================
# Same shape as the catalog's "fallbackTransformations" section.
# Entries with a placeholderMap fill named placeholders; the
# "condition" placeholder gets operator humanization.

FALLBACK_TRANSFORMATIONS: dict[str, list[dict]] = {
    "friendly": [
        {
            "regex": r"^for\s+(\w+)\s+in\s+(.+?)\s+limit\s*:\s*(\d+)\b.*$",
            "template": "Loop through {collection} (show {limit} {items})",
            "placeholderMap": {"variable": 1, "collection": 2, "limit": 3, "items": 3},
            "defaults": {"item": "item", "items": "items"},
        },
        {
            "regex": r"^for\s+(\w+)\s+in\s+(.+)$",
            "template": "Loop through {collection}",
            "placeholderMap": {"variable": 1, "collection": 2},
        },
        {
            "regex": r"^else?if\s+(.+)$",
            "template": "Otherwise, when: {condition}",
            "placeholderMap": {"condition": 1},
        },
        {
            "regex": r"^if\s+(.+)$",
            "template": "Display when: {condition}",
            "placeholderMap": {"condition": 1},
        },
        {
            "regex": r"^unless\s+(.+)$",
            "template": "Display unless: {condition}",
            "placeholderMap": {"condition": 1},
        },
        {
            "regex": r"^case\s+(.+)$",
            "template": "Check {subject}",
            "placeholderMap": {"subject": 1},
        },
        {
            "regex": r"^when\s+(.+)$",
            "template": "When it is {value}",
            "placeholderMap": {"value": 1},
        },
        {
            "regex": r"^assign\s+(\w+)\s*=\s*(.+)$",
            "template": "Set {name} to {value}",
            "placeholderMap": {"name": 1, "value": 2},
        },
        {
            "regex": r"^capture\s+(\w+)$",
            "template": "Save the following as {name}",
            "placeholderMap": {"name": 1},
        },
        {
            "regex": r"^(?:include|render)\s+(.+)$",
            "template": "Insert {snippet}",
            "placeholderMap": {"snippet": 1},
        },
        {
            "regex": r"^connected_content\s+(\S+).*$",
            "template": "Fetch data from {source}",
            "placeholderMap": {"source": 1},
        },
        {"regex": r"^abort_message\b.*$", "template": "Stop sending this message"},
        {"regex": r"^else$", "template": "Otherwise"},
        {"regex": r"^endfor$", "template": "End loop"},
        {"regex": r"^end(?:if|unless)$", "template": "End condition"},
        {"regex": r"^endcase$", "template": "End check"},
        {"regex": r"^endcapture$", "template": "End saved content"},
        {"regex": r"^comment$", "template": "Note"},
        {"regex": r"^endcomment$", "template": "End note"},
    ],
    # Technical mode shows the normalized statement verbatim
    "technical": [],
}


# ============================================================
# DEFAULT FILTER DESCRIPTIONS (friendly mode)
# ============================================================
# {0}, {1}, ... are positional filter arguments.

FALLBACK_FILTER_DESCRIPTIONS: dict[str, dict[str, str]] = {
    "id": {"withoutArgs": "as ID"},
    "default": {"withArgs": "or {0} if empty", "withoutArgs": "with fallback"},
    "capitalize": {"withoutArgs": "capitalized"},
    "upcase": {"withoutArgs": "uppercase"},
    "downcase": {"withoutArgs": "lowercase"},
    "truncate": {"withArgs": "first {0} characters", "withoutArgs": "shortened"},
    "limit": {"withArgs": "show {0}", "withoutArgs": "limited"},
    "strip": {"withoutArgs": "trimmed"},
    "escape": {"withoutArgs": "HTML-safe"},
    "join": {"withArgs": "joined with {0}", "withoutArgs": "joined"},
    "split": {"withArgs": "split on {0}", "withoutArgs": "split"},
    "replace": {"withArgs": "replace {0} with {1}", "withoutArgs": "replaced"},
    "remove": {"withArgs": "without {0}", "withoutArgs": "with text removed"},
    "append": {"withArgs": "followed by {0}", "withoutArgs": "with text added"},
    "prepend": {"withArgs": "preceded by {0}", "withoutArgs": "with text added before"},
}


# ============================================================
# IDENTIFIER VOCABULARY
# ============================================================

# Word -> display casing, applied after lower-casing a prettified identifier
ACRONYMS: dict[str, str] = {
    "id": "ID",
    "url": "URL",
    "api": "API",
    "sms": "SMS",
    "ios": "iOS",
    "usb": "USB",
}

# Platform objects whose dotted paths read as "<object> <property>"
PLATFORM_OBJECTS = (
    "user", "campaign", "canvas", "sms", "whats_app", "card", "app",
    "most_recently_used_device", "targeted_device",
)

# object.${property} phrasing; "{property}" is the prettified property
OBJECT_PROPERTY_PHRASES: dict[str, str] = {
    "most_recently_used_device": "{property} (from current device)",
    "targeted_device": "{property} (from target device)",
    "campaign": "campaign {property}",
    "canvas": "Canvas {property}",
    "event_properties": "event: {property}",
    "custom_attribute": "custom {property}",
    "subscribed_state": "subscription status for {property}",
    "sms": "SMS {property}",
    "whats_app": "WhatsApp {property}",
    "card": "card {property}",
    "app": "app {property}",
}

# Substrings that mark a dotted token as a URL/host rather than a variable path
URL_HINTS = ("com", "org", "net", "api")
