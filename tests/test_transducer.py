"""
Tests for the Content Transducer — the rewrite engine.

Friendly mode turns template syntax into prose; technical mode keeps
it near-verbatim. Nothing here may raise on text input.
"""

import pytest

from liquidlens.catalog import PatternCatalog
from liquidlens.scanner import OUTPUT, TAG
from liquidlens.transducer import (
    ContentTransducer,
    coerce_display_mode,
    parse_filter_arguments,
    prettify_identifier,
    split_pipeline,
)


CATALOG = PatternCatalog.from_dict({
    "variables": {
        "first_name": {"friendly": "First Name", "technical": "first_name"},
        "user.email": {"friendly": "User Email"},
    },
    "filters": {"date": {"friendly": "formatted as {value}"}},
    "operators": {
        "==": {"friendly": "is"},
        "!=": {"friendly": "is not"},
        ">=": {"friendly": "is at least"},
        ">": {"friendly": "is greater than"},
        "contains": {"friendly": "includes"},
        "and": {"friendly": "and also"},
    },
})


@pytest.fixture
def friendly():
    return ContentTransducer(CATALOG, "friendly")


@pytest.fixture
def technical():
    return ContentTransducer(CATALOG, "technical")


# ============================================================
# HELPERS
# ============================================================

class TestPrettifier:
    @pytest.mark.parametrize("name,expected", [
        ("first_name", "First name"),
        ("userId", "User ID"),
        ("address2", "Address 2"),
        ("api_url", "API URL"),
        ("sms_opt_in", "SMS opt in"),
        ("", ""),
    ])
    def test_prettify(self, name, expected):
        assert prettify_identifier(name) == expected

    @pytest.mark.parametrize("name", [
        "first_name", "userId", "address2", "api_url", "ios_version", "loyaltyTierName",
    ])
    def test_idempotent(self, name):
        once = prettify_identifier(name)
        assert prettify_identifier(once) == once


class TestFilterArguments:
    def test_comma_inside_quotes_does_not_split(self):
        assert parse_filter_arguments('"a, b"') == ['"a, b"']

    def test_multiple_arguments(self):
        assert parse_filter_arguments('"a, b", 3') == ['"a, b"', "3"]

    def test_empty_segments_skipped(self):
        assert parse_filter_arguments("x,,y") == ["x", "y"]
        assert parse_filter_arguments("") == []

    def test_pipe_inside_quotes_does_not_split(self):
        assert split_pipeline('"a|b" | upcase') == ['"a|b"', "upcase"]


class TestDisplayMode:
    def test_unknown_mode_becomes_friendly(self):
        assert coerce_display_mode("loud") == "friendly"
        assert ContentTransducer(CATALOG, "loud").display_mode == "friendly"

    def test_valid_modes_kept(self):
        assert coerce_display_mode("technical") == "technical"


# ============================================================
# OUTPUTS
# ============================================================

class TestOutputFriendly:
    def test_variable_lookup(self, friendly):
        assert friendly.transduce("first_name", OUTPUT) == "First Name"

    def test_prettified_unknown_variable(self, friendly):
        assert friendly.transduce(" loyalty_points ", OUTPUT) == "Loyalty points"

    def test_dot_path_with_filter(self, friendly):
        assert friendly.transduce(" user.name | upcase ", OUTPUT) == "User → Name (uppercase)"

    def test_dot_path_stops_at_configured_prefix(self, friendly):
        assert friendly.transduce("user.email.domain", OUTPUT) == "User Email"

    def test_quoted_literal_unquoted(self, friendly):
        assert friendly.transduce('"Hello there"', OUTPUT) == "Hello there"

    def test_default_filter_with_argument(self, friendly):
        assert friendly.transduce('name | default: "friend"', OUTPUT) == 'Name (or "friend" if empty)'

    def test_join_argument_with_comma(self, friendly):
        assert friendly.transduce('tags | join: ", "', OUTPUT) == 'Tags (joined with ", ")'

    def test_configured_filter_value(self, friendly):
        result = friendly.transduce('created_at | date: "%Y"', OUTPUT)
        assert result == 'Created at (formatted as "%Y")'

    def test_multiple_filters_comma_joined(self, friendly):
        result = friendly.transduce("city | strip | capitalize", OUTPUT)
        assert result == "City (trimmed, capitalized)"

    def test_unknown_filter_shows_name_and_args(self, friendly):
        assert friendly.transduce("x | frobnicate: 1, 2", OUTPUT) == "X (frobnicate 1 2)"

    def test_empty_content_yields_empty(self, friendly):
        assert friendly.transduce("   ", OUTPUT) == ""


class TestPersonalization:
    def test_standalone_variable(self, friendly):
        assert friendly.transduce("${first_name}", OUTPUT) == "First Name"

    def test_standalone_quoted(self, friendly):
        assert friendly.transduce("${'first_name'}", OUTPUT) == "First Name"

    def test_object_phrase(self, friendly):
        result = friendly.transduce("custom_attribute.${favorite_color}", OUTPUT)
        assert result == "custom Favorite color"

    def test_device_phrase(self, friendly):
        result = friendly.transduce("most_recently_used_device.${model}", OUTPUT)
        assert result == "Model (from current device)"

    def test_unknown_object_arrow(self, friendly):
        assert friendly.transduce("shopper.${tier}", OUTPUT) == "Shopper → Tier"

    def test_dynamic_pattern(self):
        catalog = PatternCatalog.from_dict({
            "dynamicPatterns": {"context": {"friendly": "context {property}"}},
        })
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("context.${store_name}", OUTPUT) == "context Store name"

    def test_full_key_wins(self):
        catalog = PatternCatalog.from_dict({
            "variables": {"custom_attribute.vip": {"friendly": "VIP status"}},
        })
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("custom_attribute.${vip}", OUTPUT) == "VIP status"

    def test_dotted_name_resolves_by_segment(self):
        catalog = PatternCatalog.from_dict({"variables": {
            "user": "Customer",
            "first_name": {"friendly": "First Name"},
        }})
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("${user.first_name}", OUTPUT) == "Customer → First Name"
        assert t.transduce("assign greeting = ${user.first_name}", TAG) == (
            "Set greeting to Customer → First Name"
        )

    def test_dotted_name_exact_key(self):
        catalog = PatternCatalog.from_dict({"variables": {"user.first_name": "Given Name"}})
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("${user.first_name}", OUTPUT) == "Given Name"

    def test_common_mapping(self):
        catalog = PatternCatalog.from_dict({"commonVariableMappings": {"fname": "First Name"}})
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("fName", OUTPUT) == "First Name"


class TestOutputTechnical:
    def test_pipeline_verbatim(self, technical):
        assert technical.transduce(" user.name | upcase ", OUTPUT) == "user.name | upcase"

    def test_filter_arguments_untouched(self, technical):
        assert technical.transduce("name | truncate:20", OUTPUT) == "name | truncate:20"

    def test_quotes_kept(self, technical):
        assert technical.transduce('"Hello"', OUTPUT) == '"Hello"'

    def test_personalization_verbatim(self, technical):
        assert technical.transduce("custom_attribute.${color}", OUTPUT) == "custom_attribute.${color}"


# ============================================================
# TAGS
# ============================================================

class TestTagFallbacks:
    """No catalog patterns: the built-in friendly phrase table applies."""

    def test_for_loop_with_limit(self, friendly):
        result = friendly.transduce("for product in products limit: 3", TAG)
        assert result == "Loop through products (show 3 items)"

    def test_for_loop_limit_one_is_singular(self, friendly):
        result = friendly.transduce("for product in products limit:1", TAG)
        assert result == "Loop through products (show 1 item)"

    def test_plain_for_loop(self, friendly):
        assert friendly.transduce("for p in products", TAG) == "Loop through products"

    def test_if_with_operator(self, friendly):
        assert friendly.transduce("if a == b", TAG) == "Display when: a is b"

    def test_longest_operator_first(self, friendly):
        result = friendly.transduce("if user.age >= 18 and user.vip", TAG)
        assert result == "Display when: user age is at least 18 and also user vip"

    def test_word_operator(self, friendly):
        assert friendly.transduce("if name contains 'x'", TAG) == "Display when: name includes 'x'"

    def test_elsif(self, friendly):
        assert friendly.transduce("elsif a != b", TAG) == "Otherwise, when: a is not b"

    def test_nested_output_in_condition(self, friendly):
        result = friendly.transduce("if {{ user.first_name }} == 'Bob'", TAG)
        assert result == "Display when: User → First Name is 'Bob'"

    def test_assign_with_filter(self, friendly):
        result = friendly.transduce("assign total = price | plus: 5", TAG)
        assert result == "Set total to price (plus 5)"

    @pytest.mark.parametrize("content,expected", [
        ("else", "Otherwise"),
        ("endif", "End condition"),
        ("endfor", "End loop"),
        ("include 'footer'", "Insert 'footer'"),
    ])
    def test_closers_and_includes(self, friendly, content, expected):
        assert friendly.transduce(content, TAG) == expected

    def test_unknown_tag_normalized(self, friendly):
        assert friendly.transduce("  raw   ", TAG) == "raw"


class TestTagTechnical:
    def test_no_catalog_match_is_verbatim(self, technical):
        assert technical.transduce("for product in products limit: 3", TAG) == \
            "for product in products limit: 3"

    def test_no_operator_humanization(self, technical):
        assert technical.transduce("  if   a==b  ", TAG) == "if a==b"

    def test_technical_template_used(self):
        catalog = PatternCatalog.from_dict({"patterns": {"loop": {
            "regex": r"^for\s+(\w+)\s+in\s+(\S+)",
            "friendly": "Loop through {collection}",
            "technical": "for {item} in {collection}",
            "placeholderMap": {"item": 1, "collection": 2},
        }}})
        assert ContentTransducer(catalog, "technical").transduce("for x in items", TAG) == "for x in items"
        assert ContentTransducer(catalog, "friendly").transduce("for x in items", TAG) == "Loop through items"


class TestCatalogTemplates:
    def test_default_fills_missing_capture(self):
        catalog = PatternCatalog.from_dict({"patterns": {"greet": {
            "regex": r"^greet(?:\s+(\w+))?$",
            "friendly": "Say hello to {who}",
            "placeholderMap": {"who": 1},
            "defaults": {"who": "everyone"},
        }}})
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("greet", TAG) == "Say hello to everyone"
        assert t.transduce("greet bob", TAG) == "Say hello to bob"

    def test_missing_default_uses_placeholder_name(self):
        catalog = PatternCatalog.from_dict({"patterns": {"ping": {
            "regex": r"^ping(?:\s+(\w+))?$",
            "friendly": "Ping {target}",
            "placeholderMap": {"target": 1},
        }}})
        assert ContentTransducer(catalog, "friendly").transduce("ping", TAG) == "Ping target"

    def test_catalog_beats_builtin_fallback(self):
        catalog = PatternCatalog.from_dict({"patterns": {"ifStatement": {
            "regex": r"^if\s+(.+)$",
            "friendly": "Only if {condition}",
            "placeholderMap": {"condition": 1},
        }}})
        assert ContentTransducer(catalog, "friendly").transduce("if vip", TAG) == "Only if vip"

    def test_numbered_fallback_transformation(self):
        catalog = PatternCatalog.from_dict({"fallbackTransformations": {"friendly": [
            {"regex": r"^tag\s+(\w+)\s*(\w*)$", "template": "Tag {1} with {2}"},
        ]}})
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("tag a b", TAG) == "Tag a with b"
        assert t.transduce("tag a", TAG) == "Tag a with"

    def test_numbered_fill_expands_nested_output(self):
        catalog = PatternCatalog.from_dict({
            "variables": {"first_name": {"friendly": "First Name"}},
            "fallbackTransformations": {"friendly": [
                {"regex": r"^show\s+(.+)$", "template": "Show {1}"},
            ]},
        })
        t = ContentTransducer(catalog, "friendly")
        assert t.transduce("show {{ first_name }}", TAG) == "Show First Name"


# ============================================================
# DOT PATHS
# ============================================================

class TestDotPaths:
    @pytest.mark.parametrize("text,expected", [
        ("catalog_items.custom_attribute.favorite_category", "products from favorite category"),
        ("catalog_items.games", "products from games"),
        ("catalog_items.games.featured", "products from games → featured"),
        ("event_properties.item_name", "event: item name"),
        ("custom_attribute.loyalty_tier", "custom loyalty tier"),
        ("canvas.name", "canvas name"),
        ("user.address.city", "user → address → city"),
        ("order.total", "order total"),
    ])
    def test_prose(self, friendly, text, expected):
        assert friendly.transform_dot_paths(text) == expected

    @pytest.mark.parametrize("text", [
        "https://shop.example.com",
        "example.com",
        "settings.api_key",
    ])
    def test_url_like_left_alone(self, friendly, text):
        assert friendly.transform_dot_paths(text) == text

    def test_technical_untouched(self, technical):
        assert technical.transform_dot_paths("user.name") == "user.name"
