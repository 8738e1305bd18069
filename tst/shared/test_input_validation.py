"""Tests for text sanitization and required-field validation."""

import pytest

from landing_service.shared.input_validation import sanitize_header, sanitize_text, validate_required

HOSTILE = [
    '<script>alert("x")</script>',
    "Tom & Jerry's <b>show</b>",
    '"><img src=x onerror=alert(1)>',
    "&lt;already escaped&gt; & raw <tag>",
    "plain text",
    "  padded  ",
    "&copy; &#60; &amp;lt;",
]


@pytest.mark.parametrize("text", HOSTILE)
def test_no_raw_metacharacters_survive(text):
    sanitized = sanitize_text(text)
    for char in "<>\"'":
        assert char not in sanitized
    # Every ampersand starts an entity
    assert sanitized.count("&") == sum(sanitized.count(e) for e in ("&amp;", "&lt;", "&gt;", "&quot;", "&#x27;"))


@pytest.mark.parametrize("text", HOSTILE)
def test_sanitize_is_idempotent(text):
    once = sanitize_text(text)
    assert sanitize_text(once) == once


def test_escapes_all_five_characters():
    assert sanitize_text("& < > \" '") == "&amp; &lt; &gt; &quot; &#x27;"


def test_only_its_own_entities_are_decoded():
    assert sanitize_text("&lt;b&gt;") == "&lt;b&gt;"
    assert sanitize_text("&copy; &#60; &nbsp;") == "&amp;copy; &amp;#60; &amp;nbsp;"


def test_empty_values():
    assert sanitize_text("") == ""
    assert sanitize_text(None) == ""


def test_truncates_before_escaping():
    assert sanitize_text("<<<<", max_length=2) == "&lt;&lt;"


def test_header_strips_line_breaks():
    assert sanitize_header("Hello\r\nBcc: victim@example.com") == "Hello Bcc: victim@example.com"
    assert sanitize_header("\tTabbed\x00") == "Tabbed"


class TestValidateRequired:

    def test_returns_stripped_value(self):
        assert validate_required("  hi  ", "Name") == "hi"

    @pytest.mark.parametrize("value", [None, "", "   ", 42, ["a"]])
    def test_rejects_missing_blank_and_non_strings(self, value):
        with pytest.raises(ValueError):
            validate_required(value, "Name")
