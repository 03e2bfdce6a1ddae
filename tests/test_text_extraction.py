"""Tests for rich-text flattening and inline markup splitting."""

import pytest

from utils.text_extraction_utils import extract_plain_text, split_inline, strip_html


class TestExtractPlainText:

    def test_plain_string_untouched(self):
        assert extract_plain_text("  Grows in 3 < 4 weeks ") == "  Grows in 3 < 4 weeks "

    def test_structured_paragraphs(self):
        value = [
            {"type": "paragraph", "children": [
                {"type": "text", "text": "Needs "},
                {"type": "text", "text": "full sun", "bold": True},
                {"type": "text", "text": "."},
            ]},
            {"type": "paragraph", "children": [
                {"type": "link", "url": "https://x.test", "children": [{"type": "text", "text": "More"}]},
            ]},
        ]
        assert extract_plain_text(value) == "Needs full sun.\n\nMore"

    def test_lists_and_empty_paragraphs(self):
        value = [
            {"type": "paragraph", "children": [{"type": "text", "text": ""}]},
            {"type": "list", "children": [
                {"type": "list-item", "children": [{"type": "text", "text": "pH 6"}]},
                {"type": "list-item", "children": [{"type": "text", "text": "EC 1.2"}]},
            ]},
            {"type": "image", "image": {"url": "/x.png"}},
        ]
        assert extract_plain_text(value) == "pH 6\nEC 1.2"

    @pytest.mark.parametrize("value", [None, 42, {"type": "paragraph"}, []])
    def test_other_values(self, value):
        assert extract_plain_text(value) == ""

    def test_html_string(self):
        assert extract_plain_text("<p>Hydroponic <b>lettuce</b></p><p>Fast</p>") == "Hydroponic lettuce\n\nFast"

    def test_strip_html_without_paragraphs(self):
        assert strip_html("Line one<br>Line  two") == "Line one\nLine two"


class TestSplitInline:

    def test_plain(self):
        assert split_inline("just text") == [("just text", False, None)]

    def test_bold_and_links(self):
        assert split_inline("a **b** [c](http://c.test) d") == [
            ("a ", False, None),
            ("b", True, None),
            (" ", False, None),
            ("c", False, "http://c.test"),
            (" d", False, None),
        ]

    def test_unclosed_markers_stay_literal(self):
        assert split_inline("2 ** 3 and [x](") == [("2 ** 3 and [x](", False, None)]

    def test_empty(self):
        assert split_inline("") == []
