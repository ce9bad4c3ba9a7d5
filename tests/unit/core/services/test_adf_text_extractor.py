"""Unit tests: AdfTextExtractor and normalize_whitespace."""

import pytest

from jira_bridge.core.services.adf_text_extractor import (
    AdfTextExtractor,
    adf_to_plain_text,
    normalize_whitespace,
)


def _text(value: str) -> dict:
    return {"type": "text", "text": value}


def _paragraph(*children: dict) -> dict:
    return {"type": "paragraph", "content": list(children)}


def _doc(*children: dict) -> dict:
    return {"type": "doc", "version": 1, "content": list(children)}


# ══════════════════════════════════════════════════════════════════════
# Extraction
# ══════════════════════════════════════════════════════════════════════


class TestExtract:
    def test_paragraph_with_mention_and_hard_break(self) -> None:
        node = _paragraph(
            _text("Hello "),
            {"type": "mention", "attrs": {"text": "Bob", "id": "557058:abc"}},
            {"type": "hardBreak"},
            _text("Goodbye"),
        )
        extractor = AdfTextExtractor()

        assert extractor.extract(node) == "Hello Bob\nGoodbye\n"
        assert extractor.to_plain_text(node) == "Hello Bob\nGoodbye"

    def test_mention_falls_back_to_id(self) -> None:
        node = _paragraph({"type": "mention", "attrs": {"id": "557058:abc"}})
        assert AdfTextExtractor().extract(node) == "@557058:abc\n"

    def test_mention_without_attrs_contributes_nothing(self) -> None:
        node = _paragraph(_text("a"), {"type": "mention"}, _text("b"))
        assert AdfTextExtractor().extract(node) == "ab\n"

    def test_list_items_are_prefixed(self) -> None:
        node = _doc(
            {
                "type": "bulletList",
                "content": [
                    {"type": "listItem", "content": [_paragraph(_text("one"))]},
                    {"type": "listItem", "content": [_paragraph(_text("two"))]},
                ],
            }
        )
        assert AdfTextExtractor().extract(node) == "- one\n\n- two\n\n"
        assert adf_to_plain_text(node) == "- one\n\n- two"

    def test_heading_and_table_cells_end_with_newline(self) -> None:
        node = _doc(
            {"type": "heading", "attrs": {"level": 1}, "content": [_text("Title")]},
            {
                "type": "table",
                "content": [
                    {
                        "type": "tableRow",
                        "content": [
                            {"type": "tableCell", "content": [_text("a")]},
                            {"type": "tableCell", "content": [_text("b")]},
                        ],
                    }
                ],
            },
        )
        assert AdfTextExtractor().extract(node) == "Title\na\nb\n\n"

    def test_unknown_leaf_types_contribute_nothing(self) -> None:
        node = _paragraph(_text("x"), {"type": "emoji", "attrs": {"shortName": ":smile:"}})
        assert AdfTextExtractor().extract(node) == "x\n"

    @pytest.mark.parametrize("node", [None, "plain", 42, [], {"content": "not-a-list"}])
    def test_non_document_input_yields_empty_text(self, node) -> None:
        assert AdfTextExtractor().extract(node) == ""

    def test_deep_nesting_is_cut_off_without_raising(self) -> None:
        node: dict = _text("deep")
        for _ in range(5000):
            node = _paragraph(node)

        extractor = AdfTextExtractor(max_depth=10)

        raw = extractor.extract(node)
        assert "deep" not in raw
        assert extractor.to_plain_text(node) == ""

    def test_default_depth_keeps_reasonable_documents(self) -> None:
        node: dict = _text("kept")
        for _ in range(30):
            node = _paragraph(node)
        assert AdfTextExtractor().to_plain_text(node) == "kept"


# ══════════════════════════════════════════════════════════════════════
# Whitespace normalization
# ══════════════════════════════════════════════════════════════════════


class TestNormalizeWhitespace:
    def test_removes_carriage_returns(self) -> None:
        assert normalize_whitespace("a\r\nb\r") == "a\nb"

    def test_collapses_three_or_more_newlines(self) -> None:
        assert normalize_whitespace("a\n\n\n\n\nb") == "a\n\nb"

    def test_keeps_single_blank_line(self) -> None:
        assert normalize_whitespace("a\n\nb") == "a\n\nb"

    def test_trims_surrounding_whitespace(self) -> None:
        assert normalize_whitespace("  \n hello \n\n") == "hello"

    @pytest.mark.parametrize(
        "text",
        ["", "plain", "a\r\n\r\n\r\nb", "\n\n\n", "  x  \n\n\n\ny ", "\r\r\n\n\n\r\n"],
    )
    def test_is_idempotent(self, text: str) -> None:
        once = normalize_whitespace(text)
        assert normalize_whitespace(once) == once
