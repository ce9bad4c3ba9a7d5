"""Flatten Atlassian Document Format trees into plain text.

Only the node types that carry readable text are rendered; unknown block
types contribute nothing, so new node kinds do not break extraction.
"""

from __future__ import annotations

import re
from typing import Any

import structlog

logger = structlog.get_logger()

DEFAULT_MAX_DEPTH = 64

_BLOCK_TYPES = frozenset({"paragraph", "heading", "listItem", "tableRow", "tableCell"})
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


class AdfTextExtractor:
    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._max_depth = max_depth

    def extract(self, node: Any) -> str:
        """Return the raw (un-normalized) text of ``node`` and its descendants.

        Nodes nested deeper than ``max_depth`` are skipped, never raised on.
        """
        out: list[str] = []
        truncated = self._collect(node, out, depth=0)
        if truncated:
            logger.warning(
                "Rich document exceeds maximum depth, deeper nodes skipped",
                max_depth=self._max_depth,
                source_system="AdfTextExtractor",
            )
        return "".join(out)

    def to_plain_text(self, node: Any) -> str:
        return normalize_whitespace(self.extract(node))

    def _collect(self, node: Any, out: list[str], depth: int) -> bool:
        if not isinstance(node, dict):
            return False
        if depth > self._max_depth:
            return True

        node_type = node.get("type") or ""
        if node_type == "text":
            text = node.get("text")
            if isinstance(text, str):
                out.append(text)
        elif node_type == "hardBreak":
            out.append("\n")
        elif node_type == "mention":
            out.append(_mention_text(node.get("attrs")))

        children = node.get("content")
        if not isinstance(children, list):
            return False

        truncated = False
        if node_type == "listItem":
            out.append("- ")
        for child in children:
            truncated = self._collect(child, out, depth + 1) or truncated
        if node_type in _BLOCK_TYPES:
            out.append("\n")
        return truncated


def _mention_text(attrs: Any) -> str:
    if not isinstance(attrs, dict):
        return ""
    display = attrs.get("text")
    if isinstance(display, str):
        return display
    mention_id = attrs.get("id")
    if isinstance(mention_id, str):
        return f"@{mention_id}"
    return ""


def normalize_whitespace(text: str) -> str:
    """Drop carriage returns, cap blank runs at one empty line, and trim."""
    text = text.replace("\r", "")
    return _EXCESS_NEWLINES_RE.sub("\n\n", text).strip()


def adf_to_plain_text(node: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    return AdfTextExtractor(max_depth).to_plain_text(node)
