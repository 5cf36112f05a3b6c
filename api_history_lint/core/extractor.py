"""
Block extractor - strict re-parse of a candidate block.

The outer Markdown parse treats the whole comment as one opaque HTML blob,
so the candidate text is parsed again: first as an HTML fragment to isolate
the comment, then the comment body as Markdown to isolate the fenced block.
"""

import logging
from dataclasses import dataclass
from html.parser import HTMLParser

from api_history_lint.core.errors import BlockFormatError
from api_history_lint.core.locator import CandidateBlock
from api_history_lint.core.parser import first_block

logger = logging.getLogger(__name__)

HISTORY_LANGUAGE = "yaml"
HISTORY_META = "history"

# Elements without an end tag, they never open a nesting level
_VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


@dataclass
class FragmentNode:
    """Top-level node of an HTML fragment."""
    kind: str  # comment, element, text, declaration
    value: str


class FragmentParser(HTMLParser):
    """Record the top-level nodes of an HTML fragment."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.nodes: list[FragmentNode] = []
        self._depth = 0

    def _add(self, kind: str, value: str) -> None:
        if self._depth == 0:
            self.nodes.append(FragmentNode(kind, value))

    def handle_starttag(self, tag, attrs):
        self._add("element", tag)
        if tag not in _VOID_ELEMENTS:
            self._depth += 1

    def handle_startendtag(self, tag, attrs):
        self._add("element", tag)

    def handle_endtag(self, tag):
        if self._depth > 0:
            self._depth -= 1

    def handle_comment(self, data):
        self._add("comment", data)

    def handle_data(self, data):
        # Whitespace between top-level nodes is not a node of its own
        if data.strip():
            self._add("text", data)

    def handle_decl(self, decl):
        self._add("declaration", decl)

    def handle_pi(self, data):
        self._add("declaration", data)

    def unknown_decl(self, data):
        self._add("declaration", data)


def parse_fragment(html: str) -> list[FragmentNode]:
    parser = FragmentParser()
    parser.feed(html)
    parser.close()
    return parser.nodes


@dataclass
class HistoryBlock:
    """
    A candidate that passed the structural checks

    Attributes:
        candidate: The located block
        yaml_text: Contents of the fenced code block
        language: Fence language as written
        meta: Fence meta string as written
        yaml_line_number: 1-based document line of the first YAML line
    """
    candidate: CandidateBlock
    yaml_text: str
    language: str
    meta: str
    yaml_line_number: int = 1

    @property
    def raw(self) -> str:
        return self.candidate.raw


def split_info(info: str) -> tuple[str, str]:
    """Split a fence info string into (language, meta)."""
    parts = info.strip().split(maxsplit=1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def extract_history_block(candidate: CandidateBlock) -> HistoryBlock:
    """
    Drill into a candidate block.

    Args:
        candidate: Block found by the locator

    Returns:
        HistoryBlock with the YAML text

    Raises:
        BlockFormatError: The block is not a single comment wrapping a
            ``yaml history`` fenced code block
    """
    nodes = parse_fragment(candidate.raw)
    if not nodes or nodes[0].kind != "comment":
        raise BlockFormatError("expected an HTML comment", candidate.raw)
    if len(nodes) > 1:
        raise BlockFormatError(
            f"expected a single HTML comment, found {len(nodes)} top-level nodes",
            candidate.raw,
        )

    fence = first_block(nodes[0].value)
    if fence is None or fence.type != "fence":
        raise BlockFormatError("expected a fenced code block inside the comment", candidate.raw)

    language, meta = split_info(fence.info)
    if language.lower() != HISTORY_LANGUAGE:
        raise BlockFormatError(
            f"expected code block language '{HISTORY_LANGUAGE}', found '{language}'",
            candidate.raw,
        )
    if meta.strip().lower() != HISTORY_META:
        raise BlockFormatError(
            f"expected code block meta '{HISTORY_META}', found '{meta.strip()}'",
            candidate.raw,
        )

    # comment body starts on the line of "<!--", the YAML one line below the fence
    comment_line = candidate.line_number + candidate.raw[:candidate.raw.find("<!--")].count("\n")
    yaml_line_number = comment_line + fence.map[0] + 1 if fence.map else candidate.line_number

    logger.debug(f"Extracted history block at {candidate.document.relative_path}:{candidate.line_number}")
    return HistoryBlock(
        candidate=candidate,
        yaml_text=fence.content,
        language=language,
        meta=meta,
        yaml_line_number=yaml_line_number,
    )
