"""
Markdown parsing helpers built on markdown-it-py.

Documents are parsed into a ``SyntaxTreeNode`` tree so the locator can look
at sibling relationships. Heading slugs follow GitHub's anchor convention.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode


# Raw HTML must stay enabled: history blocks live inside HTML comments
_md = MarkdownIt("commonmark", {"html": True})

HTML_NODE_TYPES = ("html_block", "html_inline")


@dataclass
class Header:
    """
    Heading data model

    Attributes:
        level: Heading level (1-6)
        text: Plain heading text
        id: GitHub style anchor
        line_number: 1-based line in the source
    """
    level: int
    text: str
    id: str
    line_number: int


def parse_tree(content: str) -> SyntaxTreeNode:
    """Parse Markdown content into a syntax tree."""
    return SyntaxTreeNode(_md.parse(content))


def generate_header_id(text: str) -> str:
    """
    Generate a GitHub style heading anchor.

    Rules:
    1. Lowercase
    2. Every whitespace character becomes a hyphen
    3. Anything that is neither alphanumeric nor a hyphen is removed

    Args:
        text: Heading text

    Returns:
        The anchor id
    """
    result = re.sub(r"\s", "-", text.strip().lower())
    return "".join(ch for ch in result if ch.isalnum() or ch == "-")


def node_line(node: SyntaxTreeNode) -> int:
    """1-based start line of a node, walking up to a block parent if needed."""
    current: Optional[SyntaxTreeNode] = node
    while current is not None:
        if not current.is_root and current.map:
            return current.map[0] + 1
        current = current.parent
    return 1


def inline_text(node: SyntaxTreeNode) -> str:
    """Plain text of an inline subtree (code spans keep their content, link targets are dropped)."""
    parts: list[str] = []
    for child in node.walk(include_self=False):
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return "".join(parts)


def iter_headers(tree: SyntaxTreeNode, level: Optional[int] = None) -> Iterator[Header]:
    """
    Yield the headings of a document in order.

    Args:
        tree: Parsed document
        level: Only yield headings of this level
    """
    for node in tree.walk():
        if node.type != "heading":
            continue
        node_level = int(node.tag[1])  # h1 -> 1, h2 -> 2, etc.
        if level is not None and node_level != level:
            continue
        text = inline_text(node.children[0]) if node.children else ""
        yield Header(
            level=node_level,
            text=text,
            id=generate_header_id(text),
            line_number=node_line(node),
        )


def first_block(content: str) -> Optional[SyntaxTreeNode]:
    """Return the first top-level block of a Markdown fragment, if any."""
    tree = parse_tree(content)
    return tree.children[0] if tree.children else None
