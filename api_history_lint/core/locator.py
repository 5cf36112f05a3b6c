"""
Block locator - find nodes that look like API history blocks.

Any raw HTML node that mentions a code fence, "yaml" and "history" is a
candidate. Near misses such as a misspelled meta tag reach the extractor and
get reported.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from markdown_it.tree import SyntaxTreeNode

from api_history_lint.core.parser import HTML_NODE_TYPES, node_line
from api_history_lint.core.workspace import Document


@dataclass
class CandidateBlock:
    """
    A raw HTML node that may hold an API history block

    Attributes:
        document: Document the node was found in
        raw: Literal node text
        line_number: 1-based line of the node
        previous: Preceding sibling node, None when the node is the first child
    """
    document: Document
    raw: str
    line_number: int
    previous: Optional[SyntaxTreeNode] = None


def looks_like_history_block(text: str) -> bool:
    lowered = text.lower()
    return "```" in lowered and "yaml" in lowered and "history" in lowered


def find_candidate_blocks(document: Document) -> Iterator[CandidateBlock]:
    """
    Yield candidate blocks in document order.

    Args:
        document: Document to scan

    Yields:
        CandidateBlock for every qualifying raw HTML node
    """
    for node in document.tree.walk():
        if node.type not in HTML_NODE_TYPES:
            continue
        if not looks_like_history_block(node.content):
            continue
        yield CandidateBlock(
            document=document,
            raw=node.content,
            line_number=node_line(node),
            previous=node.previous_sibling,
        )
