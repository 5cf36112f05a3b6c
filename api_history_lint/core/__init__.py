"""
Core Layer

Markdown parsing, the block locate/extract/decode pipeline, the validator
chain and the linter that ties them together.
"""

from api_history_lint.core.parser import (
    parse_tree,
    generate_header_id,
    iter_headers,
    Header,
)
from api_history_lint.core.models import (
    Issue,
    IssueCode,
    LintResults,
)
from api_history_lint.core.errors import (
    ApiHistoryLintError,
    LintConfigError,
    BlockFormatError,
    HistoryParseError,
    ReferenceDataError,
)
from api_history_lint.core.workspace import Document, DocsWorkspace
from api_history_lint.core.locator import CandidateBlock, find_candidate_blocks
from api_history_lint.core.extractor import HistoryBlock, extract_history_block
from api_history_lint.core.decoder import decode_history
from api_history_lint.core.linter import (
    lint_block,
    lint_document,
    lint_documents,
    lint_workspace,
)

__all__ = [
    # parser
    "parse_tree",
    "generate_header_id",
    "iter_headers",
    "Header",
    # models
    "Issue",
    "IssueCode",
    "LintResults",
    # errors
    "ApiHistoryLintError",
    "LintConfigError",
    "BlockFormatError",
    "HistoryParseError",
    "ReferenceDataError",
    # pipeline
    "Document",
    "DocsWorkspace",
    "CandidateBlock",
    "find_candidate_blocks",
    "HistoryBlock",
    "extract_history_block",
    "decode_history",
    "lint_block",
    "lint_document",
    "lint_documents",
    "lint_workspace",
]
