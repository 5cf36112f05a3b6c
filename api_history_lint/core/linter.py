"""
Lint pipeline - run every document through locate -> extract -> decode -> checks.

A malformed block only ends processing of that block, an unreadable document
only ends processing of that document. Issues go to the reporter the moment
they are found and are also kept on ``LintResults``.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from api_history_lint.core.checks import Check
from api_history_lint.core.decoder import decode_history
from api_history_lint.core.errors import BlockFormatError, HistoryParseError, ReferenceDataError
from api_history_lint.core.extractor import extract_history_block
from api_history_lint.core.locator import CandidateBlock, find_candidate_blocks
from api_history_lint.core.models import Issue, IssueCode, LintResults
from api_history_lint.core.workspace import DocsWorkspace, Document

if TYPE_CHECKING:
    from api_history_lint.config import LintContext
    from api_history_lint.reporters.base import Reporter

logger = logging.getLogger(__name__)


def lint_block(candidate: CandidateBlock, checks: list[Check]) -> Iterator[Issue]:
    """
    Run one candidate block through the pipeline.

    Format and parse errors end the block, the checks all run otherwise.
    Issues are yielded as each check returns, so they survive a later
    check raising.

    Raises:
        ReferenceDataError: A check could not load its reference data
    """
    file_path = candidate.document.relative_path

    try:
        block = extract_history_block(candidate)
    except BlockFormatError as e:
        yield Issue(
            severity="error",
            code=IssueCode.FORMAT_ERROR,
            message=f"Couldn't extract history block ({e.reason}), did you use the correct format?",
            file_path=file_path,
            line_number=candidate.line_number,
            details=e.raw,
            suggestion="Wrap a ```YAML history fenced block in a single <!-- --> comment",
        )
        return

    try:
        history = decode_history(block.yaml_text)
    except HistoryParseError as e:
        line_number = candidate.line_number
        if e.line is not None:
            line_number = block.yaml_line_number + e.line - 1
        yield Issue(
            severity="error",
            code=IssueCode.PARSE_ERROR,
            message=f"Invalid YAML in history block: {e.message}",
            file_path=file_path,
            line_number=line_number,
            details=candidate.raw,
        )
        return

    for check in checks:
        yield from check(block, history)


def lint_document(
    document: Document,
    checks: list[Check],
    results: LintResults,
    reporter: Optional["Reporter"] = None,
) -> None:
    """Lint every candidate block of one document into ``results``."""
    results.documents += 1
    try:
        for candidate in find_candidate_blocks(document):
            results.blocks += 1
            for issue in lint_block(candidate, checks):
                _emit(issue, results, reporter)
    except ReferenceDataError as e:
        logger.debug(f"Reference data failure while linting {document.relative_path}: {e}")
        _emit(_document_failure(document.relative_path, str(e)), results, reporter)


def lint_documents(
    documents: Iterable[Document],
    checks: list[Check],
    reporter: Optional["Reporter"] = None,
) -> LintResults:
    results = LintResults()
    for document in documents:
        lint_document(document, checks, results, reporter)
    return results


def lint_workspace(
    workspace: DocsWorkspace,
    context: "LintContext",
    reporter: Optional["Reporter"] = None,
) -> LintResults:
    """
    Lint every document of a workspace.

    Args:
        workspace: Document source
        context: Prepared run context (enabled checks, reference data)
        reporter: Receives each issue as it is found

    Returns:
        The accumulated results
    """
    checks = context.checks()
    logger.debug(f"Enabled checks: {', '.join(check.__name__ for check in checks) or 'none'}")

    results = LintResults()
    for path in workspace.iter_paths():
        try:
            document = workspace.load(path)
        except (OSError, UnicodeDecodeError) as e:
            results.documents += 1
            _emit(_document_failure(workspace.relative_path(path), f"cannot read document: {e}"), results, reporter)
            continue
        if reporter is not None:
            reporter.progress(f"Linting {document.relative_path}")
        lint_document(document, checks, results, reporter)
    return results


def _document_failure(file_path: str, message: str) -> Issue:
    return Issue(
        severity="error",
        code=IssueCode.DOCUMENT_FAILURE,
        message=message,
        file_path=file_path,
        line_number=0,
    )


def _emit(issue: Issue, results: LintResults, reporter: Optional["Reporter"]) -> None:
    results.add(issue)
    if reporter is not None:
        reporter.report_issue(issue)
