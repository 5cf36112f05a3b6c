"""
Validator chain - independent checks run over one decoded history block.

Each check is a plain callable ``(block, history) -> list[Issue]``. Checks
that need reference data are built by a factory that closes over it. The
chain for a run is a flat list assembled from the options; every check runs
regardless of what the previous ones reported.

Checks:
1. String safety: unquoted values with punctuation at either end (warning)
2. Description quoting: unquoted ``*description`` values (error)
3. Schema: decoded value against the JSON schema (error)
4. Placement: block must follow a heading (error)
5. Breaking changes: ``breaking-changes-header`` must exist in the index (error)
6. Pull requests: PR number must exist in the release index (warning)
"""

import json
import re
from typing import Any, Callable, Iterator, Optional

from api_history_lint.core.extractor import HistoryBlock
from api_history_lint.core.models import Issue, IssueCode, Severity
from api_history_lint.core.references import PullRequestIndex, extract_pull_request_number
from api_history_lint.core.schema import HistorySchema

Check = Callable[[HistoryBlock, Any], list[Issue]]

# `key: value` with an optional list dash, value not blank
_KEY_VALUE_LINE = re.compile(r"^\s*(?:-\s+)?([\w-]+):[ \t]+(\S.*)$")
_DESCRIPTION_LINE = re.compile(r"^\s*(?:-\s+)?([\w-]*description):[ \t]+(\S.*)$")

BREAKING_CHANGE_SECTIONS = ("changes", "deprecated")
PULL_REQUEST_SECTIONS = ("added", "changes", "deprecated")


def _issue(
    block: HistoryBlock,
    severity: Severity,
    code: IssueCode,
    message: str,
    details: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> Issue:
    candidate = block.candidate
    return Issue(
        severity=severity,
        code=code,
        message=message,
        file_path=candidate.document.relative_path,
        line_number=candidate.line_number,
        details=details if details is not None else block.raw,
        suggestion=suggestion,
    )


def is_quoted(value: str) -> bool:
    """True if the value is wrapped in one matching pair of single or double quotes."""
    return len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"')


def _is_safe_boundary(ch: str) -> bool:
    return ch.isalnum() or ch == "."


def _iter_records(history: Any, sections: tuple[str, ...]) -> Iterator[tuple[str, dict]]:
    """Yield (section, record) pairs, skipping anything that is not shaped like a record."""
    if not isinstance(history, dict):
        return
    for section in sections:
        records = history.get(section)
        if not isinstance(records, list):
            continue
        for record in records:
            if isinstance(record, dict):
                yield section, record


# ============================================================
# Text checks
# ============================================================

def check_strings(block: HistoryBlock, history: Any) -> list[Issue]:
    issues: list[Issue] = []
    for line in block.yaml_text.splitlines():
        match = _KEY_VALUE_LINE.match(line)
        if not match:
            continue
        key, value = match.group(1), match.group(2).strip()
        if is_quoted(value):
            continue
        if _is_safe_boundary(value[0]) and _is_safe_boundary(value[-1]):
            continue
        issues.append(_issue(
            block,
            "warning",
            IssueCode.UNSAFE_STRING,
            f"Possible string with special characters at its boundaries: {key}: {value}",
            suggestion="Unquoted special characters can break YAML parsing, wrap the value in quotes",
        ))
    return issues


def check_descriptions(block: HistoryBlock, history: Any) -> list[Issue]:
    issues: list[Issue] = []
    for line in block.yaml_text.splitlines():
        match = _DESCRIPTION_LINE.match(line)
        if not match:
            continue
        key, value = match.group(1), match.group(2).strip()
        if is_quoted(value):
            continue
        issues.append(_issue(
            block,
            "error",
            IssueCode.UNQUOTED_DESCRIPTION,
            f"Description must be wrapped in quotes: {key}: {value}",
            suggestion='Wrap the description in double quotes, e.g. description: "..."',
        ))
    return issues


# ============================================================
# Structure checks
# ============================================================

def schema_check(schema: HistorySchema) -> Check:
    def check_schema(block: HistoryBlock, history: Any) -> list[Issue]:
        errors = schema.errors(history)
        if not errors:
            return []
        details = "\n".join([
            block.raw,
            json.dumps(history, indent=4, default=str, ensure_ascii=False),
            json.dumps(errors, indent=4, default=str, ensure_ascii=False),
        ])
        return [_issue(
            block,
            "error",
            IssueCode.SCHEMA_VIOLATION,
            f"History does not match the schema ({len(errors)} problem(s))",
            details=details,
        )]

    return check_schema


def check_placement(block: HistoryBlock, history: Any) -> list[Issue]:
    previous = block.candidate.previous
    if previous is not None and previous.type == "heading":
        return []
    return [_issue(
        block,
        "error",
        IssueCode.MISSING_HEADING,
        "API history block must be preceded by a heading",
        suggestion="Move the block directly below the heading of the API it documents",
    )]


# ============================================================
# Cross-reference checks
# ============================================================

def breaking_changes_check(headers: frozenset[str]) -> Check:
    def check_breaking_changes(block: HistoryBlock, history: Any) -> list[Issue]:
        issues: list[Issue] = []
        for section, record in _iter_records(history, BREAKING_CHANGE_SECTIONS):
            if "breaking-changes-header" not in record:
                continue
            header = record["breaking-changes-header"]
            if isinstance(header, str) and header in headers:
                continue
            issues.append(_issue(
                block,
                "error",
                IssueCode.UNKNOWN_BREAKING_CHANGE,
                f"Couldn't find breaking changes header '{header}' ({section}) in the breaking changes file",
                suggestion="Use the anchor of a level-3 heading from the breaking changes file",
            ))
        return issues

    return check_breaking_changes


def pull_request_check(index: PullRequestIndex) -> Check:
    def check_pull_requests(block: HistoryBlock, history: Any) -> list[Issue]:
        issues: list[Issue] = []
        for section, record in _iter_records(history, PULL_REQUEST_SECTIONS):
            url = record.get("pr-url")
            number = extract_pull_request_number(url) if isinstance(url, str) else None
            if number is None:
                issues.append(_issue(
                    block,
                    "warning",
                    IssueCode.UNKNOWN_PULL_REQUEST,
                    f"Couldn't extract a PR number from pr-url {url!r} ({section})",
                ))
                continue
            if index.lookup(number) is None:
                issues.append(_issue(
                    block,
                    "warning",
                    IssueCode.UNKNOWN_PULL_REQUEST,
                    f"Couldn't find PR number {number} ({section}) in any release, maybe the list is stale",
                ))
        return issues

    return check_pull_requests
