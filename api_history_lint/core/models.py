"""
Data models shared by the checks, the linter and the reporters.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional


Severity = Literal["error", "warning"]


class IssueCode(str, Enum):
    """Issue codes emitted by the pipeline."""
    FORMAT_ERROR = "FORMAT_ERROR"                        # not a comment + fenced YAML block
    PARSE_ERROR = "PARSE_ERROR"                          # YAML does not decode
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
    MISSING_HEADING = "MISSING_HEADING"
    UNKNOWN_BREAKING_CHANGE = "UNKNOWN_BREAKING_CHANGE"
    UNKNOWN_PULL_REQUEST = "UNKNOWN_PULL_REQUEST"
    UNSAFE_STRING = "UNSAFE_STRING"
    UNQUOTED_DESCRIPTION = "UNQUOTED_DESCRIPTION"
    DOCUMENT_FAILURE = "DOCUMENT_FAILURE"                # I/O or reference data failure


@dataclass
class Issue:
    """
    A single diagnostic.

    Attributes:
        severity: error or warning
        code: Issue code
        message: One-line description
        file_path: Workspace-relative path of the document
        line_number: 1-based line of the block in the document
        details: Extra context (raw block text, decoded value, validator errors)
        suggestion: How to fix it
    """
    severity: Severity
    code: IssueCode
    message: str
    file_path: str
    line_number: int
    details: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code.value,
            "message": self.message,
            "file_path": self.file_path,
            "line_number": self.line_number,
            "details": self.details,
            "suggestion": self.suggestion,
        }


@dataclass
class LintResults:
    """
    Running totals for one lint run.

    Attributes:
        documents: Documents processed
        blocks: Candidate blocks processed
        errors: Error count
        warnings: Warning count
        issues: Every issue in the order it was found
    """
    documents: int = 0
    blocks: int = 0
    errors: int = 0
    warnings: int = 0
    issues: list[Issue] = field(default_factory=list)

    def add(self, issue: Issue) -> None:
        """Record an issue and bump the matching counter."""
        self.issues.append(issue)
        if issue.severity == "error":
            self.errors += 1
        else:
            self.warnings += 1

    @property
    def exit_code(self) -> int:
        return 1 if self.errors > 0 else 0

    def summary(self) -> str:
        return (
            f"Processed {self.blocks} block(s) in {self.documents} document(s) "
            f"with {self.errors} error(s) and {self.warnings} warning(s)."
        )
