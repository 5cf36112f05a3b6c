"""
Reporter base - the interface the linter talks to.
"""

from typing import Protocol

from api_history_lint.core.models import Issue, LintResults


class Reporter(Protocol):
    """Reporter protocol"""

    def report_issue(self, issue: Issue) -> None:
        """Called once per issue, as soon as it is found."""
        ...

    def progress(self, message: str) -> None:
        """Progress note, only shown in verbose mode."""
        ...

    def report(self, results: LintResults) -> None:
        """Called once after the scan with the final totals."""
        ...
