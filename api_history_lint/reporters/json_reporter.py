"""
JSON reporter - one JSON document on stdout once the scan is done.
"""

import json
import sys
from typing import TextIO

from api_history_lint.core.models import Issue, LintResults


class JsonReporter:
    """JSON reporter"""

    def __init__(self, output: TextIO | None = None):
        self.output = output
        self.issues: list[Issue] = []

    def report_issue(self, issue: Issue) -> None:
        self.issues.append(issue)

    def progress(self, message: str) -> None:
        pass

    def report(self, results: LintResults) -> None:
        report_data = {
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": {
                "documents": results.documents,
                "blocks": results.blocks,
                "errors": results.errors,
                "warnings": results.warnings,
                "passed": results.errors == 0,
                "message": results.summary(),
            },
        }

        json_str = json.dumps(report_data, indent=2, ensure_ascii=False)
        print(json_str, file=self.output or sys.stdout)
