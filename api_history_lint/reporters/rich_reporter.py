"""
Rich terminal reporter - issues on stderr as they are found, summary on stdout.
"""

from rich.console import Console
from rich.text import Text

from api_history_lint.core.models import Issue, LintResults


SEVERITY_STYLES = {
    "error": ("✖", "bold red"),
    "warning": ("⚠", "bold yellow"),
}


class RichReporter:
    """Rich terminal reporter"""

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
        verbose: bool = False,
    ):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.verbose = verbose

    def report_issue(self, issue: Issue) -> None:
        icon, style = SEVERITY_STYLES.get(issue.severity, ("•", "bold"))

        location = issue.file_path
        if issue.line_number:
            location += f":{issue.line_number}"

        header = Text()
        header.append(f"{icon} {issue.severity} ", style=style)
        header.append(f"[{issue.code.value}] ", style="dim")
        header.append(location, style="cyan")
        self.err_console.print(header, soft_wrap=True)
        self.err_console.print(Text(f"  {issue.message}"), soft_wrap=True)

        # Raw block text and validator output, printed as-is
        if issue.details:
            self.err_console.print(Text(issue.details, style="dim"), soft_wrap=True)
        if issue.suggestion:
            self.err_console.print(Text(f"  → {issue.suggestion}", style="dim"), soft_wrap=True)
        self.err_console.print()

    def progress(self, message: str) -> None:
        if self.verbose:
            self.err_console.print(Text(message, style="dim"), soft_wrap=True)

    def report(self, results: LintResults) -> None:
        style = "bold red" if results.errors else "bold green"
        self.console.print(Text(results.summary(), style=style), soft_wrap=True)
