"""
CLI entry module - command line interface built with Typer

Lint flow:
1. Validate options and load reference data (schema, breaking changes, PR index)
2. Expand globs into documents
3. Lint every API history block of every document
4. Print the summary and exit 1 if any error was found
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from api_history_lint.config import LintOptions
from api_history_lint.core import DocsWorkspace, LintConfigError, lint_workspace
from api_history_lint.core.references import DEFAULT_PULL_REQUEST_REPO
from api_history_lint.reporters import JsonReporter, RichReporter

# Typer application
app = typer.Typer(
    name="api-history-lint",
    help="Lint the API history blocks embedded in Markdown documentation.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    rich = "rich"
    json = "json"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    if value:
        from api_history_lint import __version__
        console.print(f"[bold]api-history-lint[/bold] v{__version__}")
        raise typer.Exit()


@app.command()
def lint(
    globs: List[str] = typer.Argument(
        ...,
        help="Markdown globs relative to --root, {a,b} alternatives allowed",
    ),
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Base directory for the globs",
    ),
    ignore: Optional[List[str]] = typer.Option(
        None,
        "--ignore",
        help="Glob to exclude (repeatable, gitignore syntax)",
    ),
    ignore_path: Optional[Path] = typer.Option(
        None,
        "--ignore-path",
        help="File with newline-delimited globs to exclude",
    ),
    check_placement: bool = typer.Option(
        True,
        "--check-placement/--no-check-placement",
        help="Require a heading directly before every history block",
    ),
    check_strings: bool = typer.Option(
        True,
        "--check-strings/--no-check-strings",
        help="Warn about unquoted values with special characters at either end",
    ),
    check_descriptions: bool = typer.Option(
        False,
        "--check-descriptions",
        help="Require description values to be quoted",
    ),
    schema: Optional[Path] = typer.Option(
        None,
        "--schema",
        help="JSON schema to validate every history block against",
    ),
    breaking_changes_file: Optional[Path] = typer.Option(
        None,
        "--breaking-changes-file",
        help="Markdown file whose level-3 headings are the valid breaking-changes-header values",
    ),
    check_pull_request_links: bool = typer.Option(
        False,
        "--check-pull-request-links",
        help="Check every pr-url against the release index (needs $GITHUB_TOKEN)",
    ),
    pull_request_repo: str = typer.Option(
        DEFAULT_PULL_REQUEST_REPO,
        "--pull-request-repo",
        help="owner/name of the repository whose releases build the PR index",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.rich,
        "--format",
        "-f",
        help="Output format: rich (default) or json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    Lint API history blocks in Markdown documents.

    Examples:
        api-history-lint "docs/api/*.md"
        api-history-lint --root docs --schema api-history.schema.json "api/**/*.md"
        api-history-lint --breaking-changes-file docs/breaking-changes.md "docs/**/*.md"
    """
    configure_logging(verbose)

    options = LintOptions(
        root=root,
        globs=list(globs),
        ignore_globs=list(ignore or []),
        ignore_path=ignore_path,
        check_placement=check_placement,
        check_strings=check_strings,
        check_descriptions=check_descriptions,
        schema_path=schema,
        breaking_changes_file=breaking_changes_file,
        check_pull_request_links=check_pull_request_links,
        pull_request_repo=pull_request_repo,
    )

    # 1. Configuration problems are fatal before anything is scanned
    try:
        context = options.prepare()
    except LintConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1)

    if verbose:
        err_console.print(f"[dim]Root: {escape(str(root.resolve()))}[/dim]")
        if context.ignore_globs:
            err_console.print(f"[dim]Ignoring: {escape(', '.join(context.ignore_globs))}[/dim]")

    # 2. Lint
    if format == OutputFormat.json:
        reporter = JsonReporter()
    else:
        reporter = RichReporter(console, err_console, verbose=verbose)

    workspace = DocsWorkspace(root, options.globs, context.ignore_globs)
    results = lint_workspace(workspace, context, reporter)

    # 3. Summary and exit code
    reporter.report(results)
    raise typer.Exit(results.exit_code)


if __name__ == "__main__":
    app()
