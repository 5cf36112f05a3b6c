"""
Run configuration.

``LintOptions`` holds one field per toggle or path, exactly as given on the
command line. ``LintOptions.prepare()`` checks and loads everything the run
needs up front and returns a ``LintContext``; any problem is a
``LintConfigError`` raised before a single document is read.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from api_history_lint.core.checks import (
    Check,
    breaking_changes_check,
    check_descriptions,
    check_placement,
    check_strings,
    pull_request_check,
    schema_check,
)
from api_history_lint.core.errors import LintConfigError
from api_history_lint.core.references import (
    DEFAULT_PULL_REQUEST_REPO,
    PullRequestIndex,
    load_breaking_changes_index,
)
from api_history_lint.core.schema import HistorySchema
from api_history_lint.core.workspace import expand_braces

logger = logging.getLogger(__name__)


def load_ignore_file(path: Path) -> list[str]:
    """
    Read newline-delimited ignore globs.

    Blank lines and ``#`` comments are skipped.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LintConfigError(f"cannot read ignore file {path}: {e}") from e
    globs = []
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            globs.append(line)
    return globs


@dataclass
class LintOptions:
    """
    Options for one lint run

    Attributes:
        root: Base directory for the globs
        globs: Markdown globs relative to root
        ignore_globs: Exclusion patterns
        ignore_path: File with more exclusion patterns
        check_placement: Require a heading before every block
        check_strings: Warn about unquoted values with special boundary characters
        check_descriptions: Require quoted descriptions
        schema_path: JSON schema for the decoded history
        breaking_changes_file: Markdown file whose level-3 headings are valid breaking-changes-header values
        check_pull_request_links: Look up every PR number in the release index
        pull_request_repo: GitHub repository whose releases build the index
    """
    root: Path = Path(".")
    globs: list[str] = field(default_factory=list)
    ignore_globs: list[str] = field(default_factory=list)
    ignore_path: Optional[Path] = None
    check_placement: bool = True
    check_strings: bool = True
    check_descriptions: bool = False
    schema_path: Optional[Path] = None
    breaking_changes_file: Optional[Path] = None
    check_pull_request_links: bool = False
    pull_request_repo: str = DEFAULT_PULL_REQUEST_REPO

    def prepare(
        self,
        environ: Optional[Mapping[str, str]] = None,
        pull_requests: Optional[PullRequestIndex] = None,
    ) -> "LintContext":
        """
        Validate the options and load the reference data.

        Args:
            environ: Environment for the PR index credentials (defaults to os.environ)
            pull_requests: Pre-built PR index, replaces the environment based one

        Raises:
            LintConfigError: A path is missing/unreadable, a glob is empty or absolute, or a credential is absent
        """
        if not self.root.is_dir():
            raise LintConfigError(f"root is not a directory: {self.root}")

        for raw_glob in self.globs:
            for pattern in expand_braces(raw_glob):
                if not pattern.strip():
                    raise LintConfigError(f"empty glob pattern in {raw_glob!r}")
                if Path(pattern).is_absolute():
                    raise LintConfigError(f"glob {pattern!r} must be relative to the root")

        ignore_globs = list(self.ignore_globs)
        if self.ignore_path is not None:
            ignore_globs.extend(load_ignore_file(self.ignore_path))

        schema = HistorySchema.from_path(self.schema_path) if self.schema_path else None

        breaking_changes = None
        if self.breaking_changes_file is not None:
            breaking_changes = load_breaking_changes_index(self.breaking_changes_file)

        if self.check_pull_request_links and pull_requests is None:
            pull_requests = PullRequestIndex.from_environment(self.pull_request_repo, environ)
        elif not self.check_pull_request_links:
            pull_requests = None

        return LintContext(
            options=self,
            ignore_globs=ignore_globs,
            schema=schema,
            breaking_changes=breaking_changes,
            pull_requests=pull_requests,
        )


@dataclass
class LintContext:
    """Prepared inputs of a run: loaded schema, reference indexes, ignore list."""
    options: LintOptions
    ignore_globs: list[str] = field(default_factory=list)
    schema: Optional[HistorySchema] = None
    breaking_changes: Optional[frozenset[str]] = None
    pull_requests: Optional[PullRequestIndex] = None

    def checks(self) -> list[Check]:
        """The enabled checks, schema before the reference checks."""
        chain: list[Check] = []
        if self.options.check_strings:
            chain.append(check_strings)
        if self.options.check_descriptions:
            chain.append(check_descriptions)
        if self.schema is not None:
            chain.append(schema_check(self.schema))
        if self.options.check_placement:
            chain.append(check_placement)
        if self.breaking_changes is not None:
            chain.append(breaking_changes_check(self.breaking_changes))
        if self.pull_requests is not None:
            chain.append(pull_request_check(self.pull_requests))
        return chain
