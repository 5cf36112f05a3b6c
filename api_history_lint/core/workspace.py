"""
Document source for a lint run.

Expands the positional globs relative to the workspace root, drops paths
matched by the ignore patterns (gitignore semantics via pathspec) and loads
each remaining file as a ``Document``.
"""

import logging
import re
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Iterable, Iterator

import pathspec
from markdown_it.tree import SyntaxTreeNode

from api_history_lint.core.parser import parse_tree

logger = logging.getLogger(__name__)

_BRACE_PATTERN = re.compile(r"\{([^{}]*,[^{}]*)\}")


@dataclass(frozen=True)
class Document:
    """
    A Markdown document

    Attributes:
        uri: file:// URI, the identity of the document
        relative_path: Path relative to the workspace root, used in diagnostics
        text: Full document text
    """
    uri: str
    relative_path: str
    text: str

    @cached_property
    def tree(self) -> SyntaxTreeNode:
        return parse_tree(self.text)

    @classmethod
    def from_text(cls, text: str, relative_path: str = "document.md") -> "Document":
        """Build an in-memory document (no file behind it)."""
        return cls(uri=f"memory:///{relative_path}", relative_path=relative_path, text=text)


def expand_braces(pattern: str) -> list[str]:
    """
    Expand ``{a,b}`` alternatives in a glob pattern.

    ``docs/{api,tutorial}/*.md`` -> ``docs/api/*.md``, ``docs/tutorial/*.md``
    """
    match = _BRACE_PATTERN.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


class DocsWorkspace:
    """Markdown documents under a root directory selected by globs."""

    def __init__(self, root: Path, globs: Iterable[str], ignore_globs: Iterable[str] = ()):
        self.root = root.resolve()
        self.globs = list(globs)
        self.ignore_globs = [g for g in ignore_globs if g.strip()]
        self._ignore_spec = pathspec.PathSpec.from_lines("gitwildmatch", self.ignore_globs)

    def relative_path(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def should_ignore(self, path: Path) -> bool:
        return self._ignore_spec.match_file(self.relative_path(path))

    def iter_paths(self) -> Iterator[Path]:
        """Yield matching files in glob order, sorted within each glob, without duplicates."""
        seen: set[Path] = set()
        for raw_glob in self.globs:
            for pattern in expand_braces(raw_glob):
                for path in sorted(self.root.glob(pattern)):
                    if not path.is_file() or path in seen:
                        continue
                    seen.add(path)
                    if self.should_ignore(path):
                        logger.debug(f"Ignoring {self.relative_path(path)}")
                        continue
                    yield path

    def load(self, path: Path) -> Document:
        """Read one file. Raises OSError / UnicodeDecodeError."""
        return Document(
            uri=path.resolve().as_uri(),
            relative_path=self.relative_path(path),
            text=path.read_text(encoding="utf-8"),
        )
