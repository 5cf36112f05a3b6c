"""
Reference data used by the cross-reference checks.

- Breaking-changes index: slugs of the level-3 headings of a companion
  Markdown document, built once before scanning.
- Pull request release index: PR number -> release, loaded lazily on first
  use and memoised on the ``PullRequestIndex`` instance owned by the run.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import requests

from api_history_lint.core.errors import LintConfigError, ReferenceDataError
from api_history_lint.core.parser import iter_headers, parse_tree

logger = logging.getLogger(__name__)

BREAKING_CHANGES_HEADING_LEVEL = 3

TOKEN_ENV = "GITHUB_TOKEN"
TEST_MODE_ENV = "API_HISTORY_LINT_TEST_MODE"
DEFAULT_PULL_REQUEST_REPO = "electron/electron"

_PR_REFERENCE = re.compile(r"(?:/pull/|#)(\d+)\b")


# ============================================================
# Breaking changes
# ============================================================

def build_breaking_changes_index(content: str) -> frozenset[str]:
    """Slugs of every level-3 heading in ``content``."""
    tree = parse_tree(content)
    return frozenset(
        header.id for header in iter_headers(tree, level=BREAKING_CHANGES_HEADING_LEVEL)
    )


def load_breaking_changes_index(path: Path) -> frozenset[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LintConfigError(f"cannot read breaking changes file {path}: {exc}") from exc
    index = build_breaking_changes_index(content)
    logger.debug(f"Loaded {len(index)} breaking change header(s) from {path}")
    return index


# ============================================================
# Pull requests
# ============================================================

@dataclass(frozen=True)
class ReleaseInfo:
    """Release that first shipped a pull request."""
    tag: str
    published_at: Optional[str] = None


MOCK_PULL_REQUEST_INDEX: dict[int, ReleaseInfo] = {
    15216: ReleaseInfo("v4.0.0", "2018-12-20T18:44:48Z"),
    22533: ReleaseInfo("v9.0.0", "2020-05-18T23:46:39Z"),
    26789: ReleaseInfo("v12.0.0", "2021-03-01T23:21:34Z"),
    37094: ReleaseInfo("v25.0.0", "2023-05-30T18:03:35Z"),
    42396: ReleaseInfo("v31.0.0", "2024-06-11T16:18:58Z"),
}

IndexLoader = Callable[[], Mapping[int, ReleaseInfo]]


def is_test_mode(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(TEST_MODE_ENV, "").strip().lower() in ("1", "true", "yes")


def extract_pull_request_number(url: str) -> Optional[int]:
    """Trailing numeric path segment of a PR URL, e.g. ``.../pull/22533`` -> 22533."""
    match = re.search(r"/(\d+)/?$", url.strip())
    return int(match.group(1)) if match else None


def index_release_bodies(releases: list[dict[str, Any]]) -> dict[int, ReleaseInfo]:
    """
    Map every PR referenced in a release body to that release.

    When several releases mention the same PR the earliest one wins.
    """
    index: dict[int, ReleaseInfo] = {}
    for release in releases:
        if not isinstance(release, dict):
            continue
        tag = release.get("tag_name")
        if not tag:
            continue
        info = ReleaseInfo(str(tag), release.get("published_at"))
        for match in _PR_REFERENCE.finditer(release.get("body") or ""):
            number = int(match.group(1))
            current = index.get(number)
            if current is None or _is_earlier(info, current):
                index[number] = info
    return index


def _is_earlier(candidate: ReleaseInfo, current: ReleaseInfo) -> bool:
    if candidate.published_at is None:
        return False
    if current.published_at is None:
        return True
    return candidate.published_at < current.published_at


class GitHubReleaseFetcher:
    """Fetch the releases of a repository from the GitHub REST API."""

    API_ROOT = "https://api.github.com"

    def __init__(
        self,
        repo: str,
        token: str,
        session: requests.Session | None = None,
        max_pages: int = 50,
        timeout: int = 30,
    ) -> None:
        self._repo = repo
        self._token = token
        self._session = session or requests.Session()
        self._max_pages = max_pages
        self._timeout = timeout

    def __call__(self) -> dict[int, ReleaseInfo]:
        return index_release_bodies(self.fetch_releases())

    def fetch_releases(self) -> list[dict[str, Any]]:
        url: str | None = f"{self.API_ROOT}/repos/{self._repo}/releases"
        params: dict[str, Any] = {"per_page": 100}
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
        }
        releases: list[dict[str, Any]] = []
        pages = 0
        while url and pages < self._max_pages:
            try:
                response = self._session.get(url, params=params, headers=headers, timeout=self._timeout)
            except requests.RequestException as exc:
                raise ReferenceDataError(f"release fetch failed for {self._repo}: {exc}") from exc
            params = {}  # subsequent pages use link headers only
            if response.status_code >= 400:
                raise ReferenceDataError(
                    f"release fetch failed for {self._repo}: {response.status_code} {response.text}"
                )
            try:
                page_items = response.json()
            except ValueError as exc:
                raise ReferenceDataError(
                    f"release fetch failed for {self._repo}: response is not JSON: {exc}"
                ) from exc
            if not isinstance(page_items, list) or not page_items:
                break
            releases.extend(page_items)
            pages += 1
            url = response.links.get("next", {}).get("url")
        logger.debug(f"Fetched {len(releases)} release(s) of {self._repo}")
        return releases


class PullRequestIndex:
    """
    Lazily loaded, memoised PR release index.

    The loader runs at most once; a failure is remembered and raised again on
    later lookups instead of retrying.
    """

    def __init__(self, loader: IndexLoader) -> None:
        self._loader = loader
        self._index: Mapping[int, ReleaseInfo] | None = None
        self._error: ReferenceDataError | None = None

    @classmethod
    def from_mapping(cls, index: Mapping[int, ReleaseInfo]) -> "PullRequestIndex":
        return cls(lambda: index)

    @classmethod
    def from_environment(
        cls,
        repo: str = DEFAULT_PULL_REQUEST_REPO,
        environ: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> "PullRequestIndex":
        """Mock index in test mode, otherwise GitHub releases with the token from the environment."""
        env = os.environ if environ is None else environ
        if is_test_mode(env):
            logger.debug("Test mode: using the mock pull request index")
            return cls.from_mapping(MOCK_PULL_REQUEST_INDEX)
        token = env.get(TOKEN_ENV)
        if not token:
            raise LintConfigError(
                f"--check-pull-request-links requires a GitHub token in ${TOKEN_ENV}"
            )
        return cls(GitHubReleaseFetcher(repo, token, session=session))

    def load(self) -> Mapping[int, ReleaseInfo]:
        if self._error is not None:
            raise self._error
        if self._index is None:
            try:
                self._index = self._loader()
            except ReferenceDataError as exc:
                self._error = exc
                raise
            logger.debug(f"Pull request index holds {len(self._index)} entries")
        return self._index

    def lookup(self, number: int) -> Optional[ReleaseInfo]:
        return self.load().get(number)
