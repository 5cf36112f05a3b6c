"""Shared fixtures for the api-history-lint tests."""

import textwrap
from pathlib import Path

import pytest

from api_history_lint.core.locator import find_candidate_blocks
from api_history_lint.core.workspace import Document

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
SCHEMA_PATH = FIXTURES_DIR / "api-history.schema.json"
BREAKING_CHANGES_PATH = FIXTURES_DIR / "breaking-changes.md"


def make_document(text: str, name: str = "doc.md") -> Document:
    return Document.from_text(textwrap.dedent(text).lstrip("\n"), relative_path=name)


def history_block(yaml_text: str, heading: str = "### `app.foo()`", fence: str = "```YAML history") -> str:
    """Markdown with one history block under a heading."""
    body = textwrap.dedent(yaml_text).strip("\n")
    parts = []
    if heading:
        parts.append(f"{heading}\n\n")
    parts.append(f"<!--\n{fence}\n{body}\n```\n-->\n")
    return "".join(parts)


def only_candidate(text: str):
    candidates = list(find_candidate_blocks(make_document(text)))
    assert len(candidates) == 1
    return candidates[0]


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture(autouse=True)
def _no_test_mode(monkeypatch):
    """Tests opt into the mock PR index explicitly."""
    monkeypatch.delenv("API_HISTORY_LINT_TEST_MODE", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
