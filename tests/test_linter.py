"""
Tests for the lint pipeline (api_history_lint/core/linter.py)

Covers the end-to-end scenarios over the Markdown fixtures plus the
aggregation rules.
"""

from unittest.mock import MagicMock

import pytest
import requests

from api_history_lint.config import LintOptions
from api_history_lint.core.errors import ReferenceDataError
from api_history_lint.core.linter import lint_documents, lint_workspace
from api_history_lint.core.models import IssueCode
from api_history_lint.core.references import PullRequestIndex
from api_history_lint.core.workspace import DocsWorkspace

from conftest import BREAKING_CHANGES_PATH, FIXTURES_DIR, SCHEMA_PATH, history_block, make_document

ALL_CHECKS = dict(
    check_descriptions=True,
    schema_path=SCHEMA_PATH,
    breaking_changes_file=BREAKING_CHANGES_PATH,
    check_pull_request_links=True,
)
TEST_ENV = {"API_HISTORY_LINT_TEST_MODE": "1"}


def lint_fixture(*names, reporter=None, **options):
    lint_options = LintOptions(root=FIXTURES_DIR, globs=list(names), **options)
    context = lint_options.prepare(environ=TEST_ENV)
    workspace = DocsWorkspace(FIXTURES_DIR, lint_options.globs, context.ignore_globs)
    return lint_workspace(workspace, context, reporter)


def codes(results):
    return [issue.code for issue in results.issues]


# ─── scenarios ─────────────────────────────────────────────────────────────

class TestScenarios:
    def test_valid_block(self):
        results = lint_fixture("api-history-valid.md", **ALL_CHECKS)
        assert (results.blocks, results.documents, results.errors, results.warnings) == (1, 1, 0, 0)
        assert results.exit_code == 0

    def test_valid_block_default_checks(self):
        results = lint_fixture("api-history-valid.md")
        assert results.issues == []

    def test_format_error(self):
        results = lint_fixture("api-history-format-invalid.md", **ALL_CHECKS)
        assert codes(results) == [IssueCode.FORMAT_ERROR]
        assert "did you use the correct format?" in results.issues[0].message
        assert results.issues[0].details.startswith("<!--")
        assert results.exit_code == 1

    def test_yml_fence_is_a_format_error(self):
        doc = make_document(history_block(
            'added:\n  - pr-url: https://github.com/electron/electron/pull/1\n    description: "yaml"',
            fence="```yml history",
        ))
        results = lint_documents([doc], LintOptions().prepare().checks())
        assert codes(results) == [IssueCode.FORMAT_ERROR]
        assert results.blocks == 1

    def test_parse_error(self):
        results = lint_fixture("api-history-yaml-invalid.md", **ALL_CHECKS)
        assert codes(results) == [IssueCode.PARSE_ERROR]
        assert "mapping values are not allowed here" in results.issues[0].message
        assert results.exit_code == 1

    def test_parse_error_points_at_the_yaml_line(self):
        results = lint_fixture("api-history-yaml-invalid.md")
        # line 9 holds `description: Made work for: windows`
        assert results.issues[0].line_number == 9

    def test_schema_error(self):
        results = lint_fixture("api-history-schema-invalid.md", schema_path=SCHEMA_PATH)
        assert codes(results) == [IssueCode.SCHEMA_VIOLATION]
        assert '"keyword": "minLength"' in results.issues[0].details

    def test_missing_heading(self):
        results = lint_fixture("api-history-heading-missing.md")
        assert codes(results) == [IssueCode.MISSING_HEADING]
        assert results.exit_code == 1

    def test_missing_heading_check_disabled(self):
        results = lint_fixture("api-history-heading-missing.md", check_placement=False)
        assert results.errors == 0

    def test_unknown_breaking_changes_header(self):
        results = lint_fixture(
            "api-history-breaking-changes-invalid.md",
            breaking_changes_file=BREAKING_CHANGES_PATH,
        )
        assert codes(results) == [IssueCode.UNKNOWN_BREAKING_CHANGE]
        assert "foo-bar" in results.issues[0].message
        assert results.exit_code == 1

    def test_unsafe_string_is_only_a_warning(self):
        results = lint_fixture("api-history-string-invalid.md")
        assert codes(results) == [IssueCode.UNSAFE_STRING]
        assert (results.errors, results.warnings) == (0, 1)
        assert results.exit_code == 0

    def test_unquoted_description(self):
        results = lint_fixture("api-history-description-invalid.md", check_descriptions=True)
        assert codes(results) == [IssueCode.UNQUOTED_DESCRIPTION]
        assert lint_fixture("api-history-description-invalid.md").issues == []

    def test_unknown_pull_request_is_only_a_warning(self):
        results = lint_fixture("api-history-pull-request-invalid.md", check_pull_request_links=True)
        assert codes(results) == [IssueCode.UNKNOWN_PULL_REQUEST]
        assert results.exit_code == 0


# ─── properties ────────────────────────────────────────────────────────────

class TestProperties:
    def test_no_blocks(self):
        results = lint_fixture("no-history.md", **ALL_CHECKS)
        assert (results.documents, results.blocks, results.errors, results.warnings) == (1, 0, 0, 0)

    def test_idempotent(self):
        doc = make_document(history_block(
            "changes:\n  - pr-url: https://github.com/electron/electron/pull/1\n    description: (x)\n",
            heading="",
        ))
        checks = LintOptions().prepare().checks()
        first = lint_documents([doc], checks)
        second = lint_documents([doc], checks)
        assert first.issues == second.issues
        assert (first.errors, first.warnings) == (second.errors, second.warnings) == (1, 1)

    def test_empty_history_has_nothing_to_cross_reference(self):
        doc = make_document(history_block("{}"))
        options = LintOptions(**ALL_CHECKS)
        checks = options.prepare(environ=TEST_ENV).checks()
        results = lint_documents([doc], checks)
        assert results.issues == []

    def test_bad_block_does_not_stop_the_document(self):
        text = (
            history_block("added: [", heading="## broken")
            + "\n"
            + history_block("added:\n  - pr-url: https://github.com/electron/electron/pull/2", heading="")
        )
        results = lint_documents([make_document(text)], LintOptions().prepare().checks())
        assert results.blocks == 2
        assert codes(results) == [IssueCode.PARSE_ERROR, IssueCode.MISSING_HEADING]

    def test_counts_across_documents(self):
        results = lint_fixture("{api-history-valid,api-history-yaml-invalid}.md", schema_path=SCHEMA_PATH)
        assert (results.blocks, results.documents, results.errors) == (2, 2, 1)
        assert results.summary() == (
            "Processed 2 block(s) in 2 document(s) with 1 error(s) and 0 warning(s)."
        )


# ─── failures ──────────────────────────────────────────────────────────────

class TestDocumentFailures:
    def test_reference_data_failure_is_counted_and_scan_continues(self):
        def loader():
            raise ReferenceDataError("release fetch failed")

        options = LintOptions(check_pull_request_links=True)
        checks = options.prepare(pull_requests=PullRequestIndex(loader)).checks()
        valid = make_document(history_block(
            "added:\n  - pr-url: https://github.com/electron/electron/pull/1\n"
        ), name="a.md")
        empty = make_document("# nothing here\n", name="b.md")
        results = lint_documents([valid, empty, valid], checks)
        assert results.documents == 3
        assert codes(results) == [IssueCode.DOCUMENT_FAILURE, IssueCode.DOCUMENT_FAILURE]
        assert results.issues[0].message == "release fetch failed"

    def test_issues_found_before_a_reference_failure_are_kept(self):
        def loader():
            raise ReferenceDataError("release fetch failed")

        options = LintOptions(check_pull_request_links=True)
        checks = options.prepare(pull_requests=PullRequestIndex(loader)).checks()
        doc = make_document(history_block(
            "changes:\n  - pr-url: https://github.com/electron/electron/pull/1\n    description: (x)\n",
            heading="",
        ))
        results = lint_documents([doc], checks)
        assert codes(results) == [
            IssueCode.UNSAFE_STRING,
            IssueCode.MISSING_HEADING,
            IssueCode.DOCUMENT_FAILURE,
        ]
        assert (results.errors, results.warnings) == (2, 1)

    def test_non_json_release_response_is_a_document_failure(self):
        response = MagicMock(status_code=200, links={})
        response.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
        session = MagicMock()
        session.get.return_value = response
        index = PullRequestIndex.from_environment(environ={"GITHUB_TOKEN": "t"}, session=session)
        checks = LintOptions(check_pull_request_links=True).prepare(pull_requests=index).checks()
        doc = make_document(history_block(
            "added:\n  - pr-url: https://github.com/electron/electron/pull/1\n"
        ))
        results = lint_documents([doc, doc], checks)
        assert results.documents == 2
        assert codes(results) == [IssueCode.DOCUMENT_FAILURE, IssueCode.DOCUMENT_FAILURE]
        assert "not JSON" in results.issues[0].message
        assert session.get.call_count == 1

    def test_unreadable_document(self, tmp_path):
        (tmp_path / "bad.md").write_bytes(b"\xff\xfe\x00bad")
        (tmp_path / "good.md").write_text(history_block("{}"), encoding="utf-8")
        options = LintOptions(root=tmp_path, globs=["*.md"])
        context = options.prepare()
        results = lint_workspace(DocsWorkspace(tmp_path, options.globs), context)
        assert results.documents == 2
        assert results.blocks == 1
        assert codes(results) == [IssueCode.DOCUMENT_FAILURE]
        assert results.issues[0].file_path == "bad.md"


# ─── reporter wiring ───────────────────────────────────────────────────────

class TestReporterWiring:
    def test_issues_are_reported_as_found(self):
        reporter = MagicMock()
        results = lint_fixture("api-history-heading-missing.md", "api-history-valid.md", reporter=reporter)
        assert reporter.report_issue.call_count == len(results.issues) == 1
        assert reporter.progress.call_count == 2

    @pytest.mark.parametrize("name", ["api-history-valid.md", "no-history.md"])
    def test_clean_documents_report_nothing(self, name):
        reporter = MagicMock()
        lint_fixture(name, reporter=reporter)
        reporter.report_issue.assert_not_called()
