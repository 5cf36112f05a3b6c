"""Exception types raised by the lint pipeline."""


class ApiHistoryLintError(Exception):
    """Base class for all api-history-lint errors."""


class LintConfigError(ApiHistoryLintError):
    """A configuration input is unusable; the run stops before scanning."""


class BlockFormatError(ApiHistoryLintError):
    """
    A candidate block does not have the comment + fenced YAML shape.

    Attributes:
        reason: What was wrong with the block
        raw: The offending raw block text
    """

    def __init__(self, reason: str, raw: str):
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


class HistoryParseError(ApiHistoryLintError):
    """The YAML inside a history block could not be decoded."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line


class ReferenceDataError(ApiHistoryLintError):
    """Reference data needed by a check could not be loaded."""
