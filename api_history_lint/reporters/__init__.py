"""
Reporters Layer

Rich terminal reporter and JSON reporter.
"""

from api_history_lint.reporters.base import Reporter
from api_history_lint.reporters.rich_reporter import RichReporter
from api_history_lint.reporters.json_reporter import JsonReporter

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
]
