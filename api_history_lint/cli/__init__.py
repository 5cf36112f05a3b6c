"""
CLI Layer

Command line entry point.
"""

from api_history_lint.cli.app import app, lint

__all__ = [
    "app",
    "lint",
]
