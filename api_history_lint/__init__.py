"""
api-history-lint - validate the API history blocks embedded in Markdown docs.
"""

__version__ = "0.3.0"
