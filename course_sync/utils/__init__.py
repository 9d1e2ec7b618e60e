"""
Utility helpers used by the sync tool.

This subpackage exposes the tool's exception types and the JSON Lines
report writers.
"""

from .errors import BackendNotConfiguredError, SyncRequestError
from .reports import EVENTS, report_error, report_ok

__all__ = ["BackendNotConfiguredError", "SyncRequestError", "EVENTS", "report_error", "report_ok"]
