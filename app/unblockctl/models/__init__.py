"""Data models for unblockctl.

This module exports the core data structures used throughout the application.
"""

from unblockctl.models.blocked_file import BlockedFileRecord, format_bytes
from unblockctl.models.outcome import OperationOutcome, UnblockBatch, UnblockResult

__all__ = [
    "BlockedFileRecord",
    "OperationOutcome",
    "UnblockBatch",
    "UnblockResult",
    "format_bytes",
]
