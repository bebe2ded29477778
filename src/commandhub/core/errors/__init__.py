"""
Unified error module.
"""

from .errors import (
    ErrorCode,
    CommandHubError,
    InvalidCommandError,
    DuplicateCommandError,
    UnknownCategoryError,
    CommandTimeoutError,
    CommandCancelledError,
)

__all__ = [
    "ErrorCode",
    "CommandHubError",
    "InvalidCommandError",
    "DuplicateCommandError",
    "UnknownCategoryError",
    "CommandTimeoutError",
    "CommandCancelledError",
]
