"""
Core layer: error taxonomy shared by every other layer.
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
