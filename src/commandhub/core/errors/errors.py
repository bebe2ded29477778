"""
Error taxonomy and exception types.

Codes are stable strings: clients and transport adapters switch on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    COMMAND_NOT_FOUND = "COMMAND_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_COMMAND = "INVALID_COMMAND"      # malformed request, rejected by the adapter
    RATE_LIMITED = "RATE_LIMITED"            # reserved, enforced by adapters
    MISSING_PARAMETERS = "MISSING_PARAMETERS"  # reported inside VALIDATION_FAILED details


@dataclass
class CommandHubError(Exception):
    message: str
    code: str = ErrorCode.INTERNAL_ERROR.value
    context: Dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class InvalidCommandError(CommandHubError):
    code: str = ErrorCode.INVALID_COMMAND.value


@dataclass
class DuplicateCommandError(CommandHubError):
    code: str = "DUPLICATE_COMMAND"


@dataclass
class UnknownCategoryError(CommandHubError):
    code: str = "UNKNOWN_CATEGORY"


@dataclass
class CommandTimeoutError(CommandHubError):
    code: str = ErrorCode.EXECUTION_FAILED.value


@dataclass
class CommandCancelledError(CommandHubError):
    code: str = ErrorCode.EXECUTION_FAILED.value
