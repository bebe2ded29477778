"""
Domain model: commands, handlers, registry entries and the response envelope.
"""

from .command import (
    CommandCategory,
    ParamType,
    ValidationRules,
    ParameterSchema,
    ValidationResult,
    CallerIdentity,
    CommandRequest,
    CancellationToken,
    CommandContext,
    CommandHandler,
    CommandRegistryEntry,
)
from .envelope import ErrorInfo, ResponseMetadata, ResponseEnvelope, new_request_id, utcnow

__all__ = [
    "CommandCategory",
    "ParamType",
    "ValidationRules",
    "ParameterSchema",
    "ValidationResult",
    "CallerIdentity",
    "CommandRequest",
    "CancellationToken",
    "CommandContext",
    "CommandHandler",
    "CommandRegistryEntry",
    "ErrorInfo",
    "ResponseMetadata",
    "ResponseEnvelope",
    "new_request_id",
    "utcnow",
]
