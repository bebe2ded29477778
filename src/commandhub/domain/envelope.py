"""Uniform response envelope returned for every command execution."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_request_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ErrorInfo:
    code: str
    message: str
    details: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            d["details"] = self.details
        return d


@dataclass(frozen=True)
class ResponseMetadata:
    request_id: str
    action: str
    execution_time: float  # milliseconds
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestId": self.request_id,
            "action": self.action,
            "executionTime": self.execution_time,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    Uniform result of one execute() call.

    Exactly one of `data` / `error` is meaningful: `data` only on success,
    `error` only on failure.
    """

    success: bool
    metadata: ResponseMetadata
    data: Any = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def ok(cls, data: Any, metadata: ResponseMetadata) -> "ResponseEnvelope":
        return cls(success=True, data=data, error=None, metadata=metadata)

    @classmethod
    def fail(cls, error: ErrorInfo, metadata: ResponseMetadata) -> "ResponseEnvelope":
        return cls(success=False, data=None, error=error, metadata=metadata)

    @property
    def request_id(self) -> str:
        return self.metadata.request_id

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"success": self.success}
        if self.success:
            d["data"] = self.data
        elif self.error is not None:
            d["error"] = self.error.to_dict()
        d["metadata"] = self.metadata.to_dict()
        return d
