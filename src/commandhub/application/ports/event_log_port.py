from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from commandhub.domain.envelope import utcnow


@dataclass
class ExecutionRecord:
    """One line of the execution log: the outcome of a single execute() call."""

    request_id: str
    action: str
    user_id: str
    success: bool
    execution_time_ms: float
    error_code: Optional[str] = None
    ts: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "action": self.action,
            "user_id": self.user_id,
            "success": self.success,
            "error_code": self.error_code,
            "execution_time_ms": self.execution_time_ms,
            "ts": self.ts.isoformat(),
        }


@runtime_checkable
class CommandEventLog(Protocol):
    """
    Minimal execution log port.

    Implementations may log to stdout, keep records in memory, or persist to DB.
    """

    def append(self, record: Union[ExecutionRecord, dict]) -> None:
        """Append one execution record."""

    def list_events(self, *, limit: int = 100, action: Optional[str] = None) -> List[dict]:
        """Most recent records first. May return [] when the backend cannot replay."""

    def close(self) -> None:
        """Close underlying resources (optional)."""
