from __future__ import annotations

import threading
from collections import deque
from typing import Deque, List, Optional, Union

from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord
from commandhub.infrastructure.event_log._records import record_to_dict


class InMemoryEventLog(CommandEventLog):
    """Bounded in-memory execution log (useful for tests/evals)."""

    def __init__(self, max_events: int = 10000) -> None:
        self.events: Deque[dict] = deque(maxlen=max_events)
        # append() runs on worker threads
        self._lock = threading.Lock()

    def append(self, record: Union[ExecutionRecord, dict]) -> None:
        event = record_to_dict(record)
        with self._lock:
            self.events.append(event)

    def list_events(self, *, limit: int = 100, action: Optional[str] = None) -> List[dict]:
        with self._lock:
            snapshot = list(self.events)
        out: List[dict] = []
        for event in reversed(snapshot):
            if action and event.get("action") != action:
                continue
            out.append(event)
            if len(out) >= limit:
                break
        return out

    def close(self) -> None:
        return None
