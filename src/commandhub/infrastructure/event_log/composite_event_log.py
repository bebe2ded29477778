from __future__ import annotations

import logging
from typing import List, Optional, Union

from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord

logger = logging.getLogger(__name__)


class CompositeEventLog(CommandEventLog):
    """
    Tee records to multiple backends.

    Used to keep JSON-line logging while persisting to SQLite.
    """

    def __init__(self, backends: List[Optional[CommandEventLog]]):
        self._backends = [b for b in backends if b is not None]

    @property
    def backends(self) -> List[CommandEventLog]:
        return list(self._backends)

    def append(self, record: Union[ExecutionRecord, dict]) -> None:
        for backend in self._backends:
            try:
                backend.append(record)
            except Exception as e:
                logger.debug(f"CompositeEventLog backend append failed: {e}")

    def list_events(self, *, limit: int = 100, action: Optional[str] = None) -> List[dict]:
        # First backend that can replay wins.
        for backend in self._backends:
            try:
                events = backend.list_events(limit=limit, action=action)
            except Exception as e:
                logger.debug(f"CompositeEventLog backend list_events failed: {e}")
                continue
            if events:
                return events
        return []

    def close(self) -> None:
        for backend in self._backends:
            try:
                backend.close()
            except Exception as e:
                logger.debug(f"CompositeEventLog backend close failed: {e}")
