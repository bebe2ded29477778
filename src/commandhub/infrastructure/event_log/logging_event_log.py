from __future__ import annotations

import json
import logging
from typing import List, Optional, Union

from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord
from commandhub.infrastructure.event_log._records import record_to_dict


class LoggingEventLog(CommandEventLog):
    """
    Emit execution records as JSON lines to the Python logger.

    Immediate observability without a DB.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self._logger = logger or logging.getLogger("commandhub.executions")
        self._level = level

    def append(self, record: Union[ExecutionRecord, dict]) -> None:
        payload = json.dumps(record_to_dict(record), ensure_ascii=False, separators=(",", ":"), default=str)
        self._logger.log(self._level, payload)

    def list_events(self, *, limit: int = 100, action: Optional[str] = None) -> List[dict]:
        # Logging backend cannot replay.
        return []

    def close(self) -> None:
        return None
