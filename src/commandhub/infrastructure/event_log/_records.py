from __future__ import annotations

from typing import Union

from commandhub.application.ports.event_log_port import ExecutionRecord


def record_to_dict(record: Union[ExecutionRecord, dict]) -> dict:
    if isinstance(record, ExecutionRecord):
        return record.to_dict()
    return dict(record)
