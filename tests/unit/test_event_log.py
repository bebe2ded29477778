from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord
from commandhub.infrastructure.event_log import CompositeEventLog, InMemoryEventLog, LoggingEventLog


def _record(request_id, action="ping", success=True):
    return ExecutionRecord(
        request_id=request_id,
        action=action,
        user_id="u-1",
        success=success,
        execution_time_ms=1.0,
        error_code=None if success else "EXECUTION_FAILED",
    )


def test_memory_log_newest_first_with_filter_and_limit():
    log = InMemoryEventLog()
    log.append(_record("1"))
    log.append(_record("2", action="list_commands"))
    log.append(_record("3"))

    assert [e["request_id"] for e in log.list_events()] == ["3", "2", "1"]
    assert [e["request_id"] for e in log.list_events(action="ping")] == ["3", "1"]
    assert [e["request_id"] for e in log.list_events(limit=1)] == ["3"]


def test_memory_log_is_bounded():
    log = InMemoryEventLog(max_events=2)
    for i in range(5):
        log.append(_record(str(i)))
    assert [e["request_id"] for e in log.list_events()] == ["4", "3"]


def test_memory_log_accepts_dicts():
    log = InMemoryEventLog()
    log.append({"request_id": "x", "action": "ping"})
    assert log.list_events()[0]["action"] == "ping"


def test_logging_log_emits_json_lines(caplog):
    log = LoggingEventLog()
    with caplog.at_level("INFO", logger="commandhub.executions"):
        log.append(_record("r-1", success=False))

    assert '"request_id":"r-1"' in caplog.text
    assert '"error_code":"EXECUTION_FAILED"' in caplog.text
    assert log.list_events() == []


def test_composite_tees_and_replays_from_first_capable_backend():
    memory = InMemoryEventLog()

    class Broken:
        def append(self, record):
            raise RuntimeError("down")

        def list_events(self, *, limit=100, action=None):
            raise RuntimeError("down")

        def close(self):
            raise RuntimeError("down")

    composite = CompositeEventLog([Broken(), LoggingEventLog(), None, memory])
    composite.append(_record("c-1"))

    assert len(composite.backends) == 3
    assert [e["request_id"] for e in composite.list_events()] == ["c-1"]
    composite.close()


def test_backends_satisfy_protocol():
    assert isinstance(InMemoryEventLog(), CommandEventLog)
    assert isinstance(LoggingEventLog(), CommandEventLog)
