from __future__ import annotations

import pytest

from commandhub.application.bootstrap import create_runtime
from commandhub.application.ports.event_log_port import ExecutionRecord
from commandhub.config import Settings
from commandhub.domain.command import CallerIdentity
from commandhub.infrastructure.event_log.sqlalchemy_event_log import SqlAlchemyEventLog


def test_sqlalchemy_event_log_persists_and_replays(sqlite_url):
    evlog = SqlAlchemyEventLog(db_url=sqlite_url, auto_create_schema=True)
    try:
        evlog.append(
            ExecutionRecord(request_id="r-1", action="ping", user_id="u-1", success=True, execution_time_ms=0.4)
        )
        evlog.append(
            ExecutionRecord(
                request_id="r-2",
                action="create_widget",
                user_id="u-1",
                success=False,
                execution_time_ms=1.2,
                error_code="VALIDATION_FAILED",
            )
        )

        events = evlog.list_events(limit=100)
        assert [e["request_id"] for e in events] == ["r-2", "r-1"]
        assert events[0]["error_code"] == "VALIDATION_FAILED"
        assert events[1]["success"] is True

        only_ping = evlog.list_events(action="ping")
        assert [e["request_id"] for e in only_ping] == ["r-1"]
        assert len(evlog.list_events(limit=1)) == 1
    finally:
        evlog.close()


def test_sqlalchemy_event_log_requires_request_id(sqlite_url):
    evlog = SqlAlchemyEventLog(db_url=sqlite_url)
    try:
        with pytest.raises(ValueError):
            evlog.append({"action": "ping"})
    finally:
        evlog.close()


@pytest.mark.asyncio
async def test_runtime_with_sqlite_persistence_and_event_log(sqlite_url):
    settings = Settings.from_dict(
        {
            "database": {"backend": "sqlalchemy", "url": sqlite_url},
            "orchestrator": {"event_log": ["logging", "sqlalchemy"]},
        }
    )
    runtime = create_runtime(settings)
    try:
        caller = CallerIdentity(id="u-9", role="user")
        await runtime.orchestrator.execute_action("ping", {}, caller, request_id="db-1")
        await runtime.orchestrator.execute_action("ghost", {}, caller, request_id="db-2")

        history = await runtime.orchestrator.execute_action("list_executions", {"limit": 5}, caller)
        assert [e["request_id"] for e in history.data["executions"]] == ["db-2", "db-1"]
        assert history.data["executions"][0]["error_code"] == "COMMAND_NOT_FOUND"

        health = await runtime.orchestrator.health_check()
        assert health["status"] == "healthy"
        assert health["details"]["persistence"]["backend"] == "sqlalchemy"
    finally:
        runtime.close()
