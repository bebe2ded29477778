from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from sqlalchemy import desc, select

from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord
from commandhub.infrastructure.event_log._records import record_to_dict
from commandhub.infrastructure.stores.models import Base, CommandExecutionModel
from commandhub.infrastructure.stores.sqlalchemy_db import SessionProvider

logger = logging.getLogger(__name__)


def _parse_ts(ts: Any) -> datetime:
    if isinstance(ts, datetime):
        return ts
    if isinstance(ts, str):
        try:
            return datetime.fromisoformat(ts)
        except ValueError:
            pass
    return datetime.now(timezone.utc)


class SqlAlchemyEventLog(CommandEventLog):
    """
    Persist execution records via SQLAlchemy.

    - append(): one row per execute() call
    - list_events(): newest first, optionally filtered by action
    """

    def __init__(
        self,
        db_url: Optional[str] = None,
        *,
        provider: Optional[SessionProvider] = None,
        auto_create_schema: bool = True,
    ):
        self._provider = provider or SessionProvider(db_url)
        if auto_create_schema:
            # Local dev/tests only; production schemas belong to migrations.
            Base.metadata.create_all(self._provider.engine)

    def append(self, record: Union[ExecutionRecord, dict]) -> None:
        evt = record_to_dict(record)
        request_id = str(evt.get("request_id") or "")
        if not request_id:
            raise ValueError("Execution record missing request_id")

        row = CommandExecutionModel(
            request_id=request_id,
            action=str(evt.get("action") or ""),
            user_id=str(evt.get("user_id") or ""),
            success=bool(evt.get("success")),
            error_code=evt.get("error_code"),
            execution_time_ms=float(evt.get("execution_time_ms") or 0.0),
            ts=_parse_ts(evt.get("ts")),
        )
        with self._provider.session() as session:
            session.add(row)
            session.commit()

    def list_events(self, *, limit: int = 100, action: Optional[str] = None) -> List[dict]:
        stmt = select(CommandExecutionModel)
        if action:
            stmt = stmt.where(CommandExecutionModel.action == action)
        stmt = stmt.order_by(desc(CommandExecutionModel.id)).limit(limit)
        with self._provider.session() as session:
            return [row.to_dict() for row in session.execute(stmt).scalars().all()]

    def close(self) -> None:
        try:
            self._provider.dispose()
        except Exception as e:
            logger.debug(f"SqlAlchemyEventLog dispose failed: {e}")
