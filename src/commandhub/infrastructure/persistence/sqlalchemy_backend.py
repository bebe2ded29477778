from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from commandhub.application.ports.persistence_port import PersistenceBackend
from commandhub.infrastructure.stores.models import Base
from commandhub.infrastructure.stores.sqlalchemy_db import SessionProvider

logger = logging.getLogger(__name__)


class SqlAlchemyPersistence(PersistenceBackend):
    """
    Persistence handle backed by a SQLAlchemy engine.

    Handlers open sessions with `ctx.persistence.session()`. The health probe
    runs `SELECT 1` on a worker thread so the event loop is never blocked.
    """

    name = "sqlalchemy"

    def __init__(
        self,
        db_url: Optional[str] = None,
        *,
        provider: Optional[SessionProvider] = None,
        echo: bool = False,
        auto_create_schema: bool = True,
    ):
        self._provider = provider or SessionProvider(db_url, echo=echo)
        if auto_create_schema:
            # Local dev/tests only; production schemas belong to migrations.
            Base.metadata.create_all(self._provider.engine)

    @property
    def engine(self):
        return self._provider.engine

    @property
    def provider(self) -> SessionProvider:
        return self._provider

    def session(self) -> Session:
        return self._provider.session()

    def _probe(self) -> Optional[str]:
        with self._provider.engine.connect() as conn:
            value = conn.execute(text("SELECT 1")).scalar()
        if value != 1:
            return f"Unexpected probe result: {value!r}"
        return None

    async def ping(self) -> Optional[str]:
        return await asyncio.to_thread(self._probe)

    def close(self) -> None:
        self._provider.dispose()
