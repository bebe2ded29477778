from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


DEFAULT_DB_URL = "sqlite:///data/commandhub.db"


def get_db_url() -> str:
    return os.getenv("COMMANDHUB_DB_URL") or DEFAULT_DB_URL


def _is_sqlite_memory(database: Optional[str]) -> bool:
    return database in (None, "", ":memory:")


def _ensure_sqlite_parent_dir(db_url: str) -> None:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or _is_sqlite_memory(url.database):
        return
    Path(url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _engine_kwargs(db_url: str) -> Dict[str, Any]:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}
    kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if _is_sqlite_memory(url.database):
        # One shared connection, otherwise every pooled connection sees its own empty database.
        kwargs["poolclass"] = StaticPool
    return kwargs


def create_db_engine(db_url: Optional[str] = None, *, echo: bool = False) -> Engine:
    url = db_url or get_db_url()
    _ensure_sqlite_parent_dir(url)
    return create_engine(url, echo=echo, **_engine_kwargs(url))


class SessionProvider:
    """Owns one engine and hands out sessions bound to it."""

    def __init__(self, db_url: Optional[str] = None, *, echo: bool = False):
        self.db_url = db_url or get_db_url()
        self.engine = create_db_engine(self.db_url, echo=echo)
        self._factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def session(self) -> Session:
        return self._factory()

    def dispose(self) -> None:
        self.engine.dispose()
