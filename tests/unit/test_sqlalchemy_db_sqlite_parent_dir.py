from __future__ import annotations

from pathlib import Path

from commandhub.infrastructure.stores.sqlalchemy_db import create_db_engine, get_db_url


def test_create_db_engine_creates_parent_dir_for_relative_sqlite(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    assert not (tmp_path / "data").exists()

    engine = create_db_engine("sqlite:///data/test.db")
    try:
        assert (tmp_path / "data").is_dir()
        with engine.connect() as conn:
            conn.exec_driver_sql("select 1")
    finally:
        engine.dispose()


def test_in_memory_sqlite_creates_nothing(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    engine = create_db_engine("sqlite://")
    try:
        assert list(tmp_path.iterdir()) == []
    finally:
        engine.dispose()


def test_db_url_from_environment(monkeypatch):
    monkeypatch.setenv("COMMANDHUB_DB_URL", "sqlite:////tmp/commandhub-env.db")
    assert get_db_url() == "sqlite:////tmp/commandhub-env.db"
    monkeypatch.delenv("COMMANDHUB_DB_URL")
    assert get_db_url() == "sqlite:///data/commandhub.db"
