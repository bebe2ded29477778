# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds src to sys.path so `import commandhub` works without an install.
"""

import logging
import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from commandhub.application.orchestrator import CommandOrchestrator  # noqa: E402
from commandhub.application.registries.command_registry import CommandRegistry  # noqa: E402
from commandhub.domain.command import CallerIdentity, CommandHandler, ParameterSchema  # noqa: E402
from commandhub.infrastructure.event_log import InMemoryEventLog  # noqa: E402


def _make_handler(name, execute=None, parameters=None, **kwargs):
    """Handler that echoes its parameters unless `execute` is given."""
    if execute is None:
        def execute(params, ctx):
            return dict(params)
    return CommandHandler(
        name=name,
        description=f"{name} test handler",
        execute=execute,
        parameters=list(parameters or []),
        **kwargs,
    )


@pytest.fixture
def user():
    return CallerIdentity(id="u-1", email="user@example.com", role="user")


@pytest.fixture
def admin():
    return CallerIdentity(id="a-1", email="admin@example.com", role="admin")


@pytest.fixture
def registry():
    return CommandRegistry()


@pytest.fixture
def event_log():
    return InMemoryEventLog()


@pytest.fixture
def orchestrator(registry, event_log):
    return CommandOrchestrator(registry, event_log=event_log)


@pytest.fixture
def widget_handler():
    async def create_widget(params, ctx):
        return {"name": params["name"], "created_by": ctx.user.id}

    return _make_handler(
        "create_widget",
        execute=create_widget,
        parameters=[ParameterSchema(name="name", type="string", required=True)],
    )


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'commandhub_test.db'}"


@pytest.fixture
def make_handler():
    return _make_handler


@pytest.fixture(autouse=True)
def _reset_commandhub_logging():
    yield
    logger = logging.getLogger("commandhub")
    for handler in list(logger.handlers):
        if getattr(handler, "_commandhub_handler", False):
            logger.removeHandler(handler)
            handler.close()
