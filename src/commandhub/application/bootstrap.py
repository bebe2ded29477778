"""
Process-start wiring.

Builds exactly one registry and one orchestrator per runtime and hands them
to whatever binds a transport (HTTP app, CLI, tests). Nothing here is global.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Union

from commandhub.application.orchestrator import CommandOrchestrator
from commandhub.application.ports.event_log_port import CommandEventLog
from commandhub.application.ports.permission_port import PermissionPolicy, PermissivePolicy, RolePermissionPolicy
from commandhub.application.ports.persistence_port import PersistenceBackend
from commandhub.application.registries.command_registry import CommandRegistry
from commandhub.application.registries.providers import initialize_commands
from commandhub.application.registries.system_commands import register_system_commands
from commandhub.config.settings import Settings
from commandhub.domain.command import CommandCategory, CommandHandler

logger = logging.getLogger(__name__)


@dataclass
class CommandHubRuntime:
    settings: Settings
    registry: CommandRegistry
    orchestrator: CommandOrchestrator
    persistence: Optional[PersistenceBackend] = None
    event_log: Optional[CommandEventLog] = None

    def close(self) -> None:
        for resource in (self.event_log, self.persistence):
            if resource is None:
                continue
            try:
                resource.close()
            except Exception as e:
                logger.debug(f"Runtime resource close failed: {e}")


def build_persistence(settings: Settings) -> Optional[PersistenceBackend]:
    backend = settings.database.backend
    if backend == "none":
        return None
    if backend == "memory":
        from commandhub.infrastructure.persistence.memory_backend import InMemoryPersistence

        return InMemoryPersistence()
    if backend == "sqlalchemy":
        from commandhub.infrastructure.persistence.sqlalchemy_backend import SqlAlchemyPersistence

        return SqlAlchemyPersistence(settings.database.url or None, echo=settings.database.echo)
    raise ValueError(f"Unknown persistence backend: {backend}")


def build_event_log(
    settings: Settings, persistence: Optional[PersistenceBackend] = None
) -> Optional[CommandEventLog]:
    from commandhub.infrastructure.event_log import (
        CompositeEventLog,
        InMemoryEventLog,
        LoggingEventLog,
        SqlAlchemyEventLog,
    )

    backends: List[CommandEventLog] = []
    for kind in settings.orchestrator.event_log:
        if kind == "logging":
            backends.append(LoggingEventLog())
        elif kind == "memory":
            backends.append(InMemoryEventLog())
        elif kind == "sqlalchemy":
            # Share the engine with the persistence backend when there is one.
            provider = getattr(persistence, "provider", None)
            backends.append(SqlAlchemyEventLog(settings.database.url or None, provider=provider))
        else:
            raise ValueError(f"Unknown event log backend: {kind}")

    if not backends:
        return None
    if len(backends) == 1:
        return backends[0]
    # Replay-capable backends first, so list_events finds them.
    backends.sort(key=lambda b: isinstance(b, LoggingEventLog))
    return CompositeEventLog(backends)


def build_permission_policy(settings: Settings) -> PermissionPolicy:
    if settings.permissions.policy == "role":
        return RolePermissionPolicy(settings.permissions.role_grants)
    if settings.permissions.policy == "permissive":
        return PermissivePolicy()
    raise ValueError(f"Unknown permission policy: {settings.permissions.policy}")


def create_runtime(
    settings: Optional[Settings] = None,
    *,
    providers: Optional[Mapping[Union[CommandCategory, str], Iterable[CommandHandler]]] = None,
    persistence: Optional[PersistenceBackend] = None,
    event_log: Optional[CommandEventLog] = None,
    permission_policy: Optional[PermissionPolicy] = None,
) -> CommandHubRuntime:
    """
    Build a ready-to-serve runtime.

    Explicit `persistence` / `event_log` / `permission_policy` arguments win
    over what `settings` would build. All handlers are registered before the
    runtime is returned.
    """
    settings = settings or Settings()
    if persistence is None:
        persistence = build_persistence(settings)
    if event_log is None:
        event_log = build_event_log(settings, persistence)
    if permission_policy is None:
        permission_policy = build_permission_policy(settings)

    registry = CommandRegistry()
    orch_cfg = settings.orchestrator
    orchestrator = CommandOrchestrator(
        registry,
        persistence=persistence,
        permission_policy=permission_policy,
        event_log=event_log,
        default_timeout=orch_cfg.execution_timeout_seconds,
        expose_error_details=orch_cfg.expose_error_details,
        health_probe_timeout=orch_cfg.health_probe_timeout,
    )

    if orch_cfg.register_system_commands:
        register_system_commands(orchestrator)
    if providers:
        initialize_commands(registry, providers)

    logger.info(
        "CommandHub runtime ready: %d commands, persistence=%s, policy=%s",
        len(registry),
        getattr(persistence, "name", None),
        type(permission_policy).__name__,
    )
    return CommandHubRuntime(
        settings=settings,
        registry=registry,
        orchestrator=orchestrator,
        persistence=persistence,
        event_log=event_log,
    )
