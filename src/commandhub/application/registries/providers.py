"""Registers groups of handlers supplied by feature modules, keyed by category."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Union

from commandhub.application.registries.command_registry import CommandRegistry
from commandhub.domain.command import CommandCategory, CommandHandler

logger = logging.getLogger(__name__)


def register_commands(
    registry: CommandRegistry,
    handlers: Iterable[CommandHandler],
    category: Union[CommandCategory, str],
    *,
    enabled: bool = True,
    permissions: Optional[List[str]] = None,
    replace: bool = False,
) -> CommandRegistry:
    """Register a provider's handlers under one category, keyed by handler name."""
    for handler in handlers:
        registry.register(
            handler.name,
            handler,
            category,
            enabled=enabled,
            permissions=permissions,
            replace=replace,
        )
    return registry


def initialize_commands(
    registry: CommandRegistry,
    providers: Mapping[Union[CommandCategory, str], Iterable[CommandHandler]],
) -> CommandRegistry:
    """
    Wire every provider into the registry at process start, before the
    first execute() is served, then log a per-category summary.
    """
    logger.info("Initializing commands...")
    for category, handlers in providers.items():
        register_commands(registry, handlers, category)

    logger.info("Initialized %d commands successfully", len(registry.get_enabled()))
    for category, count in registry.get_category_counts().items():
        if count:
            logger.info("%s: %d commands", category, count)
    return registry
