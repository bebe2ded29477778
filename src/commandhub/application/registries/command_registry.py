"""Name-keyed store of command handlers with category and enabled-state bookkeeping."""

from __future__ import annotations

import logging
import dataclasses
from typing import Any, Dict, List, Optional, Union

from commandhub.application.validation import validate_parameters
from commandhub.core.errors import DuplicateCommandError
from commandhub.domain.command import (
    CommandCategory,
    CommandHandler,
    CommandRegistryEntry,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def _copy_entry(entry: CommandRegistryEntry) -> CommandRegistryEntry:
    # Snapshot: callers may mutate what they get back without touching the registry.
    perms = list(entry.permissions) if entry.permissions is not None else None
    return dataclasses.replace(entry, permissions=perms)


class CommandRegistry:
    """
    In-process command registry.

    Maps a command name to its handler, category, enabled flag and required
    permissions. Pure in-memory, no I/O. Entries are never removed; only
    `enabled` changes after registration.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, CommandRegistryEntry] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        category: Union[CommandCategory, str],
        *,
        enabled: bool = True,
        permissions: Optional[List[str]] = None,
        replace: bool = False,
    ) -> CommandRegistryEntry:
        if name in self._commands and not replace:
            raise DuplicateCommandError(
                message=f"Command '{name}' is already registered (pass replace=True to override)",
                context={"name": name},
            )
        entry = CommandRegistryEntry(
            handler=handler,
            category=CommandCategory.coerce(category),
            enabled=enabled,
            permissions=list(permissions) if permissions is not None else None,
        )
        if name in self._commands:
            logger.warning("Replacing command: %s (%s)", name, entry.category.value)
        self._commands[name] = entry
        logger.info("Registered command: %s (%s)", name, entry.category.value)
        return entry

    def get(self, name: str) -> Optional[CommandRegistryEntry]:
        return self._commands.get(name)

    def has(self, name: str) -> bool:
        return name in self._commands

    def get_by_category(self, category: Union[CommandCategory, str]) -> List[CommandRegistryEntry]:
        cat = CommandCategory.coerce(category)
        return [_copy_entry(entry) for entry in self._commands.values() if entry.category == cat]

    def get_all(self) -> Dict[str, CommandRegistryEntry]:
        return {name: _copy_entry(entry) for name, entry in self._commands.items()}

    def get_enabled(self) -> Dict[str, CommandRegistryEntry]:
        return {name: _copy_entry(entry) for name, entry in self._commands.items() if entry.enabled}

    def validate_parameters(self, name: str, parameters: Dict[str, Any]) -> ValidationResult:
        """
        Declarative schema checks first; the handler's own `validate` runs
        only once those pass, and its errors are merged into the result.
        """
        entry = self._commands.get(name)
        if entry is None:
            return ValidationResult(valid=False, errors=[f"Command '{name}' not found"])

        result = validate_parameters(entry.handler.parameters, parameters)
        if not result.valid or entry.handler.validate is None:
            return result

        custom = entry.handler.validate(parameters)
        if custom is not None and not custom.valid:
            return ValidationResult.from_errors(result.errors + list(custom.errors))
        return result

    def set_enabled(self, name: str, enabled: bool) -> bool:
        entry = self._commands.get(name)
        if entry is None:
            return False
        entry.enabled = bool(enabled)
        logger.info("Command %s %s", name, "enabled" if entry.enabled else "disabled")
        return True

    def get_documentation(self) -> Dict[str, Dict[str, Any]]:
        return {name: entry.to_doc() for name, entry in self._commands.items()}

    def get_category_counts(self) -> Dict[str, int]:
        counts = {cat.value: 0 for cat in CommandCategory}
        for entry in self._commands.values():
            counts[entry.category.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands
