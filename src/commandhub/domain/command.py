"""
Command domain model: what a caller sends, what a handler declares,
and what the registry stores.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from commandhub.core.errors import InvalidCommandError, UnknownCategoryError


class CommandCategory(str, Enum):
    project = "project"
    task = "task"
    material = "material"
    mcp = "mcp"
    ai = "ai"
    workflow = "workflow"
    analytics = "analytics"
    system = "system"

    @classmethod
    def coerce(cls, value: Union["CommandCategory", str]) -> "CommandCategory":
        if isinstance(value, CommandCategory):
            return value
        try:
            return cls(str(value))
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise UnknownCategoryError(
                message=f"Unknown command category '{value}' (expected one of: {allowed})"
            ) from None


class ParamType(str, Enum):
    string = "string"
    number = "number"
    boolean = "boolean"
    object = "object"
    array = "array"


@dataclass(frozen=True)
class ValidationRules:
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    enum: Optional[List[Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.min is not None:
            d["min"] = self.min
        if self.max is not None:
            d["max"] = self.max
        if self.pattern is not None:
            d["pattern"] = self.pattern
        if self.enum is not None:
            d["enum"] = list(self.enum) if isinstance(self.enum, (list, tuple, set, frozenset)) else self.enum
        return d


@dataclass(frozen=True)
class ParameterSchema:
    """One declared parameter of a command."""

    name: str
    type: str
    required: bool = False
    description: str = ""
    validation: Optional[ValidationRules] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", getattr(self.type, "value", self.type))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "description": self.description,
            "validation": self.validation.to_dict() if self.validation else None,
        }


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True, errors=[])

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))


@dataclass(frozen=True)
class CallerIdentity:
    """Identity handed over by an external authenticator. Only `role` is inspected."""

    id: str
    email: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role}


@dataclass
class CommandRequest:
    action: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def request_id(self) -> Optional[str]:
        rid = (self.metadata or {}).get("requestId")
        return str(rid) if rid else None

    @classmethod
    def from_dict(cls, raw: Any) -> "CommandRequest":
        """Parse an untyped wire payload, rejecting malformed shapes."""
        if not isinstance(raw, Mapping):
            raise InvalidCommandError(message="Command must be a JSON object")
        action = raw.get("action")
        if not action or not isinstance(action, str):
            raise InvalidCommandError(message="Command must have a valid action field")
        parameters = raw.get("parameters")
        if parameters is None or not isinstance(parameters, Mapping):
            raise InvalidCommandError(
                message="Command must have a parameters object",
                context={"action": action},
            )
        metadata = raw.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise InvalidCommandError(
                message="Command metadata must be an object",
                context={"action": action},
            )
        return cls(action=action, parameters=dict(parameters), metadata=dict(metadata))


class CancellationToken:
    """Cooperative cancellation signal threaded through a CommandContext."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class CommandContext:
    """Per-execution context; never shared between executions."""

    user: CallerIdentity
    request_id: str
    timestamp: datetime
    persistence: Any = None
    cancel_token: CancellationToken = field(default_factory=CancellationToken)


ExecuteFn = Callable[[Dict[str, Any], CommandContext], Union[Any, Awaitable[Any]]]
ValidateFn = Callable[[Dict[str, Any]], ValidationResult]


@dataclass(frozen=True)
class CommandHandler:
    name: str
    description: str
    execute: ExecuteFn
    parameters: List[ParameterSchema] = field(default_factory=list)
    validate: Optional[ValidateFn] = None
    timeout_seconds: Optional[float] = None


@dataclass
class CommandRegistryEntry:
    handler: CommandHandler
    category: CommandCategory
    enabled: bool = True
    permissions: Optional[List[str]] = None

    def to_doc(self) -> Dict[str, Any]:
        return {
            "name": self.handler.name,
            "description": self.handler.description,
            "category": self.category.value,
            "enabled": self.enabled,
            "parameters": [p.to_dict() for p in self.handler.parameters],
            "permissions": list(self.permissions) if self.permissions is not None else None,
        }

    def to_doc_lite(self) -> Dict[str, Any]:
        return {
            "name": self.handler.name,
            "description": self.handler.description,
            "category": self.category.value,
            "parameters": [p.to_dict() for p in self.handler.parameters],
        }
