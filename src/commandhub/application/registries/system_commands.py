"""
Built-in `system` commands: liveness, introspection and the admin toggle.

They close over the orchestrator, so they see the same registry, event log
and permission policy as any other dispatch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from commandhub.domain.command import (
    CommandCategory,
    CommandContext,
    CommandHandler,
    ParameterSchema,
    ValidationResult,
    ValidationRules,
)
from commandhub.domain.envelope import utcnow

if TYPE_CHECKING:
    from commandhub.application.orchestrator import CommandOrchestrator

ADMIN_PERMISSION = "commands:admin"
EXECUTIONS_READ_PERMISSION = "executions:read"


def build_system_commands(orchestrator: "CommandOrchestrator") -> List[CommandHandler]:
    registry = orchestrator.registry

    def ping(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        return {
            "pong": True,
            "message": params.get("message"),
            "server_time": utcnow().isoformat(),
            "request_id": ctx.request_id,
        }

    async def list_commands(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        commands = await orchestrator.get_available_commands(ctx.user)
        category = params.get("category")
        if category:
            commands = {name: doc for name, doc in commands.items() if doc["category"] == category}
        return {"commands": commands, "total": len(commands)}

    def describe_command(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        entry = registry.get(params["name"])
        if entry is None:
            raise LookupError(f"Command '{params['name']}' not found")
        return entry.to_doc()

    async def get_health(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        return await orchestrator.health_check()

    def set_command_enabled(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        name = params["name"]
        if not registry.set_enabled(name, params["enabled"]):
            raise LookupError(f"Command '{name}' not found")
        return {"name": name, "enabled": params["enabled"], "changed_by": ctx.user.id}

    def validate_set_command_enabled(params: Dict[str, Any]) -> ValidationResult:
        errors = []
        if params.get("name") == "set_command_enabled" and params.get("enabled") is False:
            errors.append("set_command_enabled cannot disable itself")
        return ValidationResult.from_errors(errors)

    def list_executions(params: Dict[str, Any], ctx: CommandContext) -> Dict[str, Any]:
        if orchestrator.event_log is None:
            return {"executions": [], "total": 0}
        events = orchestrator.event_log.list_events(
            limit=int(params.get("limit") or 50),
            action=params.get("action"),
        )
        return {"executions": events, "total": len(events)}

    return [
        CommandHandler(
            name="ping",
            description="Liveness probe; echoes an optional message",
            parameters=[
                ParameterSchema(
                    name="message",
                    type="string",
                    description="Text to echo back",
                    validation=ValidationRules(max=1000),
                ),
            ],
            execute=ping,
        ),
        CommandHandler(
            name="list_commands",
            description="List the commands the caller may invoke",
            parameters=[
                ParameterSchema(
                    name="category",
                    type="string",
                    description="Only list commands in this category",
                    validation=ValidationRules(enum=[c.value for c in CommandCategory]),
                ),
            ],
            execute=list_commands,
        ),
        CommandHandler(
            name="describe_command",
            description="Show the documentation of one registered command",
            parameters=[
                ParameterSchema(name="name", type="string", required=True, description="Command name"),
            ],
            execute=describe_command,
        ),
        CommandHandler(
            name="get_health",
            description="Report orchestrator and persistence health",
            execute=get_health,
        ),
        CommandHandler(
            name="set_command_enabled",
            description="Enable or disable a registered command",
            parameters=[
                ParameterSchema(name="name", type="string", required=True, description="Command name"),
                ParameterSchema(name="enabled", type="boolean", required=True, description="New enabled state"),
            ],
            execute=set_command_enabled,
            validate=validate_set_command_enabled,
        ),
        CommandHandler(
            name="list_executions",
            description="Recent command executions, newest first",
            parameters=[
                ParameterSchema(
                    name="limit",
                    type="number",
                    description="Maximum records to return",
                    validation=ValidationRules(min=1, max=500),
                ),
                ParameterSchema(name="action", type="string", description="Only this command"),
            ],
            execute=list_executions,
        ),
    ]


_PERMISSIONS = {
    "set_command_enabled": [ADMIN_PERMISSION],
    "list_executions": [EXECUTIONS_READ_PERMISSION],
}


def register_system_commands(orchestrator: "CommandOrchestrator", *, replace: bool = False) -> None:
    for handler in build_system_commands(orchestrator):
        orchestrator.registry.register(
            handler.name,
            handler,
            CommandCategory.system,
            permissions=_PERMISSIONS.get(handler.name),
            replace=replace,
        )
