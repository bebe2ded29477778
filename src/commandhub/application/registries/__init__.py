from .command_registry import CommandRegistry
from .providers import register_commands, initialize_commands
from .system_commands import build_system_commands, register_system_commands

__all__ = [
    "CommandRegistry",
    "register_commands",
    "initialize_commands",
    "build_system_commands",
    "register_system_commands",
]
