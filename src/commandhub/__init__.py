# commandhub/__init__.py
"""
CommandHub - command orchestration core.

A single-entry dispatcher for named commands:
- declarative parameter validation
- an in-memory command registry with enable/disable and documentation export
- permission checks through an injected policy
- a uniform success/error envelope with request id and timing
- sequential and parallel batch execution
"""

from __future__ import annotations

__version__ = "1.0.0"
__author__ = "CommandHub Team"


# Lazy imports keep `import commandhub` cheap and free of cycles.
def __getattr__(name: str):
    if name == "CommandRegistry":
        from commandhub.application.registries.command_registry import CommandRegistry
        return CommandRegistry
    if name == "CommandOrchestrator":
        from commandhub.application.orchestrator import CommandOrchestrator
        return CommandOrchestrator
    if name == "create_runtime":
        from commandhub.application.bootstrap import create_runtime
        return create_runtime
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "CommandRegistry",
    "CommandOrchestrator",
    "create_runtime",
]
