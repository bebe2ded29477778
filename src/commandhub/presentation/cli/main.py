"""
CLI entry point

Drives the same orchestrator the HTTP adapter uses; every subcommand prints
JSON to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from commandhub import __version__


def create_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser"""
    parser = argparse.ArgumentParser(
        prog="commandhub",
        description="CommandHub - command registry and orchestration",
    )
    parser.add_argument("--config", "-c", help="Path to a YAML config file")
    parser.add_argument("--version", "-v", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run
    run_parser = subparsers.add_parser("run", help="Execute a single command")
    run_parser.add_argument("action", help="Registered command name")
    run_parser.add_argument("--params", "-p", default="{}", help="Parameters as a JSON object")
    run_parser.add_argument("--user", "-u", default="cli", help="Caller id")
    run_parser.add_argument("--email", help="Caller email")
    run_parser.add_argument("--role", "-r", help="Caller role")
    run_parser.add_argument("--request-id", help="Correlation id echoed in the response")

    # introspection
    commands_parser = subparsers.add_parser("commands", help="List commands available to the caller")
    commands_parser.add_argument("--user", "-u", default="cli", help="Caller id")
    commands_parser.add_argument("--role", "-r", help="Caller role")
    subparsers.add_parser("docs", help="Print documentation for every registered command")
    subparsers.add_parser("health", help="Run the health check")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _identity(parsed: argparse.Namespace, settings):
    from commandhub.domain.command import CallerIdentity

    return CallerIdentity(
        id=parsed.user,
        email=getattr(parsed, "email", None),
        role=parsed.role or settings.api.default_role,
    )


def _load_settings(config_path: Optional[str]):
    from commandhub.config.validated_settings import load_validated_settings

    return load_validated_settings(config_path)


async def _dispatch(parsed: argparse.Namespace, runtime) -> int:
    orchestrator = runtime.orchestrator

    if parsed.command == "run":
        try:
            parameters = json.loads(parsed.params)
        except ValueError as e:
            print(f"Error: --params is not valid JSON: {e}", file=sys.stderr)
            return 1
        if not isinstance(parameters, dict):
            print("Error: --params must be a JSON object", file=sys.stderr)
            return 1
        envelope = await orchestrator.execute_action(
            parsed.action,
            parameters,
            _identity(parsed, runtime.settings),
            request_id=parsed.request_id,
        )
        _print_json(envelope.to_dict())
        return 0 if envelope.success else 1

    if parsed.command == "commands":
        commands = await orchestrator.get_available_commands(_identity(parsed, runtime.settings))
        _print_json({"commands": commands, "total": len(commands)})
        return 0

    if parsed.command == "docs":
        documentation = orchestrator.get_documentation()
        _print_json(
            {
                "documentation": documentation,
                "total": len(documentation),
                "categories": runtime.registry.get_category_counts(),
            }
        )
        return 0

    if parsed.command == "health":
        health = await orchestrator.health_check()
        _print_json(health)
        return 1 if health["status"] == "unhealthy" else 0

    return 1


def _serve(parsed: argparse.Namespace, settings) -> int:
    import uvicorn

    from commandhub.api.main import create_app

    uvicorn.run(create_app(settings=settings), host=parsed.host, port=parsed.port)
    return 0


def run_cli(args: Optional[list] = None, *, runtime=None) -> int:
    """
    Run the CLI

    Args:
        args: command-line arguments (defaults to sys.argv)
        runtime: a prebuilt runtime; when given it is used as-is and not closed

    Returns:
        exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.version:
        print(f"CommandHub v{__version__}")
        return 0

    if not parsed.command:
        parser.print_help()
        return 0

    try:
        settings = runtime.settings if runtime is not None else _load_settings(parsed.config)

        if parsed.command == "serve":
            return _serve(parsed, settings)

        owned = None
        if runtime is None:
            from commandhub.application.bootstrap import create_runtime
            from commandhub.infrastructure.logging import configure_logging

            configure_logging(settings.logging)
            runtime = owned = create_runtime(settings)
        try:
            return asyncio.run(_dispatch(parsed, runtime))
        finally:
            if owned is not None:
                owned.close()

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
