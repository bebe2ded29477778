"""
Command API Route

POST executes commands through the orchestrator; GET exposes the
introspection surface (available commands, documentation, health).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, List, Mapping, Optional, Tuple, Union

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from commandhub.api.status import adapter_error, http_status_for
from commandhub.application.bootstrap import CommandHubRuntime
from commandhub.core.errors import ErrorCode, InvalidCommandError
from commandhub.domain.command import CallerIdentity, CommandRequest
from commandhub.domain.envelope import ResponseEnvelope

logger = logging.getLogger(__name__)

router = APIRouter()


def _runtime(http_request: Request) -> CommandHubRuntime:
    return http_request.app.state.runtime


async def _identity(http_request: Request) -> Optional[CallerIdentity]:
    identity = http_request.app.state.authenticator.authenticate(http_request)
    if inspect.isawaitable(identity):
        identity = await identity
    return identity


def _envelope_response(envelope: ResponseEnvelope, status_code: Optional[int] = None) -> JSONResponse:
    return JSONResponse(
        jsonable_encoder(envelope.to_dict()), status_code=status_code or http_status_for(envelope)
    )


def _unauthenticated() -> JSONResponse:
    return _envelope_response(adapter_error(ErrorCode.UNAUTHORIZED, "Authentication required"), 401)


def _loose_request_id(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping) and isinstance(raw.get("metadata"), Mapping):
        rid = raw["metadata"].get("requestId")
        return str(rid) if rid else None
    return None


def _loose_action(raw: Any) -> Optional[str]:
    if isinstance(raw, Mapping) and isinstance(raw.get("action"), str):
        return raw["action"]
    return None


async def _json_body(http_request: Request) -> Tuple[Any, Optional[JSONResponse]]:
    try:
        return await http_request.json(), None
    except ValueError:
        logger.warning("Rejected request with invalid JSON body")
        return None, _envelope_response(
            adapter_error(ErrorCode.INVALID_COMMAND, "Invalid JSON in request body"), 400
        )


def _parse_command(raw: Any) -> Union[CommandRequest, JSONResponse]:
    try:
        return CommandRequest.from_dict(raw)
    except InvalidCommandError as exc:
        logger.warning("Rejected malformed command: %s", exc.message)
        return _envelope_response(
            adapter_error(
                ErrorCode.INVALID_COMMAND,
                exc.message,
                request_id=_loose_request_id(raw),
                action=_loose_action(raw),
            ),
            400,
        )


@router.post("/commands")
async def execute_command(http_request: Request):
    identity = await _identity(http_request)
    if identity is None:
        return _unauthenticated()

    raw, error = await _json_body(http_request)
    if error is not None:
        return error

    command = _parse_command(raw)
    if isinstance(command, JSONResponse):
        return command

    envelope = await _runtime(http_request).orchestrator.execute(command, identity)
    return _envelope_response(envelope)


async def _parse_batch(http_request: Request) -> Union[List[CommandRequest], JSONResponse]:
    raw, error = await _json_body(http_request)
    if error is not None:
        return error
    items = raw.get("commands") if isinstance(raw, Mapping) else None
    if not isinstance(items, list):
        return _envelope_response(
            adapter_error(ErrorCode.INVALID_COMMAND, "Body must have a commands array"), 400
        )

    commands: List[CommandRequest] = []
    for index, item in enumerate(items):
        try:
            commands.append(CommandRequest.from_dict(item))
        except InvalidCommandError as exc:
            return _envelope_response(
                adapter_error(
                    ErrorCode.INVALID_COMMAND,
                    f"commands[{index}]: {exc.message}",
                    request_id=_loose_request_id(item),
                    action=_loose_action(item),
                ),
                400,
            )
    return commands


def _batch_response(results: List[ResponseEnvelope], requested: int) -> dict:
    return {
        "success": all(r.success for r in results) and len(results) == requested,
        "results": [jsonable_encoder(r.to_dict()) for r in results],
        "total": requested,
        "completed": len(results),
    }


@router.post("/commands/sequence")
async def execute_sequence(http_request: Request):
    identity = await _identity(http_request)
    if identity is None:
        return _unauthenticated()

    commands = await _parse_batch(http_request)
    if isinstance(commands, JSONResponse):
        return commands

    results = await _runtime(http_request).orchestrator.execute_sequence(commands, identity)
    return _batch_response(results, len(commands))


@router.post("/commands/parallel")
async def execute_parallel(http_request: Request):
    identity = await _identity(http_request)
    if identity is None:
        return _unauthenticated()

    commands = await _parse_batch(http_request)
    if isinstance(commands, JSONResponse):
        return commands

    results = await _runtime(http_request).orchestrator.execute_parallel(commands, identity)
    return _batch_response(results, len(commands))


@router.get("/commands")
async def list_available_commands(http_request: Request):
    identity = await _identity(http_request)
    if identity is None:
        return _unauthenticated()

    commands = await _runtime(http_request).orchestrator.get_available_commands(identity)
    return {"commands": commands, "total": len(commands)}


@router.get("/commands/documentation")
async def command_documentation(http_request: Request):
    runtime = _runtime(http_request)
    documentation = runtime.orchestrator.get_documentation()
    return {
        "documentation": documentation,
        "total": len(documentation),
        "categories": runtime.registry.get_category_counts(),
    }


@router.get("/commands/health")
async def command_health(http_request: Request):
    health = await _runtime(http_request).orchestrator.health_check()
    status_code = 503 if health["status"] == "unhealthy" else 200
    return JSONResponse(jsonable_encoder(health), status_code=status_code)
