"""
Command orchestrator: the dispatch engine.

Per execution (stack-local, never persisted):

    LOOKUP -> {NOT_FOUND | DISABLED} -> PERMISSION_CHECK -> {DENIED}
           -> VALIDATE -> {INVALID} -> EXECUTE -> {HANDLER_ERROR} -> SUCCESS

Every path ends in exactly one ResponseEnvelope. This class is the only
place where exceptions are turned into envelopes.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import traceback
from datetime import datetime
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from commandhub.application.ports.event_log_port import CommandEventLog, ExecutionRecord
from commandhub.application.ports.permission_port import PermissionPolicy, PermissivePolicy
from commandhub.application.ports.persistence_port import PersistenceBackend
from commandhub.application.registries.command_registry import CommandRegistry
from commandhub.core.errors import (
    CommandCancelledError,
    CommandHubError,
    CommandTimeoutError,
    ErrorCode,
)
from commandhub.domain.command import (
    CallerIdentity,
    CancellationToken,
    CommandContext,
    CommandHandler,
    CommandRequest,
)
from commandhub.domain.envelope import (
    ErrorInfo,
    ResponseEnvelope,
    ResponseMetadata,
    new_request_id,
    utcnow,
)

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"
_SEVERITY = {HEALTHY: 0, DEGRADED: 1, UNHEALTHY: 2}


def _worst(a: str, b: str) -> str:
    return a if _SEVERITY.get(a, 0) >= _SEVERITY.get(b, 0) else b


def _elapsed_ms(start: float) -> float:
    return round(max(0.0, (perf_counter() - start) * 1000), 3)


def _error_message(exc: BaseException, fallback: str) -> str:
    if isinstance(exc, CommandHubError):
        return exc.message or fallback
    return str(exc) or fallback


def _drain(task: "asyncio.Future[Any]") -> None:
    # Retrieve the outcome of an abandoned handler task so asyncio does not warn about it.
    if not task.cancelled():
        task.exception()


class CommandOrchestrator:
    def __init__(
        self,
        registry: CommandRegistry,
        *,
        persistence: Optional[PersistenceBackend] = None,
        permission_policy: Optional[PermissionPolicy] = None,
        event_log: Optional[CommandEventLog] = None,
        default_timeout: Optional[float] = None,
        expose_error_details: bool = False,
        health_probe_timeout: float = 5.0,
    ) -> None:
        self.registry = registry
        self.persistence = persistence
        self.permission_policy: PermissionPolicy = permission_policy or PermissivePolicy()
        self.event_log = event_log
        self.default_timeout = default_timeout
        self.expose_error_details = expose_error_details
        self.health_probe_timeout = health_probe_timeout
        self._started_at = time.monotonic()

    # ---- dispatch ----

    async def execute(
        self,
        command: CommandRequest,
        identity: CallerIdentity,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ResponseEnvelope:
        start = perf_counter()
        timestamp = utcnow()
        request_id = getattr(command, "request_id", None) or new_request_id()
        action = getattr(command, "action", None) or "unknown"

        try:
            response = await self._dispatch(command, identity, request_id, action, timestamp, start, cancel_token)
        except Exception:
            logger.exception("Unexpected error while executing %s (request_id=%s)", action, request_id)
            response = self._error(
                request_id,
                action,
                start,
                timestamp,
                ErrorCode.INTERNAL_ERROR,
                "An unexpected error occurred",
            )

        await self._record(response, identity)
        return response

    async def execute_action(
        self,
        action: str,
        parameters: Dict[str, Any],
        identity: CallerIdentity,
        request_id: Optional[str] = None,
    ) -> ResponseEnvelope:
        metadata = {"requestId": request_id} if request_id else {}
        return await self.execute(CommandRequest(action=action, parameters=parameters, metadata=metadata), identity)

    async def _dispatch(
        self,
        command: CommandRequest,
        identity: CallerIdentity,
        request_id: str,
        action: str,
        timestamp: datetime,
        start: float,
        cancel_token: Optional[CancellationToken],
    ) -> ResponseEnvelope:
        parameters = command.parameters
        logger.info(
            "Executing command: %s request_id=%s user=%s parameters=%s",
            action,
            request_id,
            identity.id,
            sorted(parameters.keys()),
        )

        entry = self.registry.get(action)
        if entry is None:
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.COMMAND_NOT_FOUND, f"Command '{action}' not found",
            )

        if not entry.enabled:
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.COMMAND_NOT_FOUND, f"Command '{action}' is currently disabled",
            )

        if entry.permissions:
            if not await self.check_permissions(identity, entry.permissions):
                logger.info("Permission denied for %s on %s (role=%s)", identity.id, action, identity.role)
                return self._error(
                    request_id, action, start, timestamp,
                    ErrorCode.UNAUTHORIZED, "Insufficient permissions to execute this command",
                )

        validation = self.registry.validate_parameters(action, parameters)
        if not validation.valid:
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.VALIDATION_FAILED, "Parameter validation failed",
                {"errors": list(validation.errors)},
            )

        token = cancel_token or CancellationToken()
        if token.cancelled:
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.EXECUTION_FAILED, f"Command '{action}' was cancelled before execution",
                {"reason": token.reason},
            )

        context = CommandContext(
            user=identity,
            request_id=request_id,
            timestamp=timestamp,
            persistence=self.persistence,
            cancel_token=token,
        )

        try:
            data = await self._invoke(action, entry.handler, dict(parameters), context)
        except (CommandTimeoutError, CommandCancelledError) as exc:
            logger.warning("Command %s aborted (request_id=%s): %s", action, request_id, exc.message)
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.EXECUTION_FAILED, exc.message, exc.context,
            )
        except Exception as exc:
            logger.error(
                "Command execution failed: %s (request_id=%s): %s",
                action,
                request_id,
                exc,
                exc_info=True,
            )
            details = None
            if self.expose_error_details:
                details = {"type": type(exc).__name__, "stack": traceback.format_exc()}
            return self._error(
                request_id, action, start, timestamp,
                ErrorCode.EXECUTION_FAILED, _error_message(exc, "Command execution failed"), details,
            )

        metadata = ResponseMetadata(
            request_id=request_id,
            action=action,
            execution_time=_elapsed_ms(start),
            timestamp=timestamp,
        )
        logger.info(
            "Command executed successfully: %s request_id=%s executionTime=%sms",
            action,
            request_id,
            metadata.execution_time,
        )
        return ResponseEnvelope.ok(data, metadata)

    async def _invoke(
        self,
        action: str,
        handler: CommandHandler,
        parameters: Dict[str, Any],
        context: CommandContext,
    ) -> Any:
        timeout = handler.timeout_seconds if handler.timeout_seconds is not None else self.default_timeout
        task = asyncio.ensure_future(self._call(handler, parameters, context))
        waiter = asyncio.ensure_future(context.cancel_token.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                task.add_done_callback(_drain)

        if task in done:
            if task.cancelled():
                raise CommandCancelledError(message=f"Command '{action}' was cancelled")
            return task.result()

        if context.cancel_token.cancelled:
            raise CommandCancelledError(
                message=f"Command '{action}' was cancelled",
                context={"reason": context.cancel_token.reason},
            )

        context.cancel_token.cancel("timeout")
        raise CommandTimeoutError(
            message=f"Command '{action}' timed out after {timeout}s",
            context={"timeout_seconds": timeout},
        )

    @staticmethod
    async def _call(handler: CommandHandler, parameters: Dict[str, Any], context: CommandContext) -> Any:
        result = handler.execute(parameters, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    # ---- batches ----

    async def execute_sequence(
        self, commands: Sequence[CommandRequest], identity: CallerIdentity
    ) -> List[ResponseEnvelope]:
        """Run in order; stop at the first failure and return what ran."""
        results: List[ResponseEnvelope] = []
        for command in commands:
            result = await self.execute(command, identity)
            results.append(result)
            if not result.success:
                logger.info(
                    "Sequence execution stopped at command: %s (%d of %d)",
                    result.metadata.action,
                    len(results),
                    len(commands),
                )
                break
        return results

    async def execute_parallel(
        self, commands: Sequence[CommandRequest], identity: CallerIdentity
    ) -> List[ResponseEnvelope]:
        """Run concurrently, no short-circuit; results keep input order."""
        return list(await asyncio.gather(*(self.execute(command, identity) for command in commands)))

    # ---- permissions & introspection ----

    async def check_permissions(self, identity: CallerIdentity, required: Sequence[str]) -> bool:
        if identity.is_admin:
            return True
        allowed = self.permission_policy.check(identity, list(required))
        if inspect.isawaitable(allowed):
            allowed = await allowed
        return bool(allowed)

    async def get_available_commands(self, identity: CallerIdentity) -> Dict[str, Dict[str, Any]]:
        available: Dict[str, Dict[str, Any]] = {}
        for name, entry in self.registry.get_enabled().items():
            if entry.permissions and not await self.check_permissions(identity, entry.permissions):
                continue
            available[name] = entry.to_doc_lite()
        return available

    def get_documentation(self) -> Dict[str, Dict[str, Any]]:
        return self.registry.get_documentation()

    async def health_check(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {}
        status = HEALTHY

        try:
            all_commands = self.registry.get_all()
            enabled = sum(1 for entry in all_commands.values() if entry.enabled)
            commands_status = HEALTHY if enabled > 0 else DEGRADED
            details["commands"] = {
                "total": len(all_commands),
                "enabled": enabled,
                "status": commands_status,
            }
            status = _worst(status, commands_status)

            persistence_details, persistence_effect = await self._probe_persistence()
            details["persistence"] = persistence_details
            status = _worst(status, persistence_effect)
        except Exception as exc:
            logger.exception("Health check failed")
            status = UNHEALTHY
            details["error"] = str(exc) or type(exc).__name__

        details["timestamp"] = utcnow().isoformat()
        details["uptime_seconds"] = round(time.monotonic() - self._started_at, 3)
        return {"status": status, "details": details}

    async def _probe_persistence(self) -> Tuple[Dict[str, Any], str]:
        if self.persistence is None:
            return {"status": "unconfigured"}, HEALTHY

        backend = getattr(self.persistence, "name", type(self.persistence).__name__)
        start = perf_counter()
        try:
            error = await asyncio.wait_for(self.persistence.ping(), timeout=self.health_probe_timeout)
        except Exception as exc:
            logger.warning("Persistence health probe failed (%s): %s", backend, exc)
            message = str(exc) or type(exc).__name__
            return (
                {"status": UNHEALTHY, "backend": backend, "latency_ms": _elapsed_ms(start), "error": message},
                UNHEALTHY,
            )

        latency = _elapsed_ms(start)
        if error:
            return {"status": UNHEALTHY, "backend": backend, "latency_ms": latency, "error": error}, DEGRADED
        return {"status": HEALTHY, "backend": backend, "latency_ms": latency}, HEALTHY

    # ---- envelope helpers ----

    def _error(
        self,
        request_id: str,
        action: str,
        start: float,
        timestamp: datetime,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None,
    ) -> ResponseEnvelope:
        metadata = ResponseMetadata(
            request_id=request_id,
            action=action,
            execution_time=_elapsed_ms(start),
            timestamp=timestamp,
        )
        return ResponseEnvelope.fail(ErrorInfo(code=code.value, message=message, details=details), metadata)

    async def _record(self, response: ResponseEnvelope, identity: CallerIdentity) -> None:
        if self.event_log is None:
            return
        record = ExecutionRecord(
            request_id=response.metadata.request_id,
            action=response.metadata.action,
            user_id=str(getattr(identity, "id", "") or ""),
            success=response.success,
            execution_time_ms=response.metadata.execution_time,
            error_code=response.error.code if response.error else None,
        )
        try:
            # append() may block on I/O
            await asyncio.to_thread(self.event_log.append, record)
        except Exception as exc:
            logger.warning("Failed to record execution %s: %s", response.metadata.request_id, exc)
