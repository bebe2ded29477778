from __future__ import annotations

from typing import Optional

from commandhub.core.errors import ErrorCode
from commandhub.domain.envelope import ErrorInfo, ResponseEnvelope, ResponseMetadata

_STATUS_BY_CODE = {
    ErrorCode.UNAUTHORIZED.value: 401,
    ErrorCode.COMMAND_NOT_FOUND.value: 404,
    ErrorCode.VALIDATION_FAILED.value: 400,
    ErrorCode.INVALID_COMMAND.value: 400,
    ErrorCode.MISSING_PARAMETERS.value: 400,
    ErrorCode.RATE_LIMITED.value: 429,
}


def http_status_for(envelope: ResponseEnvelope) -> int:
    if envelope.success:
        return 200
    code = envelope.error.code if envelope.error else ""
    return _STATUS_BY_CODE.get(code, 500)


def adapter_error(
    code: ErrorCode,
    message: str,
    *,
    request_id: Optional[str] = None,
    action: Optional[str] = None,
) -> ResponseEnvelope:
    """Envelope for failures detected before the request reaches the orchestrator."""
    return ResponseEnvelope.fail(
        ErrorInfo(code=code.value, message=message),
        ResponseMetadata(request_id=request_id or "unknown", action=action or "unknown", execution_time=0),
    )
