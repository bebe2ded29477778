"""
Caller identity for the HTTP adapter.

Token issuance/verification lives outside this service; an upstream
authenticator (gateway, auth proxy) forwards the verified identity in headers.
"""

from __future__ import annotations

from typing import Awaitable, Optional, Protocol, Union, runtime_checkable

from fastapi import Request

from commandhub.domain.command import CallerIdentity

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLE_HEADER = "X-User-Role"


@runtime_checkable
class Authenticator(Protocol):
    def authenticate(self, request: Request) -> Union[Optional[CallerIdentity], Awaitable[Optional[CallerIdentity]]]:
        """Return the caller identity, or None when the request is unauthenticated."""


class HeaderAuthenticator:
    def __init__(self, default_role: str = "user") -> None:
        self.default_role = default_role

    def authenticate(self, request: Request) -> Optional[CallerIdentity]:
        user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
        if not user_id:
            return None
        return CallerIdentity(
            id=user_id,
            email=request.headers.get(USER_EMAIL_HEADER) or None,
            role=request.headers.get(USER_ROLE_HEADER) or self.default_role,
        )
