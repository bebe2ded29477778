from __future__ import annotations

from typing import Awaitable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from commandhub.domain.command import CallerIdentity


@runtime_checkable
class PermissionPolicy(Protocol):
    """
    Decides whether a caller holds every permission a command requires.

    May be sync or async; the orchestrator awaits awaitable results.
    Admins are let through by the orchestrator before the policy is asked.
    """

    def check(
        self, identity: CallerIdentity, required: Sequence[str]
    ) -> Union[bool, Awaitable[bool]]:
        ...


class PermissivePolicy:
    """Allows every authenticated caller. Placeholder until a real RBAC backend is wired in."""

    def check(self, identity: CallerIdentity, required: Sequence[str]) -> bool:
        return True


class RolePermissionPolicy:
    """
    Deny-by-default role grants.

    `grants` maps a role to the permissions it holds; "*" grants everything.
    A caller without a role, or with an unknown role, holds nothing.
    """

    def __init__(self, grants: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._grants: Dict[str, frozenset] = {
            role: frozenset(perms) for role, perms in (grants or {}).items()
        }

    def permissions_for(self, role: Optional[str]) -> List[str]:
        return sorted(self._grants.get(role or "", frozenset()))

    def check(self, identity: CallerIdentity, required: Sequence[str]) -> bool:
        held = self._grants.get(identity.role or "")
        if not held:
            return False
        if "*" in held:
            return True
        return all(perm in held for perm in required)
