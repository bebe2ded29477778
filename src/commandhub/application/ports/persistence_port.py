from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class PersistenceBackend(Protocol):
    """
    Storage handle passed to handlers through CommandContext.

    The orchestrator never inspects what handlers do with it; it only probes
    connectivity for the health check.
    """

    name: str

    async def ping(self) -> Optional[str]:
        """
        Run a trivial read.

        Returns None when the backend answered normally, or an error message
        when it answered with a failure. Raises when it cannot be reached.
        """

    def close(self) -> None:
        """Release underlying resources (optional)."""
