from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional

from commandhub.application.ports.persistence_port import PersistenceBackend


class InMemoryPersistence(PersistenceBackend):
    """
    Dict-of-collections store (useful for tests/evals).

    `report_error` makes ping() answer with a failure; `raise_error` makes it
    unreachable. Both simulate backend trouble for health checks.
    """

    name = "memory"

    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Any]] = defaultdict(dict)
        self.report_error: Optional[str] = None
        self.raise_error: Optional[BaseException] = None

    async def insert(self, collection: str, key: str, value: Any) -> Any:
        self.collections[collection][key] = value
        return value

    async def get(self, collection: str, key: str) -> Optional[Any]:
        return self.collections.get(collection, {}).get(key)

    async def list(self, collection: str) -> List[Any]:
        return list(self.collections.get(collection, {}).values())

    async def ping(self) -> Optional[str]:
        if self.raise_error is not None:
            raise self.raise_error
        return self.report_error

    def close(self) -> None:
        self.collections.clear()
