from typing import Any, Dict, Optional

from ..core.models import CacheSnapshot
from .base import BaseSnapshotStore


class InMemorySnapshotStore(BaseSnapshotStore):
    """Snapshot store kept in process memory. Used for dry runs and tests."""

    def __init__(self, initial: Optional[CacheSnapshot] = None):
        self._snapshot: CacheSnapshot = dict(initial or {})
        self.save_count = 0

    async def load(self) -> CacheSnapshot:
        return dict(self._snapshot)

    async def save(self, snapshot: CacheSnapshot) -> None:
        self._snapshot = dict(snapshot)
        self.save_count += 1

    async def clear(self) -> None:
        self._snapshot = {}

    def describe(self) -> Dict[str, Any]:
        return {'type': 'memory', 'entries': len(self._snapshot)}
