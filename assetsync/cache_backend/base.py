from abc import ABC, abstractmethod
from typing import Any, Dict

from ..core.models import CacheSnapshot


class BaseSnapshotStore(ABC):
    """
    Base class for cache snapshot stores.

    A store holds one mapping of remote key -> content digest. The engine
    loads it once at the start of a run and replaces it wholesale after a
    successful run, so implementations only need whole-document semantics.
    """

    @abstractmethod
    async def load(self) -> CacheSnapshot:
        """
        Load the last persisted snapshot.

        Returns:
            The snapshot, or an empty dict when nothing usable is stored.
            Never raises.
        """
        pass

    @abstractmethod
    async def save(self, snapshot: CacheSnapshot) -> None:
        """
        Replace the persisted snapshot.

        Raises:
            PersistenceError: If the snapshot cannot be written
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove any persisted snapshot"""
        pass

    @abstractmethod
    def describe(self) -> Dict[str, Any]:
        """Short description of where the snapshot lives"""
        pass

    @staticmethod
    def is_valid_snapshot(data: Any) -> bool:
        """Check that decoded data is a str -> str mapping"""
        return isinstance(data, dict) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        )
