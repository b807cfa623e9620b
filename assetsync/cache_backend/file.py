import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from ..core.exceptions import PersistenceError
from ..core.models import CacheSnapshot
from .base import BaseSnapshotStore


DEFAULT_CACHE_FILE = "cacheData.json"


class FileSnapshotStore(BaseSnapshotStore):
    """
    Snapshot store backed by a single JSON document on disk.

    Writes go to a temporary file in the same directory which then replaces
    the document, so readers never see a half-written snapshot.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file store.

        Args:
            path: Path of the JSON document
        """
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def in_directory(cls, cache_dir: Union[str, Path], file_name: str = DEFAULT_CACHE_FILE) -> 'FileSnapshotStore':
        return cls(Path(cache_dir) / file_name)

    async def load(self) -> CacheSnapshot:
        if not self.path.exists():
            self.logger.info(f"No cache snapshot at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable cache snapshot {self.path}: {e}")
            return {}

        if data is None:
            return {}
        if not self.is_valid_snapshot(data):
            self.logger.warning(f"Ignoring malformed cache snapshot {self.path}")
            return {}

        self.logger.debug(f"Loaded {len(data)} cache entries from {self.path}")
        return data

    async def save(self, snapshot: CacheSnapshot) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, sort_keys=True)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            self.logger.error(f"Failed to save cache snapshot to {self.path}: {e}")
            raise PersistenceError(f"Could not write cache snapshot {self.path}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        self.logger.info(f"Saved {len(snapshot)} cache entries to {self.path}")

    async def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            self.logger.info(f"Removed cache snapshot {self.path}")

    def describe(self) -> Dict[str, Any]:
        return {'type': 'file', 'path': str(self.path), 'exists': self.path.exists()}
