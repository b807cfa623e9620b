"""
Detects which candidate assets changed since the last successful run.
"""
import asyncio
from typing import List, Tuple

from ..base import PipelineStage
from ...core.exceptions import DigestError
from ...core.models import Asset, CacheSnapshot, ChangeSet
from ...utils.hash_calculator import HashCalculator


# Files hashed at once; each holds an open descriptor while it is read
HASH_CONCURRENCY = 64


class ChangeDetectionStage(PipelineStage):
    """Hashes every candidate and compares against the cache snapshot"""

    def __init__(self, options, progress_manager=None, logger=None,
                 hash_calculator: HashCalculator = None, max_concurrency: int = HASH_CONCURRENCY):
        super().__init__("change_detection", options, progress_manager=progress_manager, logger=logger)
        self.hash_calculator = hash_calculator or HashCalculator()
        self.max_concurrency = max_concurrency

    async def detect(self, assets: List[Asset], snapshot: CacheSnapshot) -> ChangeSet:
        """
        Partition assets into changed and unchanged.

        Args:
            assets: Filtered candidates, in collaborator order
            snapshot: Cache snapshot of the previous successful run

        Returns:
            ChangeSet with changed assets in input order and the new snapshot
            covering every candidate

        Raises:
            DigestError: If any file cannot be hashed; nothing is returned
        """
        self._update_progress(total_files=len(assets))
        new_snapshot: CacheSnapshot = {}
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def hash_asset(asset: Asset) -> Tuple[Asset, str]:
            try:
                async with semaphore:
                    digest = await self.hash_calculator.calculate_file_hash(asset.local_path)
            except OSError as e:
                self.logger.error(f"Failed to hash {asset.name}: {e}")
                raise DigestError(asset.name, asset.local_path, e) from e
            new_snapshot[self.options.remote_key(asset.name)] = digest
            self._update_progress(hashed_files=1)
            return asset, digest

        results = await asyncio.gather(
            *[hash_asset(asset) for asset in assets], return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        changes = ChangeSet(new_snapshot=new_snapshot)
        for asset, digest in results:
            key = self.options.remote_key(asset.name)
            if digest != snapshot.get(key):
                changes.changed.append(asset)
                self.logger.debug(f"Changed: {key}")
            else:
                changes.unchanged.append(asset)

        self._update_progress(changed_files=len(changes.changed))
        self.logger.info(
            f"Change detection complete: changed={len(changes.changed)}, "
            f"unchanged={len(changes.unchanged)}"
        )
        return changes
