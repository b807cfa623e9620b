from typing import Iterable, List

from ..base import PipelineStage
from ...core.exceptions import DeleteError
from ...core.models import CacheSnapshot
from ...utils.batching import chunk


# Maximum number of operations the remote accepts in one batch call
MAX_DELETE_BATCH = 1000


def compute_stale_keys(old_snapshot: CacheSnapshot, new_snapshot: CacheSnapshot) -> List[str]:
    """Keys of the old snapshot that are missing from, or differ in, the new one"""
    return [
        key for key, digest in old_snapshot.items()
        if new_snapshot.get(key) != digest
    ]


class DeleteStage(PipelineStage):
    """Removes remote objects that the current build no longer produces"""

    def __init__(self, options, backend, progress_manager=None, logger=None,
                 max_batch_size: int = MAX_DELETE_BATCH):
        super().__init__("delete", options, backend=backend, progress_manager=progress_manager, logger=logger)
        self.max_batch_size = max_batch_size

    @property
    def enabled(self) -> bool:
        return self.options.delete

    def select_stale(self, old_snapshot: CacheSnapshot, new_snapshot: CacheSnapshot,
                     overwritten: Iterable[str] = ()) -> List[str]:
        """Stale keys minus the ones overwritten by this run's uploads"""
        skip = set(overwritten)
        return [key for key in compute_stale_keys(old_snapshot, new_snapshot) if key not in skip]

    async def delete_stale(self, old_snapshot: CacheSnapshot, new_snapshot: CacheSnapshot,
                           overwritten: Iterable[str] = ()) -> List[str]:
        """
        Delete stale keys in batches.

        Args:
            old_snapshot: Snapshot of the previous successful run
            new_snapshot: Snapshot built for the current run
            overwritten: Keys this run has just re-uploaded in place; they
                are stale by digest but hold the new content now

        Returns:
            Keys submitted for deletion

        Raises:
            DeleteError: On the first batch the remote rejects entirely.
                Later batches are not sent.
        """
        stale_keys = self.select_stale(old_snapshot, new_snapshot, overwritten)
        self.logger.info(f"{len(stale_keys)} files need to delete")
        if not stale_keys:
            return []

        deleted: List[str] = []
        batches = chunk(stale_keys, self.max_batch_size)
        for index, batch in enumerate(batches, start=1):
            response = await self.backend.batch_delete(batch)

            if response.transport_failed:
                raise DeleteError(
                    f"Delete batch {index}/{len(batches)} failed: {response.error}"
                )
            # 200 is full success, 298 is partial success
            if response.status_class != 2:
                raise DeleteError(
                    f"Delete batch {index}/{len(batches)} rejected with status {response.status_code}",
                    status_code=response.status_code,
                    body=response.body
                )
            if response.status_code != 200:
                self.logger.warning(
                    f"Delete batch {index}/{len(batches)} partially succeeded "
                    f"(status {response.status_code}): {response.body}"
                )

            deleted.extend(batch)
            self._update_progress(deleted_files=len(batch))
            self.logger.debug(f"Delete batch {index}/{len(batches)} done ({len(batch)} keys)")

        return deleted
