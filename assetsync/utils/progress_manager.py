"""
Centralized progress manager to handle progress updates for a sync run.
"""
from typing import Optional, Callable
import logging

from ..core.models import SyncProgress


class ProgressManager:
    """Applies progress increments and notifies an optional callback"""

    def __init__(self,
                 progress: SyncProgress,
                 progress_callback: Optional[Callable[[SyncProgress], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.progress = progress
        self.progress_callback = progress_callback
        self.logger = logger or logging.getLogger(__name__)

    def update_progress(self,
                        total_files: int = 0,
                        hashed_files: int = 0,
                        changed_files: int = 0,
                        total_uploads: int = 0,
                        completed_uploads: int = 0,
                        failed_uploads: int = 0,
                        deleted_files: int = 0,
                        refreshed_urls: int = 0) -> None:
        """Update progress and notify the callback"""
        self.progress.update_progress(
            total_files=total_files,
            hashed_files=hashed_files,
            changed_files=changed_files,
            total_uploads=total_uploads,
            completed_uploads=completed_uploads,
            failed_uploads=failed_uploads,
            deleted_files=deleted_files,
            refreshed_urls=refreshed_urls
        )

        if self.progress_callback:
            try:
                self.progress_callback(self.progress)
            except Exception as e:
                self.logger.warning(f"Progress callback raised: {e}")

    def upload_completed(self, failed: bool = False) -> None:
        """Record one finished upload"""
        self.update_progress(completed_uploads=1, failed_uploads=1 if failed else 0)
        self.logger.debug(
            f"Uploaded {self.progress.completed_uploads}/{self.progress.total_uploads}"
        )
