import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..backend.base_backend import RemoteBackend
from ..cache_backend.base import BaseSnapshotStore
from ..core.enums import SyncState
from ..core.exceptions import ConfigError, UploadError
from ..core.models import Asset, AssetEntry, SyncOptions, SyncProgress, SyncResult
from ..pipeline.base import StageResult
from ..pipeline.stages import ChangeDetectionStage, DeleteStage, RefreshStage, UploadStage
from ..utils.name_filter import passes
from ..utils.progress_manager import ProgressManager


class SyncEngine:
    """
    Runs one incremental sync of build outputs to the object store and CDN.

    Phases run strictly in order: detect, upload, delete, refresh, persist.
    The first fatal error moves the engine to FAILED and skips every
    remaining phase, including persistence, so re-running the same build
    retries the same work.
    """

    def __init__(self, options: SyncOptions, backend: RemoteBackend, store: BaseSnapshotStore,
                 progress_callback: Optional[Callable[[SyncProgress], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.options = options
        self.backend = backend
        self.store = store
        self.progress_callback = progress_callback
        logger_name = f"{logger.name}.sync_engine" if logger else __name__
        self.logger = logging.getLogger(logger_name)
        self.state = SyncState.IDLE
        self.last_result: Optional[SyncResult] = None
        self.stage_results: Dict[str, StageResult] = {}

    def select_candidates(self, assets: Mapping[str, Any]) -> List[Asset]:
        """
        Emitted assets that pass include, then exclude, in input order.

        Raises:
            ConfigError: An entry has no local path or a filter predicate
                misbehaves
        """
        candidates = []
        for name, value in assets.items():
            try:
                entry = AssetEntry.from_value(value)
                if not entry.emitted:
                    continue
                if not passes(name, self.options.include, keep_on_match=True):
                    continue
                if not passes(name, self.options.exclude, keep_on_match=False):
                    continue
            except (ValueError, TypeError) as e:
                raise ConfigError(f"Cannot select asset '{name}': {e}") from e
            candidates.append(Asset(name=name, local_path=entry.local_path))
        return candidates

    async def sync(self, assets: Mapping[str, Any]) -> SyncResult:
        """
        Run the pipeline.

        Args:
            assets: Ordered mapping of asset name -> AssetEntry (or dict
                with local_path/emitted)

        Returns:
            SyncResult in DONE state

        Raises:
            SyncError: The first fatal error; ``last_result`` holds the
                FAILED result with the failing phase and per-file failures
        """
        progress = SyncProgress(start_time=datetime.now())
        result = SyncResult(progress=progress, start_time=progress.start_time)
        self.last_result = result
        self.stage_results = {}
        self.state = SyncState.IDLE

        progress_manager = ProgressManager(progress, self.progress_callback, self.logger)
        detector = ChangeDetectionStage(self.options, progress_manager=progress_manager, logger=self.logger)
        uploader = UploadStage(self.options, self.backend, progress_manager=progress_manager, logger=self.logger)
        deleter = DeleteStage(self.options, self.backend, progress_manager=progress_manager, logger=self.logger)
        refresher = RefreshStage(self.options, self.backend, progress_manager=progress_manager, logger=self.logger)

        try:
            self._transition(SyncState.DETECTING)
            started = datetime.now()
            candidates = self.select_candidates(assets)
            old_snapshot = await self.store.load()
            self.logger.info(
                f"Starting sync: {len(candidates)} candidate(s), {len(old_snapshot)} cached entries"
            )
            changes = await detector.detect(candidates, old_snapshot)
            result.unchanged = [self.options.remote_key(a.name) for a in changes.unchanged]
            self._record(detector.name, started, data_processed=changes.total)

            self._transition(SyncState.UPLOADING)
            started = datetime.now()
            report = await uploader.upload_all(changes.changed)
            result.uploaded = report.uploaded
            self._record(uploader.name, started, data_processed=len(report.uploaded))

            self._transition(SyncState.DELETING)
            if deleter.should_process():
                started = datetime.now()
                result.deleted = await deleter.delete_stale(
                    old_snapshot, changes.new_snapshot, overwritten=report.uploaded
                )
                self._record(deleter.name, started, data_processed=len(result.deleted))
            else:
                self._record(deleter.name, None, skipped=True)

            self._transition(SyncState.REFRESHING)
            if refresher.should_process():
                started = datetime.now()
                result.refreshed = await refresher.refresh_changed(changes.changed)
                self._record(refresher.name, started, data_processed=len(result.refreshed))
            else:
                self._record(refresher.name, None, skipped=True)

            self._transition(SyncState.PERSISTING)
            await self.store.save(changes.new_snapshot)

            self._transition(SyncState.DONE)
        except Exception as e:
            result.failed_phase = self.state.value
            result.error = e
            if isinstance(e, UploadError):
                result.uploaded = e.uploaded
                result.failed = e.failures
            self.stage_results[result.failed_phase] = StageResult(
                stage_name=result.failed_phase, success=False, error=str(e)
            )
            self._transition(SyncState.FAILED)
            self.logger.error(f"Sync failed during {result.failed_phase}: {e}")
            raise
        finally:
            result.state = self.state
            result.end_time = datetime.now()
            await self.backend.disconnect()

        self.logger.info(f"Sync completed in {result.duration_seconds:.2f}s - {result.summary()}")
        return result

    async def run(self, assets: Mapping[str, Any], callback: Callable[[Optional[Exception]], None]) -> SyncResult:
        """
        Run the pipeline and report completion through a callback.

        The callback receives None on success or the first fatal error.
        """
        try:
            result = await self.sync(assets)
        except Exception as e:
            callback(e)
            return self.last_result
        callback(None)
        return result

    async def plan(self, assets: Mapping[str, Any]) -> Dict[str, List[str]]:
        """
        Compute what a sync would do without touching the remote or the cache.

        Returns:
            Dict with 'upload', 'unchanged', 'delete' and 'refresh' lists
        """
        candidates = self.select_candidates(assets)
        old_snapshot = await self.store.load()
        detector = ChangeDetectionStage(self.options, logger=self.logger)
        changes = await detector.detect(candidates, old_snapshot)

        upload = [self.options.remote_key(a.name) for a in changes.changed]
        delete = []
        if self.options.delete:
            delete = DeleteStage(self.options, self.backend, logger=self.logger).select_stale(
                old_snapshot, changes.new_snapshot, overwritten=upload
            )
        refresh = []
        if self.options.refresh:
            refresh = RefreshStage(self.options, self.backend, logger=self.logger).build_urls(changes.changed)

        return {
            'upload': upload,
            'unchanged': [self.options.remote_key(a.name) for a in changes.unchanged],
            'delete': delete,
            'refresh': refresh,
        }

    def _transition(self, state: SyncState) -> None:
        self.logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    def _record(self, stage_name: str, started: Optional[datetime], data_processed: int = 0,
                skipped: bool = False) -> None:
        duration = None
        if started is not None:
            duration = (datetime.now() - started).total_seconds() * 1000
        self.stage_results[stage_name] = StageResult(
            stage_name=stage_name,
            success=True,
            skipped=skipped,
            data_processed=data_processed,
            duration_ms=duration
        )
