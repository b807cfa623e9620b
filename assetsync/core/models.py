from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Pattern, Union

from .enums import SyncState, Zone


# Remote key -> content digest
CacheSnapshot = Dict[str, str]


@dataclass(frozen=True)
class LiteralFilter:
    """Matches a name that is exactly equal to ``value``"""
    value: str


@dataclass(frozen=True)
class PatternFilter:
    """Matches a name the compiled pattern can be found in"""
    pattern: Pattern[str]


@dataclass(frozen=True)
class PredicateFilter:
    """Matches a name the predicate returns True for"""
    predicate: Callable[[str], bool]


NameFilter = Union[LiteralFilter, PatternFilter, PredicateFilter]


@dataclass(frozen=True)
class Asset:
    """A build output candidate"""
    name: str
    local_path: str


@dataclass
class AssetEntry:
    """One entry of the mapping handed over by the build collaborator"""
    local_path: str
    emitted: bool = True

    @classmethod
    def from_value(cls, value: Any) -> 'AssetEntry':
        """Accept AssetEntry, plain dicts, or a bare path"""
        if isinstance(value, AssetEntry):
            return value
        if isinstance(value, dict):
            local_path = value.get('local_path') or value.get('localPath') or value.get('existsAt')
            if not local_path:
                raise ValueError(f"Asset entry has no local path: {value}")
            return cls(local_path=str(local_path), emitted=bool(value.get('emitted', True)))
        return cls(local_path=str(value))


@dataclass
class SyncOptions:
    """Validated options for one sync target. Build with ConfigLoader."""
    access_key: str
    secret_key: str
    bucket: str
    cdn: str
    zone: Zone
    timeout: int = 600000  # milliseconds
    include: List[NameFilter] = field(default_factory=list)
    exclude: List[NameFilter] = field(default_factory=list)
    refresh: bool = False
    refresh_filters: List[NameFilter] = field(default_factory=list)
    delete: bool = False
    prefix: str = ""
    max_concurrency: int = 20

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0

    def remote_key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def public_url(self, remote_key: str) -> str:
        return f"{self.cdn}{remote_key}"


@dataclass
class ChangeSet:
    """Output of change detection"""
    changed: List[Asset] = field(default_factory=list)
    unchanged: List[Asset] = field(default_factory=list)
    new_snapshot: CacheSnapshot = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.changed) + len(self.unchanged)


@dataclass
class SyncProgress:
    """Track sync progress"""
    total_files: int = 0
    hashed_files: int = 0
    changed_files: int = 0
    total_uploads: int = 0
    completed_uploads: int = 0   # successful and failed uploads that have finished
    failed_uploads: int = 0
    deleted_files: int = 0
    refreshed_urls: int = 0
    start_time: Optional[datetime] = None

    def update_progress(self,
        total_files: int = 0,
        hashed_files: int = 0,
        changed_files: int = 0,
        total_uploads: int = 0,
        completed_uploads: int = 0,
        failed_uploads: int = 0,
        deleted_files: int = 0,
        refreshed_urls: int = 0
    ):
        self.total_files += total_files
        self.hashed_files += hashed_files
        self.changed_files += changed_files
        self.total_uploads += total_uploads
        self.completed_uploads += completed_uploads
        self.failed_uploads += failed_uploads
        self.deleted_files += deleted_files
        self.refreshed_urls += refreshed_urls

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['start_time'] = self.start_time.isoformat() if self.start_time else None
        return data


@dataclass
class SyncResult:
    """Outcome of one pipeline run"""
    state: SyncState = SyncState.IDLE
    failed_phase: Optional[str] = None
    error: Optional[Exception] = None
    uploaded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    unchanged: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    refreshed: List[str] = field(default_factory=list)
    progress: SyncProgress = field(default_factory=SyncProgress)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SyncState.DONE

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def summary(self) -> str:
        """One-line human-readable summary"""
        return (
            f"{self.state.value}: uploaded={len(self.uploaded)}, "
            f"unchanged={len(self.unchanged)}, deleted={len(self.deleted)}, "
            f"refreshed={len(self.refreshed)}, failed={len(self.failed)}"
        )

    def failure_report(self) -> str:
        """Human-readable report naming the failing phase and failed files"""
        if self.state != SyncState.FAILED:
            return ""
        lines = [f"Sync failed during {self.failed_phase or 'unknown'} phase: {self.error}"]
        if self.failed:
            lines.append(f"Failed uploads ({len(self.failed)}):")
            for key in sorted(self.failed):
                lines.append(f"  - {key}: {self.failed[key]}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'failed_phase': self.failed_phase,
            'error': str(self.error) if self.error else None,
            'uploaded': list(self.uploaded),
            'failed': dict(self.failed),
            'unchanged': list(self.unchanged),
            'deleted': list(self.deleted),
            'refreshed': list(self.refreshed),
            'progress': self.progress.to_dict(),
            'duration_seconds': self.duration_seconds,
        }
