"""
assetsync - incremental sync of build outputs to object storage and CDN

Main modules:
- core: Data models, enums and exceptions
- utils: Hashing, name filters, batching and progress tracking
- cache_backend: Persisted cache snapshot stores
- backend: Remote object store / CDN backends
- pipeline: Change detection, upload, delete and refresh stages
- sync: The sync engine that sequences the stages
- config: Option loading and validation
"""

from .core.enums import SyncState
from .core.exceptions import SyncError, ConfigError, DigestError, UploadError, DeleteError, RefreshError, PersistenceError
from .core.models import Asset, AssetEntry, SyncOptions, SyncResult, SyncProgress
from .sync.sync_engine import SyncEngine
from .config.config_loader import ConfigLoader
from .cache_backend import FileSnapshotStore, InMemorySnapshotStore, get_snapshot_store
from .backend import RemoteBackend, RemoteResponse, QiniuBackend

__version__ = "1.0.0"
__all__ = [
    'SyncState',
    'SyncError',
    'ConfigError',
    'DigestError',
    'UploadError',
    'DeleteError',
    'RefreshError',
    'PersistenceError',
    'Asset',
    'AssetEntry',
    'SyncOptions',
    'SyncResult',
    'SyncProgress',
    'SyncEngine',
    'ConfigLoader',
    'FileSnapshotStore',
    'InMemorySnapshotStore',
    'get_snapshot_store',
    'RemoteBackend',
    'RemoteResponse',
    'QiniuBackend',
]
