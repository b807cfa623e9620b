from .enums import SyncState, Zone
from .exceptions import (
    SyncError,
    ConfigError,
    DigestError,
    UploadError,
    RemoteCallError,
    DeleteError,
    RefreshError,
    PersistenceError
)
from .models import (
    CacheSnapshot,
    LiteralFilter,
    PatternFilter,
    PredicateFilter,
    NameFilter,
    Asset,
    AssetEntry,
    SyncOptions,
    ChangeSet,
    SyncProgress,
    SyncResult
)
