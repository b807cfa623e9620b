"""Exceptions raised by the sync engine.

All engine errors inherit from SyncError. The phase that raised an error is
available as ``error.phase`` so callers can report where a run stopped.
"""
from typing import Any, Dict, List, Optional


class SyncError(Exception):
    """Base exception for sync operations."""

    phase: Optional[str] = None


class ConfigError(SyncError):
    """Raised when a required option is missing or invalid."""

    phase = "config"


class DigestError(SyncError):
    """Raised when a local file cannot be hashed."""

    phase = "detecting"

    def __init__(self, name: str, path: str, cause: Exception):
        self.name = name
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to hash '{name}' ({path}): {cause}")


class UploadError(SyncError):
    """Raised once an upload phase finishes with at least one failed file."""

    phase = "uploading"

    def __init__(self, failures: Dict[str, str], uploaded: Optional[List[str]] = None):
        self.failures = dict(failures)
        self.uploaded = list(uploaded or [])
        keys = ", ".join(sorted(self.failures))
        super().__init__(f"{len(self.failures)} file(s) failed to upload: {keys}")


class RemoteCallError(SyncError):
    """Base for batch calls rejected by the remote service."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DeleteError(RemoteCallError):
    """Raised when a batch delete call fails entirely."""

    phase = "deleting"


class RefreshError(RemoteCallError):
    """Raised when a CDN refresh call is not acknowledged."""

    phase = "refreshing"


class PersistenceError(SyncError):
    """Raised when the cache snapshot cannot be written."""

    phase = "persisting"
