import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass
class RemoteResponse:
    """Result of one remote call. Transport failures set ``error``."""
    status_code: Optional[int] = None
    body: Any = None
    error: Optional[str] = None

    @property
    def transport_failed(self) -> bool:
        return self.error is not None

    @property
    def status_class(self) -> Optional[int]:
        if self.status_code is None:
            return None
        return self.status_code // 100

    def describe(self) -> str:
        if self.error is not None:
            return self.error
        return f"status {self.status_code}: {self.body}"


class RemoteBackend(ABC):
    """
    Object store + CDN operations the sync engine depends on.

    Every call returns a RemoteResponse instead of raising, so the stages
    decide what counts as a failure. Calls are bounded by ``timeout``
    seconds; a timed out call comes back as a transport failure.
    """

    def __init__(self, timeout: Optional[float] = 600.0, logger: Optional[logging.Logger] = None):
        self.timeout = timeout
        self.logger = logger or logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def put_object(self, key: str, local_path: str) -> RemoteResponse:
        """Upload one local file under key, overwriting any existing object"""
        pass

    @abstractmethod
    async def batch_delete(self, keys: List[str]) -> RemoteResponse:
        """Delete several keys in one call; body holds per-key results"""
        pass

    @abstractmethod
    async def refresh_urls(self, urls: List[str]) -> RemoteResponse:
        """Invalidate CDN caches for the given public URLs"""
        pass

    async def connect(self):
        """Prepare clients (optional override)"""
        pass

    async def disconnect(self):
        """Release clients (optional override)"""
        pass

    async def _run_blocking(self, operation: str, func: Callable[..., RemoteResponse], *args) -> RemoteResponse:
        """
        Run a blocking SDK call in a worker thread under the call timeout.

        A timed out call is reported as a transport failure, but only once
        its worker thread has finished: the thread cannot be interrupted, and
        callers holding a concurrency slot must keep it until then.
        """
        call = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.wait_for(asyncio.shield(call), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"{operation} timed out after {self.timeout}s")
            try:
                late = await call
                self.logger.warning(f"{operation} finished after timeout: {late.describe()}")
            except Exception as e:
                self.logger.warning(f"{operation} failed after timeout: {e}")
            return RemoteResponse(error=f"{operation} timed out after {self.timeout}s")
        except Exception as e:
            self.logger.error(f"{operation} failed: {e}")
            return RemoteResponse(error=f"{operation} failed: {e}")
