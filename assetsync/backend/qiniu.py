"""
Qiniu Kodo object storage and CDN backend.

Wraps the blocking ``qiniu`` SDK; each call runs in a worker thread through
RemoteBackend._run_blocking so uploads can proceed concurrently.
"""
from typing import Dict, List, Optional
import logging

import qiniu
from qiniu import Auth, BucketManager, CdnManager, build_batch_delete, put_file

from ..core.enums import Zone
from ..core.models import SyncOptions
from .base_backend import RemoteBackend, RemoteResponse


# zone -> (upload host, backup upload host, io host)
ZONE_HOSTS: Dict[Zone, tuple] = {
    Zone.Z0: ("https://upload.qiniup.com", "https://up.qiniup.com", "https://iovip.qbox.me"),
    Zone.CN_EAST_2: ("https://upload-cn-east-2.qiniup.com", "https://up-cn-east-2.qiniup.com",
                     "https://iovip-cn-east-2.qiniuio.com"),
    Zone.Z1: ("https://upload-z1.qiniup.com", "https://up-z1.qiniup.com", "https://iovip-z1.qbox.me"),
    Zone.Z2: ("https://upload-z2.qiniup.com", "https://up-z2.qiniup.com", "https://iovip-z2.qbox.me"),
    Zone.NA0: ("https://upload-na0.qiniup.com", "https://up-na0.qiniup.com", "https://iovip-na0.qbox.me"),
    Zone.AS0: ("https://upload-as0.qiniup.com", "https://up-as0.qiniup.com", "https://iovip-as0.qbox.me"),
}


class QiniuBackend(RemoteBackend):
    """RemoteBackend implementation on top of the qiniu SDK"""

    def __init__(self, options: SyncOptions, logger: Optional[logging.Logger] = None):
        super().__init__(timeout=options.timeout_seconds, logger=logger)
        self.options = options
        self.auth: Optional[Auth] = None
        self.bucket_manager: Optional[BucketManager] = None
        self.cdn_manager: Optional[CdnManager] = None

    async def connect(self):
        """Create the signing key pair and SDK managers"""
        if self.auth is not None:
            return
        up_host, up_host_backup, io_host = ZONE_HOSTS[self.options.zone]
        qiniu.config.set_default(
            default_zone=qiniu.Zone(up_host=up_host, up_host_backup=up_host_backup, io_host=io_host),
            connection_timeout=self.options.timeout_seconds
        )
        self.auth = Auth(self.options.access_key, self.options.secret_key)
        self.bucket_manager = BucketManager(self.auth)
        self.cdn_manager = CdnManager(self.auth)
        self.logger.info(f"Qiniu backend ready: bucket={self.options.bucket}, zone={self.options.zone.value}")

    async def disconnect(self):
        self.auth = None
        self.bucket_manager = None
        self.cdn_manager = None

    def upload_token(self, key: str) -> str:
        """Mint a single-use upload token scoped to bucket:key"""
        return self.auth.upload_token(self.options.bucket, key)

    async def put_object(self, key: str, local_path: str) -> RemoteResponse:
        await self.connect()
        return await self._run_blocking(f"put {key}", self._put_object_sync, key, local_path)

    async def batch_delete(self, keys: List[str]) -> RemoteResponse:
        await self.connect()
        return await self._run_blocking(f"batch delete of {len(keys)} key(s)", self._batch_delete_sync, keys)

    async def refresh_urls(self, urls: List[str]) -> RemoteResponse:
        await self.connect()
        return await self._run_blocking(f"refresh of {len(urls)} url(s)", self._refresh_urls_sync, urls)

    def _put_object_sync(self, key: str, local_path: str) -> RemoteResponse:
        token = self.upload_token(key)
        ret, info = put_file(token, key, local_path)
        return self._to_response(ret, info)

    def _batch_delete_sync(self, keys: List[str]) -> RemoteResponse:
        ops = build_batch_delete(self.options.bucket, keys)
        ret, info = self.bucket_manager.batch(ops)
        return self._to_response(ret, info)

    def _refresh_urls_sync(self, urls: List[str]) -> RemoteResponse:
        ret, info = self.cdn_manager.refresh_urls(urls)
        return self._to_response(ret, info)

    @staticmethod
    def _to_response(ret, info) -> RemoteResponse:
        """Translate the SDK's (ret, ResponseInfo) pair"""
        status_code = getattr(info, 'status_code', None)
        exception = getattr(info, 'exception', None)
        # The SDK reports "no response" as status -1
        if exception is not None and (status_code is None or status_code < 0):
            return RemoteResponse(error=str(exception))
        body = ret if ret is not None else getattr(info, 'text_body', None)
        return RemoteResponse(status_code=status_code, body=body)
