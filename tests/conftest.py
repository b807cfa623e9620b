"""Pytest configuration and fixtures for assetsync tests."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from assetsync.backend.base_backend import RemoteBackend, RemoteResponse
from assetsync.config.config_loader import ConfigLoader
from assetsync.core.models import AssetEntry, SyncOptions

# Configure logging
logging.basicConfig(level=logging.INFO)


class FakeBackend(RemoteBackend):
    """Records every remote call; responses can be scripted per key or per call."""

    def __init__(self, upload_delay: float = 0.0):
        super().__init__(timeout=5.0)
        self.upload_delay = upload_delay
        self.put_calls: List[tuple] = []
        self.delete_calls: List[List[str]] = []
        self.refresh_calls: List[List[str]] = []
        self.upload_failures: Dict[str, Union[RemoteResponse, Exception]] = {}
        self.delete_responses: List[RemoteResponse] = []
        self.refresh_responses: List[RemoteResponse] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.disconnect_count = 0

    async def put_object(self, key: str, local_path: str) -> RemoteResponse:
        self.put_calls.append((key, local_path))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.upload_delay)
        finally:
            self.in_flight -= 1
        failure = self.upload_failures.get(key)
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure
        return RemoteResponse(status_code=200, body={'key': key, 'hash': 'remote-hash'})

    async def batch_delete(self, keys: List[str]) -> RemoteResponse:
        self.delete_calls.append(list(keys))
        if self.delete_responses:
            return self.delete_responses.pop(0)
        return RemoteResponse(status_code=200, body=[{'code': 200} for _ in keys])

    async def refresh_urls(self, urls: List[str]) -> RemoteResponse:
        self.refresh_calls.append(list(urls))
        if self.refresh_responses:
            return self.refresh_responses.pop(0)
        return RemoteResponse(status_code=200, body={'code': 200, 'error': 'success'})

    async def disconnect(self):
        self.disconnect_count += 1

    @property
    def uploaded_keys(self) -> List[str]:
        return [key for key, _ in self.put_calls]

    @property
    def deleted_keys(self) -> List[str]:
        return [key for batch in self.delete_calls for key in batch]

    @property
    def refreshed_urls(self) -> List[str]:
        return [url for batch in self.refresh_calls for url in batch]


@pytest.fixture
def base_options_dict() -> Dict:
    """Minimal valid sync target options."""
    return {
        'accessKey': 'test-access-key',
        'secretKey': 'test-secret-key',
        'bucket': 'test-bucket',
        'cdn': 'https://cdn.example.com',
        'zone': 'z0',
    }


@pytest.fixture
def options(base_options_dict) -> SyncOptions:
    return ConfigLoader.load_from_dict(base_options_dict)


@pytest.fixture
def make_options(base_options_dict):
    """Build options with overrides."""
    def _make(**overrides) -> SyncOptions:
        data = dict(base_options_dict)
        data.update(overrides)
        return ConfigLoader.load_from_dict(data)
    return _make


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def dist(tmp_path):
    """Write files into a fake build output directory and return their asset mapping."""
    root = tmp_path / "dist"
    root.mkdir()

    def _write(files: Dict[str, Optional[bytes]]) -> Dict[str, AssetEntry]:
        assets = {}
        for name, content in files.items():
            path = root / name
            if content is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(content)
            assets[name] = AssetEntry(local_path=str(path), emitted=True)
        return assets

    _write.root = root
    return _write
