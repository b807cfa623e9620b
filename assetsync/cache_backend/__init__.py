from .base import BaseSnapshotStore
from .file import FileSnapshotStore, DEFAULT_CACHE_FILE
from .memory import InMemorySnapshotStore


def get_snapshot_store(store_type: str, config: dict) -> BaseSnapshotStore:
    """
    Factory function to create snapshot store instances.

    Args:
        store_type: Type of store ('file', 'memory')
        config: Store-specific settings

    Returns:
        Snapshot store instance

    Example config:
        {
            'cache_dir': './.cache/assetsync',
            'cache_file': 'cacheData.json'
        }
    """
    store_type = store_type.lower()

    if store_type == 'file':
        return FileSnapshotStore.in_directory(
            config.get('cache_dir', './.cache/assetsync'),
            config.get('cache_file', DEFAULT_CACHE_FILE)
        )
    elif store_type == 'memory':
        return InMemorySnapshotStore(config.get('initial'))
    else:
        raise ValueError(f"Unsupported snapshot store: {store_type}. Supported: 'file', 'memory'")

__all__ = ['BaseSnapshotStore', 'FileSnapshotStore', 'InMemorySnapshotStore', 'get_snapshot_store', 'DEFAULT_CACHE_FILE']
