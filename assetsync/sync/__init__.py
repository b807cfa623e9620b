from .sync_engine import SyncEngine

__all__ = ['SyncEngine']
