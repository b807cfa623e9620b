from .sync_cli import cli, main, SyncCLI

__all__ = ['cli', 'main', 'SyncCLI']
