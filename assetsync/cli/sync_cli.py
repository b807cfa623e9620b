#!/usr/bin/env python3
"""
assetsync CLI

Scans a build output directory and syncs it to the configured bucket and CDN.
"""

import asyncio
import click
import json
import logging
import sys
from typing import Callable

from ..backend.base_backend import RemoteBackend
from ..backend.qiniu import QiniuBackend
from ..cache_backend import get_snapshot_store
from ..config.config_loader import ConfigLoader
from ..config.global_config_loader import GlobalConfig, load_global_config
from ..core.exceptions import ConfigError, SyncError
from ..core.models import SyncOptions
from ..sync.sync_engine import SyncEngine
from ..utils.asset_scanner import AssetScanner


class SyncCLI:
    """Command-line interface for running syncs"""

    def __init__(self, global_config: GlobalConfig,
                 backend_factory: Callable[[SyncOptions], RemoteBackend] = QiniuBackend):
        self.logger = logging.getLogger(__name__)
        self.global_config = global_config
        self.backend_factory = backend_factory

    def _create_store(self):
        cache = self.global_config.cache
        return get_snapshot_store(cache.store, {
            'cache_dir': cache.cache_dir,
            'cache_file': cache.cache_file,
        })

    def _load_options(self, config_path: str) -> SyncOptions:
        try:
            return ConfigLoader.load_from_yaml(config_path)
        except ConfigError as e:
            self.logger.error(f"Invalid configuration: {e}")
            click.echo(f"Configuration error: {e}", err=True)
            sys.exit(1)

    def _scan(self, dist_dir: str):
        try:
            return AssetScanner(dist_dir).scan()
        except FileNotFoundError as e:
            click.echo(str(e), err=True)
            sys.exit(1)

    def _create_engine(self, options: SyncOptions) -> SyncEngine:
        return SyncEngine(options, self.backend_factory(options), self._create_store())

    async def run_sync(self, config_path: str, dist_dir: str, output_json: bool):
        """Run a full sync"""
        options = self._load_options(config_path)
        assets = self._scan(dist_dir)
        engine = self._create_engine(options)

        self.logger.info(f"Syncing {dist_dir} to bucket {options.bucket}")
        try:
            result = await engine.sync(assets)
        except SyncError:
            result = engine.last_result
            if output_json:
                click.echo(json.dumps(result.to_dict(), indent=2))
            click.echo(result.failure_report(), err=True)
            sys.exit(1)

        if output_json:
            click.echo(json.dumps(result.to_dict(), indent=2))
        else:
            click.echo(f"\n{'='*80}")
            click.echo("SYNC REPORT")
            click.echo(f"{'='*80}")
            click.echo(f"Uploaded:  {len(result.uploaded)}")
            for key in result.uploaded:
                click.echo(f"   - {key}")
            click.echo(f"Unchanged: {len(result.unchanged)}")
            click.echo(f"Deleted:   {len(result.deleted)}")
            for key in result.deleted:
                click.echo(f"   - {key}")
            click.echo(f"Refreshed: {len(result.refreshed)}")
            click.echo(f"{'='*80}\n")
            click.echo("files successfully uploaded to the CDN!")

    async def plan_sync(self, config_path: str, dist_dir: str):
        """Show what a sync would do"""
        options = self._load_options(config_path)
        assets = self._scan(dist_dir)
        engine = self._create_engine(options)

        try:
            plan = await engine.plan(assets)
        except SyncError as e:
            click.echo(f"Planning failed: {e}", err=True)
            sys.exit(1)

        for section in ('upload', 'delete', 'refresh'):
            items = plan[section]
            click.echo(f"{len(items)} files need to {section}")
            for item in items:
                click.echo(f"   - {item}")
        click.echo(f"{len(plan['unchanged'])} files unchanged")

    async def clear_cache(self):
        """Remove the persisted cache snapshot"""
        store = self._create_store()
        await store.clear()
        click.echo(f"Cache cleared: {store.describe()}")


@click.group()
@click.option('--global-config', default=None, help='Path to global config YAML')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level (overrides global config)')
@click.pass_context
def cli(ctx, global_config, log_level):
    """assetsync - sync build outputs to object storage and CDN"""
    global_cfg = load_global_config(global_config)

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, (log_level or global_cfg.logging.level).upper()),
        format=global_cfg.logging.format,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    ctx.ensure_object(dict)
    ctx.obj['global_config'] = global_cfg
    if 'cli' not in ctx.obj:
        ctx.obj['cli'] = SyncCLI(global_cfg)


@cli.command()
@click.option('--config', 'config_path', required=True, help='Path to the sync target YAML')
@click.option('--dist', 'dist_dir', required=True, help='Build output directory to sync')
@click.option('--json', 'output_json', is_flag=True, help='Print the result as JSON')
@click.pass_context
def run(ctx, config_path, dist_dir, output_json):
    """Upload changed files, delete stale ones and refresh the CDN"""
    cli_instance = ctx.obj['cli']
    asyncio.run(cli_instance.run_sync(config_path, dist_dir, output_json))


@cli.command()
@click.option('--config', 'config_path', required=True, help='Path to the sync target YAML')
@click.option('--dist', 'dist_dir', required=True, help='Build output directory to sync')
@click.pass_context
def plan(ctx, config_path, dist_dir):
    """Show what would be uploaded, deleted and refreshed"""
    cli_instance = ctx.obj['cli']
    asyncio.run(cli_instance.plan_sync(config_path, dist_dir))


@cli.command('clear-cache')
@click.pass_context
def clear_cache(ctx):
    """Forget the cache snapshot so the next run uploads everything"""
    cli_instance = ctx.obj['cli']
    asyncio.run(cli_instance.clear_cache())


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
