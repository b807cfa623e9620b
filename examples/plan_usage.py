#!/usr/bin/env python3
"""
Example usage of the SyncEngine API: plan a sync of a build directory
without uploading anything, then run it and report through a callback.
"""

import asyncio
import logging
import sys

from assetsync.backend.qiniu import QiniuBackend
from assetsync.cache_backend import get_snapshot_store
from assetsync.config.config_loader import ConfigLoader
from assetsync.sync.sync_engine import SyncEngine
from assetsync.utils.asset_scanner import AssetScanner


async def plan_example(config_path: str, dist_dir: str):
    """Show what a sync would do, using an in-memory cache"""
    print("\n=== Plan Example ===")

    options = ConfigLoader.load_from_yaml(config_path)
    assets = AssetScanner(dist_dir).scan()
    store = get_snapshot_store('memory', {})

    engine = SyncEngine(options, QiniuBackend(options), store)
    plan = await engine.plan(assets)

    for section in ('upload', 'unchanged', 'delete', 'refresh'):
        print(f"{section}: {len(plan[section])}")
        for item in plan[section]:
            print(f"   - {item}")


async def run_example(config_path: str, dist_dir: str):
    """Run a real sync with the file cache and a completion callback"""
    print("\n=== Run Example ===")

    options = ConfigLoader.load_from_yaml(config_path)
    assets = AssetScanner(dist_dir).scan()
    store = get_snapshot_store('file', {'cache_dir': './.cache/assetsync'})

    def on_progress(progress):
        if progress.total_uploads:
            print(f"\ruploaded {progress.completed_uploads}/{progress.total_uploads}", end="")

    def on_done(error):
        print()
        if error is None:
            print("files successfully uploaded to the CDN!")
        else:
            print(f"sync failed: {error}")

    engine = SyncEngine(options, QiniuBackend(options), store, progress_callback=on_progress)
    result = await engine.run(assets, on_done)
    print(result.summary())
    if not result.succeeded:
        print(result.failure_report())


async def main():
    logging.basicConfig(level=logging.WARNING)
    args = [a for a in sys.argv[1:] if a != "--run"]
    config_path = args[0] if len(args) > 0 else "./examples/configs/target.yaml"
    dist_dir = args[1] if len(args) > 1 else "./dist"

    await plan_example(config_path, dist_dir)
    if "--run" in sys.argv:
        await run_example(config_path, dist_dir)


if __name__ == "__main__":
    asyncio.run(main())
