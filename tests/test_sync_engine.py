"""Test cases for SyncEngine phase sequencing."""

from unittest.mock import Mock

import pytest

from assetsync.backend.base_backend import RemoteResponse
from assetsync.cache_backend import FileSnapshotStore, InMemorySnapshotStore
from assetsync.core.enums import SyncState
from assetsync.core.exceptions import (
    ConfigError,
    DeleteError,
    DigestError,
    PersistenceError,
    RefreshError,
    SyncError,
    UploadError,
)
from assetsync.core.models import AssetEntry, PredicateFilter
from assetsync.sync.sync_engine import SyncEngine
from assetsync.utils.hash_calculator import HashCalculator


def digest(data: bytes) -> str:
    return HashCalculator.calculate_bytes_hash(data)


class TestFirstAndRepeatedRuns:
    """Full runs against an in-memory snapshot"""

    @pytest.mark.asyncio
    async def test_first_run_uploads_everything(self, options, fake_backend, dist):
        store = InMemorySnapshotStore()
        assets = dist({"a.js": b"alpha", "b.js": b"beta"})
        engine = SyncEngine(options, fake_backend, store)

        result = await engine.sync(assets)

        assert result.state == SyncState.DONE
        assert result.succeeded
        assert result.uploaded == ["a.js", "b.js"]
        assert result.unchanged == []
        assert await store.load() == {"a.js": digest(b"alpha"), "b.js": digest(b"beta")}
        assert engine.state == SyncState.DONE

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, make_options, fake_backend, dist):
        """Re-running an unchanged build makes no remote calls"""
        options = make_options(refresh=True, delete=True)
        store = InMemorySnapshotStore()
        assets = dist({"a.js": b"alpha", "b.js": b"beta"})

        await SyncEngine(options, fake_backend, store).sync(assets)
        snapshot = await store.load()
        fake_backend.put_calls.clear()
        fake_backend.refresh_calls.clear()

        result = await SyncEngine(options, fake_backend, store).sync(assets)

        assert result.uploaded == []
        assert result.unchanged == ["a.js", "b.js"]
        assert fake_backend.put_calls == []
        assert fake_backend.delete_calls == []
        assert fake_backend.refresh_calls == []
        assert await store.load() == snapshot

    @pytest.mark.asyncio
    async def test_changed_file_is_uploaded_and_refreshed(self, make_options, fake_backend, dist):
        """a.js unchanged, b.js changed: one upload, one refresh, no deletes"""
        options = make_options(refresh=True, delete=True)
        store = InMemorySnapshotStore({"a.js": digest(b"alpha"), "b.js": digest(b"old beta")})
        assets = dist({"a.js": b"alpha", "b.js": b"beta"})

        result = await SyncEngine(options, fake_backend, store).sync(assets)

        assert fake_backend.uploaded_keys == ["b.js"]
        assert fake_backend.refreshed_urls == ["https://cdn.example.com/b.js"]
        assert fake_backend.delete_calls == []
        assert result.deleted == []
        assert await store.load() == {"a.js": digest(b"alpha"), "b.js": digest(b"beta")}

    @pytest.mark.asyncio
    async def test_removed_file_is_deleted(self, make_options, fake_backend, dist):
        options = make_options(delete=True)
        store = InMemorySnapshotStore({"a.js": digest(b"alpha"), "c.js": digest(b"gamma")})
        assets = dist({"a.js": b"alpha"})

        result = await SyncEngine(options, fake_backend, store).sync(assets)

        assert fake_backend.delete_calls == [["c.js"]]
        assert result.deleted == ["c.js"]
        assert await store.load() == {"a.js": digest(b"alpha")}

    @pytest.mark.asyncio
    async def test_delete_disabled_keeps_remote_objects(self, options, fake_backend, dist):
        store = InMemorySnapshotStore({"c.js": digest(b"gamma")})

        result = await SyncEngine(options, fake_backend, store).sync(dist({"a.js": b"alpha"}))

        assert fake_backend.delete_calls == []
        assert result.deleted == []
        assert result.state == SyncState.DONE

    @pytest.mark.asyncio
    async def test_stage_results_recorded(self, options, fake_backend, dist):
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())

        await engine.sync(dist({"a.js": b"alpha"}))

        assert engine.stage_results["change_detection"].data_processed == 1
        assert engine.stage_results["upload"].data_processed == 1
        assert engine.stage_results["delete"].skipped
        assert engine.stage_results["refresh"].skipped
        assert fake_backend.disconnect_count == 1


class TestCandidateSelection:
    """Emitted flag and include / exclude filters"""

    def test_unemitted_entries_are_ignored(self, options, fake_backend):
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())
        assets = {
            "a.js": AssetEntry("/build/a.js"),
            "b.js": AssetEntry("/build/b.js", emitted=False),
            "c.js": {"localPath": "/build/c.js", "emitted": True},
            "d.js": "/build/d.js",
        }

        names = [a.name for a in engine.select_candidates(assets)]

        assert names == ["a.js", "c.js", "d.js"]

    def test_include_then_exclude(self, make_options, fake_backend):
        options = make_options(include=[{"regex": r"\.js"}], exclude=[{"regex": r"\.map$"}])
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())
        assets = {name: AssetEntry(f"/build/{name}") for name in
                  ["main.js", "main.js.map", "index.html", "vendor.js"]}

        names = [a.name for a in engine.select_candidates(assets)]

        assert names == ["main.js", "vendor.js"]

    @pytest.mark.asyncio
    async def test_excluded_files_are_never_hashed(self, make_options, fake_backend, dist):
        """A missing but excluded file does not fail detection"""
        options = make_options(exclude=["missing.js"])
        assets = dist({"a.js": b"alpha", "missing.js": None})

        result = await SyncEngine(options, fake_backend, InMemorySnapshotStore()).sync(assets)

        assert result.uploaded == ["a.js"]


class TestFailures:
    """First fatal error skips every later phase, including persistence"""

    @pytest.mark.asyncio
    async def test_upload_failure_skips_delete_refresh_and_persist(self, make_options, fake_backend, dist):
        options = make_options(refresh=True, delete=True)
        old = {"a.js": digest(b"old"), "gone.js": digest(b"gone")}
        store = InMemorySnapshotStore(old)
        fake_backend.upload_failures = {"b.js": RemoteResponse(status_code=401, body={"error": "expired"})}
        engine = SyncEngine(options, fake_backend, store)

        with pytest.raises(UploadError):
            await engine.sync(dist({"a.js": b"alpha", "b.js": b"beta"}))

        result = engine.last_result
        assert result.state == SyncState.FAILED
        assert result.failed_phase == "uploading"
        assert result.uploaded == ["a.js"]
        assert list(result.failed) == ["b.js"]
        assert fake_backend.delete_calls == []
        assert fake_backend.refresh_calls == []
        assert store.save_count == 0
        assert await store.load() == old

        report = result.failure_report()
        assert "uploading" in report
        assert "b.js" in report

    @pytest.mark.asyncio
    async def test_retry_after_upload_failure_reuploads(self, options, fake_backend, dist):
        """Nothing was persisted, so the next run retries every changed file"""
        store = InMemorySnapshotStore()
        assets = dist({"a.js": b"alpha", "b.js": b"beta"})
        fake_backend.upload_failures = {"b.js": RemoteResponse(status_code=503)}

        with pytest.raises(UploadError):
            await SyncEngine(options, fake_backend, store).sync(assets)

        fake_backend.upload_failures = {}
        fake_backend.put_calls.clear()
        result = await SyncEngine(options, fake_backend, store).sync(assets)

        assert result.uploaded == ["a.js", "b.js"]

    @pytest.mark.asyncio
    async def test_misbehaving_predicate_fails_detection(self, options, fake_backend, dist):
        """Selection errors are engine errors, recorded like any other phase failure"""
        options.exclude = [PredicateFilter(lambda name: "no")]
        store = InMemorySnapshotStore()
        engine = SyncEngine(options, fake_backend, store)

        with pytest.raises(ConfigError) as exc_info:
            await engine.sync(dist({"a.js": b"alpha"}))

        assert isinstance(exc_info.value, SyncError)
        assert engine.last_result.state == SyncState.FAILED
        assert engine.last_result.failed_phase == "detecting"
        assert "a.js" in engine.last_result.failure_report()
        assert fake_backend.put_calls == []
        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_entry_without_path_fails_detection(self, options, fake_backend):
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())

        with pytest.raises(ConfigError):
            await engine.sync({"a.js": {"emitted": True}})

        assert engine.last_result.state == SyncState.FAILED
        assert engine.last_result.failed_phase == "detecting"
        assert fake_backend.disconnect_count == 1

    @pytest.mark.asyncio
    async def test_plan_reports_selection_errors(self, options, fake_backend):
        with pytest.raises(ConfigError):
            await SyncEngine(options, fake_backend, InMemorySnapshotStore()).plan({"a.js": {}})

    @pytest.mark.asyncio
    async def test_digest_failure_makes_no_remote_calls(self, options, fake_backend, dist):
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())

        with pytest.raises(DigestError):
            await engine.sync(dist({"a.js": b"alpha", "gone.js": None}))

        assert engine.last_result.failed_phase == "detecting"
        assert fake_backend.put_calls == []

    @pytest.mark.asyncio
    async def test_delete_failure_skips_refresh_and_persist(self, make_options, fake_backend, dist):
        options = make_options(refresh=True, delete=True)
        store = InMemorySnapshotStore({"c.js": digest(b"gamma")})
        fake_backend.delete_responses = [RemoteResponse(status_code=599)]
        engine = SyncEngine(options, fake_backend, store)

        with pytest.raises(DeleteError):
            await engine.sync(dist({"a.js": b"alpha"}))

        assert engine.last_result.failed_phase == "deleting"
        assert fake_backend.refresh_calls == []
        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_refresh_failure_skips_persist(self, make_options, fake_backend, dist):
        options = make_options(refresh=True)
        store = InMemorySnapshotStore()
        fake_backend.refresh_responses = [RemoteResponse(status_code=200, body={"code": 400032})]
        engine = SyncEngine(options, fake_backend, store)

        with pytest.raises(RefreshError):
            await engine.sync(dist({"a.js": b"alpha"}))

        assert engine.last_result.failed_phase == "refreshing"
        assert engine.last_result.uploaded == ["a.js"]
        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_persist_failure(self, options, fake_backend, dist, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        engine = SyncEngine(options, fake_backend, FileSnapshotStore(blocker / "cacheData.json"))

        with pytest.raises(PersistenceError):
            await engine.sync(dist({"a.js": b"alpha"}))

        assert engine.last_result.failed_phase == "persisting"
        assert engine.last_result.state == SyncState.FAILED
        assert fake_backend.disconnect_count == 1


class TestRunCallback:

    @pytest.mark.asyncio
    async def test_callback_receives_none_on_success(self, options, fake_backend, dist):
        callback = Mock()
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())

        result = await engine.run(dist({"a.js": b"alpha"}), callback)

        callback.assert_called_once_with(None)
        assert result.succeeded

    @pytest.mark.asyncio
    async def test_callback_receives_first_error(self, options, fake_backend, dist):
        callback = Mock()
        fake_backend.upload_failures = {"a.js": RemoteResponse(status_code=403)}
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore())

        result = await engine.run(dist({"a.js": b"alpha"}), callback)

        callback.assert_called_once()
        assert isinstance(callback.call_args[0][0], UploadError)
        assert result.state == SyncState.FAILED

    @pytest.mark.asyncio
    async def test_progress_callback(self, options, fake_backend, dist):
        snapshots = []
        engine = SyncEngine(options, fake_backend, InMemorySnapshotStore(),
                            progress_callback=lambda p: snapshots.append(p.completed_uploads))

        await engine.sync(dist({"a.js": b"alpha", "b.js": b"beta"}))

        assert snapshots[-1] == 2


class TestPlan:

    @pytest.mark.asyncio
    async def test_plan_touches_nothing(self, make_options, dist):
        options = make_options(refresh=True, delete=True)
        backend = Mock()
        store = InMemorySnapshotStore({"a.js": digest(b"alpha"), "b.js": digest(b"old"), "c.js": digest(b"gamma")})
        engine = SyncEngine(options, backend, store)

        plan = await engine.plan(dist({"a.js": b"alpha", "b.js": b"beta"}))

        assert plan == {
            "upload": ["b.js"],
            "unchanged": ["a.js"],
            "delete": ["c.js"],
            "refresh": ["https://cdn.example.com/b.js"],
        }
        assert backend.method_calls == []
        assert store.save_count == 0

    @pytest.mark.asyncio
    async def test_plan_without_optional_phases(self, options, fake_backend, dist):
        store = InMemorySnapshotStore({"c.js": digest(b"gamma")})

        plan = await SyncEngine(options, fake_backend, store).plan(dist({"a.js": b"alpha"}))

        assert plan["upload"] == ["a.js"]
        assert plan["delete"] == []
        assert plan["refresh"] == []
