r"""
Tests for graph_harness.runner.lifecycle module.
"""

import time

import pytest

from conftest import RecordingPlatform
from graph_harness.errors import LifecycleError, PhaseError, PlatformSetupError
from graph_harness.runner.lifecycle import LoadedGraph, PreparedRun, VerifiedPlatform, verify
from graph_harness.types import BenchmarkMetrics, Phase


@pytest.fixture
def loaded(recording_platform, tiny_graph) -> LoadedGraph:
    return verify(recording_platform).load_graph(tiny_graph)


class TestVerify:
    def test_verify_returns_stage(self, recording_platform):
        verified = verify(recording_platform)
        assert isinstance(verified, VerifiedPlatform)
        assert verified.phase == Phase.VERIFIED
        assert recording_platform.calls == ["verify_setup"]

    def test_setup_failure_is_wrapped(self):
        platform = RecordingPlatform(fail={"verify_setup": RuntimeError("no license")})
        with pytest.raises(PlatformSetupError, match="no license"):
            verify(platform)

    def test_stages_cannot_be_constructed(self, recording_platform):
        with pytest.raises(LifecycleError):
            VerifiedPlatform(object(), recording_platform)


class TestLoadedGraph:
    def test_load_failure(self, tiny_graph):
        platform = RecordingPlatform(fail={"load_graph": OSError("disk full")})
        with pytest.raises(PhaseError) as exc_info:
            verify(platform).load_graph(tiny_graph)
        assert exc_info.value.phase == Phase.GRAPH_LOADED
        assert isinstance(exc_info.value.cause, OSError)

    def test_reusable_across_runs(self, loaded, make_run, recording_platform):
        for _ in range(2):
            prepared = loaded.prepare(make_run())
            prepared.terminate()
        assert recording_platform.calls.count("prepare") == 2
        assert recording_platform.calls.count("load_graph") == 1

    def test_run_must_target_loaded_graph(self, loaded, make_run, tiny_graph):
        from dataclasses import replace

        other = replace(tiny_graph, name="other")
        with pytest.raises(LifecycleError, match="targets graph other"):
            loaded.prepare(make_run(graph=other))

    def test_delete(self, loaded, make_run, recording_platform):
        loaded.delete()
        assert recording_platform.calls[-1] == "delete_graph"
        with pytest.raises(LifecycleError, match="deleted"):
            loaded.prepare(make_run())
        with pytest.raises(LifecycleError):
            loaded.delete()


class TestRunStages:
    def test_full_sequence(self, loaded, make_run, recording_platform):
        prepared = loaded.prepare(make_run())
        started = prepared.startup()
        ran = started.run_algorithm()
        finalized = ran.finalize()
        assert finalized.terminate() is True

        assert recording_platform.calls == [
            "verify_setup",
            "load_graph",
            "prepare",
            "startup",
            "run",
            "finalize",
            "terminate",
        ]
        assert ran.completed
        assert finalized.metrics == BenchmarkMetrics(processing_time_ns=42)
        assert finalized.current_phase == Phase.TERMINATED

    def test_prepare_failure_terminates(self, tiny_graph, make_run):
        platform = RecordingPlatform(fail={"prepare": RuntimeError("no memory")})
        loaded = verify(platform).load_graph(tiny_graph)
        with pytest.raises(PhaseError) as exc_info:
            loaded.prepare(make_run())
        assert exc_info.value.phase == Phase.PREPARED
        assert platform.calls[-2:] == ["prepare", "terminate"]

    def test_run_failure_is_captured(self, tiny_graph, make_run):
        platform = RecordingPlatform(fail={"run": RuntimeError("crash")})
        prepared = verify(platform).load_graph(tiny_graph).prepare(make_run())
        ran = prepared.startup().run_algorithm()
        assert ran.completed is False
        assert isinstance(ran.error, RuntimeError)
        assert ran.finalize().metrics["processing_time_ns"] == 42

    def test_run_blocks_until_platform_returns(self, tiny_graph, make_run):
        platform = RecordingPlatform(run_seconds=1.5)
        prepared = verify(platform).load_graph(tiny_graph).prepare(make_run(timeout_seconds=1))
        start = time.monotonic()
        ran = prepared.startup().run_algorithm()
        assert time.monotonic() - start >= 1.5
        assert ran.completed is True

        ran.finalize().terminate()
        assert platform.overlapping == []

    def test_startup_failure(self, tiny_graph, make_run):
        platform = RecordingPlatform(fail={"startup": RuntimeError("bad path")})
        prepared = verify(platform).load_graph(tiny_graph).prepare(make_run())
        with pytest.raises(PhaseError) as exc_info:
            prepared.startup()
        assert exc_info.value.phase == Phase.STARTED
        assert prepared.current_phase == Phase.FAILED

    def test_stage_is_single_use(self, loaded, make_run):
        prepared = loaded.prepare(make_run())
        prepared.startup()
        with pytest.raises(LifecycleError, match="already advanced"):
            prepared.startup()

    def test_terminate_once(self, loaded, make_run, recording_platform):
        prepared = loaded.prepare(make_run())
        started = prepared.startup()
        started.terminate()
        with pytest.raises(LifecycleError, match="already terminated"):
            prepared.terminate()
        assert recording_platform.calls.count("terminate") == 1

    def test_no_advance_after_terminate(self, loaded, make_run):
        prepared: PreparedRun = loaded.prepare(make_run())
        prepared.terminate()
        with pytest.raises(LifecycleError):
            prepared.startup()

    def test_terminate_failure_is_logged(self, tiny_graph, make_run, caplog):
        platform = RecordingPlatform(fail={"terminate": RuntimeError("stuck")})
        prepared = verify(platform).load_graph(tiny_graph).prepare(make_run())
        assert prepared.terminate() is False
        assert "failed to terminate" in caplog.text
