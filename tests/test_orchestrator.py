r"""
Tests for graph_harness.runner.orchestrator module.

These run real worker processes.
"""

import textwrap
import time

import pytest

from conftest import write_vertex_file
from graph_harness.config import load_config
from graph_harness.platforms import ReferencePlatform
from graph_harness.runner import BenchmarkOrchestrator, OrchestratorResult, WorkerEntryPoint, WorkerLauncher
from graph_harness.types import Status

PLUGIN_SOURCE = """
import time

from graph_harness.errors import PlatformSetupError
from graph_harness.platforms.base import BasePlatform


class _Stub(BasePlatform):
    name = "stub"

    def load_graph(self, graph):
        pass

    def run(self, run):
        pass

    def delete_graph(self, graph):
        pass


class HangingPrepare(_Stub):
    def prepare(self, run):
        time.sleep(120)


class SlowRun(_Stub):
    def run(self, run):
        time.sleep(120)


class BrokenSetup(_Stub):
    def verify_setup(self):
        raise PlatformSetupError("license expired")


class FailingLoad(_Stub):
    def load_graph(self, graph):
        raise OSError("corrupt graph")
"""


@pytest.fixture
def plugins(tmp_path, monkeypatch) -> str:
    """Module of test platforms importable by worker processes."""
    directory = tmp_path / "plugins"
    directory.mkdir()
    (directory / "harness_test_platforms.py").write_text(textwrap.dedent(PLUGIN_SOURCE))
    monkeypatch.syspath_prepend(str(directory))
    return "harness_test_platforms"


@pytest.fixture
def orchestrator(runner_config) -> BenchmarkOrchestrator:
    return BenchmarkOrchestrator(config=runner_config)


class TestRunBenchmark:
    def test_reference_bfs_end_to_end(self, orchestrator, make_run):
        run = make_run("BFS", parameters={"source_vertex": 1})
        inf = 9223372036854775807
        write_vertex_file(run.validation_path, {"1": 0, "2": 1, "3": 1, "4": inf, "5": inf, "6": inf})

        result = orchestrator.run_benchmark("reference", run)

        assert result.run_id == run.id
        assert result.status == Status.SUCCESS, result.error
        assert result.completed is True
        assert result.validated is True
        assert result.successful is True
        assert result.metrics["vertices"] == 6
        assert "run" in result.phase_durations_ns
        assert run.output_path.exists()

    def test_validation_mismatch(self, orchestrator, make_run):
        run = make_run("BFS", parameters={"source_vertex": 1})
        write_vertex_file(run.validation_path, {"1": 0, "2": 2, "3": 1, "4": 0, "5": 0, "6": 0})

        result = orchestrator.run_benchmark("reference", run)

        assert result.completed is True
        assert result.validated is False
        assert result.successful is False
        assert result.status == Status.FAILED

    def test_hung_worker_is_killed(self, runner_config, make_run, plugins):
        config = load_config(
            work_dir=runner_config.work_dir,
            startup_allowance_seconds=1.0,
            termination_grace_seconds=0.1,
        )
        orchestrator = BenchmarkOrchestrator(config=config)
        run = make_run(timeout_seconds=1, validation_required=False)

        result = orchestrator.run_benchmark(f"{plugins}:HangingPrepare", run)

        assert result.status == Status.TIMEOUT
        assert result.completed is False
        assert result.successful is False
        assert "killed" in result.error

    def test_slow_run_is_killed_at_deadline(self, runner_config, make_run, plugins):
        config = load_config(
            work_dir=runner_config.work_dir,
            startup_allowance_seconds=3.0,
            termination_grace_seconds=0.1,
        )
        orchestrator = BenchmarkOrchestrator(config=config)
        run = make_run(timeout_seconds=1, validation_required=False)

        start = time.monotonic()
        result = orchestrator.run_benchmark(f"{plugins}:SlowRun", run)

        assert time.monotonic() - start < 30
        assert result.status == Status.TIMEOUT
        assert result.completed is False
        assert "killed after 4s" in result.error

    def test_setup_failure_leaves_no_result(self, orchestrator, make_run, plugins):
        result = orchestrator.run_benchmark(f"{plugins}:BrokenSetup", make_run())

        assert result.status == Status.NOT_STARTED
        assert result.completed is False
        assert "exited with code 1" in result.error

    def test_unknown_platform(self, orchestrator, make_run):
        result = orchestrator.run_benchmark("no-such-platform", make_run())
        assert result.status == Status.NOT_STARTED

    def test_graph_load_failure(self, orchestrator, make_run, plugins):
        result = orchestrator.run_benchmark(f"{plugins}:FailingLoad", make_run())

        assert result.status == Status.FAILED
        assert result.completed is False
        assert "corrupt graph" in result.error

    def test_spawn_failure(self, runner_config, make_run, tmp_path):
        launcher = WorkerLauncher(
            config=runner_config,
            entry_point=WorkerEntryPoint(argv=(str(tmp_path / "missing-python"),)),
        )
        orchestrator = BenchmarkOrchestrator(config=runner_config, launcher=launcher)

        result = orchestrator.run_benchmark("reference", make_run())

        assert result.status == Status.NOT_STARTED
        assert "Failed to launch worker" in result.error

    def test_blank_platform_id(self, orchestrator, make_run):
        run = make_run()

        result = orchestrator.run_benchmark("  ", run)

        assert result.status == Status.NOT_STARTED
        assert "non-empty" in result.error
        assert not orchestrator.store.run_path(run.id).exists()

    def test_rerun_does_not_return_previous_result(self, orchestrator, make_run):
        run = make_run("WCC", validation_required=False)
        first = orchestrator.run_benchmark("reference", run)
        assert first.status == Status.SUCCESS, first.error

        second = orchestrator.run_benchmark("no-such-platform", run)

        assert second.status == Status.NOT_STARTED
        assert second.error is not None

    def test_handoff_files_removed(self, orchestrator, make_run):
        run = make_run("WCC", validation_required=False)

        orchestrator.run_benchmark("reference", run)

        assert not orchestrator.store.run_path(run.id).exists()
        assert not orchestrator.store.result_path(run.id).exists()

    def test_progress_callback(self, orchestrator, make_run):
        events = []
        orchestrator.set_progress_callback(lambda platform, run_id, status: events.append(status))
        run = make_run("WCC", validation_required=False)

        orchestrator.run_benchmark("reference", run)

        assert events == ["running", "success"]


class TestRunAll:
    def test_runs_sequentially(self, orchestrator, make_run):
        runs = [
            make_run("WCC", validation_required=False),
            make_run("BFS", validation_required=False),
        ]

        outcome = orchestrator.run_all("reference", runs)

        assert isinstance(outcome, OrchestratorResult)
        assert [r.run_id for r in outcome.results] == [r.id for r in runs]
        assert outcome.success_count == 1
        assert outcome.failure_count == 1
        assert outcome.duration_seconds > 0


class TestUnloadGraph:
    def test_unload_removes_stored_graph(self, orchestrator, tiny_graph, isolated_storage):
        ReferencePlatform().load_graph(tiny_graph)
        stored = isolated_storage / "tiny.json"
        assert stored.exists()

        orchestrator.unload_graph("reference", tiny_graph)

        assert not stored.exists()

    def test_unknown_platform(self, orchestrator, tiny_graph):
        with pytest.raises(ValueError, match="Unknown platform"):
            orchestrator.unload_graph("no-such-platform", tiny_graph)
