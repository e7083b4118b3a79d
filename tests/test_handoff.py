r"""
Tests for graph_harness.runner.handoff module.
"""

import pytest

from graph_harness.errors import HandoffError
from graph_harness.runner.handoff import RunStore
from graph_harness.types import BenchmarkRunResult, Status


@pytest.fixture
def store(tmp_path) -> RunStore:
    return RunStore(tmp_path / "work")


class TestRunStore:
    def test_run_roundtrip(self, store, make_run):
        run = make_run("SSSP", parameters={"source_vertex": 1})
        path = store.save_run(run)
        assert path == store.directory / f"{run.id}.run.json"
        assert store.load_run(run.id) == run

    def test_missing_run(self, store):
        with pytest.raises(HandoffError, match="Missing hand-off file"):
            store.load_run("nope")

    def test_corrupt_run(self, store):
        store.directory.mkdir(parents=True)
        store.run_path("bad").write_text("{not json")
        with pytest.raises(HandoffError, match="Unreadable"):
            store.load_run("bad")

    def test_invalid_run(self, store):
        store.directory.mkdir(parents=True)
        store.run_path("bad").write_text('{"id": "bad"}')
        with pytest.raises(HandoffError, match="Invalid run file"):
            store.load_run("bad")

    def test_result_roundtrip(self, store, make_run):
        run = make_run()
        result = BenchmarkRunResult.failed(run, status=Status.TIMEOUT, error="killed")
        store.save_result(result)
        assert store.load_result(run.id) == result

    def test_missing_result(self, store):
        assert store.load_result("nope") is None

    def test_no_temp_files_left(self, store, make_run):
        store.save_run(make_run())
        assert not list(store.directory.glob("*.tmp"))

    def test_discard(self, store, make_run):
        run = make_run()
        store.save_run(run)
        store.save_result(BenchmarkRunResult.failed(run, status=Status.FAILED, error="x"))
        store.discard(run.id)
        assert not store.run_path(run.id).exists()
        assert store.load_result(run.id) is None
