r"""
Run and result hand-off between the parent and a worker process.

The parent writes `<id>.run.json` before launching a worker; the worker
writes `<id>.result.json` when it is done. Writes are atomic, so a worker
killed mid-write never leaves a truncated result behind.

    from graph_harness.runner.handoff import RunStore

    store = RunStore(config.work_dir)
    store.save_run(run)
    ...
    result = store.load_result(run.id)
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from graph_harness.errors import HandoffError
from graph_harness.types import BenchmarkRun, BenchmarkRunResult

__all__ = ["RunStore"]


class RunStore:
    """Directory of run and result JSON files keyed by run id."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def run_path(self, run_id: str) -> Path:
        return self._dir / f"{run_id}.run.json"

    def result_path(self, run_id: str) -> Path:
        return self._dir / f"{run_id}.result.json"

    def save_run(self, run: BenchmarkRun) -> Path:
        """Persist a run for a worker to pick up."""
        path = self.run_path(run.id)
        self._write(path, run.to_dict())
        return path

    def load_run(self, run_id: str) -> BenchmarkRun:
        """Load a run written by the parent.

        Raises:
            HandoffError: If the run file is missing or invalid.
        """
        data = self._read(self.run_path(run_id))
        try:
            return BenchmarkRun.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise HandoffError(f"Invalid run file for {run_id}: {e}") from e

    def save_result(self, result: BenchmarkRunResult) -> Path:
        """Persist a worker's result."""
        path = self.result_path(result.run_id)
        self._write(path, result.to_dict())
        return path

    def load_result(self, run_id: str) -> BenchmarkRunResult | None:
        """Load a worker's result, or None if the worker never wrote one.

        Raises:
            HandoffError: If the result file exists but is invalid.
        """
        path = self.result_path(run_id)
        if not path.exists():
            return None
        data = self._read(path)
        try:
            return BenchmarkRunResult.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise HandoffError(f"Invalid result file for {run_id}: {e}") from e

    def discard(self, run_id: str) -> None:
        """Remove the files of a run."""
        self.run_path(run_id).unlink(missing_ok=True)
        self.result_path(run_id).unlink(missing_ok=True)

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(f"{path.name}.{os.getpid()}.tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise HandoffError(f"Missing hand-off file: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise HandoffError(f"Unreadable hand-off file {path}: {e}") from e
