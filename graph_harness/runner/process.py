r"""
Worker process supervision.

Each benchmark run executes in its own worker process so memory and
platform state cannot leak between runs, and so a hard timeout can be
enforced without the platform's cooperation.

The worker's stdout and stderr are merged into one pipe that a drain
thread reads from the moment the worker is spawned. Pipe buffers are
bounded, so a worker writing faster than nobody reads would otherwise
block forever. WorkerProcess.wait joins the drain thread before it
returns, so no output line is lost when a run is reported finished.

    from graph_harness.runner.process import WorkerLauncher

    launcher = WorkerLauncher(config=config)
    worker = launcher.launch("reference", run.id)
    try:
        worker.wait(timeout=600)
    except TimeoutError:
        launcher.terminate(worker)
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from graph_harness.config import ENV_PREFIX, RunnerConfig, load_config
from graph_harness.errors import WorkerLaunchError
from graph_harness.utils.process import get_process_memory, kill_process_tree

__all__ = [
    "LogSink",
    "WORKER_MODULE",
    "WorkerEntryPoint",
    "WorkerLauncher",
    "WorkerProcess",
    "log_worker_line",
]

logger = logging.getLogger(__name__)
worker_logger = logging.getLogger("graph_harness.worker")

WORKER_MODULE = "graph_harness.runner.worker"

LogSink = Callable[[str, str], None]


def log_worker_line(benchmark_id: str, line: str) -> None:
    """Default sink: re-log a worker line tagged with its benchmark id."""
    adapter = logging.LoggerAdapter(worker_logger, {"benchmark_id": benchmark_id})
    adapter.info("[Runner %s] => %s", benchmark_id, line)


@dataclass(frozen=True, slots=True)
class WorkerEntryPoint:
    """How a worker process is started.

    Attributes:
        argv: Command prefix; platform and benchmark ids are appended.
    """

    argv: tuple[str, ...] = (sys.executable, "-m", WORKER_MODULE)

    def command(self, platform_id: str, benchmark_id: str) -> list[str]:
        """Full worker command line for one run."""
        for label, value in (("platform id", platform_id), ("benchmark id", benchmark_id)):
            if not value or not value.strip():
                msg = f"Worker {label} must be a non-empty string"
                raise ValueError(msg)
        return [*self.argv, platform_id, benchmark_id]


class WorkerProcess:
    """A running worker and the thread draining its output.

    Owned by the launcher that created it. Not done until the process
    exited and its output reached end-of-stream.
    """

    def __init__(
        self,
        process: subprocess.Popen[str],
        benchmark_id: str,
        *,
        sink: LogSink = log_worker_line,
        drain_timeout: float = 10.0,
        tail_size: int = 50,
    ) -> None:
        self._process = process
        self._benchmark_id = benchmark_id
        self._sink = sink
        self._drain_timeout = drain_timeout
        self._tail: deque[str] = deque(maxlen=tail_size)
        self._line_count = 0
        self._drained = threading.Event()
        self._thread = threading.Thread(
            target=self._drain,
            name=f"drain-{benchmark_id}",
            daemon=True,
        )
        self._thread.start()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def benchmark_id(self) -> str:
        return self._benchmark_id

    @property
    def returncode(self) -> int | None:
        """Exit code, or None while the worker runs."""
        return self._process.poll()

    @property
    def line_count(self) -> int:
        """Number of output lines drained so far."""
        return self._line_count

    @property
    def tail(self) -> list[str]:
        """Most recent output lines."""
        return list(self._tail)

    @property
    def drained(self) -> bool:
        """True once the output stream reached end-of-stream."""
        return self._drained.is_set()

    @property
    def done(self) -> bool:
        """True once the worker exited and all its output was drained."""
        return self.returncode is not None and self.drained

    @property
    def memory_bytes(self) -> int:
        """Current RSS of the worker, 0 once it exited."""
        return get_process_memory(self.pid) if self.returncode is None else 0

    def wait(self, timeout: float | None = None) -> int:
        """Wait for the worker to exit and its output to be drained.

        Args:
            timeout: Seconds to wait for exit (None = forever).

        Returns:
            The worker's exit code.

        Raises:
            TimeoutError: If the worker is still running after timeout.
        """
        try:
            code = self._process.wait(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"Worker for benchmark {self._benchmark_id} still running after {timeout}s"
            raise TimeoutError(msg) from e

        self._join_drain()
        return code

    def _join_drain(self) -> None:
        self._thread.join(self._drain_timeout)
        if self._thread.is_alive():
            # an orphaned child still holds the pipe open
            logger.warning(
                "Output of worker %d (benchmark %s) still open %.1fs after exit; killing its process group",
                self.pid,
                self._benchmark_id,
                self._drain_timeout,
            )
            self.kill_group()
            self._thread.join(self._drain_timeout)
            if self._thread.is_alive():
                logger.warning(
                    "Giving up on output of worker %d (benchmark %s); %d lines drained",
                    self.pid,
                    self._benchmark_id,
                    self._line_count,
                )

    def kill_group(self) -> None:
        """Kill every process left in the worker's process group."""
        if os.name != "posix":
            return
        try:
            os.killpg(self.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError) as e:
            logger.debug("Could not kill process group %d: %s", self.pid, e)

    def _drain(self) -> None:
        stream = self._process.stdout
        if stream is None:
            self._drained.set()
            return

        try:
            for raw in stream:
                line = raw.rstrip("\r\n")
                self._line_count += 1
                self._tail.append(line)
                try:
                    self._sink(self._benchmark_id, line)
                except Exception:
                    logger.exception("Log sink failed on output of benchmark %s", self._benchmark_id)
        except (OSError, ValueError):
            logger.error("[Runner %s] => Failed to read from the benchmark runner.", self._benchmark_id)
        finally:
            stream.close()
            self._drained.set()

    def __repr__(self) -> str:
        state = "done" if self.done else "running" if self.returncode is None else "draining"
        return f"WorkerProcess(pid={self.pid}, benchmark={self._benchmark_id}, {state})"


class WorkerLauncher:
    """Spawns and terminates worker processes."""

    def __init__(
        self,
        *,
        config: RunnerConfig | None = None,
        entry_point: WorkerEntryPoint | None = None,
        sink: LogSink | None = None,
    ) -> None:
        self._config = config or load_config()
        self._entry_point = entry_point or WorkerEntryPoint()
        self._sink = sink or log_worker_line

    @property
    def config(self) -> RunnerConfig:
        return self._config

    def launch(self, platform_id: str, benchmark_id: str) -> WorkerProcess:
        """Spawn a worker for one benchmark run.

        Raises:
            WorkerLaunchError: If the process cannot be spawned.
        """
        command = self._entry_point.command(platform_id, benchmark_id)
        logger.debug("Worker command: %s", " ".join(command))

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=self._environment(),
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            msg = f"Failed to launch worker for benchmark {benchmark_id}: {e}"
            raise WorkerLaunchError(msg) from e

        worker = WorkerProcess(
            process,
            benchmark_id,
            sink=self._sink,
            drain_timeout=self._config.drain_timeout_seconds,
        )
        logger.info("Launched worker %d for benchmark %s on %s", worker.pid, benchmark_id, platform_id)
        return worker

    def terminate(self, worker: WorkerProcess) -> None:
        """Force-kill a worker and its children, then pause for cleanup.

        Failures are logged, never raised.
        """
        if worker.returncode is None:
            logger.info("Terminating worker %d (benchmark %s)", worker.pid, worker.benchmark_id)
            survivors = kill_process_tree(worker.pid, timeout=self._config.termination_grace_seconds)
            if survivors:
                logger.error("Processes %s survived termination of worker %d", survivors, worker.pid)

        time.sleep(self._config.termination_grace_seconds)

        try:
            worker.wait(timeout=self._config.drain_timeout_seconds)
        except TimeoutError:
            logger.error("Worker %d did not exit after being killed", worker.pid)

    def _environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(p for p in sys.path if p)
        env["PYTHONUNBUFFERED"] = "1"
        env[f"{ENV_PREFIX}WORK_DIR"] = str(self._config.work_dir)
        return env
