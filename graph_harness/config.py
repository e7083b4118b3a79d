r"""
Runner configuration.

Settings come from GRAPH_HARNESS_* environment variables, optionally
loaded from a .env file, and can be overridden per call.

Environment variables:
    GRAPH_HARNESS_WORK_DIR: Directory for run/result hand-off files
    GRAPH_HARNESS_TIMEOUT_SECONDS: Default run-phase timeout
    GRAPH_HARNESS_STARTUP_ALLOWANCE_SECONDS: Extra time a worker gets for setup
    GRAPH_HARNESS_TERMINATION_GRACE_SECONDS: Pause after killing a worker
    GRAPH_HARNESS_DRAIN_TIMEOUT_SECONDS: Wait for worker output after exit
    GRAPH_HARNESS_LOG_LEVEL: Logging level (default: INFO)

    from graph_harness.config import load_config

    config = load_config(timeout_seconds=60)
    print(config.work_dir)
"""

import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Look for .env in current dir or the project root
_env_file = Path(".env")
if not _env_file.exists():
    _env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

__all__ = [
    "ENV_PREFIX",
    "RunnerConfig",
    "get_env",
    "load_config",
]

ENV_PREFIX = "GRAPH_HARNESS_"

DEFAULT_WORK_DIR = Path(tempfile.gettempdir()) / "graph-harness"


@dataclass(frozen=True, slots=True)
class RunnerConfig:
    """Configuration for supervising benchmark workers.

    Attributes:
        work_dir: Directory holding run and result hand-off files.
        timeout_seconds: Default run-phase timeout for new runs.
        startup_allowance_seconds: Time a worker gets on top of the run
            timeout for setup, loading, validation and teardown.
        termination_grace_seconds: Pause after a forced kill so the OS can
            reclaim resources before the next launch.
        drain_timeout_seconds: How long to wait for worker output to reach
            end-of-stream after the worker exited.
        log_level: Logging level name.
    """

    work_dir: Path = DEFAULT_WORK_DIR
    timeout_seconds: int = 3600
    startup_allowance_seconds: float = 60.0
    termination_grace_seconds: float = 2.0
    drain_timeout_seconds: float = 10.0
    log_level: str = "INFO"


def get_env(key: str, *, default: str | None = None) -> str | None:
    """Get environment variable with GRAPH_HARNESS_ prefix.

    Args:
        key: Variable name without prefix (e.g., "WORK_DIR").
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(f"{ENV_PREFIX}{key}", default)


def load_config(**overrides: Any) -> RunnerConfig:
    """Build a RunnerConfig from the environment plus explicit overrides.

    Args:
        **overrides: RunnerConfig field values that take precedence.

    Returns:
        The resolved configuration.

    Raises:
        ValueError: If an override or environment value is invalid.
    """
    config = RunnerConfig()
    known = {f.name: f for f in fields(RunnerConfig)}

    unknown = set(overrides) - set(known)
    if unknown:
        msg = f"Unknown config option(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    values: dict[str, Any] = {}
    for name in known:
        raw = get_env(name.upper())
        if raw is not None:
            values[name] = _coerce(name, raw, getattr(config, name))
    values.update({k: v for k, v in overrides.items() if v is not None})

    if "work_dir" in values:
        values["work_dir"] = Path(values["work_dir"])
    return replace(config, **values)


def _coerce(name: str, raw: str, current: Any) -> Any:
    """Convert an environment string to the type of the default value."""
    try:
        if isinstance(current, Path):
            return Path(raw)
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
    except ValueError as e:
        msg = f"Invalid value for {ENV_PREFIX}{name.upper()}: '{raw}'"
        raise ValueError(msg) from e
    return raw
