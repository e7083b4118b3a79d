r"""
Base platform implementation and registry.

Integrations subclass BasePlatform and register under an id
the worker process can be launched with.

    from graph_harness.platforms.base import BasePlatform, PlatformRegistry

    @PlatformRegistry.register("myplatform")
    class MyPlatform(BasePlatform):
        def run(self, run: BenchmarkRun) -> None:
            ...
"""

import importlib
from abc import ABC, abstractmethod
from typing import Any

from graph_harness.types import BenchmarkMetrics, BenchmarkRun, FormattedGraph

__all__ = ["BasePlatform", "PlatformRegistry"]


class PlatformRegistry:
    """Registry for platform integrations."""

    _platforms: dict[str, type["BasePlatform"]] = {}

    @classmethod
    def register(cls, name: str) -> Any:
        """Decorator to register a platform class."""

        def decorator(platform_cls: type["BasePlatform"]) -> type["BasePlatform"]:
            cls._platforms[name] = platform_cls
            return platform_cls

        return decorator

    @classmethod
    def get(cls, name: str) -> type["BasePlatform"] | None:
        """Get platform class by name or `module:ClassName` path."""
        if name in cls._platforms:
            return cls._platforms[name]
        if ":" in name:
            return cls._import(name)
        return None

    @classmethod
    def list(cls) -> list[str]:
        """List registered platform names."""
        return list(cls._platforms.keys())

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> Any:
        """Create platform instance by name."""
        platform_cls = cls.get(name)
        if platform_cls is None:
            valid = ", ".join(cls.list()) or "none"
            msg = f"Unknown platform '{name}'. Registered: {valid}"
            raise ValueError(msg)
        return platform_cls(**kwargs)

    @staticmethod
    def _import(path: str) -> Any:
        module_name, _, attr = path.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            msg = f"Cannot import platform module '{module_name}': {e}"
            raise ValueError(msg) from e
        platform_cls = getattr(module, attr, None)
        if platform_cls is None:
            msg = f"Module '{module_name}' has no platform class '{attr}'"
            raise ValueError(msg)
        return platform_cls


class BasePlatform(ABC):
    """Base class for platform integrations.

    Provides no-op defaults for the optional phases; integrations
    must implement name, load_graph, run and delete_graph.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique platform name."""
        ...

    def verify_setup(self) -> None:
        """Check prerequisites. Default accepts any environment."""

    @abstractmethod
    def load_graph(self, graph: FormattedGraph) -> None:
        """Convert and upload a graph into platform storage."""
        ...

    def prepare(self, run: BenchmarkRun) -> None:
        """Acquire resources for the run."""

    def startup(self, run: BenchmarkRun) -> None:
        """Configure run paths. Default creates the output directory."""
        run.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def run(self, run: BenchmarkRun) -> None:
        """Execute the algorithm."""
        ...

    def finalize(self, run: BenchmarkRun) -> BenchmarkMetrics:
        """Report metrics. Default reports none."""
        return BenchmarkMetrics()

    def terminate(self, run: BenchmarkRun) -> None:
        """Release resources acquired in prepare."""

    @abstractmethod
    def delete_graph(self, graph: FormattedGraph) -> None:
        """Unload a graph from platform storage."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name})"
