r"""
Platform integrations for graph-harness.

Each integration implements the Platform protocol and registers
under the id a worker process is launched with.

    from graph_harness.platforms import PlatformRegistry

    platform = PlatformRegistry.create("reference")
    platform.verify_setup()
"""

from graph_harness.platforms.base import BasePlatform, PlatformRegistry
from graph_harness.platforms.reference import ReferencePlatform

__all__ = [
    "BasePlatform",
    "PlatformRegistry",
    "ReferencePlatform",
]
