"""Cluster source of truth.

A ClusterSot answers whether a cluster is online and ready by inspecting
the live cluster, independently of whatever created it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from ..config import StackConfig
from ..errors import ConfigError
from ..provider import Values


class ClusterSot(ABC):
    """Inspects live cluster state."""

    @abstractmethod
    def is_online(self, stack_config: StackConfig, values: Values) -> bool:
        """Whether the cluster's API is reachable."""

    @abstractmethod
    def is_ready(self, stack_config: StackConfig, values: Values) -> bool:
        """Whether the cluster is ready to have kapps installed into it."""


_REGISTRY: dict[str, Callable[[], ClusterSot]] = {}


def register_cluster_sot(name: str, factory: Callable[[], ClusterSot]) -> None:
    """Register a ClusterSot implementation."""
    _REGISTRY[name] = factory


def new_cluster_sot(name: str) -> ClusterSot:
    """Create a ClusterSot by name.

    Raises:
        ConfigError: If no ClusterSot has that name.
    """
    factory = _REGISTRY.get(name)
    if factory is None:
        raise ConfigError(
            message=f"ClusterSot '{name}' doesn't exist",
            hint=f"Available: {', '.join(sorted(_REGISTRY))}",
        )
    return factory()


def is_online(cluster_sot: ClusterSot, stack_config: StackConfig, values: Values) -> bool:
    """Check whether the cluster is online, recording it on the stack status."""
    online = cluster_sot.is_online(stack_config, values)
    stack_config.status.is_online = online
    return online


def is_ready(cluster_sot: ClusterSot, stack_config: StackConfig, values: Values) -> bool:
    """Check whether the cluster is ready, recording it on the stack status."""
    ready = cluster_sot.is_ready(stack_config, values)
    stack_config.status.is_ready = ready
    return ready
