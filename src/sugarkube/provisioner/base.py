"""Provisioner abstraction, registry and cluster lifecycle helpers.

A provisioner creates and converges a cluster with an external tool. It
owns a ClusterSot used to decide whether the cluster it manages is online.

State machine:

    Unknown -> ConfigAbsent | ConfigExists
    ConfigExists -> Online | Offline
    Online -> Ready | NotReady
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .. import clustersot
from ..clustersot import ClusterSot, new_cluster_sot
from ..config import StackConfig
from ..errors import ConfigError, ReadinessTimeoutError
from ..provider import Provider, Values
from ..shared.logging import get_logger

logger = get_logger(__name__)

# Key in values that holds the provisioner section
PROVISIONER_KEY = "provisioner"
PARAMS_KEY = "params"
SPECS_KEY = "specs"
GLOBAL_PARAMS = "global"

# Seconds between online/ready polls
POLL_INTERVAL_SECONDS = 5


@dataclass
class ProvisionerSpec:
    """The provisioner section of a stack's values."""

    binary: str | None = None
    params: dict[str, dict[str, Any]] = field(default_factory=dict)
    specs: dict[str, Any] = field(default_factory=dict)

    def group(self, name: str) -> dict[str, Any]:
        """A parameter group, without any nested specs tree."""
        group = self.params.get(name) or {}
        return {k: v for k, v in group.items() if k != SPECS_KEY}

    def has_group(self, name: str) -> bool:
        return name in self.params

    @classmethod
    def from_values(cls, values: Values) -> ProvisionerSpec:
        """Parse the provisioner section of a values mapping.

        Raises:
            ConfigError: If the section or its groups aren't mappings.
        """
        section = values.get(PROVISIONER_KEY) or {}
        if not isinstance(section, dict):
            raise ConfigError(message=f"'{PROVISIONER_KEY}' in values must be a mapping")

        params = section.get(PARAMS_KEY) or {}
        specs = section.get(SPECS_KEY) or {}
        if not isinstance(params, dict) or not isinstance(specs, dict):
            raise ConfigError(
                message=f"'{PROVISIONER_KEY}.{PARAMS_KEY}' and '{PROVISIONER_KEY}.{SPECS_KEY}' "
                "must be mappings"
            )
        for name, group in params.items():
            if group is not None and not isinstance(group, dict):
                raise ConfigError(message=f"Parameter group '{name}' must be a mapping")

        binary = section.get("binary")
        return cls(binary=str(binary) if binary else None, params=params, specs=specs)


@dataclass
class ProvisionResult:
    """What a create/update did to the cluster."""

    started: bool = False
    sleep_before_ready_check: int = 0


class Provisioner(ABC):
    """Creates and converges clusters."""

    name: str = ""

    def __init__(self, cluster_sot: ClusterSot | None = None):
        self.cluster_sot = cluster_sot or new_cluster_sot(clustersot.KUBECTL)

    @abstractmethod
    def create(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        """Create the cluster, then converge it."""

    @abstractmethod
    def update(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        """Converge an existing cluster onto its configured spec."""

    @abstractmethod
    def is_already_online(self, stack_config: StackConfig, provider: Provider) -> bool:
        """Whether the cluster is already running."""


_REGISTRY: dict[str, Callable[[], Provisioner]] = {}


def register_provisioner(name: str, factory: Callable[[], Provisioner]) -> None:
    """Register a provisioner implementation."""
    _REGISTRY[name] = factory


def available_provisioners() -> list[str]:
    """Names of the registered provisioners."""
    return sorted(_REGISTRY)


def new_provisioner(name: str) -> Provisioner:
    """Create a provisioner by name.

    Raises:
        ConfigError: If no provisioner has that name.
    """
    factory = _REGISTRY.get(name)
    if factory is None:
        raise ConfigError(
            message=f"Provisioner '{name}' doesn't exist",
            hint=f"Available provisioners: {', '.join(available_provisioners())}",
        )
    return factory()


def apply_result(stack_config: StackConfig, result: ProvisionResult) -> None:
    """Record a provisioning result on the stack status."""
    if result.started:
        stack_config.status.started_this_run = True
        # only sleep before checking readiness if we started the cluster
        stack_config.status.sleep_before_ready_check = result.sleep_before_ready_check


def create(
    provisioner: Provisioner, stack_config: StackConfig, provider: Provider, dry_run: bool
) -> ProvisionResult:
    """Create a cluster and record the result on the stack status."""
    result = provisioner.create(stack_config, provider, dry_run)
    apply_result(stack_config, result)
    return result


def update(
    provisioner: Provisioner, stack_config: StackConfig, provider: Provider, dry_run: bool
) -> ProvisionResult:
    """Converge a cluster and record the result on the stack status."""
    result = provisioner.update(stack_config, provider, dry_run)
    apply_result(stack_config, result)
    return result


def is_already_online(
    provisioner: Provisioner, stack_config: StackConfig, provider: Provider
) -> bool:
    """Whether the cluster is online, recorded on the stack status."""
    online = provisioner.is_already_online(stack_config, provider)
    stack_config.status.is_online = online
    return online


def _poll(
    check: Callable[[], bool],
    timeout: int,
    what: str,
    stack_config: StackConfig,
    sleep: Callable[[float], None],
    clock: Callable[[], float],
    interval: float,
) -> None:
    deadline = clock() + timeout
    while True:
        if check():
            return
        if clock() >= deadline:
            raise ReadinessTimeoutError(
                message=f"Cluster '{stack_config.cluster}' didn't become {what} "
                f"within {timeout} seconds",
                timeout=float(timeout),
            )
        logger.info(
            f"Cluster isn't {what} yet, sleeping", cluster=stack_config.cluster, seconds=interval
        )
        sleep(interval)


def wait_for_cluster_readiness(
    provisioner: Provisioner,
    stack_config: StackConfig,
    provider: Provider,
    interval: float = POLL_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Block until the cluster is online and then ready.

    Polls the provisioner's ClusterSot within the stack's online and ready
    timeouts. If the cluster was started this run, sleeps the settle delay
    between the two phases.

    Raises:
        ReadinessTimeoutError: If either phase exceeds its timeout.
    """
    values = provider.vars()
    sot = provisioner.cluster_sot

    logger.info("Waiting for cluster to come online", cluster=stack_config.cluster)
    _poll(
        lambda: clustersot.is_online(sot, stack_config, values),
        stack_config.online_timeout or 0,
        "online",
        stack_config,
        sleep,
        clock,
        interval,
    )

    if stack_config.status.sleep_before_ready_check:
        logger.info(
            "Sleeping before checking cluster readiness",
            cluster=stack_config.cluster,
            seconds=stack_config.status.sleep_before_ready_check,
        )
        sleep(stack_config.status.sleep_before_ready_check)

    logger.info("Waiting for cluster to become ready", cluster=stack_config.cluster)
    _poll(
        lambda: clustersot.is_ready(sot, stack_config, values),
        stack_config.ready_timeout or 0,
        "ready",
        stack_config,
        sleep,
        clock,
        interval,
    )
