"""Provisioner for clusters that already exist and are managed elsewhere."""

from __future__ import annotations

from ..config import StackConfig
from ..provider import Provider
from ..shared.logging import get_logger
from .base import ProvisionResult, Provisioner

logger = get_logger(__name__)

NONE_PROVISIONER_NAME = "none"


class NoOpProvisioner(Provisioner):
    """Never creates or changes anything; only reports online state."""

    name = NONE_PROVISIONER_NAME

    def create(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        logger.info("Not creating cluster, it's managed externally", cluster=stack_config.cluster)
        return ProvisionResult()

    def update(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        logger.info("Not updating cluster, it's managed externally", cluster=stack_config.cluster)
        return ProvisionResult()

    def is_already_online(self, stack_config: StackConfig, provider: Provider) -> bool:
        return self.cluster_sot.is_online(stack_config, provider.vars())
