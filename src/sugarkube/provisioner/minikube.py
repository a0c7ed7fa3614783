"""Provisioner for local minikube clusters."""

from __future__ import annotations

from ..config import StackConfig
from ..provider import Provider
from ..shared.logging import get_logger
from ..shared.process import format_command, run_command
from ..utils import to_cli_flags
from .base import GLOBAL_PARAMS, ProvisionerSpec, ProvisionResult, Provisioner

logger = get_logger(__name__)

MINIKUBE_PATH = "minikube"
MINIKUBE_PROVISIONER_NAME = "minikube"

START_PARAMS = "start"

# minikube start only returns once the API server is up
SLEEP_SECONDS_BEFORE_READY_CHECK = 0


class MinikubeProvisioner(Provisioner):
    """Start local clusters with `minikube start`."""

    name = MINIKUBE_PROVISIONER_NAME

    def create(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        spec = ProvisionerSpec.from_values(provider.vars())
        args = (
            [spec.binary or MINIKUBE_PATH, "start"]
            + to_cli_flags(spec.group(GLOBAL_PARAMS))
            + to_cli_flags(spec.group(START_PARAMS))
        )

        if dry_run:
            logger.info("Dry run. Skipping invoking minikube", would_execute=format_command(args))
            return ProvisionResult()

        logger.info("Starting minikube cluster", command=format_command(args))
        run_command(args, error_message="Failed to start minikube")
        logger.info("minikube cluster started", cluster=stack_config.cluster)

        return ProvisionResult(
            started=True, sleep_before_ready_check=SLEEP_SECONDS_BEFORE_READY_CHECK
        )

    def update(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        logger.info("minikube clusters can't be updated in place", cluster=stack_config.cluster)
        return ProvisionResult()

    def is_already_online(self, stack_config: StackConfig, provider: Provider) -> bool:
        return self.cluster_sot.is_online(stack_config, provider.vars())
