"""Provisioner for clusters managed by kops.

kops keeps its own copy of each cluster's configuration in a state store.
Convergence downloads that configuration, deep-merges the desired specs
onto it, replaces it, then runs `kops update cluster` to apply it:

    provisioner:
      params:
        global:
          name: dev1.example.com
          state: s3://example-kops-state
        create_cluster:
          zones: [eu-west-1a]
          node_count: 2
        update_cluster: {}
        rolling_update: {}       # optional, enables `kops rolling-update`
      specs:
        cluster:
          docker:
            logDriver: json-file
        instanceGroups:
          nodes:
            maxSize: 3
"""

from __future__ import annotations

import os
import tempfile
from typing import Any

import yaml

from ..config import StackConfig
from ..errors import (
    ConfigError,
    ExternalToolError,
    PartialConvergenceError,
    SugarkubeError,
    TimeoutError,
)
from ..provider import Provider
from ..shared.logging import get_logger
from ..shared.process import format_command, run_command
from ..utils import deep_merge, to_cli_flags
from .base import GLOBAL_PARAMS, ProvisionerSpec, ProvisionResult, Provisioner

logger = get_logger(__name__)

KOPS_PATH = "kops"
KOPS_PROVISIONER_NAME = "kops"

# Deadline for existence checks and config downloads
CONFIG_FETCH_TIMEOUT_SECONDS = 5

# Seconds to wait after applying before polling for readiness, since kops
# replaces nodes asynchronously
SLEEP_SECONDS_BEFORE_READY_CHECK = 60

CREATE_PARAMS = "create_cluster"
UPDATE_PARAMS = "update_cluster"
ROLLING_UPDATE_PARAMS = "rolling_update"

CLUSTER_SPEC = "cluster"
INSTANCE_GROUPS_SPEC = "instanceGroups"

TIMEOUT_HINT = "Timed out talking to the kops state store. Check your credentials."


class KopsProvisioner(Provisioner):
    """Create and converge clusters with kops."""

    name = KOPS_PROVISIONER_NAME

    def _spec(self, provider: Provider) -> ProvisionerSpec:
        spec = ProvisionerSpec.from_values(provider.vars())
        global_params = spec.group(GLOBAL_PARAMS)
        missing = [key for key in ("name", "state") if not global_params.get(key)]
        if missing:
            raise ConfigError(
                message=f"kops requires provisioner.params.global.{' and '.join(missing)}",
                hint="Set the cluster name and state store in the stack's values.",
            )
        return spec

    def _kops_cmd(self, spec: ProvisionerSpec, *args: str) -> list[str]:
        """Build a kops command with the global flags."""
        return [spec.binary or KOPS_PATH, *args, *to_cli_flags(spec.group(GLOBAL_PARAMS))]

    def cluster_config_exists(self, spec: ProvisionerSpec) -> bool:
        """Whether kops has a config for the cluster in its state store.

        This doesn't check whether the cluster is actually running.

        Raises:
            TimeoutError: If kops doesn't answer within the deadline.
            ExternalToolError: If kops fails for any reason other than the
                config being absent.
        """
        args = self._kops_cmd(spec, "get", "clusters")
        try:
            result = run_command(args, timeout=CONFIG_FETCH_TIMEOUT_SECONDS, check=False)
        except TimeoutError as e:
            raise TimeoutError(
                message="Timed out trying to retrieve kops cluster config",
                hint=TIMEOUT_HINT,
                command=e.command,
                timeout=e.timeout,
            )

        if result.returncode == 0:
            logger.debug("kops cluster config exists")
            return True

        if not (result.stdout or "").strip():
            logger.debug("kops cluster config doesn't exist")
            return False

        raise ExternalToolError(
            message="Error fetching kops clusters",
            command=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def is_already_online(self, stack_config: StackConfig, provider: Provider) -> bool:
        spec = self._spec(provider)
        if not self.cluster_config_exists(spec):
            return False
        return self.cluster_sot.is_online(stack_config, provider.vars())

    def create(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        spec = self._spec(provider)
        logger.debug("Creating stack with kops", cluster=stack_config.cluster)

        if self.cluster_config_exists(spec):
            logger.info("kops cluster config already exists", cluster=stack_config.cluster)
        else:
            args = self._kops_cmd(spec, "create", "cluster") + to_cli_flags(
                spec.group(CREATE_PARAMS)
            )
            if dry_run:
                logger.info("Dry run. Skipping invoking kops", would_execute=format_command(args))
                logger.info("Dry run. The new cluster config would then be patched and applied")
                return ProvisionResult()

            logger.info("Creating kops cluster config", command=format_command(args))
            result = run_command(args, error_message="Failed to create a kops cluster config")
            logger.debug("kops returned", stdout=result.stdout)
            logger.info("kops cluster config created", cluster=stack_config.cluster)

        return self._converge(spec, stack_config, dry_run)

    def update(
        self, stack_config: StackConfig, provider: Provider, dry_run: bool
    ) -> ProvisionResult:
        spec = self._spec(provider)
        if not self.cluster_config_exists(spec):
            logger.info("No kops cluster config to update", cluster=stack_config.cluster)
            return ProvisionResult()
        return self._converge(spec, stack_config, dry_run)

    def _converge(
        self, spec: ProvisionerSpec, stack_config: StackConfig, dry_run: bool
    ) -> ProvisionResult:
        self.patch_cluster(spec, dry_run)
        self.patch_instance_groups(spec, dry_run)
        applied = self.apply(spec, dry_run)
        if not applied:
            return ProvisionResult()

        logger.info("kops cluster config applied", cluster=stack_config.cluster)
        return ProvisionResult(
            started=True, sleep_before_ready_check=SLEEP_SECONDS_BEFORE_READY_CHECK
        )

    def _download(self, spec: ProvisionerSpec, *resource: str) -> dict[str, Any]:
        args = self._kops_cmd(spec, "get", *resource) + ["-o", "yaml"]
        try:
            result = run_command(
                args,
                timeout=CONFIG_FETCH_TIMEOUT_SECONDS,
                error_message=f"Failed to get kops {' '.join(resource)} config",
            )
        except TimeoutError as e:
            raise TimeoutError(
                message=f"Timed out downloading kops {' '.join(resource)} config",
                hint=TIMEOUT_HINT,
                command=e.command,
                timeout=e.timeout,
            )

        try:
            config = yaml.safe_load(result.stdout) or {}
        except yaml.YAMLError as e:
            raise ExternalToolError(
                message=f"Error parsing kops {' '.join(resource)} config: {e}",
                command=args,
                stdout=result.stdout,
            )
        if not isinstance(config, dict):
            raise ExternalToolError(
                message=f"Unexpected kops {' '.join(resource)} config", command=args
            )
        return config

    def _patch(
        self, spec: ProvisionerSpec, desired: dict[str, Any], dry_run: bool, *resource: str
    ) -> None:
        """Download a resource's config, merge the desired spec in and replace it."""
        actual = self._download(spec, *resource)
        merged = deep_merge(actual, {"spec": desired})

        if merged == actual:
            logger.info("kops config already matches desired spec", resource=" ".join(resource))
            return

        merged_yaml = yaml.safe_dump(merged, default_flow_style=False, sort_keys=False)
        logger.debug("Merged kops config", resource=" ".join(resource), config=merged_yaml)

        # kops can't read the config from stdin, so stage it in a temp file
        fd, tmp_path = tempfile.mkstemp(prefix="kops.", suffix=".yaml")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(merged_yaml)

            args = self._kops_cmd(spec, "replace") + ["-f", tmp_path]
            if dry_run:
                logger.info(
                    "Dry run. Skipping patching kops config", would_execute=format_command(args)
                )
                return

            logger.info("Patching kops config", resource=" ".join(resource))
            run_command(args, error_message=f"Failed to update kops {' '.join(resource)} config")
        finally:
            os.remove(tmp_path)

    def patch_cluster(self, spec: ProvisionerSpec, dry_run: bool) -> None:
        """Merge specs.cluster onto the cluster config."""
        desired = spec.specs.get(CLUSTER_SPEC)
        if not desired:
            logger.debug("No cluster spec to patch in")
            return
        self._patch(spec, desired, dry_run, "cluster")

    def patch_instance_groups(self, spec: ProvisionerSpec, dry_run: bool) -> None:
        """Merge each specs.instanceGroups entry onto its instance group.

        Each instance group is patched independently. Failures are collected
        and raised together once every group has been attempted; groups that
        were patched successfully stay patched.

        Raises:
            ConfigError: If specs.instanceGroups isn't a mapping.
            PartialConvergenceError: If any instance group failed to patch.
        """
        instance_groups = spec.specs.get(INSTANCE_GROUPS_SPEC) or {}
        if not isinstance(instance_groups, dict):
            raise ConfigError(
                message=f"specs.{INSTANCE_GROUPS_SPEC} must be a mapping of instance group names",
                hint="Key each instance group spec by the name kops knows it by.",
            )
        failures: dict[str, SugarkubeError] = {}

        for name, desired in instance_groups.items():
            if not desired:
                continue
            try:
                self._patch(spec, desired, dry_run, "instancegroups", str(name))
            except (ExternalToolError, TimeoutError) as e:
                logger.error("Failed to patch instance group", instance_group=name, error=e.message)
                failures[str(name)] = e

        if failures:
            raise PartialConvergenceError(
                message=f"Failed to patch {len(failures)} of {len(instance_groups)} "
                f"instance group(s): {', '.join(failures)}",
                hint="Instance groups that were patched successfully have not been rolled back.",
                failures=failures,
            )

    def apply(self, spec: ProvisionerSpec, dry_run: bool) -> bool:
        """Apply the patched config to the live cluster.

        Returns:
            True if the config was applied, False for a dry run.
        """
        commands = [
            self._kops_cmd(spec, "update", "cluster")
            + to_cli_flags(spec.group(UPDATE_PARAMS))
            + ["--yes"]
        ]
        if spec.has_group(ROLLING_UPDATE_PARAMS):
            commands.append(
                self._kops_cmd(spec, "rolling-update", "cluster")
                + to_cli_flags(spec.group(ROLLING_UPDATE_PARAMS))
                + ["--yes"]
            )

        for args in commands:
            if dry_run:
                logger.info(
                    "Dry run. Skipping applying kops config", would_execute=format_command(args)
                )
                continue
            logger.info("Applying kops cluster config", command=format_command(args))
            run_command(args, error_message="Failed to apply kops cluster config")

        return not dry_run
