"""Top-level flows for clusters and kapps.

These sequence the building blocks for one invocation:

- cluster: provider and provisioner construction, online check, create,
  then waiting for the cluster to become online and ready
- kapps: manifest parsing, source acquisition, then the installer for each
  selected kapp in manifest order
"""

from __future__ import annotations

from pathlib import Path

import structlog

from . import provisioner as provisioning
from .config import StackConfig
from .errors import ConfigError
from .installer import MAKE_INSTALLER_NAME, new_installer
from .kapp import Kapp, acquire_kapps, parse_manifests
from .provider import new_provider
from .shared.logging import get_logger
from .shared.paths import ensure_cache_dir


def _stack_logger(stack_config: StackConfig) -> structlog.stdlib.BoundLogger:
    return get_logger(__name__, stack=stack_config.name or None, cluster=stack_config.cluster)


def create_cluster(stack_config: StackConfig, dry_run: bool = False, **wait_kwargs) -> None:
    """Create a cluster unless it's already online, then wait for it to be ready.

    Any configured manifests are parsed first, so a malformed one fails the
    command before a provisioner is run.

    Args:
        stack_config: Resolved stack config
        dry_run: Log external commands that would change state instead of running them
        **wait_kwargs: Passed to wait_for_cluster_readiness (interval, sleep, clock)
    """
    log = _stack_logger(stack_config)

    # Malformed manifests abort before any cluster is touched
    if stack_config.manifests:
        kapps = load_kapps(stack_config)
        log.debug("Manifests parsed", kapps=len(kapps))

    provider = new_provider(stack_config)
    provisioner = provisioning.new_provisioner(stack_config.provisioner)

    online = provisioning.is_already_online(provisioner, stack_config, provider)

    if online:
        log.info("Target cluster is already online")
        if not dry_run:
            return
    else:
        log.info("Cluster isn't online. Will create it")

    provisioning.create(provisioner, stack_config, provider, dry_run)

    if dry_run:
        log.info("Dry run. Skipping waiting for the cluster to become ready")
        return

    provisioning.wait_for_cluster_readiness(provisioner, stack_config, provider, **wait_kwargs)
    log.info("Cluster is ready")


def manifest_paths(stack_config: StackConfig) -> list[Path]:
    """Manifest paths from the stack config, resolved against the stack file.

    Raises:
        ConfigError: If no manifests are configured.
    """
    if not stack_config.manifests:
        raise ConfigError(
            message="No manifests configured",
            hint="Pass --manifest or set 'manifests' in the stack file.",
        )
    return [stack_config.resolve_path(m) for m in stack_config.manifests]


def load_kapps(stack_config: StackConfig) -> list[Kapp]:
    """Parse every manifest configured for the stack."""
    return parse_manifests(manifest_paths(stack_config))


def cache_dir_for(stack_config: StackConfig) -> Path:
    """The cache directory for kapp sources, created if necessary."""
    if stack_config.cache_dir:
        return ensure_cache_dir(stack_config.resolve_path(stack_config.cache_dir))
    return ensure_cache_dir()


def select_kapps(kapps: list[Kapp], present: bool, include_all: bool = False) -> list[Kapp]:
    """Kapps with the given presence flag, or every kapp if include_all is set."""
    if include_all:
        return list(kapps)
    return [k for k in kapps if k.should_be_present == present]


def _run_kapps(
    stack_config: StackConfig,
    kapps: list[Kapp],
    action: str,
    approved: bool,
    dry_run: bool,
    installer_name: str,
) -> list[Kapp]:
    log = _stack_logger(stack_config)
    if not kapps:
        log.info(f"No kapps to {action}")
        return []

    provider = new_provider(stack_config)
    installer = new_installer(installer_name, provider)

    acquire_kapps(kapps, cache_dir_for(stack_config))

    for kapp in kapps:
        log.info(f"Kapp '{kapp.id}': {action}", approved=approved, dry_run=dry_run)
        getattr(installer, action)(kapp, stack_config, approved, dry_run)

    return kapps


def install_kapps(
    stack_config: StackConfig,
    approved: bool = False,
    dry_run: bool = False,
    installer_name: str = MAKE_INSTALLER_NAME,
) -> list[Kapp]:
    """Install every present kapp in manifest order.

    Returns:
        The kapps that were installed
    """
    kapps = select_kapps(load_kapps(stack_config), present=True)
    return _run_kapps(stack_config, kapps, "install", approved, dry_run, installer_name)


def destroy_kapps(
    stack_config: StackConfig,
    approved: bool = False,
    dry_run: bool = False,
    include_all: bool = False,
    installer_name: str = MAKE_INSTALLER_NAME,
) -> list[Kapp]:
    """Destroy absent kapps (or all kapps) in manifest order.

    Returns:
        The kapps that were destroyed
    """
    kapps = select_kapps(load_kapps(stack_config), present=False, include_all=include_all)
    return _run_kapps(stack_config, kapps, "destroy", approved, dry_run, installer_name)
