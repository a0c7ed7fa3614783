"""Stack configuration.

A stack is a named set of settings (provider, provisioner, profile,
cluster, value files, manifests, ...) defined in a YAML stack file.
Command line values take precedence over values in the stack file.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .shared.logging import get_logger
from .utils import load_yaml_file

logger = get_logger(__name__)

# Default values
DEFAULT_ONLINE_TIMEOUT = 600
DEFAULT_READY_TIMEOUT = 600

# Keys allowed for each stack in a stack file
STACK_KEYS = {
    "provider",
    "provisioner",
    "profile",
    "cluster",
    "account",
    "region",
    "values",
    "manifests",
    "online_timeout",
    "ready_timeout",
    "cache_dir",
}


@dataclass
class ClusterStatus:
    """Runtime-only status of the target cluster."""

    is_online: bool = False
    is_ready: bool = False
    started_this_run: bool = False
    sleep_before_ready_check: int = 0


@dataclass
class StackConfig:
    """Resolved desired state for one invocation."""

    name: str = ""
    provider: str = ""
    provisioner: str = ""
    profile: str = ""
    cluster: str = ""
    account: str = ""
    region: str = ""
    values: list[str] = field(default_factory=list)
    manifests: list[str] = field(default_factory=list)
    online_timeout: int | None = None
    ready_timeout: int | None = None
    cache_dir: str = ""
    file_path: str = ""
    status: ClusterStatus = field(default_factory=ClusterStatus)

    def dir(self) -> Path:
        """Directory relative paths in this config resolve against."""
        if self.file_path:
            return Path(self.file_path).resolve().parent
        return Path.cwd()

    def resolve_path(self, path: str) -> Path:
        """Resolve a possibly relative path against the stack file directory."""
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return self.dir() / candidate

    def validate_identity(self) -> None:
        """Check the fields needed before building a provider or provisioner.

        Raises:
            ConfigError: If the cluster or profile is empty.
        """
        missing = [name for name in ("profile", "cluster") if not getattr(self, name)]
        if missing:
            raise ConfigError(
                message=f"Stack config is missing required value(s): {', '.join(missing)}",
                hint="Pass --profile/--cluster or set them in the stack file.",
            )


def load_stack_config(stack_name: str, stack_file: str | Path) -> StackConfig:
    """Load a named stack from a stack file.

    Args:
        stack_name: Name of the stack to load
        stack_file: Path to the YAML file defining stacks by name

    Returns:
        StackConfig for the named stack

    Raises:
        ConfigError: If the file or stack is missing or malformed.
    """
    stacks = load_yaml_file(stack_file)

    if stack_name not in stacks:
        raise ConfigError(
            message=f"No stack called '{stack_name}' found in {stack_file}",
            data={"available": sorted(str(k) for k in stacks)},
        )

    data = stacks[stack_name] or {}
    if not isinstance(data, dict):
        raise ConfigError(message=f"Stack '{stack_name}' in {stack_file} must be a mapping")

    unknown = sorted(str(k) for k in data if k not in STACK_KEYS)
    if unknown:
        raise ConfigError(
            message=f"Unknown key(s) in stack '{stack_name}': {', '.join(unknown)}",
            hint=f"Valid keys are: {', '.join(sorted(STACK_KEYS))}",
        )

    kwargs: dict[str, Any] = {"name": stack_name, "file_path": str(stack_file)}
    for key, value in data.items():
        if key in ("values", "manifests"):
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigError(message=f"'{key}' in stack '{stack_name}' must be a list")
            kwargs[key] = [str(v) for v in value]
        elif key in ("online_timeout", "ready_timeout"):
            try:
                kwargs[key] = int(value)
            except (TypeError, ValueError):
                raise ConfigError(message=f"'{key}' in stack '{stack_name}' must be an integer")
        elif value is not None:
            kwargs[key] = str(value)

    return StackConfig(**kwargs)


def merge_overrides(base: StackConfig, overrides: StackConfig) -> StackConfig:
    """Merge command line overrides onto a stack config.

    A non-empty override always wins. Empty strings, empty lists, zero and
    None never clobber a configured value. Lists are replaced wholesale, not
    appended.
    """
    changes: dict[str, Any] = {}
    for f in fields(StackConfig):
        if f.name in ("status", "name", "file_path"):
            continue
        value = getattr(overrides, f.name)
        if not value:
            continue
        changes[f.name] = list(value) if isinstance(value, list) else value
    return replace(base, **changes)


def resolve_stack_config(
    stack_name: str | None,
    stack_file: str | Path | None,
    overrides: StackConfig | None = None,
) -> StackConfig:
    """Build the authoritative stack config for an invocation.

    Args:
        stack_name: Name of a stack in the stack file
        stack_file: Path to the stack file
        overrides: Values supplied on the command line

    Returns:
        The merged StackConfig, with timeout defaults applied

    Raises:
        ConfigError: If only one of stack name and stack file is given, or
            the stack can't be loaded.
    """
    overrides = overrides or StackConfig()

    if stack_name and not stack_file:
        raise ConfigError(
            message=f"Stack name '{stack_name}' requires a config source",
            hint="Pass --stack-config with the path to the file defining the stack.",
        )
    if stack_file and not stack_name:
        raise ConfigError(
            message="A stack name is required when supplying the path to a stack config file",
            hint="Pass --stack-name.",
        )

    if stack_name and stack_file:
        base = load_stack_config(stack_name, stack_file)
    else:
        base = StackConfig()

    config = merge_overrides(base, overrides)

    if config.online_timeout is None:
        config.online_timeout = DEFAULT_ONLINE_TIMEOUT
    if config.ready_timeout is None:
        config.ready_timeout = DEFAULT_READY_TIMEOUT

    logger.debug("Resolved stack config", stack=config.name or None, config=repr(config))
    return config
