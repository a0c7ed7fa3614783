"""Provider abstraction and registry.

A provider supplies the values for a stack. Values come from YAML files
laid out under each configured values directory by convention:

    {base}/{provider}/profiles/{profile}/clusters/{cluster}

Every directory in that chain must exist. A values.yaml in any of them is
loaded, shallowest first, so more specific directories override.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..config import StackConfig
from ..errors import ConfigError, MissingDirectoryError
from ..shared.logging import get_logger
from ..utils import deep_merge, load_yaml_file

logger = get_logger(__name__)

Values = dict[str, Any]

PROFILE_DIR = "profiles"
CLUSTER_DIR = "clusters"
VALUES_FILE = "values.yaml"


class Provider(ABC):
    """Supplies backend-specific values and directory conventions."""

    name: str = ""

    def __init__(self, stack_config: StackConfig):
        self.stack_config = stack_config
        self._values: Values | None = None

    def value_dirs(self, stack_config: StackConfig) -> list[Path]:
        """Directories to load values from, shallowest first.

        Raises:
            MissingDirectoryError: If any directory in the convention for a
                configured values directory doesn't exist.
        """
        dirs: list[Path] = []
        for entry in stack_config.values:
            base = stack_config.resolve_path(entry)
            if base.is_file():
                continue
            dirs.extend(self._convention_dirs(base, stack_config))
        return dirs

    def _convention_dirs(self, base: Path, stack_config: StackConfig) -> list[Path]:
        provider_dir = base / self.name
        profiles_dir = provider_dir / PROFILE_DIR
        profile_dir = profiles_dir / stack_config.profile
        clusters_dir = profile_dir / CLUSTER_DIR
        cluster_dir = clusters_dir / stack_config.cluster

        chain = [base, provider_dir, profiles_dir, profile_dir, clusters_dir, cluster_dir]
        for path in chain:
            if not path.is_dir():
                raise MissingDirectoryError(
                    message=f"No directory found at {path}",
                    hint=(
                        f"Values for provider '{self.name}', profile '{stack_config.profile}' "
                        f"and cluster '{stack_config.cluster}' are expected under {cluster_dir}"
                    ),
                    path=str(path),
                )
        return chain

    def load_values(self) -> Values:
        """Load and merge all values files for the stack, in order."""
        values: Values = {}

        for entry in self.stack_config.values:
            base = self.stack_config.resolve_path(entry)
            if base.is_file():
                files = [base]
            else:
                dirs = self.value_dirs(replace(self.stack_config, values=[entry]))
                files = [d / VALUES_FILE for d in dirs if (d / VALUES_FILE).is_file()]

            for values_file in files:
                logger.debug("Loading values file", path=str(values_file))
                values = deep_merge(values, load_yaml_file(values_file))

        return deep_merge(values, self.derived_vars(values))

    def derived_vars(self, values: Values) -> Values:
        """Values this provider adds on top of the loaded files."""
        return {}

    def vars(self) -> Values:
        """All values for the stack (loaded once)."""
        if self._values is None:
            self._values = self.load_values()
        return self._values

    @abstractmethod
    def installer_vars(self) -> Values:
        """The narrow subset of values installers may consume."""


_REGISTRY: dict[str, Callable[[StackConfig], Provider]] = {}


def register_provider(name: str, factory: Callable[[StackConfig], Provider]) -> None:
    """Register a provider implementation."""
    _REGISTRY[name] = factory


def available_providers() -> list[str]:
    """Names of the registered providers."""
    return sorted(_REGISTRY)


def new_provider(stack_config: StackConfig) -> Provider:
    """Create the provider named in a stack config and load its values.

    Raises:
        ConfigError: If the stack is missing its profile/cluster or names an
            unknown provider.
        MissingDirectoryError: If the values directory convention is violated.
    """
    stack_config.validate_identity()

    factory = _REGISTRY.get(stack_config.provider)
    if factory is None:
        raise ConfigError(
            message=f"Provider '{stack_config.provider}' doesn't exist",
            hint=f"Available providers: {', '.join(available_providers())}",
        )

    provider = factory(stack_config)
    provider.vars()
    return provider
