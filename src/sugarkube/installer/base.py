"""Installer abstraction and registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from ..config import StackConfig
from ..errors import ConfigError
from ..kapp import Kapp
from ..provider import Provider

TARGET_INSTALL = "install"
TARGET_DESTROY = "destroy"


class Installer(ABC):
    """Installs and destroys kapps with an external build tool."""

    name: str = ""

    def __init__(self, provider: Provider):
        self.provider = provider

    @abstractmethod
    def run(
        self, target: str, kapp: Kapp, stack_config: StackConfig, approved: bool, dry_run: bool
    ) -> None:
        """Run a build target for a kapp."""

    def install(self, kapp: Kapp, stack_config: StackConfig, approved: bool, dry_run: bool) -> None:
        """Install a kapp."""
        self.run(TARGET_INSTALL, kapp, stack_config, approved, dry_run)

    def destroy(self, kapp: Kapp, stack_config: StackConfig, approved: bool, dry_run: bool) -> None:
        """Destroy a kapp."""
        self.run(TARGET_DESTROY, kapp, stack_config, approved, dry_run)


_REGISTRY: dict[str, Callable[[Provider], Installer]] = {}


def register_installer(name: str, factory: Callable[[Provider], Installer]) -> None:
    """Register an installer implementation."""
    _REGISTRY[name] = factory


def new_installer(name: str, provider: Provider) -> Installer:
    """Create an installer by name.

    Raises:
        ConfigError: If no installer has that name.
    """
    factory = _REGISTRY.get(name)
    if factory is None:
        raise ConfigError(
            message=f"Installer '{name}' doesn't exist",
            hint=f"Available installers: {', '.join(sorted(_REGISTRY))}",
        )
    return factory(provider)
