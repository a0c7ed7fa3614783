"""Installers run kapps' build tools to install or destroy them."""

from .base import (
    TARGET_DESTROY,
    TARGET_INSTALL,
    Installer,
    new_installer,
    register_installer,
)
from .make import MAKE_INSTALLER_NAME, MakeInstaller, build_cli_args, build_env, find_makefile
from .parameterisers import (
    PARAMETERISERS,
    HelmParameteriser,
    KubernetesParameteriser,
    Parameteriser,
    TerraformParameteriser,
    identify_kapp_interfaces,
)

register_installer(MAKE_INSTALLER_NAME, MakeInstaller)

__all__ = [
    "MAKE_INSTALLER_NAME",
    "PARAMETERISERS",
    "TARGET_DESTROY",
    "TARGET_INSTALL",
    "HelmParameteriser",
    "Installer",
    "KubernetesParameteriser",
    "MakeInstaller",
    "Parameteriser",
    "TerraformParameteriser",
    "build_cli_args",
    "build_env",
    "find_makefile",
    "identify_kapp_interfaces",
    "new_installer",
    "register_installer",
]
