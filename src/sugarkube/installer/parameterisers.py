"""Capability detection for kapps.

A parameteriser is chosen when a kapp's files carry its marker (e.g. a
Helm chart). It contributes environment variables and, optionally, one
extra build tool argument selecting environment-specific value files by
naming convention (values-dev.yaml, terraform_dev1.tfvars, ...).
"""

from __future__ import annotations

from pathlib import Path

from ..kapp import Kapp
from ..provider import Values


def find_files(root: Path, pattern: str) -> list[Path]:
    """Files under root matching pattern, ignoring VCS metadata."""
    return sorted(p for p in root.rglob(pattern) if ".git" not in p.relative_to(root).parts)


class Parameteriser:
    """Base class for capability-specific parameterisers."""

    name: str = ""

    # glob patterns, any of which marks a kapp as having this capability
    markers: tuple[str, ...] = ()

    @classmethod
    def identify(cls, kapp_root: Path) -> bool:
        """Whether the kapp at kapp_root has this capability."""
        return any(find_files(kapp_root, marker) for marker in cls.markers)

    def get_env_vars(self, kapp: Kapp, values: Values) -> dict[str, str]:
        return {}

    def get_cli_arg(self, kapp_root: Path, valid_pattern_matches: list[str]) -> str:
        return ""


class KubernetesParameteriser(Parameteriser):
    """Kapps that deploy into a Kubernetes cluster."""

    name = "kubernetes"
    markers = ("Chart.yaml", "kustomization.yaml")

    def get_env_vars(self, kapp: Kapp, values: Values) -> dict[str, str]:
        kube_context = values.get("kube_context")
        return {"KUBE_CONTEXT": str(kube_context)} if kube_context else {}


class HelmParameteriser(Parameteriser):
    """Kapps containing a Helm chart."""

    name = "helm"
    markers = ("Chart.yaml",)

    def get_env_vars(self, kapp: Kapp, values: Values) -> dict[str, str]:
        return {"NAMESPACE": kapp.id, "RELEASE": kapp.id}

    def get_cli_arg(self, kapp_root: Path, valid_pattern_matches: list[str]) -> str:
        files: list[str] = []
        for chart in find_files(kapp_root, "Chart.yaml"):
            for match in valid_pattern_matches:
                if not match:
                    continue
                values_file = chart.parent / f"values-{match}.yaml"
                if values_file.is_file():
                    files.extend(["-f", str(values_file)])
        return f"helm-opts={' '.join(files)}" if files else ""


class TerraformParameteriser(Parameteriser):
    """Kapps containing Terraform configuration."""

    name = "terraform"
    markers = ("*.tf",)

    def get_cli_arg(self, kapp_root: Path, valid_pattern_matches: list[str]) -> str:
        tf_dirs = sorted({tf.parent for tf in find_files(kapp_root, "*.tf")})
        options: list[str] = []
        for tf_dir in tf_dirs:
            for match in valid_pattern_matches:
                if not match:
                    continue
                var_file = tf_dir / f"terraform_{match}.tfvars"
                if var_file.is_file():
                    options.append(f"-var-file={var_file}")
        return f"tf-opts={' '.join(options)}" if options else ""


# Detection order, which is also the order env vars are merged in
PARAMETERISERS: list[type[Parameteriser]] = [
    KubernetesParameteriser,
    HelmParameteriser,
    TerraformParameteriser,
]


def identify_kapp_interfaces(kapp_root: Path) -> list[Parameteriser]:
    """Parameterisers for every capability the kapp at kapp_root has."""
    return [cls() for cls in PARAMETERISERS if cls.identify(kapp_root)]
