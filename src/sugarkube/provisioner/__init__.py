"""Provisioners create and converge clusters."""

from .base import (
    PROVISIONER_KEY,
    ProvisionerSpec,
    ProvisionResult,
    Provisioner,
    apply_result,
    available_provisioners,
    create,
    is_already_online,
    new_provisioner,
    register_provisioner,
    update,
    wait_for_cluster_readiness,
)
from .kops import KOPS_PROVISIONER_NAME, KopsProvisioner
from .minikube import MINIKUBE_PROVISIONER_NAME, MinikubeProvisioner
from .none import NONE_PROVISIONER_NAME, NoOpProvisioner

register_provisioner(KOPS_PROVISIONER_NAME, KopsProvisioner)
register_provisioner(MINIKUBE_PROVISIONER_NAME, MinikubeProvisioner)
register_provisioner(NONE_PROVISIONER_NAME, NoOpProvisioner)

__all__ = [
    "PROVISIONER_KEY",
    "KopsProvisioner",
    "MinikubeProvisioner",
    "NoOpProvisioner",
    "ProvisionResult",
    "Provisioner",
    "ProvisionerSpec",
    "apply_result",
    "available_provisioners",
    "create",
    "is_already_online",
    "new_provisioner",
    "register_provisioner",
    "update",
    "wait_for_cluster_readiness",
]
