"""Cluster sources of truth report live online/ready state."""

from .base import ClusterSot, is_online, is_ready, new_cluster_sot, register_cluster_sot
from .kubectl import KUBECTL, KubeCtlClusterSot

register_cluster_sot(KUBECTL, KubeCtlClusterSot)

__all__ = [
    "KUBECTL",
    "ClusterSot",
    "KubeCtlClusterSot",
    "is_online",
    "is_ready",
    "new_cluster_sot",
    "register_cluster_sot",
]
