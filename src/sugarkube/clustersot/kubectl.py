"""ClusterSot backed by kubectl."""

from __future__ import annotations

import yaml

from ..config import StackConfig
from ..errors import ExternalToolError, TimeoutError
from ..provider import Values
from ..shared.logging import get_logger
from ..shared.process import run_command
from .base import ClusterSot

logger = get_logger(__name__)

KUBECTL = "kubectl"

# Deadline for each probe
PROBE_TIMEOUT_SECONDS = 10


class KubeCtlClusterSot(ClusterSot):
    """Query cluster state with kubectl."""

    def __init__(self, kubectl_path: str = KUBECTL):
        self.kubectl_path = kubectl_path

    def __eq__(self, other: object) -> bool:
        return isinstance(other, KubeCtlClusterSot) and other.kubectl_path == self.kubectl_path

    def _kubectl_cmd(self, values: Values) -> list[str]:
        """Build base kubectl command."""
        cmd = [self.kubectl_path]
        kube_context = values.get("kube_context")
        if kube_context:
            cmd.extend(["--context", str(kube_context)])
        return cmd

    def _probe(self, args: list[str]) -> str | None:
        """Run a probe, returning stdout, or None if it failed or timed out."""
        try:
            result = run_command(args, timeout=PROBE_TIMEOUT_SECONDS)
        except TimeoutError:
            logger.debug("Cluster probe timed out", command=" ".join(args))
            return None
        except ExternalToolError as e:
            logger.debug("Cluster probe failed", command=" ".join(args), stderr=e.stderr)
            return None
        return result.stdout

    def is_online(self, stack_config: StackConfig, values: Values) -> bool:
        output = self._probe(self._kubectl_cmd(values) + ["get", "namespaces"])
        online = output is not None
        logger.debug("Checked if cluster is online", cluster=stack_config.cluster, online=online)
        return online

    def is_ready(self, stack_config: StackConfig, values: Values) -> bool:
        output = self._probe(self._kubectl_cmd(values) + ["get", "nodes", "-o", "yaml"])
        if output is None:
            return False

        try:
            nodes = (yaml.safe_load(output) or {}).get("items") or []
        except yaml.YAMLError:
            logger.warning("Unparseable node list from kubectl", cluster=stack_config.cluster)
            return False

        if not nodes:
            return False

        for node in nodes:
            conditions = (node.get("status") or {}).get("conditions") or []
            ready = any(c.get("type") == "Ready" and c.get("status") == "True" for c in conditions)
            if not ready:
                logger.debug(
                    "Node not ready",
                    cluster=stack_config.cluster,
                    node=(node.get("metadata") or {}).get("name"),
                )
                return False

        logger.debug("All nodes ready", cluster=stack_config.cluster, nodes=len(nodes))
        return True
