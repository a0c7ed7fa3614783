"""Unit tests for cluster sources of truth."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest
import yaml

from sugarkube import clustersot
from sugarkube.clustersot import KubeCtlClusterSot, new_cluster_sot
from sugarkube.errors import ConfigError


def _nodes(*statuses: str) -> str:
    return yaml.safe_dump(
        {
            "items": [
                {
                    "metadata": {"name": f"node-{i}"},
                    "status": {"conditions": [{"type": "Ready", "status": status}]},
                }
                for i, status in enumerate(statuses)
            ]
        }
    )


class TestKubeCtlClusterSot:
    """Tests for KubeCtlClusterSot."""

    def test_online_uses_kube_context(self, make_stack_config):
        """Test the online probe targets the configured context."""
        sot = KubeCtlClusterSot()

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="default\n", stderr="")
            online = sot.is_online(make_stack_config(), {"kube_context": "minikube"})

        assert online
        args = mock_run.call_args.args[0]
        assert args == ["kubectl", "--context", "minikube", "get", "namespaces"]
        assert mock_run.call_args.kwargs["timeout"] == 10

    def test_offline_on_failure(self, make_stack_config):
        """Test a failing probe means not online."""
        sot = KubeCtlClusterSot()

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="refused")
            assert not sot.is_online(make_stack_config(), {})

    def test_offline_on_timeout(self, make_stack_config):
        """Test a probe that times out means not online yet."""
        sot = KubeCtlClusterSot()

        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="kubectl", timeout=10)
            assert not sot.is_online(make_stack_config(), {})

    @pytest.mark.parametrize(
        "stdout,expected",
        [
            (_nodes("True", "True"), True),
            (_nodes("True", "False"), False),
            (_nodes(), False),
            ("", False),
        ],
    )
    def test_ready(self, make_stack_config, stdout, expected):
        """Test readiness requires at least one node, all of them Ready."""
        sot = KubeCtlClusterSot()

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=stdout, stderr="")
            assert sot.is_ready(make_stack_config(), {}) is expected


class TestStatusRecording:
    """Tests for the module-level helpers that record status."""

    def test_is_online_records_status(self, make_stack_config):
        config = make_stack_config()
        sot = MagicMock()
        sot.is_online.return_value = True

        assert clustersot.is_online(sot, config, {})
        assert config.status.is_online

    def test_is_ready_records_status(self, make_stack_config):
        config = make_stack_config()
        config.status.is_ready = True
        sot = MagicMock()
        sot.is_ready.return_value = False

        assert not clustersot.is_ready(sot, config, {})
        assert not config.status.is_ready


class TestNewClusterSot:
    """Tests for the ClusterSot factory."""

    def test_kubectl(self):
        assert new_cluster_sot("kubectl") == KubeCtlClusterSot()

    def test_unknown(self):
        with pytest.raises(ConfigError):
            new_cluster_sot("helm")
