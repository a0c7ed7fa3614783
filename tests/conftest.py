"""Shared test fixtures for sugarkube tests.

This module provides fixtures for building on-disk stacks:
- values_tree: a values directory laid out by provider/profile/cluster
- make_stack_config: StackConfig factory rooted in a temp directory
- write_manifest: writes a manifest document to a file
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from sugarkube.config import StackConfig


def _write_yaml(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    return path


@pytest.fixture
def values_tree(tmp_path: Path):
    """Create a values directory for a provider/profile/cluster.

    Returns a function taking (provider, profile, cluster, files) where files
    maps a level name (root, provider, profile, cluster) to the contents of
    that level's values.yaml.
    """

    def _make(
        provider: str = "local",
        profile: str = "minikube",
        cluster: str = "standard",
        files: dict[str, dict] | None = None,
    ) -> Path:
        base = tmp_path / "values"
        levels = {
            "root": base,
            "provider": base / provider,
            "profile": base / provider / "profiles" / profile,
            "cluster": base / provider / "profiles" / profile / "clusters" / cluster,
        }
        levels["cluster"].mkdir(parents=True, exist_ok=True)
        for level, data in (files or {}).items():
            _write_yaml(levels[level] / "values.yaml", data)
        return base

    return _make


@pytest.fixture
def make_stack_config(tmp_path: Path):
    """Factory for StackConfigs whose relative paths resolve in tmp_path."""

    def _make(**kwargs: Any) -> StackConfig:
        defaults: dict[str, Any] = {
            "name": "test",
            "provider": "local",
            "provisioner": "none",
            "profile": "minikube",
            "cluster": "standard",
            "online_timeout": 30,
            "ready_timeout": 30,
            "file_path": str(tmp_path / "stacks.yaml"),
        }
        defaults.update(kwargs)
        return StackConfig(**defaults)

    return _make


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Write a manifest document and return its path."""

    def _write(data: dict, name: str = "manifest.yaml") -> Path:
        return _write_yaml(tmp_path / "manifests" / name, data)

    return _write


@pytest.fixture
def write_yaml():
    """Write any YAML document to a path."""
    return _write_yaml
