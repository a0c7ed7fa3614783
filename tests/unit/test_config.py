"""Unit tests for stack config resolution."""

from __future__ import annotations

import pytest

from sugarkube.config import (
    DEFAULT_ONLINE_TIMEOUT,
    DEFAULT_READY_TIMEOUT,
    StackConfig,
    load_stack_config,
    merge_overrides,
    resolve_stack_config,
)
from sugarkube.errors import ConfigError


@pytest.fixture
def stack_file(tmp_path, write_yaml):
    return write_yaml(
        tmp_path / "stacks.yaml",
        {
            "local-standard": {
                "provider": "local",
                "provisioner": "minikube",
                "profile": "minikube",
                "cluster": "standard",
                "values": ["values/"],
                "manifests": ["manifests/web.yaml", "manifests/db.yaml"],
                "online_timeout": 120,
            },
            "large": {
                "provider": "aws",
                "profile": "dev",
                "cluster": "large",
                "region": "eu-west-1",
            },
        },
    )


class TestLoadStackConfig:
    """Tests for load_stack_config."""

    def test_loads_named_stack(self, stack_file):
        """Test fields are read from the named stack."""
        config = load_stack_config("local-standard", stack_file)

        assert config.name == "local-standard"
        assert config.provider == "local"
        assert config.provisioner == "minikube"
        assert config.values == ["values/"]
        assert config.manifests == ["manifests/web.yaml", "manifests/db.yaml"]
        assert config.online_timeout == 120
        assert config.ready_timeout is None
        assert config.file_path == str(stack_file)

    def test_missing_stack_raises(self, stack_file):
        """Test an unknown stack name is a ConfigError."""
        with pytest.raises(ConfigError, match="No stack called 'nope'"):
            load_stack_config("nope", stack_file)

    def test_unknown_key_raises(self, tmp_path, write_yaml):
        """Test unknown stack keys are rejected."""
        path = write_yaml(tmp_path / "stacks.yaml", {"s": {"provider": "local", "colour": "red"}})
        with pytest.raises(ConfigError, match="colour"):
            load_stack_config("s", path)

    def test_relative_paths_resolve_against_stack_file(self, stack_file, tmp_path):
        """Test relative paths resolve from the stack file's directory."""
        config = load_stack_config("local-standard", stack_file)
        assert config.resolve_path("values/") == tmp_path.resolve() / "values"


class TestMergeOverrides:
    """Tests for merge_overrides."""

    def test_non_empty_override_wins(self):
        """Test a set override replaces the configured value."""
        base = StackConfig(provider="local", cluster="standard")
        merged = merge_overrides(base, StackConfig(cluster="large"))

        assert merged.cluster == "large"
        assert merged.provider == "local"

    def test_empty_override_never_clobbers(self):
        """Test empty strings, empty lists and None keep the base."""
        base = StackConfig(
            provider="local", values=["a"], manifests=["m.yaml"], online_timeout=100
        )
        merged = merge_overrides(base, StackConfig())

        assert merged.provider == "local"
        assert merged.values == ["a"]
        assert merged.manifests == ["m.yaml"]
        assert merged.online_timeout == 100

    def test_zero_timeout_never_clobbers(self):
        """Test a zero timeout override keeps the configured timeout."""
        base = StackConfig(online_timeout=300, ready_timeout=120)
        merged = merge_overrides(base, StackConfig(online_timeout=0, ready_timeout=0))

        assert merged.online_timeout == 300
        assert merged.ready_timeout == 120

    def test_lists_are_replaced_not_appended(self):
        """Test an override list replaces the configured list wholesale."""
        base = StackConfig(manifests=["a.yaml", "b.yaml"])
        merged = merge_overrides(base, StackConfig(manifests=["c.yaml"]))
        assert merged.manifests == ["c.yaml"]

    def test_identity_fields_are_kept(self):
        """Test the stack name and file path come from the base."""
        base = StackConfig(name="stack", file_path="/tmp/stacks.yaml")
        merged = merge_overrides(base, StackConfig(name="other", file_path="/x"))

        assert merged.name == "stack"
        assert merged.file_path == "/tmp/stacks.yaml"


class TestResolveStackConfig:
    """Tests for resolve_stack_config."""

    def test_name_without_file_raises(self):
        """Test a stack name needs a config source."""
        with pytest.raises(ConfigError, match="requires a config source"):
            resolve_stack_config("local-standard", None)

    def test_file_without_name_raises(self, stack_file):
        """Test a stack file needs a stack name."""
        with pytest.raises(ConfigError, match="stack name is required"):
            resolve_stack_config(None, stack_file)

    def test_no_stack_uses_overrides(self):
        """Test CLI values alone make a config."""
        config = resolve_stack_config(
            None, None, StackConfig(provider="local", profile="p", cluster="c")
        )

        assert config.provider == "local"
        assert config.cluster == "c"
        assert config.online_timeout == DEFAULT_ONLINE_TIMEOUT
        assert config.ready_timeout == DEFAULT_READY_TIMEOUT

    def test_cli_overrides_stack_file(self, stack_file):
        """Test CLI values win over the stack file, unset ones don't."""
        config = resolve_stack_config(
            "local-standard", stack_file, StackConfig(cluster="large", ready_timeout=30)
        )

        assert config.cluster == "large"
        assert config.provisioner == "minikube"
        assert config.online_timeout == 120
        assert config.ready_timeout == 30

    def test_status_starts_clean(self, stack_file):
        """Test the resolved config has a fresh cluster status."""
        config = resolve_stack_config("local-standard", stack_file)

        assert not config.status.is_online
        assert not config.status.is_ready
        assert not config.status.started_this_run
        assert config.status.sleep_before_ready_check == 0


class TestValidateIdentity:
    """Tests for StackConfig.validate_identity."""

    def test_missing_cluster_and_profile(self):
        """Test empty profile and cluster are reported together."""
        with pytest.raises(ConfigError, match="profile, cluster"):
            StackConfig(provider="local").validate_identity()

    def test_complete_identity(self):
        """Test a config with profile and cluster passes."""
        StackConfig(profile="dev", cluster="dev1").validate_identity()
