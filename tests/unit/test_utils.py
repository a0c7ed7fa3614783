"""Unit tests for sugarkube.utils."""

from __future__ import annotations

import pytest

from sugarkube.errors import ConfigError
from sugarkube.utils import deep_merge, load_yaml_file, to_cli_flags


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_kops_cluster_spec_merge(self):
        """Test merging a desired kops spec onto a downloaded cluster config."""
        actual = {
            "apiVersion": "kops/v1alpha2",
            "kind": "Cluster",
            "spec": {
                "kubernetesVersion": "1.10.0",
                "docker": {"logDriver": "json-file", "storage": "overlay2"},
                "subnets": [{"name": "eu-west-1a", "zone": "eu-west-1a"}],
            },
        }
        desired = {
            "spec": {
                "kubernetesVersion": "1.11.0",
                "docker": {"logDriver": "awslogs"},
                "subnets": [{"name": "eu-west-1b", "zone": "eu-west-1b"}],
            }
        }

        merged = deep_merge(actual, desired)

        assert merged == {
            "apiVersion": "kops/v1alpha2",
            "kind": "Cluster",
            "spec": {
                "kubernetesVersion": "1.11.0",
                "docker": {"logDriver": "awslogs", "storage": "overlay2"},
                "subnets": [{"name": "eu-west-1b", "zone": "eu-west-1b"}],
            },
        }

    def test_merge_is_idempotent(self):
        """Test merging the same override twice changes nothing more."""
        base = {"a": {"b": 1, "c": [1, 2]}, "d": "x"}
        override = {"a": {"c": [3]}, "e": {"f": True}}

        once = deep_merge(base, override)
        twice = deep_merge(once, override)

        assert once == twice

    def test_keys_only_in_base_are_preserved(self):
        """Test keys missing from the override survive."""
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_none_override_keeps_base(self):
        """Test a None override leaves the base value alone."""
        assert deep_merge({"a": {"b": 1}}, {"a": None}) == {"a": {"b": 1}}

    def test_does_not_mutate_inputs(self):
        """Test neither input is modified."""
        base = {"a": {"b": 1}}
        override = {"a": {"c": 2}}

        deep_merge(base, override)

        assert base == {"a": {"b": 1}}
        assert override == {"a": {"c": 2}}


class TestToCliFlags:
    """Tests for to_cli_flags."""

    def test_renders_flags_sorted(self):
        """Test keys become sorted kebab-case flags."""
        flags = to_cli_flags({"node_count": 2, "cloud": "aws"})
        assert flags == ["--cloud", "aws", "--node-count", "2"]

    def test_renders_bools_with_equals(self):
        """Test booleans render as --flag=true/false."""
        assert to_cli_flags({"associate_public_ip": False}) == ["--associate-public-ip=false"]
        assert to_cli_flags({"yes": True}) == ["--yes=true"]

    def test_renders_lists_comma_joined(self):
        """Test lists are comma-joined."""
        assert to_cli_flags({"zones": ["eu-west-1a", "eu-west-1b"]}) == [
            "--zones",
            "eu-west-1a,eu-west-1b",
        ]

    def test_skips_none(self):
        """Test None values are omitted."""
        assert to_cli_flags({"name": None}) == []
        assert to_cli_flags(None) == []

    def test_rejects_mappings(self):
        """Test a nested mapping can't be rendered."""
        with pytest.raises(ConfigError):
            to_cli_flags({"spec": {"a": 1}})


class TestLoadYamlFile:
    """Tests for load_yaml_file."""

    def test_empty_file_is_empty_mapping(self, tmp_path):
        """Test an empty file loads as {}."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_non_mapping_raises(self, tmp_path):
        """Test a list at the top level is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_yaml_file(path)

    def test_missing_file_raises(self, tmp_path):
        """Test a missing file is a ConfigError."""
        with pytest.raises(ConfigError, match="Error reading"):
            load_yaml_file(tmp_path / "nope.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        """Test unparseable YAML is a ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("a: [unclosed\n")
        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_yaml_file(path)
