"""Unit tests for running external tools."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from sugarkube.errors import ExternalToolError, TimeoutError
from sugarkube.shared.process import run_command


class TestRunCommand:
    """Tests for run_command."""

    def test_captures_output(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="ok", stderr="")
            result = run_command(["kubectl", "version"])

        assert result.stdout == "ok"
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["timeout"] is None

    def test_env_extends_environment(self, monkeypatch):
        """Test extra env vars are added to the inherited environment."""
        monkeypatch.setenv("HOME_MARKER", "1")
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
            run_command(["make"], env={"CLUSTER": "dev1"})

        env = mock_run.call_args.kwargs["env"]
        assert env["CLUSTER"] == "dev1"
        assert env["HOME_MARKER"] == "1"

    def test_non_zero_exit(self):
        """Test a failure carries the command and both output streams."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=3, stdout="out", stderr="err")
            with pytest.raises(ExternalToolError) as exc_info:
                run_command(["kops", "get", "clusters"], error_message="Failed")

        error = exc_info.value
        assert error.message == "Failed"
        assert error.command == ["kops", "get", "clusters"]
        assert error.returncode == 3
        assert error.stdout == "out"
        assert error.stderr == "err"
        assert "-- stderr --\nerr" in error.details()

    def test_unchecked(self):
        """Test check=False returns failures instead of raising."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="")
            assert run_command(["kops"], check=False).returncode == 1

    def test_timeout_is_distinct(self):
        """Test an expired deadline is a TimeoutError, not a tool failure."""
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.TimeoutExpired(cmd="kops", timeout=5)
            with pytest.raises(TimeoutError) as exc_info:
                run_command(["kops", "get", "clusters"], timeout=5)

        assert not isinstance(exc_info.value, ExternalToolError)
        assert exc_info.value.timeout == 5
        assert "credentials" in exc_info.value.hint

    def test_missing_binary(self):
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError()
            with pytest.raises(ExternalToolError, match="kops not found"):
                run_command(["kops", "version"])
