"""Unit tests for CLI output formatting."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from sugarkube.acquirer import GitAcquirer
from sugarkube.errors import ConfigError, ExternalToolError
from sugarkube.formatters import kapps_table, print_error, print_kapps
from sugarkube.kapp import Kapp


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=160, color_system=None), buffer


class TestPrintKapps:
    """Tests for the kapps table."""

    def test_one_row_per_source(self):
        kapps = [
            Kapp(
                id="web",
                sources=[
                    GitAcquirer("", "git@x:org/web.git", "main", "chart"),
                    GitAcquirer("", "git@x:org/web.git", "main", "terraform"),
                ],
            ),
            Kapp(id="old", should_be_present=False, sources=[GitAcquirer("", "git@x:o.git", "v1")]),
        ]

        assert kapps_table(kapps).row_count == 3

    def test_renders_ids_and_state(self):
        console, buffer = _console()
        kapps = [Kapp(id="old", should_be_present=False, sources=[GitAcquirer("", "u", "v1")])]

        print_kapps(kapps, console)

        output = buffer.getvalue()
        assert "old" in output
        assert "absent" in output
        assert "v1" in output

    def test_empty(self):
        console, buffer = _console()
        print_kapps([], console)
        assert "No kapps found" in buffer.getvalue()


class TestPrintError:
    """Tests for rendering errors."""

    def test_hint(self, capsys):
        print_error(ConfigError(message="Bad stack", hint="Fix it"))

        err = capsys.readouterr().err
        assert "Error: Bad stack" in err
        assert "Hint: Fix it" in err

    def test_tool_output(self, capsys):
        print_error(
            ExternalToolError(
                message="kops failed", command=["kops", "get"], returncode=1, stderr="denied"
            )
        )

        err = capsys.readouterr().err
        assert "Command: kops get" in err
        assert "denied" in err
