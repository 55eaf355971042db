"""
Tests for CLI output formatting.

Shows sample output for each scenario. Run with:
    pytest tests/test_display.py -v
    pytest tests/test_display.py -v -s   # see actual terminal output
"""

import re

import pytest

from work_facilitator.cli import main as cli_main
from work_facilitator.cli.commands import display_config, run_completion
from work_facilitator.config import Config
from work_facilitator.output import print_box, print_error, print_success

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def strip_ansi():
    """Return a function that removes ANSI escape codes."""
    def _strip(text: str) -> str:
        return ANSI_RE.sub('', text)
    return _strip


# ---------------------------------------------------------------------------
# Message box
# ---------------------------------------------------------------------------

class TestPrintBox:
    """Output from print_box()."""

    def test_message_inside_box(self, capsys, strip_ansi):
        print_box("Add user authentication to login page")
        lines = strip_ansi(capsys.readouterr().out).strip().split("\n")

        assert len(lines) == 3
        assert "Add user authentication to login page" in lines[1]

    def test_box_edges_align(self, capsys, strip_ansi):
        print_box("short\na much longer second line")
        lines = strip_ansi(capsys.readouterr().out).strip().split("\n")

        assert len({len(line) for line in lines}) == 1

    def test_long_line_wraps(self, capsys, strip_ansi):
        print_box("word " * 60)
        lines = strip_ansi(capsys.readouterr().out).strip().split("\n")

        assert len(lines) > 3


class TestStatusLines:

    def test_error_goes_to_stderr(self, capsys, strip_ansi):
        print_error("Not in a current workflow.")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Not in a current workflow." in strip_ansi(captured.err)

    def test_success_goes_to_stdout(self, capsys, strip_ansi):
        print_success("Committed")
        assert "Committed" in strip_ansi(capsys.readouterr().out)


# ---------------------------------------------------------------------------
# Config display
# ---------------------------------------------------------------------------

class TestDisplayConfig:
    """Output from display_config()."""

    def test_masks_api_key(self, capsys, strip_ansi):
        display_config(Config(api_key="sk-abcdefghijklmnopqrstuvwxyz"))
        out = strip_ansi(capsys.readouterr().out)

        assert "sk-abcdefghijklmnopqrstuvwxyz" not in out
        assert "sk-...wxyz" in out

    def test_lists_settings(self, capsys, strip_ansi):
        display_config(Config(provider="vertexai", exclude_patterns=[r"\.lock$"]))
        out = strip_ansi(capsys.readouterr().out)

        assert "provider:" in out
        assert "vertexai" in out
        assert r"\.lock$" in out
        assert "google_location:" in out

    def test_shows_env_overrides(self, capsys, monkeypatch, strip_ansi):
        monkeypatch.setenv("WF_PROVIDER", "claude")
        display_config(Config())
        assert "WF_PROVIDER=claude" in strip_ansi(capsys.readouterr().out)

    def test_env_override_applied_by_cli(self, capsys, monkeypatch, strip_ansi):
        monkeypatch.setenv("WF_PROVIDER", "llamacpp")
        monkeypatch.delenv("WF_MODEL", raising=False)
        monkeypatch.setattr(cli_main, "load_config", lambda: Config())
        monkeypatch.setattr(cli_main, "configure_logging", lambda level: None)

        assert cli_main.main(["config"]) == 0
        out = strip_ansi(capsys.readouterr().out)
        assert re.search(r"provider:\s+llamacpp", out)


class TestCompletion:

    @pytest.mark.parametrize("shell", ["/bin/bash", "/usr/bin/zsh", "/usr/bin/fish"])
    def test_prints_register_line(self, capsys, monkeypatch, shell):
        monkeypatch.setenv("SHELL", shell)
        assert run_completion() == 0
        out = capsys.readouterr().out
        assert "register-python-argcomplete" in out
        assert " wf" in out
