"""Unit tests for ProcessLauncher."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from bench_manager.core.errors import LaunchError
from bench_manager.core.launcher import ProcessLauncher
from bench_manager.models.tool import BrowserState, EditorState, TerminalState, ToolKind


@pytest.fixture
def launcher(tmp_path) -> ProcessLauncher:
    return ProcessLauncher(profiles_dir=tmp_path / "profiles")


class TestBuildCommand:
    """Tests for per-kind argv construction."""

    def test_browser(self, launcher, tmp_path):
        state = BrowserState(urls=["https://a", "https://b"])
        assert launcher.build_command(ToolKind.BROWSER, state, 9333) == [
            "chromium",
            "--new-window",
            "--remote-debugging-port=9333",
            f"--user-data-dir={tmp_path / 'profiles' / '9333'}",
            "https://a",
            "https://b",
        ]

    def test_browser_needs_endpoint(self, launcher):
        with pytest.raises(LaunchError, match="debugging endpoint"):
            launcher.build_command(ToolKind.BROWSER, BrowserState(), None)

    def test_terminal_with_command(self, launcher):
        state = TerminalState(cwd="/tmp", command=["htop", "-d", "10"])
        assert launcher.build_command(ToolKind.TERMINAL, state) == ["kitty", "htop", "-d", "10"]

    def test_terminal_plain(self, launcher):
        assert launcher.build_command(ToolKind.TERMINAL, TerminalState()) == ["kitty"]

    def test_editor_path_expanded(self, launcher):
        command = launcher.build_command(ToolKind.EDITOR, EditorState(path="~/src/app"))
        assert command == ["zed", str(Path.home() / "src/app")]

    def test_editor_without_path(self, launcher):
        assert launcher.build_command(ToolKind.EDITOR, EditorState()) == ["zed"]

    def test_custom_executables(self, tmp_path):
        launcher = ProcessLauncher(terminal_command="foot", editor_command="zeditor")
        assert launcher.build_command(ToolKind.TERMINAL, TerminalState())[0] == "foot"
        assert launcher.build_command(ToolKind.EDITOR, EditorState())[0] == "zeditor"

    def test_state_kind_mismatch(self, launcher):
        with pytest.raises(LaunchError, match="Invalid state for terminal"):
            launcher.build_command(ToolKind.TERMINAL, EditorState())


class TestLaunch:
    """Tests for process spawning."""

    @pytest.mark.asyncio
    async def test_spawns_detached(self, launcher):
        with patch("bench_manager.core.launcher.subprocess.Popen") as mock_popen:
            mock_popen.return_value = MagicMock(pid=4242)
            await launcher.launch(ToolKind.TERMINAL, TerminalState(cwd="~/work", command=["vim"]))

        args, kwargs = mock_popen.call_args
        assert args[0] == ["kitty", "vim"]
        assert kwargs["cwd"] == str(Path.home() / "work")
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] == subprocess.DEVNULL
        assert kwargs["stderr"] == subprocess.DEVNULL

    @pytest.mark.asyncio
    async def test_spawn_failure(self, launcher):
        with patch("bench_manager.core.launcher.subprocess.Popen", side_effect=FileNotFoundError("no kitty")):
            with pytest.raises(LaunchError, match="kitty"):
                await launcher.launch(ToolKind.TERMINAL, TerminalState())
