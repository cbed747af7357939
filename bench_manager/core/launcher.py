"""Application launcher capability.

Launching is fire-and-forget: launch() returns as soon as the process is
spawned. Finding the window it opens is the resolver's job.

ProcessLauncher builds one argv per tool kind:
- Browser: chromium --new-window --remote-debugging-port=N --user-data-dir=... URLS
- Terminal: kitty [COMMAND...] in the configured working directory
- Editor: zed [PATH]
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..models.tool import BrowserState, EditorState, TerminalState, ToolKind, ToolState
from .errors import LaunchError

logger = logging.getLogger("bench.launcher")


class AppLauncher(ABC):
    """Starts applications by tool kind."""

    @abstractmethod
    async def launch(
        self,
        kind: ToolKind,
        state: ToolState,
        debug_endpoint: Optional[int] = None,
    ) -> None:
        """Spawn the application for `kind` configured by `state`.

        Raises:
            LaunchError: If the process cannot be spawned
        """


def expand_path(path: str) -> str:
    return os.path.expanduser(path)


class ProcessLauncher(AppLauncher):
    """Launches tools as detached local processes.

    Args:
        browser_command: Chromium executable
        terminal_command: Terminal executable
        editor_command: Editor executable
        profiles_dir: Parent of per-endpoint browser profile directories
    """

    def __init__(
        self,
        browser_command: str = "chromium",
        terminal_command: str = "kitty",
        editor_command: str = "zed",
        profiles_dir: Optional[Path] = None,
    ):
        self.browser_command = browser_command
        self.terminal_command = terminal_command
        self.editor_command = editor_command
        self.profiles_dir = profiles_dir or Path.home() / ".local/share/bench/browser-profiles"

    def build_command(
        self,
        kind: ToolKind,
        state: ToolState,
        debug_endpoint: Optional[int] = None,
    ) -> List[str]:
        """Build the argv for a tool kind."""
        if kind == ToolKind.BROWSER:
            if not isinstance(state, BrowserState):
                raise LaunchError(f"Invalid state for browser launch: {type(state).__name__}")
            if debug_endpoint is None:
                raise LaunchError("Browser launch requires a debugging endpoint")
            return [
                self.browser_command,
                "--new-window",
                f"--remote-debugging-port={debug_endpoint}",
                f"--user-data-dir={self.profiles_dir / str(debug_endpoint)}",
                *state.urls,
            ]
        if kind == ToolKind.TERMINAL:
            if not isinstance(state, TerminalState):
                raise LaunchError(f"Invalid state for terminal launch: {type(state).__name__}")
            return [self.terminal_command, *state.command]
        if kind == ToolKind.EDITOR:
            if not isinstance(state, EditorState):
                raise LaunchError(f"Invalid state for editor launch: {type(state).__name__}")
            command = [self.editor_command]
            if state.path:
                command.append(expand_path(state.path))
            return command
        raise LaunchError(f"Unsupported tool kind: {kind}")

    def working_directory(self, state: ToolState) -> Optional[str]:
        if isinstance(state, TerminalState) and state.cwd:
            return expand_path(state.cwd)
        return None

    async def launch(
        self,
        kind: ToolKind,
        state: ToolState,
        debug_endpoint: Optional[int] = None,
    ) -> None:
        command = self.build_command(kind, state, debug_endpoint)
        cwd = self.working_directory(state)

        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.error(f"Failed to launch {command[0]}: {e}")
            raise LaunchError(f"Failed to launch '{command[0]}': {e}", subject=command[0])

        logger.info(f"Launched {kind.value} via {command[0]} (PID: {process.pid}, cwd: {cwd})")
