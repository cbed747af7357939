"""Window manager capability and its sway/i3 IPC implementation.

WindowManager is the only way the reconciliation engine observes or changes
live window state. Every fact is obtained by an on-demand snapshot query;
there is no event subscription.

SwayClient wraps i3ipc.aio for:
- Window tree (GET_TREE)
- Workspaces (GET_WORKSPACES)
- Sending commands (RUN_COMMAND)
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import i3ipc.aio

from ..models.window import SCRATCHPAD_WORKSPACE, WindowInfo
from .errors import SwayCommandError, SwayConnectionError
from .pattern_matcher import matching_window_ids
from .window_index import collect_windows

logger = logging.getLogger("bench.sway")


class WindowManager(ABC):
    """Window manager operations consumed by the engine."""

    holding_workspace: str = SCRATCHPAD_WORKSPACE

    @abstractmethod
    async def snapshot(self) -> List[WindowInfo]:
        """Return every window currently known to the window manager."""

    async def exists(self, window_id: str) -> bool:
        windows = await self.snapshot()
        return any(window.id == window_id for window in windows)

    async def matching_ids(self, signatures: Sequence[str]) -> List[str]:
        return matching_window_ids(await self.snapshot(), signatures)

    @abstractmethod
    async def focused_workspace(self) -> Optional[str]:
        """Name of the focused workspace, if any."""

    @abstractmethod
    async def move_to_workspace(self, window_id: str, workspace: str) -> None:
        """Move a window onto a named workspace."""

    @abstractmethod
    async def move_to_holding(self, window_id: str) -> None:
        """Move a window into the holding area."""

    @abstractmethod
    async def make_workspace_visible(self, name: str) -> None:
        """Switch the output showing `name` to that workspace."""

    @abstractmethod
    async def rename_workspace(self, old: str, new: str) -> None:
        """Rename a workspace."""

    def is_holding(self, workspace: Optional[str]) -> bool:
        """Whether a workspace name denotes the holding area."""
        return workspace in (SCRATCHPAD_WORKSPACE, self.holding_workspace)


def quote(value: str) -> str:
    """Quote a workspace name for a sway command."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SwayClient(WindowManager):
    """Async sway/i3 IPC client.

    Args:
        holding_workspace: "__i3_scratch" to use the scratchpad, otherwise a
            regular workspace name used as the holding area
        connection: Pre-built i3ipc.aio connection (tests)
    """

    def __init__(
        self,
        holding_workspace: str = SCRATCHPAD_WORKSPACE,
        connection: Optional[i3ipc.aio.Connection] = None,
    ):
        self.holding_workspace = holding_workspace
        self._connection = connection

    async def connect(self) -> None:
        """Connect to the IPC socket.

        Raises:
            SwayConnectionError: If connection fails
        """
        try:
            logger.debug("Connecting to sway IPC socket")
            self._connection = await i3ipc.aio.Connection(auto_reconnect=False).connect()
            logger.info("Connected to sway IPC")
        except Exception as e:
            logger.error(f"Failed to connect to sway IPC: {e}")
            raise SwayConnectionError(f"Failed to connect to sway: {e}")

    async def close(self) -> None:
        if self._connection:
            # i3ipc has no explicit close; the socket goes with the connection
            self._connection = None

    async def _conn(self) -> i3ipc.aio.Connection:
        if not self._connection:
            await self.connect()
        return self._connection

    async def snapshot(self) -> List[WindowInfo]:
        """Query GET_TREE and flatten it.

        Raises:
            SwayConnectionError: If the query fails
            ParseError: If the tree is malformed
        """
        conn = await self._conn()
        try:
            logger.debug("IPC query: GET_TREE")
            tree = await conn.get_tree()
        except Exception as e:
            logger.error(f"GET_TREE failed: {e}")
            raise SwayConnectionError(f"Failed to get window tree: {e}")

        windows = collect_windows(tree.ipc_data)
        logger.debug(f"GET_TREE returned {len(windows)} window(s)")
        return windows

    async def focused_workspace(self) -> Optional[str]:
        conn = await self._conn()
        try:
            logger.debug("IPC query: GET_WORKSPACES")
            workspaces = await conn.get_workspaces()
        except Exception as e:
            logger.error(f"GET_WORKSPACES failed: {e}")
            raise SwayConnectionError(f"Failed to get workspaces: {e}")

        for ws in workspaces:
            if ws.focused:
                return ws.name
        return None

    async def command(self, cmd: str) -> None:
        """Send a command (RUN_COMMAND).

        Raises:
            SwayConnectionError: If the IPC call fails
            SwayCommandError: If sway rejects the command
        """
        conn = await self._conn()
        try:
            logger.debug(f"IPC command: {cmd}")
            results = await conn.command(cmd)
        except Exception as e:
            logger.error(f"RUN_COMMAND failed for '{cmd}': {e}")
            raise SwayConnectionError(f"Failed to execute command '{cmd}': {e}")

        for reply in results:
            if not reply.success:
                raise SwayCommandError(cmd, getattr(reply, "error", None))

    async def move_to_workspace(self, window_id: str, workspace: str) -> None:
        await self.command(f"[con_id={window_id}] move container to workspace {quote(workspace)}")

    async def move_to_holding(self, window_id: str) -> None:
        if self.holding_workspace == SCRATCHPAD_WORKSPACE:
            await self.command(f"[con_id={window_id}] move container to scratchpad")
        else:
            await self.move_to_workspace(window_id, self.holding_workspace)

    async def make_workspace_visible(self, name: str) -> None:
        await self.command(f"workspace {quote(name)}")

    async def rename_workspace(self, old: str, new: str) -> None:
        await self.command(f"rename workspace {quote(old)} to {quote(new)}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
