"""Tool resolution: tracked window -> pattern match -> launch.

For one declared tool the resolver tries, in strict order:
1. The tracked window id from the tool's AssembledTool record, if still live
2. The first live window matching the tool kind's signatures
3. Launching the tool and waiting for a new matching window

Resolutions from steps 2 and 3 are persisted before returning, so the next
tool resolved in the same pass sees them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Collection, Optional

from ..models.assembly import AssembledTool
from ..models.tool import ToolDefinition, ToolKind
from .endpoints import stable_endpoint
from .errors import BenchError, LaunchError, LaunchTimeoutError, NotFoundError
from .launcher import AppLauncher
from .pattern_matcher import signatures_for
from .persistence import BenchRepository
from .sway_client import WindowManager

logger = logging.getLogger("bench.resolver")


@dataclass
class Resolution:
    """Window chosen for a tool."""

    window_id: str
    launched: bool = False
    tracked: bool = False


class ToolResolver:
    """Maps declared tools to live windows.

    Args:
        window_manager: WindowManager capability
        launcher: AppLauncher capability
        repository: Record access for tool definitions and tracking
        launch_timeout: Seconds to wait for a launched window
        poll_interval: Seconds between polls while waiting
        endpoint_base: First debugging endpoint for browser tools
        endpoint_span: Size of the debugging endpoint range
    """

    def __init__(
        self,
        window_manager: WindowManager,
        launcher: AppLauncher,
        repository: BenchRepository,
        launch_timeout: float = 15.0,
        poll_interval: float = 0.15,
        endpoint_base: int = 9222,
        endpoint_span: int = 1000,
    ):
        self.wm = window_manager
        self.launcher = launcher
        self.repository = repository
        self.launch_timeout = launch_timeout
        self.poll_interval = poll_interval
        self.endpoint_base = endpoint_base
        self.endpoint_span = endpoint_span

    def debug_endpoint(self, tool_name: str) -> int:
        return stable_endpoint(tool_name, self.endpoint_base, self.endpoint_span)

    async def tracked_window(self, tool_name: str) -> Optional[str]:
        """Tracked window id if the tool's record points at a live window.

        A record whose window is gone is deleted on the spot.
        """
        record = self.repository.read_assembled_tool(tool_name)
        if record is None:
            return None
        if await self.wm.exists(record.window_id):
            return record.window_id
        logger.info(f"Tracked window {record.window_id} for tool '{tool_name}' is gone")
        self.repository.forget_assembled_tool(tool_name)
        return None

    async def discover(self, tool: ToolDefinition, exclude: Collection[str] = ()) -> Optional[str]:
        """First live window matching the tool kind, skipping `exclude`."""
        for window_id in await self.wm.matching_ids(signatures_for(tool.kind)):
            if window_id not in exclude:
                return window_id
        return None

    async def resolve(
        self,
        tool_name: str,
        bay: str,
        exclude: Collection[str] = (),
    ) -> Resolution:
        """Resolve one tool to a window id.

        Args:
            tool_name: Declared tool name
            bay: Bay the tool is being resolved for (used in messages)
            exclude: Window ids already claimed by other tools in this pass;
                never returned by pattern matching

        Raises:
            NotFoundError: If the tool definition does not exist
            LaunchError: If launching is needed and fails
            LaunchTimeoutError: If the launched window never appears
        """
        window_id = await self.tracked_window(tool_name)
        if window_id is not None:
            logger.debug(f"Tool '{tool_name}' reuses tracked window {window_id}")
            return Resolution(window_id=window_id, tracked=True)

        try:
            tool = self.repository.read_tool(tool_name)
        except NotFoundError:
            raise NotFoundError(
                f"Tool '{tool_name}' (bay '{bay}') not found; create it with 'bench craft-tool'",
                subject=tool_name,
            )

        window_id = await self.discover(tool, exclude)
        launched = False
        if window_id is not None:
            logger.info(f"Tool '{tool_name}' matched existing window {window_id}")
        else:
            window_id = await self.launch_and_wait(tool, bay)
            launched = True

        self.repository.write_assembled_tool(tool_name, AssembledTool(window_id=window_id))
        return Resolution(window_id=window_id, launched=launched)

    async def launch_and_wait(self, tool: ToolDefinition, bay: str = "", timeout: Optional[float] = None) -> str:
        """Launch a tool and wait for a window that was not there before.

        Raises:
            LaunchError: If the launcher fails
            LaunchTimeoutError: If no new matching window appears in time
        """
        if timeout is None:
            timeout = self.launch_timeout
        signatures = signatures_for(tool.kind)
        before = set(await self.wm.matching_ids(signatures))

        endpoint = self.debug_endpoint(tool.name) if tool.kind == ToolKind.BROWSER else None
        logger.info(f"Launching tool '{tool.name}' ({tool.kind.value}) for bay '{bay}'")
        try:
            await self.launcher.launch(tool.kind, tool.launch_state(), endpoint)
        except LaunchError as e:
            raise LaunchError(f"Tool '{tool.name}': {e}", subject=tool.name)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            for window_id in await self.wm.matching_ids(signatures):
                if window_id not in before:
                    logger.info(f"Tool '{tool.name}' opened window {window_id}")
                    return window_id
            if loop.time() >= deadline:
                raise LaunchTimeoutError(
                    f"Tool '{tool.name}': timed out after {timeout:g}s waiting for new window "
                    f"for signatures: {', '.join(signatures)}",
                    subject=tool.name,
                )
            await asyncio.sleep(self.poll_interval)


async def is_live(window_manager: WindowManager, window_id: str) -> bool:
    """Liveness check that treats query failures as 'gone'."""
    try:
        return await window_manager.exists(window_id)
    except BenchError as e:
        logger.warning(f"Liveness check for window {window_id} failed, treating as gone: {e}")
        return False
