"""Bench assembly: resolve every declared tool of a bench to a live window.

One pass walks bays and tools in declaration order. Each tool's resolution
(including its persisted tracking record) completes before the next tool
starts, so later tools of the same kind never grab an earlier tool's window.
"""

import logging
from typing import Dict, List, Set

from ..models.assembly import AssembledBench, AssembledTool, AssemblyOutcome, ToolStatus
from ..models.bench import Bench
from .resolver import ToolResolver, is_live
from .sway_client import WindowManager
from .window_index import WindowIndex

logger = logging.getLogger("bench.assembly")


async def prune_windows(window_manager: WindowManager, window_ids: List[str]) -> List[str]:
    """Drop ids the window manager no longer knows.

    A failing liveness check counts as 'gone' and never aborts the prune.
    """
    kept: List[str] = []
    for window_id in window_ids:
        if await is_live(window_manager, window_id):
            kept.append(window_id)
        else:
            logger.info(f"Pruning closed window {window_id}")
    return kept


async def enrich_workspaces(window_manager: WindowManager, statuses: List[ToolStatus]) -> None:
    """Fill in each status's current workspace from a fresh snapshot."""
    index = await WindowIndex.capture(window_manager)
    for status in statuses:
        if status.window_id:
            status.workspace = index.workspace_of(status.window_id)


class BenchAssembler:
    """Drives the ToolResolver over a whole bench."""

    def __init__(self, window_manager: WindowManager, resolver: ToolResolver):
        self.wm = window_manager
        self.resolver = resolver

    async def assemble(self, bench: Bench, previous: AssembledBench) -> AssemblyOutcome:
        """Resolve every tool of `bench` and rebuild its snapshot.

        Args:
            bench: Bench declaration
            previous: Last persisted snapshot (may hold stale ids)

        Returns:
            AssemblyOutcome with the new snapshot, tool records and statuses

        Raises:
            BenchError: The first resolution failure, naming the tool
        """
        snapshot = AssembledBench(
            bay_windows={bay: list(ids) for bay, ids in previous.bay_windows.items()}
        )
        tool_records: Dict[str, AssembledTool] = {}
        statuses: List[ToolStatus] = []
        claimed: Set[str] = set()

        for bay in bench.bays:
            snapshot.bay_windows[bay.name] = await prune_windows(
                self.wm, snapshot.windows_for(bay.name)
            )

            for tool_name in bay.tool_names:
                resolution = await self.resolver.resolve(tool_name, bay.name, exclude=claimed)
                claimed.add(resolution.window_id)
                snapshot.add_window(bay.name, resolution.window_id)

                record = self.resolver.repository.read_assembled_tool(tool_name)
                if record is not None:
                    tool_records[tool_name] = record

                statuses.append(
                    ToolStatus(
                        name=tool_name,
                        bay=bay.name,
                        window_id=resolution.window_id,
                        launched=resolution.launched,
                    )
                )

        snapshot.retain_bays(bench.bay_names())
        await enrich_workspaces(self.wm, statuses)

        launched = sum(1 for status in statuses if status.launched)
        logger.info(
            f"Assembled bench '{bench.name}': {len(statuses)} tool(s), {launched} launched"
        )
        return AssemblyOutcome(
            assembled_bench=snapshot,
            tool_records=tool_records,
            statuses=statuses,
        )
