"""Layout operations: stow, focus, placement and layout diffing.

Windows are only ever moved between workspaces and the holding area; they
are never closed, resized or retiled.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..models.assembly import AssembledBench, LayoutDiff
from ..models.bench import Bench
from ..models.window import WindowInfo
from .sway_client import WindowManager
from .window_index import WindowIndex

logger = logging.getLogger("bench.layout")


def _unique(window_ids: Iterable[str]) -> List[str]:
    ids: List[str] = []
    for window_id in window_ids:
        if window_id not in ids:
            ids.append(window_id)
    return ids


def prune_snapshot(snapshot: AssembledBench, index: WindowIndex) -> AssembledBench:
    """Copy of `snapshot` without windows missing from `index`."""
    return AssembledBench(
        bay_windows={
            bay: [window_id for window_id in ids if window_id in index]
            for bay, ids in snapshot.bay_windows.items()
        }
    )


def capture_layout(index: WindowIndex, window_manager: WindowManager) -> AssembledBench:
    """Group every live window by workspace.

    Windows in the holding area and windows without a workspace are left out.
    """
    snapshot = AssembledBench()
    for window in index:
        if window.workspace is None or window_manager.is_holding(window.workspace):
            continue
        snapshot.add_window(window.workspace, window.id)
    return snapshot


def diff_layouts(
    old: AssembledBench,
    new: AssembledBench,
    bench: Optional[str] = None,
) -> LayoutDiff:
    """Per-workspace added/removed windows between two snapshots.

    Examples:
        >>> old = AssembledBench(bay_windows={"a": ["1", "2"]})
        >>> new = AssembledBench(bay_windows={"a": ["2", "3"]})
        >>> diff = diff_layouts(old, new)
        >>> diff.added_windows, diff.removed_windows
        ([('a', '3')], [('a', '1')])
    """
    diff = LayoutDiff(bench=bench)
    for workspace, window_ids in new.bay_windows.items():
        before = old.bay_windows.get(workspace, [])
        for window_id in window_ids:
            if window_id not in before:
                diff.added_windows.append((workspace, window_id))
    for workspace, window_ids in old.bay_windows.items():
        now = new.bay_windows.get(workspace, [])
        for window_id in window_ids:
            if window_id not in now:
                diff.removed_windows.append((workspace, window_id))
    return diff


def windows_to_stow(
    index: WindowIndex,
    keep: Set[str],
    window_manager: WindowManager,
) -> List[WindowInfo]:
    """Visible windows outside `keep` that are not already held."""
    return [
        window
        for window in index
        if window.id not in keep
        and window.workspace is not None
        and not window_manager.is_holding(window.workspace)
    ]


class LayoutOperations:
    """Moves bench windows between bays and the holding area."""

    def __init__(self, window_manager: WindowManager):
        self.wm = window_manager

    async def stow(self, window_ids: Iterable[str]) -> List[str]:
        """Move every live window in `window_ids` to the holding area.

        Each id is handled once even if several bays list it. Windows that
        are gone or already held are skipped.

        Returns:
            Ids actually moved
        """
        index = await WindowIndex.capture(self.wm)
        seen: Set[str] = set()
        moved: List[str] = []
        for window_id in window_ids:
            if window_id in seen:
                continue
            seen.add(window_id)
            if window_id not in index:
                logger.debug(f"Window {window_id} is gone, nothing to stow")
                continue
            if self.wm.is_holding(index.workspace_of(window_id)):
                continue
            await self.wm.move_to_holding(window_id)
            moved.append(window_id)
        logger.info(f"Stowed {len(moved)} window(s)")
        return moved

    async def place(self, bay_windows: Dict[str, List[str]]) -> List[str]:
        """Move windows onto their bay workspace when they are elsewhere.

        Returns:
            Ids actually moved
        """
        index = await WindowIndex.capture(self.wm)
        moved: List[str] = []
        for bay, window_ids in bay_windows.items():
            for window_id in window_ids:
                if window_id not in index or index.workspace_of(window_id) == bay:
                    continue
                await self.wm.move_to_workspace(window_id, bay)
                moved.append(window_id)
        return moved

    async def focus(
        self,
        bench: Bench,
        snapshot: AssembledBench,
        tool_windows: Dict[str, str],
        stow_others: bool = True,
    ) -> List[str]:
        """Show a bench's bays and, optionally, stow every other window.

        Args:
            bench: Bench declaration
            snapshot: Assembled snapshot of the bench
            tool_windows: tool name -> resolved window id
            stow_others: Sweep non-bench windows into the holding area

        Returns:
            Ids of windows swept into the holding area
        """
        index = await WindowIndex.capture(self.wm)
        seen: Set[str] = set()

        for bay in bench.bays:
            await self.wm.make_workspace_visible(bay.name)
            bay_ids = _unique(
                list(snapshot.windows_for(bay.name))
                + [tool_windows[name] for name in bay.tool_names if name in tool_windows]
            )
            for window_id in bay_ids:
                if window_id in seen:
                    continue
                seen.add(window_id)
                if window_id not in index:
                    continue
                if index.workspace_of(window_id) != bay.name:
                    await self.wm.move_to_workspace(window_id, bay.name)

        stowed: List[str] = []
        if stow_others:
            for window in windows_to_stow(index, seen, self.wm):
                await self.wm.move_to_holding(window.id)
                stowed.append(window.id)
            logger.info(f"Stowed {len(stowed)} window(s) outside bench '{bench.name}'")
        return stowed
