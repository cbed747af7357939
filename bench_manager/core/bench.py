"""Bench management operations.

This module provides the top-level operations behind every CLI command:
- Declarations (create bench, add tool to bay, rename bay, craft tool, list)
- Reconciliation (assemble, assemble-tool, stow, focus)
- Sync (layout diff against the live tree, browser tab state)
- Status (focus plan, info, active bench marker)

Each operation loads declarations and the last snapshot through the
repository, drives the assembler/layout engine against the window manager,
then writes the resulting snapshot back.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..models.assembly import (
    AssembledBench,
    BenchInfo,
    BenchReport,
    FocusPlan,
    LayoutDiff,
    ToolStatus,
)
from ..models.bench import BaySpec, Bench
from ..models.tool import BrowserState, ToolDefinition, ToolKind, default_state
from .assembly import BenchAssembler, enrich_workspaces
from .config import BenchConfig
from .devtools import list_page_urls
from .errors import BenchError, BenchIOError, ConflictError, InvalidNameError, NotFoundError
from .launcher import AppLauncher, ProcessLauncher
from .layout import LayoutOperations, capture_layout, diff_layouts, prune_snapshot, windows_to_stow
from .persistence import BenchRepository
from .resolver import ToolResolver
from .store import JsonFileStore, Store
from .sway_client import SwayClient, WindowManager
from .window_index import WindowIndex

logger = logging.getLogger("bench.manager")


def _invalid_name(what: str, name: str, error: ValidationError) -> InvalidNameError:
    details = error.errors()
    reason = details[0]["msg"] if details else str(error)
    return InvalidNameError(f"Invalid {what} name '{name}': {reason}", subject=name)


class BenchManager:
    """High-level bench operations.

    Coordinates between:
    - Bench/tool declarations and derived records (Store)
    - The window manager (sway/i3 IPC)
    - Application launching
    """

    def __init__(
        self,
        config: Optional[BenchConfig] = None,
        window_manager: Optional[WindowManager] = None,
        launcher: Optional[AppLauncher] = None,
        store: Optional[Store] = None,
    ):
        """Initialize bench manager.

        Args:
            config: Settings (defaults when not provided)
            window_manager: Optional window manager (connects to sway if not provided)
            launcher: Optional launcher (local processes if not provided)
            store: Optional store (JSON files under config.data_dir if not provided)
        """
        self.config = config or BenchConfig()
        self._wm = window_manager
        self.launcher = launcher or ProcessLauncher(
            browser_command=self.config.browser_command,
            terminal_command=self.config.terminal_command,
            editor_command=self.config.editor_command,
            profiles_dir=self.config.data_dir / "browser-profiles",
        )
        self.repository = BenchRepository(store or JsonFileStore(self.config.data_dir))

    async def _get_wm(self) -> WindowManager:
        """Get window manager (lazy connection)."""
        if not self._wm:
            client = SwayClient(holding_workspace=self.config.holding_workspace)
            await client.connect()
            self._wm = client
        return self._wm

    async def close(self) -> None:
        if isinstance(self._wm, SwayClient):
            await self._wm.close()

    def _resolver(self, wm: WindowManager) -> ToolResolver:
        return ToolResolver(
            wm,
            self.launcher,
            self.repository,
            launch_timeout=self.config.launch_timeout,
            poll_interval=self.config.poll_interval,
            endpoint_base=self.config.endpoint_base,
            endpoint_span=self.config.endpoint_span,
        )

    def _tracked_windows(self, bench: Bench) -> Dict[str, str]:
        """tool name -> last tracked window id for every tool of a bench."""
        windows: Dict[str, str] = {}
        for tool_name in bench.tool_names():
            record = self.repository.read_assembled_tool(tool_name)
            if record is not None:
                windows[tool_name] = record.window_id
        return windows

    # Declarations

    async def create_bench(self, name: str) -> Bench:
        """Create an empty bench.

        Raises:
            InvalidNameError: If the name is rejected
            ConflictError: If the bench already exists
        """
        try:
            bench = Bench(name=name)
        except ValidationError as e:
            raise _invalid_name("bench", name, e)
        if self.repository.bench_exists(name):
            raise ConflictError(f"Bench '{name}' already exists", subject=name)
        self.repository.write_bench(bench)
        logger.info(f"Created bench '{name}'")
        return bench

    async def add_tool_to_bay(self, bench_name: str, bay_name: str, tool_name: str) -> Bench:
        """Assign a tool to a bay, creating the bay if needed.

        Raises:
            NotFoundError: If the bench or tool does not exist
            InvalidNameError: If a new bay name is rejected
            ConflictError: If the tool is already in that bay
        """
        bench = self.repository.read_bench(bench_name)
        if not self.repository.tool_exists(tool_name):
            raise NotFoundError(f"Tool '{tool_name}' not found", subject=tool_name)

        bay = bench.get_bay(bay_name)
        if bay is None:
            try:
                bay = BaySpec(name=bay_name)
            except ValidationError as e:
                raise _invalid_name("bay", bay_name, e)
            bench.bays.append(bay)
        if tool_name in bay.tool_names:
            raise ConflictError(
                f"Tool '{tool_name}' is already in bay '{bay_name}' of bench '{bench_name}'",
                subject=tool_name,
            )
        for other in bench.bays:
            if other is not bay and tool_name in other.tool_names:
                logger.warning(
                    f"Tool '{tool_name}' is also in bay '{other.name}' of bench '{bench_name}'; "
                    f"both bays will share one window"
                )
        bay.tool_names.append(tool_name)
        self.repository.write_bench(bench)
        return bench

    async def rename_bay(self, bench_name: str, old: str, new: str) -> Bench:
        """Rename a bay, its snapshot entry and its live workspace.

        Raises:
            NotFoundError: If the bench or bay does not exist
            InvalidNameError: If `new` is rejected
            ConflictError: If `new` is already a bay of the bench
        """
        try:
            BaySpec(name=new)
        except ValidationError as e:
            raise _invalid_name("bay", new, e)
        bench = self.repository.read_bench(bench_name)
        bay = bench.get_bay(old)
        if bay is None:
            raise NotFoundError(f"Bay '{old}' not found in bench '{bench_name}'", subject=old)
        if bench.get_bay(new) is not None:
            raise ConflictError(f"Bay '{new}' already exists in bench '{bench_name}'", subject=new)

        wm = await self._get_wm()
        index = await WindowIndex.capture(wm)
        if any(window.workspace == old for window in index):
            await wm.rename_workspace(old, new)

        bay.name = new
        self.repository.write_bench(bench)

        snapshot = self.repository.read_assembled_bench(bench_name)
        if old in snapshot.bay_windows:
            snapshot.bay_windows[new] = snapshot.bay_windows.pop(old)
            self.repository.write_assembled_bench(bench_name, snapshot)
        logger.info(f"Renamed bay '{old}' to '{new}' in bench '{bench_name}'")
        return bench

    async def craft_tool(self, kind: ToolKind, name: str) -> ToolDefinition:
        """Create a tool definition with the kind's default state.

        Raises:
            InvalidNameError: If the name is rejected
            ConflictError: If the tool already exists
        """
        try:
            tool = ToolDefinition(name=name, kind=kind, state=default_state(kind))
        except ValidationError as e:
            raise _invalid_name("tool", name, e)
        if self.repository.tool_exists(name):
            raise ConflictError(f"Tool '{name}' already exists", subject=name)
        self.repository.write_tool(tool)
        logger.info(f"Crafted {kind.value} tool '{name}'")
        return tool

    async def list_benches(self) -> List[str]:
        return self.repository.list_bench_names()

    async def list_tools(self) -> List[str]:
        return self.repository.list_tool_names()

    # Reconciliation

    async def assemble(self, bench_name: str) -> BenchReport:
        """Resolve every tool of a bench and place windows on their bays.

        Raises:
            NotFoundError: If the bench or one of its tools does not exist
            BenchError: If a tool cannot be resolved
        """
        bench = self.repository.read_bench(bench_name)
        wm = await self._get_wm()
        previous = self.repository.read_assembled_bench(bench_name)

        outcome = await BenchAssembler(wm, self._resolver(wm)).assemble(bench, previous)

        # A window shared by several bays belongs to the first one
        placements: Dict[str, List[str]] = {}
        placed = set()
        for status in outcome.statuses:
            if not status.window_id or status.window_id in placed:
                continue
            placed.add(status.window_id)
            if status.workspace != status.bay:
                placements.setdefault(status.bay, []).append(status.window_id)
        if placements:
            await LayoutOperations(wm).place(placements)
            await enrich_workspaces(wm, outcome.statuses)

        self.repository.write_assembled_bench(bench_name, outcome.assembled_bench)
        self.repository.set_active_bench(bench_name)
        return BenchReport(bench=bench, assembled=outcome.assembled_bench, statuses=outcome.statuses)

    async def assemble_tool(self, tool_name: str, bay: Optional[str] = None) -> ToolStatus:
        """Resolve a single tool.

        Args:
            tool_name: Declared tool name
            bay: Workspace to place the window on; defaults to the focused
                workspace, in which case the window is not moved

        Raises:
            NotFoundError: If the tool does not exist or no workspace is focused
        """
        wm = await self._get_wm()
        move = bay is not None
        if bay is None:
            bay = await wm.focused_workspace()
            if bay is None:
                raise NotFoundError(
                    f"No focused workspace to assemble tool '{tool_name}' into; pass --bay",
                    subject=tool_name,
                )

        resolution = await self._resolver(wm).resolve(tool_name, bay)
        if move:
            await LayoutOperations(wm).place({bay: [resolution.window_id]})

        status = ToolStatus(
            name=tool_name,
            bay=bay,
            window_id=resolution.window_id,
            launched=resolution.launched,
        )
        await enrich_workspaces(wm, [status])
        return status

    async def stow(self, bench_name: str) -> BenchReport:
        """Move every window of a bench into the holding area.

        Raises:
            NotFoundError: If the bench does not exist
        """
        bench = self.repository.read_bench(bench_name)
        wm = await self._get_wm()
        snapshot = self.repository.read_assembled_bench(bench_name)
        tool_windows = self._tracked_windows(bench)

        await LayoutOperations(wm).stow(snapshot.all_windows() + list(tool_windows.values()))

        index = await WindowIndex.capture(wm)
        pruned = prune_snapshot(snapshot, index)
        self.repository.write_assembled_bench(bench_name, pruned)
        if self.repository.get_active_bench() == bench_name:
            self.repository.clear_active_bench()

        statuses = []
        for bay, tool_name in bench.iter_tools():
            window_id = tool_windows.get(tool_name)
            statuses.append(
                ToolStatus(
                    name=tool_name,
                    bay=bay.name,
                    window_id=window_id,
                    workspace=index.workspace_of(window_id) if window_id else None,
                )
            )
        return BenchReport(bench=bench, assembled=pruned, statuses=statuses)

    async def focus(self, bench_name: str, stow_others: bool = True) -> BenchReport:
        """Switch to a bench: save the current one, assemble, show, stow the rest.

        Raises:
            NotFoundError: If the bench or one of its tools does not exist
            BenchError: If a tool cannot be resolved
        """
        bench = self.repository.read_bench(bench_name)
        wm = await self._get_wm()

        current = self.repository.get_active_bench()
        if current and current != bench_name:
            try:
                diff = await self.sync_layout()
                logger.info(
                    f"Saved layout of bench '{current}' "
                    f"(+{len(diff.added_windows)} / -{len(diff.removed_windows)} windows)"
                )
            except BenchError as e:
                logger.warning(f"Could not save layout of bench '{current}', continuing: {e}")

        previous = self.repository.read_assembled_bench(bench_name)
        outcome = await BenchAssembler(wm, self._resolver(wm)).assemble(bench, previous)
        tool_windows = {status.name: status.window_id for status in outcome.statuses if status.window_id}

        await LayoutOperations(wm).focus(
            bench, outcome.assembled_bench, tool_windows, stow_others=stow_others
        )
        await enrich_workspaces(wm, outcome.statuses)

        self.repository.write_assembled_bench(bench_name, outcome.assembled_bench)
        self.repository.set_active_bench(bench_name)
        bench.last_focused_at = datetime.now()
        self.repository.write_bench(bench)
        return BenchReport(bench=bench, assembled=outcome.assembled_bench, statuses=outcome.statuses)

    async def focus_plan(self, bench_name: str) -> FocusPlan:
        """Describe what focus() would do, without changing anything.

        Raises:
            NotFoundError: If the bench does not exist
        """
        bench = self.repository.read_bench(bench_name)
        wm = await self._get_wm()
        index = await WindowIndex.capture(wm)

        plan = FocusPlan(bench=bench_name)
        live_tool_windows = set()
        for tool_name in bench.tool_names():
            record = self.repository.read_assembled_tool(tool_name)
            if record is not None and record.window_id in index:
                plan.tracked.append((tool_name, record.window_id))
                live_tool_windows.add(record.window_id)
            else:
                plan.to_assemble.append(tool_name)

        snapshot = self.repository.read_assembled_bench(bench_name)
        keep = live_tool_windows | {
            window_id
            for bay in bench.bay_names()
            for window_id in snapshot.bay_windows.get(bay, [])
        }
        plan.to_stow = windows_to_stow(index, keep, wm)
        plan.saved_bays = {bay: len(ids) for bay, ids in snapshot.bay_windows.items()}
        return plan

    # Sync

    async def sync_layout(self) -> LayoutDiff:
        """Replace the active bench's snapshot with the live layout.

        Raises:
            NotFoundError: If no bench is active
        """
        bench_name = self.repository.get_active_bench()
        if not bench_name:
            raise NotFoundError("No active bench to sync")

        old = self.repository.read_assembled_bench(bench_name)
        wm = await self._get_wm()
        new = capture_layout(await WindowIndex.capture(wm), wm)
        diff = diff_layouts(old, new, bench=bench_name)

        self.repository.write_assembled_bench(bench_name, new)
        logger.info(
            f"Synced layout of bench '{bench_name}': "
            f"{len(diff.added_windows)} added, {len(diff.removed_windows)} removed"
        )
        return diff

    async def sync_tool_state(self) -> List[ToolDefinition]:
        """Write open browser tabs back into running browser tools.

        Returns:
            Tool definitions that were updated

        Raises:
            BenchIOError: If a running browser's DevTools endpoint is unreachable
        """
        wm = await self._get_wm()
        index = await WindowIndex.capture(wm)
        resolver = self._resolver(wm)
        updated = []

        for name in self.repository.list_tool_names():
            tool = self.repository.read_tool(name)
            if tool.kind != ToolKind.BROWSER:
                continue
            record = self.repository.read_assembled_tool(name)
            if record is None or record.window_id not in index:
                logger.debug(f"Browser tool '{name}' is not running, skipping")
                continue

            port = resolver.debug_endpoint(tool.name)
            try:
                urls = await list_page_urls(port, timeout=self.config.devtools_timeout)
            except BenchIOError as e:
                raise BenchIOError(f"Tool '{name}': {e}", subject=name)

            tool.state = BrowserState(urls=urls)
            self.repository.write_tool(tool)
            updated.append(tool)
            logger.info(f"Synced {len(urls)} tab(s) for browser tool '{name}'")
        return updated

    # Status

    async def info(self, bench_name: str) -> BenchInfo:
        """Report the bench's tools against the live window tree.

        Raises:
            NotFoundError: If the bench does not exist
        """
        bench = self.repository.read_bench(bench_name)
        wm = await self._get_wm()
        index = await WindowIndex.capture(wm)
        tool_windows = self._tracked_windows(bench)

        statuses = []
        assembled = True
        for bay, tool_name in bench.iter_tools():
            window_id = tool_windows.get(tool_name)
            if window_id is None or window_id not in index:
                assembled = False
            statuses.append(
                ToolStatus(
                    name=tool_name,
                    bay=bay.name,
                    window_id=window_id,
                    workspace=index.workspace_of(window_id) if window_id else None,
                )
            )

        current_windows = [
            window
            for window in index
            if window.workspace is not None and not wm.is_holding(window.workspace)
        ]
        saved: Optional[AssembledBench] = None
        if self.repository.has_assembled_bench(bench_name):
            saved = self.repository.read_assembled_bench(bench_name)

        return BenchInfo(
            bench=bench,
            assembled=assembled,
            active=self.repository.get_active_bench() == bench_name,
            statuses=statuses,
            current_windows=current_windows,
            saved_layout=saved,
        )

    async def active_bench(self) -> Optional[str]:
        return self.repository.get_active_bench()

    async def clear_active_bench(self) -> None:
        self.repository.clear_active_bench()
