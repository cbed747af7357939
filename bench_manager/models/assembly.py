"""Engine-owned derived state and runtime result types.

AssembledTool and AssembledBench are persisted caches: any window id they
hold may be stale and must be re-validated against the window manager.
The dataclasses below are runtime-only results (not persisted).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .bench import Bench
from .window import WindowInfo


class AssembledTool(BaseModel):
    """Last window id believed to host a tool."""

    window_id: str = Field(..., min_length=1)
    assembled_at: datetime = Field(default_factory=datetime.now)


class AssembledBench(BaseModel):
    """Snapshot of window ids per bay/workspace name."""

    bay_windows: Dict[str, List[str]] = Field(default_factory=dict)

    def windows_for(self, bay: str) -> List[str]:
        return self.bay_windows.get(bay, [])

    def add_window(self, bay: str, window_id: str) -> None:
        """Append a window id to a bay, keeping set semantics."""
        windows = self.bay_windows.setdefault(bay, [])
        if window_id not in windows:
            windows.append(window_id)

    def retain_bays(self, bay_names) -> None:
        keep = set(bay_names)
        self.bay_windows = {
            bay: windows for bay, windows in self.bay_windows.items() if bay in keep
        }

    def all_windows(self) -> List[str]:
        ids: List[str] = []
        for windows in self.bay_windows.values():
            for window_id in windows:
                if window_id not in ids:
                    ids.append(window_id)
        return ids


@dataclass
class ToolStatus:
    """Per-tool result of an assemble/focus/stow/info operation."""

    name: str
    bay: str
    window_id: Optional[str] = None
    workspace: Optional[str] = None
    launched: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "bay": self.bay,
            "window_id": self.window_id,
            "workspace": self.workspace,
            "launched": self.launched,
        }


@dataclass
class AssemblyOutcome:
    """Result of one Bench Assembler pass."""

    assembled_bench: AssembledBench
    tool_records: Dict[str, AssembledTool] = field(default_factory=dict)
    statuses: List[ToolStatus] = field(default_factory=list)


@dataclass
class BenchReport:
    """Result of a top-level assemble/focus/stow."""

    bench: Bench
    assembled: AssembledBench
    statuses: List[ToolStatus]


@dataclass
class LayoutDiff:
    """Windows added/removed per workspace between two snapshots."""

    bench: Optional[str] = None
    added_windows: List[Tuple[str, str]] = field(default_factory=list)
    removed_windows: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added_windows and not self.removed_windows


@dataclass
class FocusPlan:
    """Dry-run view of what focus() would do for a bench."""

    bench: str
    tracked: List[Tuple[str, str]] = field(default_factory=list)
    to_assemble: List[str] = field(default_factory=list)
    to_stow: List[WindowInfo] = field(default_factory=list)
    saved_bays: Dict[str, int] = field(default_factory=dict)


@dataclass
class BenchInfo:
    """Read-only status of a bench against the live window manager."""

    bench: Bench
    assembled: bool
    active: bool
    statuses: List[ToolStatus]
    current_windows: List[WindowInfo]
    saved_layout: Optional[AssembledBench] = None
