"""Data models for bench management."""

from .assembly import (
    AssembledBench,
    AssembledTool,
    AssemblyOutcome,
    BenchInfo,
    BenchReport,
    FocusPlan,
    LayoutDiff,
    ToolStatus,
)
from .bench import BaySpec, Bench
from .tool import (
    BrowserState,
    EditorState,
    TerminalState,
    ToolDefinition,
    ToolKind,
    ToolState,
    default_state,
)
from .window import SCRATCHPAD_WORKSPACE, WindowInfo

__all__ = [
    "AssembledBench",
    "AssembledTool",
    "AssemblyOutcome",
    "BaySpec",
    "Bench",
    "BenchInfo",
    "BenchReport",
    "BrowserState",
    "EditorState",
    "FocusPlan",
    "LayoutDiff",
    "SCRATCHPAD_WORKSPACE",
    "TerminalState",
    "ToolDefinition",
    "ToolKind",
    "ToolState",
    "ToolStatus",
    "WindowInfo",
    "default_state",
]
