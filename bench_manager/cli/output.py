"""Output formatting utilities for CLI commands.

Every command supports --json: rich text goes to the terminal, or a single
JSON document is printed at the end of the command.
"""

import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.assembly import BenchInfo, BenchReport, FocusPlan, LayoutDiff, ToolStatus
from ..models.tool import ToolDefinition


# ANSI color codes for output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    GRAY = "\033[90m"


def print_success(message: str) -> None:
    print(f"{Colors.GREEN}✓{Colors.RESET} {message}")


def print_error(message: str) -> None:
    print(f"{Colors.RED}✗{Colors.RESET} {message}", file=sys.stderr)


def print_info(message: str) -> None:
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {message}")


def print_error_with_remediation(error: str, remediation: str) -> None:
    """Print error with remediation steps.

    Examples:
        >>> print_error_with_remediation(
        ...     "Bench 'work' not found",
        ...     "Use 'bench list' to see available benches"
        ... )
    """
    print(f"{Colors.RED}✗ Error:{Colors.RESET} {error}", file=sys.stderr)
    print(f"{Colors.BLUE}  Remediation:{Colors.RESET} {remediation}", file=sys.stderr)


class OutputFormatter:
    """Format output as either rich text or JSON.

    Examples:
        >>> fmt = OutputFormatter(json_mode=False)
        >>> fmt.print_success("Created bench 'work'")
        ✓ Created bench 'work'

        >>> fmt = OutputFormatter(json_mode=True)
        >>> fmt.print_success("Created bench 'work'")
        >>> fmt.output()
        {
          "status": "success",
          "message": "Created bench 'work'"
        }
    """

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode
        self._json_result: Dict[str, Any] = {}

    def set_result(self, **kwargs: Any) -> None:
        self._json_result.update(kwargs)

    def print_success(self, message: str) -> None:
        if self.json_mode:
            self.set_result(status="success", message=message)
        else:
            print_success(message)

    def print_error(self, message: str, remediation: Optional[str] = None) -> None:
        """Print error message.

        In JSON mode the error replaces any partial result.
        """
        if self.json_mode:
            result = {"status": "error", "message": message}
            if remediation:
                result["remediation"] = remediation
            self._json_result = result
        elif remediation:
            print_error_with_remediation(message, remediation)
        else:
            print_error(message)

    def print_info(self, message: str) -> None:
        if not self.json_mode:
            print_info(message)

    def output(self, data: Optional[Dict[str, Any]] = None, file=None) -> None:
        """Output final result.

        In JSON mode, outputs accumulated JSON result.
        In rich mode, does nothing (output already printed).
        """
        if self.json_mode:
            if file is None:
                file = sys.stdout
            if data:
                self._json_result.update(data)
            print(json.dumps(self._json_result, indent=2, cls=BenchJSONEncoder), file=file)


class BenchJSONEncoder(json.JSONEncoder):
    """JSON encoder for bench objects (datetime, Path, pydantic models, dataclasses)."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, Path):
            return str(obj)
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        elif hasattr(obj, "to_dict"):
            return obj.to_dict()
        elif is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        return super().default(obj)


def format_statuses_json(statuses: List[ToolStatus]) -> List[Dict[str, Any]]:
    return [status.to_dict() for status in statuses]


def format_report_json(report: BenchReport) -> Dict[str, Any]:
    return {
        "bench": report.bench.name,
        "bays": report.assembled.bay_windows,
        "tools": format_statuses_json(report.statuses),
        "launched": sum(1 for status in report.statuses if status.launched),
    }


def format_info_json(info: BenchInfo) -> Dict[str, Any]:
    return {
        "bench": info.bench.name,
        "active": info.active,
        "assembled": info.assembled,
        "last_focused_at": info.bench.last_focused_at,
        "tools": format_statuses_json(info.statuses),
        "current_windows": [window.to_dict() for window in info.current_windows],
        "saved_layout": info.saved_layout.bay_windows if info.saved_layout else None,
    }


def format_plan_json(plan: FocusPlan) -> Dict[str, Any]:
    return {
        "bench": plan.bench,
        "tracked": [{"name": name, "window_id": window_id} for name, window_id in plan.tracked],
        "to_assemble": plan.to_assemble,
        "to_stow": [window.to_dict() for window in plan.to_stow],
        "saved_bays": plan.saved_bays,
    }


def format_diff_json(diff: LayoutDiff) -> Dict[str, Any]:
    return {
        "bench": diff.bench,
        "added": [{"workspace": ws, "window_id": wid} for ws, wid in diff.added_windows],
        "removed": [{"workspace": ws, "window_id": wid} for ws, wid in diff.removed_windows],
    }


def format_tool_json(tool: ToolDefinition) -> Dict[str, Any]:
    return tool.model_dump(mode="json")
