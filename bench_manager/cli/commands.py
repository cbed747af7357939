"""CLI command handlers for bench.

Each handler receives the parsed arguments, a BenchManager and an
OutputFormatter, and returns an exit code. run_command() owns the manager's
lifetime and turns every BenchError into exit code 1 with a message naming
the bench, tool or bay concerned.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

import argcomplete

from .. import __version__
from ..core.bench import BenchManager
from ..core.config import BenchConfig
from ..core.errors import (
    BenchError,
    ConflictError,
    InvalidNameError,
    LaunchError,
    LaunchTimeoutError,
    NotFoundError,
    ParseError,
    SwayCommandError,
    SwayConnectionError,
)
from ..models.assembly import BenchReport
from ..models.tool import ToolKind
from .completers import (
    complete_bay_names,
    complete_bench_names,
    complete_tool_kinds,
    complete_tool_names,
)
from .formatters import (
    console,
    format_bay_windows,
    format_bench_info,
    format_focus_plan,
    format_layout_diff,
    format_name_list,
    format_tool_details,
    format_tool_statuses,
)
from .logging_config import log_timing, setup_logging
from .output import (
    OutputFormatter,
    format_diff_json,
    format_info_json,
    format_plan_json,
    format_report_json,
    format_statuses_json,
    format_tool_json,
)

logger = logging.getLogger("bench.cli")

Handler = Callable[[argparse.Namespace, BenchManager, OutputFormatter], Awaitable[int]]

# Checked in order; first isinstance match wins
REMEDIATIONS = [
    (SwayConnectionError, "Check that sway is running and $SWAYSOCK points at its socket"),
    (SwayCommandError, "Run with --debug to see the IPC commands sent to sway"),
    (LaunchTimeoutError, "Check that the application starts, or raise launch_timeout in config.json"),
    (LaunchError, "Check that the application is installed and on $PATH"),
    (NotFoundError, "Use 'bench list' and 'bench tools' to see what is declared"),
    (ConflictError, "Pick another name, or use 'bench info' to inspect the existing one"),
    (InvalidNameError, "Names must be non-empty and not blank"),
    (ParseError, "Fix or delete the malformed file named above"),
]


def remediation_for(error: BenchError) -> Optional[str]:
    for error_type, remediation in REMEDIATIONS:
        if isinstance(error, error_type):
            return remediation
    return None


def _print_report(report: BenchReport, fmt: OutputFormatter, message: str) -> None:
    if fmt.json_mode:
        fmt.set_result(status="success", **format_report_json(report))
        return
    console.print(format_bay_windows(report.assembled))
    console.print(format_tool_statuses(report.statuses))
    fmt.print_success(message)


# ============================================================================
# Declarations
# ============================================================================


async def cmd_create(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    bench = await manager.create_bench(args.bench)
    fmt.set_result(bench=bench.name)
    fmt.print_success(f"Created bench '{bench.name}'")
    fmt.print_info(f"Add tools with: bench bay add {bench.name} <bay> <tool>")
    return 0


async def cmd_list(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    names = await manager.list_benches()
    active = await manager.active_bench()
    if fmt.json_mode:
        fmt.set_result(total=len(names), active=active, benches=names)
    elif not names:
        fmt.print_info("No benches yet. Create one with: bench create <name>")
    else:
        console.print(format_name_list(names, "Benches", active=active))
    return 0


async def cmd_tools(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    names = await manager.list_tools()
    if fmt.json_mode:
        fmt.set_result(total=len(names), tools=names)
    elif not names:
        fmt.print_info("No tools yet. Create one with: bench craft-tool <kind> <name>")
    else:
        console.print(format_name_list(names, "Tools"))
    return 0


async def cmd_bay(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    if args.bay_command == "add":
        bench = await manager.add_tool_to_bay(args.bench, args.bay, args.tool)
        fmt.set_result(bench=bench.name, bays=[bay.model_dump() for bay in bench.bays])
        fmt.print_success(f"Added tool '{args.tool}' to bay '{args.bay}' of bench '{bench.name}'")
    elif args.bay_command == "rename":
        bench = await manager.rename_bay(args.bench, args.old, args.new)
        fmt.set_result(bench=bench.name, bays=bench.bay_names())
        fmt.print_success(f"Renamed bay '{args.old}' to '{args.new}' in bench '{bench.name}'")
    else:
        fmt.print_error("Missing bay subcommand (add, rename)")
        return 1
    return 0


async def cmd_craft_tool(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    tool = await manager.craft_tool(ToolKind(args.kind), args.name)
    if fmt.json_mode:
        fmt.set_result(status="success", tool=format_tool_json(tool))
        return 0
    console.print(format_tool_details(tool))
    fmt.print_success(f"Wrote tool definition '{tool.name}' ({tool.kind.value})")
    return 0


# ============================================================================
# Reconciliation
# ============================================================================


async def cmd_assemble(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    report = await manager.assemble(args.bench)
    _print_report(report, fmt, f"Assembled bench '{report.bench.name}'")
    return 0


async def cmd_stow(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    report = await manager.stow(args.bench)
    _print_report(report, fmt, f"Stowed bench '{report.bench.name}'")
    return 0


async def cmd_focus(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    if args.dry_run:
        plan = await manager.focus_plan(args.bench)
        if fmt.json_mode:
            fmt.set_result(**format_plan_json(plan))
        else:
            console.print(format_focus_plan(plan))
        return 0

    report = await manager.focus(args.bench, stow_others=not args.no_stow)
    _print_report(report, fmt, f"Focused bench '{report.bench.name}'")
    return 0


async def cmd_assemble_tool(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    status = await manager.assemble_tool(args.tool, bay=args.bay)
    if fmt.json_mode:
        fmt.set_result(status="success", tool=format_statuses_json([status])[0])
        return 0
    console.print(format_tool_statuses([status], title="Tool"))
    verb = "Launched" if status.launched else "Found"
    fmt.print_success(f"{verb} tool '{status.name}' in window {status.window_id}")
    return 0


# ============================================================================
# Sync & status
# ============================================================================


async def cmd_sync_layout(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    diff = await manager.sync_layout()
    if fmt.json_mode:
        fmt.set_result(status="success", **format_diff_json(diff))
        return 0
    if not diff.is_empty:
        console.print(format_layout_diff(diff))
    fmt.print_success(f"Synced layout for bench '{diff.bench}'")
    return 0


async def cmd_sync_tool_state(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    updated = await manager.sync_tool_state()
    fmt.set_result(tools=[tool.name for tool in updated])
    fmt.print_success(f"Synced tool state ({len(updated)} browser tool(s) updated)")
    return 0


async def cmd_info(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    info = await manager.info(args.bench)
    if fmt.json_mode:
        fmt.set_result(**format_info_json(info))
    else:
        console.print(format_bench_info(info))
    return 0


async def cmd_active(args: argparse.Namespace, manager: BenchManager, fmt: OutputFormatter) -> int:
    if args.clear:
        await manager.clear_active_bench()
        fmt.set_result(active=None)
        fmt.print_success("Cleared active bench")
        return 0

    active = await manager.active_bench()
    if fmt.json_mode:
        fmt.set_result(active=active)
    else:
        print(active if active else "<no active bench>")
    return 0


COMMAND_HANDLERS = {
    "create": cmd_create,
    "list": cmd_list,
    "tools": cmd_tools,
    "bay": cmd_bay,
    "craft-tool": cmd_craft_tool,
    "assemble": cmd_assemble,
    "stow": cmd_stow,
    "focus": cmd_focus,
    "assemble-tool": cmd_assemble_tool,
    "sync-layout": cmd_sync_layout,
    "sync-tool-state": cmd_sync_tool_state,
    "info": cmd_info,
    "active": cmd_active,
}


async def run_command(handler: Handler, args: argparse.Namespace) -> int:
    """Run one handler with a fresh BenchManager and map errors to exit codes."""
    fmt = OutputFormatter(json_mode=getattr(args, "json", False))
    manager = None
    try:
        config = BenchConfig.load(args.config)
        manager = BenchManager(config)
        with log_timing(args.command, logger):
            code = await handler(args, manager, fmt)
    except BenchError as e:
        logger.debug(f"{args.command} failed: {e!r}")
        fmt.print_error(str(e), remediation_for(e))
        code = 1
    finally:
        if manager is not None:
            await manager.close()
    fmt.output()
    return code


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bench",
        description="Bench - named sets of tool windows across sway workspaces",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"bench {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: $BENCH_CONFIG or ~/.config/bench/config.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (INFO level)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level, includes verbose)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # bench create <bench>
    parser_create = subparsers.add_parser("create", help="Create an empty bench")
    parser_create.add_argument("bench", help="Bench name")
    _add_json_flag(parser_create)

    # bench list
    parser_list = subparsers.add_parser("list", help="List benches")
    _add_json_flag(parser_list)

    # bench tools
    parser_tools = subparsers.add_parser("tools", help="List tool definitions")
    _add_json_flag(parser_tools)

    # bench bay add|rename
    parser_bay = subparsers.add_parser("bay", help="Manage the bays of a bench")
    bay_subparsers = parser_bay.add_subparsers(dest="bay_command", help="Bay commands")

    parser_bay_add = bay_subparsers.add_parser("add", help="Add a tool to a bay (creates the bay)")
    parser_bay_add.add_argument("bench", help="Bench name").completer = complete_bench_names
    parser_bay_add.add_argument("bay", help="Bay (workspace) name").completer = complete_bay_names
    parser_bay_add.add_argument("tool", help="Tool name").completer = complete_tool_names
    _add_json_flag(parser_bay_add)

    parser_bay_rename = bay_subparsers.add_parser("rename", help="Rename a bay and its workspace")
    parser_bay_rename.add_argument("bench", help="Bench name").completer = complete_bench_names
    parser_bay_rename.add_argument("old", help="Current bay name").completer = complete_bay_names
    parser_bay_rename.add_argument("new", help="New bay name")
    _add_json_flag(parser_bay_rename)

    # bench craft-tool <kind> <name>
    parser_craft = subparsers.add_parser("craft-tool", help="Create a tool definition")
    parser_craft.add_argument(
        "kind",
        choices=[kind.value for kind in ToolKind],
        help="Tool kind"
    ).completer = complete_tool_kinds
    parser_craft.add_argument("name", help="Tool name")
    _add_json_flag(parser_craft)

    # bench assemble|stow|info <bench>
    for name, help_text in (
        ("assemble", "Resolve or launch every tool of a bench"),
        ("stow", "Move a bench's windows to the holding area"),
        ("info", "Show a bench's tools against live windows"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("bench", help="Bench name").completer = complete_bench_names
        _add_json_flag(sub)

    # bench focus <bench>
    parser_focus = subparsers.add_parser(
        "focus",
        help="Switch to a bench",
        description="Save the active bench's layout, assemble this bench, show its bays "
                    "and stow every other window"
    )
    parser_focus.add_argument("bench", help="Bench name").completer = complete_bench_names
    parser_focus.add_argument(
        "--no-stow",
        action="store_true",
        help="Leave windows outside the bench where they are"
    )
    parser_focus.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would happen without changing anything"
    )
    _add_json_flag(parser_focus)

    # bench assemble-tool <tool> [--bay NAME]
    parser_assemble_tool = subparsers.add_parser("assemble-tool", help="Resolve or launch one tool")
    parser_assemble_tool.add_argument("tool", help="Tool name").completer = complete_tool_names
    parser_assemble_tool.add_argument(
        "--bay",
        default=None,
        help="Workspace to place the window on (default: focused workspace)"
    )
    _add_json_flag(parser_assemble_tool)

    # bench sync-layout / sync-tool-state
    parser_sync_layout = subparsers.add_parser(
        "sync-layout", help="Save the live layout as the active bench's snapshot"
    )
    _add_json_flag(parser_sync_layout)

    parser_sync_tools = subparsers.add_parser(
        "sync-tool-state", help="Save open browser tabs into browser tools"
    )
    _add_json_flag(parser_sync_tools)

    # bench active [--clear]
    parser_active = subparsers.add_parser("active", help="Show or clear the active bench")
    parser_active.add_argument("--clear", action="store_true", help="Clear the active bench")
    _add_json_flag(parser_active)

    return parser


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, debug=args.debug)

    if not args.command:
        parser.print_help()
        return 0

    handler = COMMAND_HANDLERS[args.command]
    return asyncio.run(run_command(handler, args))


if __name__ == "__main__":
    sys.exit(cli_main())
