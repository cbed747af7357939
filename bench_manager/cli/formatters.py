"""Rich formatters for bench CLI output.

Provides formatted, colored tables and panels for CLI commands using the
Rich library.
"""

from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.assembly import AssembledBench, BenchInfo, FocusPlan, LayoutDiff, ToolStatus
from ..models.tool import ToolDefinition


# Global console instance
console = Console()


def _relative_time(moment: Optional[datetime]) -> str:
    if moment is None:
        return "never"
    time_diff = datetime.now() - moment.replace(tzinfo=None)
    if time_diff.days > 0:
        return f"{time_diff.days}d ago"
    if time_diff.seconds // 3600 > 0:
        return f"{time_diff.seconds // 3600}h ago"
    return f"{time_diff.seconds // 60}m ago"


def format_tool_statuses(statuses: List[ToolStatus], title: str = "Tools") -> Table:
    """Format per-tool statuses as a Rich table.

    A '*' in the first column marks tools launched by this command.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("", width=1, style="bold yellow")
    table.add_column("Tool", style="bold green")
    table.add_column("Bay", style="blue")
    table.add_column("Window", justify="right", style="dim")
    table.add_column("Workspace", style="magenta")

    for status in statuses:
        table.add_row(
            "*" if status.launched else "",
            status.name,
            status.bay,
            status.window_id or "[red]<missing>[/red]",
            status.workspace or "[dim]<unplaced>[/dim]",
        )

    return table


def format_bay_windows(assembled: AssembledBench, title: str = "Tracked bays") -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("Bay", style="blue")
    table.add_column("Windows", style="white")

    for bay, window_ids in assembled.bay_windows.items():
        table.add_row(bay, ", ".join(window_ids) or "[dim]-[/dim]")

    return table


def format_name_list(names: List[str], title: str, active: Optional[str] = None) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Name", style="bold green")
    for name in names:
        marker = " [cyan](active)[/cyan]" if name == active else ""
        table.add_row(f"{name}{marker}")
    return table


def format_tool_details(tool: ToolDefinition) -> Panel:
    lines = [
        f"[bold cyan]Name:[/bold cyan] {tool.name}",
        f"[bold cyan]Kind:[/bold cyan] {tool.kind.value}",
    ]
    state = tool.launch_state().model_dump()
    for key, value in state.items():
        lines.append(f"[bold cyan]{key}:[/bold cyan] {value if value not in (None, []) else '[dim]-[/dim]'}")
    return Panel("\n".join(lines), title=f"Tool: {tool.name}", border_style="cyan")


def format_bench_info(info: BenchInfo) -> Panel:
    """Format a bench's live status as a Rich panel.

    Args:
        info: Result of BenchManager.info()

    Returns:
        Rich Panel object ready for display
    """
    lines = []

    active = "[green]yes[/green]" if info.active else "[dim]no[/dim]"
    assembled = "[green]yes[/green]" if info.assembled else "[yellow]no[/yellow]"
    lines.append(f"[bold cyan]Active:[/bold cyan] {active}")
    lines.append(f"[bold cyan]Assembled:[/bold cyan] {assembled}")
    lines.append(f"[bold cyan]Bays:[/bold cyan] {', '.join(info.bench.bay_names()) or '-'}")

    lines.append("")
    lines.append(f"[bold cyan]Tools ({len(info.statuses)}):[/bold cyan]")
    for status in info.statuses:
        window = status.window_id or "<missing>"
        workspace = status.workspace or "<unplaced>"
        lines.append(f"  • {status.name} @ {status.bay} → window {window} (workspace {workspace})")

    if info.saved_layout is not None:
        lines.append("")
        lines.append("[bold cyan]Saved layout:[/bold cyan]")
        for bay, window_ids in info.saved_layout.bay_windows.items():
            lines.append(f"  {bay}: {len(window_ids)} window(s)")

    lines.append("")
    lines.append(f"[bold cyan]Visible windows:[/bold cyan] {len(info.current_windows)}")
    lines.append("")
    lines.append(f"[dim]Last focused: {_relative_time(info.bench.last_focused_at)}[/dim]")

    return Panel("\n".join(lines), title=f"Bench: {info.bench.name}", border_style="cyan")


def format_focus_plan(plan: FocusPlan) -> Panel:
    lines = ["[bold cyan]Tools:[/bold cyan]"]
    for name, window_id in plan.tracked:
        lines.append(f"  [green]✓[/green] {name} (window {window_id}) - already assembled")
    for name in plan.to_assemble:
        lines.append(f"  [yellow]✗[/yellow] {name} - will be assembled")

    lines.append("")
    lines.append("[bold cyan]Windows to stow:[/bold cyan]")
    if not plan.to_stow:
        lines.append("  [dim](none)[/dim]")
    for window in plan.to_stow:
        lines.append(f"  → Window {window.id} from workspace {window.workspace or '<unknown>'}")

    lines.append("")
    lines.append("[bold cyan]Bench window placement:[/bold cyan]")
    if not plan.saved_bays:
        lines.append("  [dim](no saved layout - windows will be placed in their bay workspaces)[/dim]")
    for bay, count in plan.saved_bays.items():
        lines.append(f"  Bay '{bay}': {count} window(s)")

    return Panel("\n".join(lines), title=f"Plan: focus {plan.bench}", border_style="yellow")


def format_layout_diff(diff: LayoutDiff) -> Table:
    table = Table(title=f"Layout changes: {diff.bench}", show_header=True, header_style="bold cyan")
    table.add_column("", width=1)
    table.add_column("Workspace", style="blue")
    table.add_column("Window", justify="right")

    for workspace, window_id in diff.added_windows:
        table.add_row("[green]+[/green]", workspace, window_id)
    for workspace, window_id in diff.removed_windows:
        table.add_row("[red]-[/red]", workspace, window_id)

    return table
