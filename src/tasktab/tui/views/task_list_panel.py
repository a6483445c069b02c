"""Task list panel renderer.

This module provides the render_task_list_panel function that displays the
active list's (filtered) tasks, or the archive when the Finished tab is
active.
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...core.projection import RenderTree
from ..tui_utils import get_priority_badge, get_theme_styles, truncate_text

MAX_TITLE_LEN = 60


def _due_style(css_class: str) -> str:
    if css_class == "overdue":
        return "bold red"
    if css_class == "today":
        return "bold yellow"
    return "cyan"


def _render_tasks(tree: RenderTree) -> Table:
    table = Table(
        show_header=True,
        header_style="bold cyan",
        border_style="blue",
        padding=(0, 1),
        expand=True,
    )
    table.add_column("#", style="yellow", no_wrap=True, width=4)
    table.add_column("", no_wrap=True, width=3)
    table.add_column("Priority", no_wrap=True, width=8)
    table.add_column("Task")
    table.add_column("Due", no_wrap=True)

    for position, row in enumerate(tree.task_rows, start=1):
        label, color = get_priority_badge(row.priority)
        due = ""
        if row.due:
            style = _due_style(row.due.css_class)
            due = f"[{style}]{row.due.text}[/{style}]"
        text = escape(truncate_text(row.text, MAX_TITLE_LEN))
        if row.editing:
            text = f"[reverse]{text}[/reverse] [dim](editing)[/dim]"
        table.add_row(str(position), "[ ]", f"[{color}]{label}[/{color}]", text, due)

    if not tree.task_rows:
        if tree.search_query.strip():
            table.add_row("", "", "", "[dim italic]No tasks match the search[/dim italic]", "")
        else:
            table.add_row("", "", "", "[dim italic]No tasks yet[/dim italic]", "")
    return table


def _render_finished(tree: RenderTree) -> Table:
    table = Table(
        show_header=True,
        header_style="bold cyan",
        border_style="blue",
        padding=(0, 1),
        expand=True,
    )
    table.add_column("#", style="yellow", no_wrap=True, width=4)
    table.add_column("Task")
    table.add_column("List", style="dim", no_wrap=True)

    for row in tree.finished_rows:
        table.add_row(
            str(row.index + 1),
            f"[green]✓[/green] {escape(truncate_text(row.text, MAX_TITLE_LEN))}",
            escape(row.origin_label),
        )
    if not tree.finished_rows:
        table.add_row("", "[dim italic]Nothing finished yet[/dim italic]", "")
    return table


def render_task_list_panel(tree: RenderTree) -> Panel:
    """Build Rich Panel displaying the body of the active tab.

    Args:
        tree: Projected render tree

    Returns:
        Rich Panel component with the task or archive table
    """
    text_style, border_style = get_theme_styles(tree.theme)

    if tree.inputs_visible:
        body = _render_tasks(tree)
        shown = len(tree.task_rows)
        count = f"[dim]({shown}/{tree.total_tasks})[/dim]"
        hints = "[dim](done N · edit N · rm N)[/dim]"
        if tree.search_query.strip():
            hints = f"[dim]search: {escape(repr(tree.search_query))}[/dim] {hints}"
    else:
        body = _render_finished(tree)
        count = f"[dim]({tree.finished_count})[/dim]"
        hints = "[dim](restore N)[/dim]"

    title = f"[bold]{escape(tree.title)}[/bold] {count} {hints}"
    return Panel(
        body,
        title=title,
        border_style=border_style,
        style=text_style,
        padding=(1, 2),
    )
