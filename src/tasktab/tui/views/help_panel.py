"""Help panel renderer for the command reference.

This module provides the render_help_panel function that displays
a table of all available commands organized by category.
"""

from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table


def render_help_panel() -> Panel:
    """Build Rich Panel displaying the command reference table.

    Returns:
        Rich Panel component with categorized commands
    """
    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="blue",
        padding=(0, 1),
    )
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")

    # Tasks
    table.add_row("", "")
    table.add_row("[bold cyan]Tasks[/bold cyan]", "", style="bold")
    table.add_row(escape("add <text> [!high|!low] [@YYYY-MM-DD]"), "Add a task to the active list")
    table.add_row("edit N", "Open the inline editor for row N")
    table.add_row(escape("save <text> [!prio] [@date|@none]"), "Save the open edit")
    table.add_row("cancel", "Close the open edit")
    table.add_row("done N", "Complete row N (moves it to Finished)")
    table.add_row("rm N", "Delete row N")
    table.add_row("restore N", "Restore finished task N to its list")
    table.add_row(escape("search [text]"), "Filter the active list (no text clears)")

    # Lists
    table.add_row("", "")
    table.add_row("[bold green]Lists[/bold green]", "", style="bold")
    table.add_row("list <name>", "Switch to a list")
    table.add_row("list new <name>", "Create a list and switch to it")
    table.add_row("list rm <name>", "Delete a list and its tasks (asks first)")
    table.add_row("finished", "Show the Finished tab")

    # Appearance
    table.add_row("", "")
    table.add_row("[bold yellow]Appearance[/bold yellow]", "", style="bold")
    table.add_row("bg", "Show the background chooser")
    table.add_row("bg N", "Use background N")
    table.add_row("bg add <url>", "Add a custom background image")
    table.add_row("bg rm N", "Delete custom background N")
    table.add_row("color N", "Use palette color N as a solid background")
    table.add_row(escape("theme [name]"), "Cycle (or set) the theme; this locks it")
    table.add_row("lock", "Toggle automatic theme selection")

    # Meta
    table.add_row("", "")
    table.add_row("[bold magenta]Meta[/bold magenta]", "", style="bold")
    table.add_row("help", "Toggle this help panel")
    table.add_row("quit", "Save and exit")

    return Panel(
        table,
        title="[bold white]Commands[/bold white]",
        border_style="blue",
        padding=(1, 2),
    )
