"""Background chooser renderer.

This module provides the render_background_panel function that lists the
background catalog (default images first, then custom ones), the add-image
and custom-color affordances, and the color palette.
"""

from __future__ import annotations

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ...core.projection import RenderTree
from ..tui_utils import theme_display_name, truncate_text


def render_background_panel(tree: RenderTree, url_width: int = 60) -> Panel:
    """Build Rich Panel displaying the background chooser grid.

    Args:
        tree: Projected render tree
        url_width: Maximum characters of each URL to show

    Returns:
        Rich Panel component with the chooser table
    """
    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="blue",
        padding=(0, 1),
        expand=True,
    )
    table.add_column("#", style="yellow", no_wrap=True, width=4)
    table.add_column("Image")
    table.add_column("Theme", no_wrap=True)
    table.add_column("", no_wrap=True)

    for tile in tree.chooser:
        if tile.kind == "image":
            marker = "[bold green]●[/bold green]" if tile.active else ""
            theme = theme_display_name(tile.theme) if tile.theme else "[dim]auto[/dim]"
            action = "[red]bg rm[/red]" if tile.deletable else "[dim]default[/dim]"
            table.add_row(
                f"{tile.index + 1}",
                f"{marker} {escape(truncate_text(tile.url or '', url_width))}",
                theme,
                action,
            )
        elif tile.kind == "add-image":
            table.add_row("+", "[cyan]Add image (bg add <url>)[/cyan]", "", "")
        elif tile.kind == "custom-color":
            table.add_row("", "[cyan]Custom solid colors (color N)[/cyan]", "", "")

    palette = Text("Palette: ", style="bold")
    for position, color in enumerate(tree.palette, start=1):
        palette.append(f" {position} ")
        palette.append("  ", style=f"on {color}")

    if tree.background.color:
        current = Text(f"Current: solid {tree.background.color}", style="dim")
    else:
        current = Text(
            f"Current: {truncate_text(tree.background.image_url or 'none', url_width)}",
            style="dim",
        )

    return Panel(
        Group(table, Text(""), palette, current),
        title="[bold white]Backgrounds[/bold white]",
        border_style="blue",
        padding=(1, 2),
    )
