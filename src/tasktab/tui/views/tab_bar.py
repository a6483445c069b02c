"""Tab bar renderer for list selection.

This module provides the render_tab_bar function that displays one tab per
list, the trailing Finished tab, and the current theme / lock indicator.
"""

from __future__ import annotations

from rich.text import Text

from ...core.models import Theme
from ...core.projection import TabView
from ..tui_utils import theme_display_name


def render_tab_bar(tabs: list[TabView], theme: Theme, lock_label: str, locked: bool) -> Text:
    """Build Rich Text displaying the tab strip.

    Args:
        tabs: Tabs from the render tree, in display order
        theme: Current theme
        lock_label: Theme lock label from the render tree
        locked: Whether the theme is locked

    Returns:
        Rich Text component ready for rendering
    """
    bar = Text()
    for position, tab in enumerate(tabs):
        if position:
            bar.append(" ")
        if tab.active:
            bar.append(f"[ {tab.name} ]", style="bold reverse")
        elif tab.closable:
            bar.append(f"  {tab.name}  ", style="cyan")
        else:
            bar.append(f"  {tab.name}  ", style="dim")

    lock_icon = "🔒" if locked else "🔓"
    bar.append("   ")
    bar.append(f"theme: {theme_display_name(theme)} {lock_icon} {lock_label}", style="dim")
    return bar
