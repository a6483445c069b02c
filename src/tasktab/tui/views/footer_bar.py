"""Footer bar renderer for status indicators.

This module provides the render_footer_bar function that displays
a status bar with task counts, error messages, and help hints.
"""

from __future__ import annotations

from rich.text import Text

from ..tui_utils import truncate_text


def render_footer_bar(
    open_task_count: int,
    finished_count: int,
    error_message: str | None = None,
    terminal_width: int = 80,
) -> Text:
    """Build Rich Text displaying footer status bar.

    Args:
        open_task_count: Number of tasks in the active list
        finished_count: Number of archived tasks
        error_message: Current error message to display, if any
        terminal_width: Terminal width for truncation calculations

    Returns:
        Rich Text component ready for rendering
    """
    parts = []

    task_text = "1 task" if open_task_count == 1 else f"{open_task_count} tasks"
    parts.append((f"{task_text} · {finished_count} finished", "green" if open_task_count else "dim"))

    # Error message (truncated if needed)
    if error_message:
        # Format: "[counts] | [error] | Type help for commands"
        help_hint = " | Type help for commands"
        counts_part = parts[0][0] + " | "
        available_width = terminal_width - len(counts_part) - len(help_hint)

        if available_width > 10:  # Minimum space for meaningful error
            parts.append((" | ", "dim"))
            parts.append((truncate_text(error_message, available_width), "red"))

    parts.append((" | ", "dim"))
    parts.append(("Type help for commands", "cyan"))

    footer = Text()
    for text, style in parts:
        footer.append(text, style=style)

    return footer
