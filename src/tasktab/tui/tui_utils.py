"""TUI utility functions for formatting and display helpers."""

import shutil

from ..core.models import Priority, Theme

THEME_STYLES: dict[Theme, tuple[str, str]] = {
    Theme.WHITE: ("bright_white", "grey50"),
    Theme.BLACK: ("black on grey93", "grey30"),
    Theme.SKYBLUE: ("sky_blue1", "deep_sky_blue3"),
    Theme.SEPIA: ("wheat1", "tan"),
}


def truncate_text(text: str, max_len: int) -> str:
    """
    Truncate text to max length, adding ellipsis if needed.

    Args:
        text: Text to truncate
        max_len: Maximum length including ellipsis

    Returns:
        Truncated text with "..." suffix if text exceeds max_len

    Examples:
        >>> truncate_text("short", 10)
        'short'
        >>> truncate_text("this is a long text", 10)
        'this is...'
    """
    if len(text) <= max_len:
        return text

    if max_len <= 3:
        return "..."[:max_len]

    return text[: max_len - 3] + "..."


def get_terminal_size() -> tuple[int, int]:
    """
    Get terminal size as (columns, rows) tuple.

    Returns:
        Tuple of (columns, rows), defaults to (80, 24) if unavailable
    """
    try:
        size = shutil.get_terminal_size(fallback=(80, 24))
        return (size.columns, size.lines)
    except (OSError, ValueError):
        return (80, 24)


def get_priority_badge(priority: Priority) -> tuple[str, str]:
    """
    Get label and color for a task priority.

    Examples:
        >>> get_priority_badge(Priority.HIGH)
        ('high', 'red')
    """
    badge_map = {
        Priority.HIGH: ("high", "red"),
        Priority.MEDIUM: ("medium", "yellow"),
        Priority.LOW: ("low", "green"),
    }

    return badge_map.get(priority, (str(priority), "white"))


def get_theme_styles(theme: Theme) -> tuple[str, str]:
    """Return (text style, border style) for a theme."""
    return THEME_STYLES.get(theme, ("white", "blue"))


def theme_display_name(theme: Theme) -> str:
    """
    Examples:
        >>> theme_display_name(Theme.SKYBLUE)
        'skyblue'
    """
    return theme.value.removeprefix("theme-")
