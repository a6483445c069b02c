"""Tests for footer bar rendering."""

from __future__ import annotations

from rich.text import Text

from tasktab.tui.views.footer_bar import render_footer_bar


class TestRenderFooterBar:
    """Tests for footer bar rendering."""

    def test_empty_list_no_error(self) -> None:
        """Render footer with no tasks and no error."""
        footer = render_footer_bar(open_task_count=0, finished_count=0)

        assert isinstance(footer, Text)
        text_str = footer.plain
        assert "0 tasks · 0 finished" in text_str
        assert "Type help for commands" in text_str

    def test_single_task_is_singular(self) -> None:
        footer = render_footer_bar(open_task_count=1, finished_count=3)

        assert "1 task · 3 finished" in footer.plain

    def test_multiple_tasks(self) -> None:
        footer = render_footer_bar(open_task_count=5, finished_count=0)

        assert "5 tasks" in footer.plain

    def test_with_error_message(self) -> None:
        """Render footer with an error message."""
        footer = render_footer_bar(
            open_task_count=2,
            finished_count=0,
            error_message="Error: Task text cannot be empty.",
        )

        text_str = footer.plain
        assert "Task text cannot be empty." in text_str
        assert "Type help for commands" in text_str

    def test_long_error_is_truncated(self) -> None:
        """Long error messages are truncated to fit the terminal width."""
        long_error = "Error: " + "x" * 200

        footer = render_footer_bar(
            open_task_count=0, finished_count=0, error_message=long_error, terminal_width=80
        )

        assert "..." in footer.plain
        assert len(footer.plain) <= 80

    def test_narrow_terminal_hides_error(self) -> None:
        """Too little room for a meaningful error drops it."""
        footer = render_footer_bar(
            open_task_count=0, finished_count=0, error_message="Error: boom", terminal_width=30
        )

        assert "boom" not in footer.plain
