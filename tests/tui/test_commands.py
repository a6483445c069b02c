"""Unit tests for CommandHandler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from tasktab.core.engine import StateEngine
from tasktab.core.models import Priority, Theme
from tasktab.tui.commands import CommandHandler


@pytest.fixture
def confirm() -> AsyncMock:
    """Confirmation prompt that answers yes."""
    return AsyncMock(return_value=True)


@pytest.fixture
def handler(engine: StateEngine, confirm: AsyncMock) -> CommandHandler:
    return CommandHandler(engine, confirm)


def run(handler: CommandHandler, line: str) -> tuple[bool, str | None]:
    return asyncio.run(handler.handle(line))


def _texts(handler: CommandHandler, list_name: str = "To-Do") -> list[str]:
    return [t.text for t in handler.engine.state.lists[list_name]]


@pytest.fixture
def filled(handler: CommandHandler) -> CommandHandler:
    for line in ("add Buy cat food", "add Call mom", "add Walk dog"):
        run(handler, line)
    return handler


class TestTaskCommands:
    """Tests for task commands."""

    def test_add_plain(self, handler: CommandHandler) -> None:
        handled, message = run(handler, "add Buy milk")

        assert handled is True
        assert message is None
        assert _texts(handler) == ["Buy milk"]

    def test_add_with_markers(self, handler: CommandHandler) -> None:
        run(handler, "add Report !high @2024-06-20 for Q2")

        task = handler.engine.state.lists["To-Do"][0]
        assert task.text == "Report for Q2"
        assert task.priority == Priority.HIGH
        assert task.due_date == "2024-06-20"

    def test_add_empty_is_an_error(self, handler: CommandHandler) -> None:
        handled, message = run(handler, "add !low")

        assert handled is True
        assert message.startswith("Error:")
        assert _texts(handler) == []

    def test_add_bad_date_is_an_error(self, handler: CommandHandler) -> None:
        _, message = run(handler, "add Thing @tomorrow")

        assert message.startswith("Error:")
        assert _texts(handler) == []

    def test_add_in_finished_view(self, handler: CommandHandler) -> None:
        run(handler, "finished")

        _, message = run(handler, "add Nope")

        assert message.startswith("Error:")

    def test_done_maps_filtered_row_to_task(self, filled: CommandHandler) -> None:
        """Row numbers refer to the displayed (filtered) list."""
        run(filled, "search walk")

        run(filled, "done 1")

        assert _texts(filled) == ["Buy cat food", "Call mom"]
        assert filled.engine.state.finished[0].task.text == "Walk dog"

    def test_rm(self, filled: CommandHandler) -> None:
        run(filled, "rm 2")

        assert _texts(filled) == ["Buy cat food", "Walk dog"]

    @pytest.mark.parametrize("line", ["done", "done 0", "done 9", "rm x"])
    def test_bad_row_numbers(self, filled: CommandHandler, line: str) -> None:
        _, message = run(filled, line)

        assert message.startswith("Error:")
        assert len(_texts(filled)) == 3

    def test_edit_and_save(self, filled: CommandHandler) -> None:
        run(filled, "add Report !high @2024-06-20")

        run(filled, "edit 4")
        assert filled.engine.view.editing is not None
        run(filled, "save Final report")

        task = filled.engine.state.lists["To-Do"][3]
        assert task.text == "Final report"
        assert task.priority == Priority.HIGH
        assert task.due_date == "2024-06-20"
        assert filled.engine.view.editing is None

    def test_save_can_clear_date(self, handler: CommandHandler) -> None:
        run(handler, "add Report @2024-06-20")
        run(handler, "edit 1")

        run(handler, "save Report @none !low")

        task = handler.engine.state.lists["To-Do"][0]
        assert task.due_date is None
        assert task.priority == Priority.LOW

    def test_save_empty_text_closes_editor(self, filled: CommandHandler) -> None:
        run(filled, "edit 1")

        _, message = run(filled, "save")

        assert message.startswith("Error:")
        assert filled.engine.view.editing is None
        assert _texts(filled)[0] == "Buy cat food"

    def test_save_without_edit(self, handler: CommandHandler) -> None:
        _, message = run(handler, "save Something")

        assert message == "Error: Nothing is being edited"

    def test_cancel(self, filled: CommandHandler) -> None:
        run(filled, "edit 2")

        run(filled, "cancel")

        assert filled.engine.view.editing is None

    def test_restore(self, filled: CommandHandler) -> None:
        run(filled, "done 1")

        _, message = run(filled, "restore 1")

        assert message == "Restored to To-Do"
        assert _texts(filled) == ["Call mom", "Walk dog", "Buy cat food"]

    def test_search_without_text_clears(self, filled: CommandHandler) -> None:
        run(filled, "search cat")
        run(filled, "search")

        assert filled.engine.view.search_query == ""


class TestListCommands:
    """Tests for list commands."""

    def test_new_list_with_spaces(self, handler: CommandHandler) -> None:
        run(handler, "list new Weekend plans")

        assert handler.engine.state.active_list == "Weekend plans"

    def test_duplicate_list(self, handler: CommandHandler) -> None:
        _, message = run(handler, "list new To-Do")

        assert message == "Error: A list with this name already exists."

    def test_switch_list(self, handler: CommandHandler) -> None:
        run(handler, "list new Work")

        run(handler, "list To-Do")

        assert handler.engine.state.active_list == "To-Do"

    def test_switch_to_unknown_list(self, handler: CommandHandler) -> None:
        _, message = run(handler, "list Nowhere")

        assert message.startswith("Error:")

    def test_delete_asks_first(self, handler: CommandHandler, confirm: AsyncMock) -> None:
        run(handler, "list new Work")

        _, message = run(handler, "list rm Work")

        confirm.assert_awaited_once()
        assert "Work" in confirm.call_args.args[0]
        assert "Work" not in handler.engine.state.lists
        assert message == "Deleted list Work"

    def test_delete_declined(self, handler: CommandHandler, confirm: AsyncMock) -> None:
        confirm.return_value = False
        run(handler, "list new Work")

        _, message = run(handler, "list rm Work")

        assert "Work" in handler.engine.state.lists
        assert message == "Delete cancelled"

    def test_finished(self, handler: CommandHandler) -> None:
        run(handler, "finished")

        assert handler.engine.state.active_list == "Finished"


class TestAppearanceCommands:
    """Tests for background and theme commands."""

    def test_bg_toggles_chooser(self, handler: CommandHandler) -> None:
        run(handler, "bg")
        assert handler.backgrounds_visible is True
        run(handler, "bg")
        assert handler.backgrounds_visible is False

    def test_bg_select(self, handler: CommandHandler) -> None:
        run(handler, "bg 3")

        assert handler.engine.state.background_image_index == 2
        assert handler.engine.state.current_theme == Theme.SKYBLUE

    def test_bg_select_out_of_range(self, handler: CommandHandler) -> None:
        _, message = run(handler, "bg 99")

        assert message == "Error: No background #99"

    def test_bg_add(self, handler: CommandHandler) -> None:
        _, message = run(handler, "bg add https://images.unsplash.com/photo-new")

        assert message == "Background added"
        assert len(handler.engine.state.custom_backgrounds) == 1

    def test_bg_add_untrusted(self, handler: CommandHandler) -> None:
        _, message = run(handler, "bg add https://example.com/cat.png")

        assert message.startswith("Error: Invalid URL")

    def test_bg_rm_default(self, handler: CommandHandler) -> None:
        _, message = run(handler, "bg rm 1")

        assert message == "Error: Default backgrounds cannot be deleted"

    def test_bg_rm_custom(self, handler: CommandHandler) -> None:
        run(handler, "bg add https://images.unsplash.com/photo-new")
        position = len(handler.engine.catalog)

        run(handler, f"bg rm {position}")

        assert handler.engine.state.custom_backgrounds == []

    def test_color(self, handler: CommandHandler) -> None:
        run(handler, "color 2")

        assert handler.engine.view.background_color == "#2c3e50"
        assert handler.engine.state.current_theme == Theme.WHITE

    def test_color_out_of_range(self, handler: CommandHandler) -> None:
        _, message = run(handler, "color 42")

        assert message.startswith("Error: Usage: color N")

    def test_theme_cycle(self, handler: CommandHandler) -> None:
        _, message = run(handler, "theme")

        assert handler.engine.state.current_theme == Theme.BLACK
        assert handler.engine.state.theme_locked is True
        assert message == "Theme theme-black (locked)"

    @pytest.mark.parametrize("name", ["sepia", "theme-sepia", "SEPIA"])
    def test_theme_by_name(self, handler: CommandHandler, name: str) -> None:
        run(handler, f"theme {name}")

        assert handler.engine.state.current_theme == Theme.SEPIA

    def test_unknown_theme(self, handler: CommandHandler) -> None:
        _, message = run(handler, "theme neon")

        assert message.startswith("Error: Unknown theme")

    def test_lock_toggle(self, handler: CommandHandler) -> None:
        _, message = run(handler, "lock")

        assert handler.engine.state.theme_locked is True
        assert message == "Theme is locked"


class TestMetaCommands:
    """Tests for help, quit and unknown input."""

    def test_empty_line(self, handler: CommandHandler) -> None:
        assert run(handler, "   ") == (True, None)

    def test_help_toggles(self, handler: CommandHandler) -> None:
        run(handler, "help")

        assert handler.help_visible is True

    @pytest.mark.parametrize("line", ["quit", "exit", "q"])
    def test_quit(self, handler: CommandHandler, line: str) -> None:
        assert run(handler, line) == (True, "quit")

    def test_unknown_command(self, handler: CommandHandler) -> None:
        handled, message = run(handler, "frobnicate")

        assert handled is False
        assert message.startswith("Error: Unknown command")
