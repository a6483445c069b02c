"""Command input handling for the terminal front end.

This module maps typed commands to state engine operations. Row numbers
typed by the user are positions in the displayed (possibly filtered) list;
they are translated to canonical task indices through each row's uid
before the engine is called.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..core.engine import KEEP
from ..core.exceptions import ValidationRejection
from ..core.models import FINISHED, Priority, Theme
from ..core.projection import TaskRow

if TYPE_CHECKING:
    from ..core.engine import StateEngine

logger = logging.getLogger(__name__)

PRIORITY_MARKERS = {"!" + p.value: p for p in Priority}
THEME_ALIASES = {t.value.removeprefix("theme-"): t for t in Theme}
NO_DATE = "@none"


def _parse_task_args(tokens: list[str]) -> tuple[str, Priority | None, str | None]:
    """Split task words from ``!priority`` and ``@date`` markers.

    Returns:
        Tuple of (text, priority or None, date marker or None); the date
        marker is the text after ``@`` ("" for ``@none``)
    """
    words: list[str] = []
    priority: Priority | None = None
    due: str | None = None
    for token in tokens:
        lower = token.lower()
        if lower in PRIORITY_MARKERS:
            priority = PRIORITY_MARKERS[lower]
        elif lower == NO_DATE:
            due = ""
        elif token.startswith("@") and len(token) > 1:
            due = token[1:]
        else:
            words.append(token)
    return " ".join(words), priority, due


def _parse_position(raw: str) -> int | None:
    raw = raw.rstrip(".")
    if not raw.isdigit() or int(raw) < 1:
        return None
    return int(raw)


class CommandHandler:
    """Handles typed commands and dispatches engine operations."""

    def __init__(
        self,
        engine: StateEngine,
        confirm: Callable[[str], Awaitable[bool]],
    ) -> None:
        """Initialize command handler.

        Args:
            engine: State engine receiving the operations
            confirm: Asks the user a yes/no question (used before deleting lists)
        """
        self.engine = engine
        self.confirm = confirm
        self.help_visible = False
        self.backgrounds_visible = False

    async def handle(self, line: str) -> tuple[bool, str | None]:
        """Process one command line.

        Args:
            line: Raw input line

        Returns:
            Tuple of (handled, message):
                - handled: True if the command was recognized
                - message: Optional feedback; "quit" ends the app, messages
                  starting with "Error:" are shown as errors
        """
        tokens = line.split()
        if not tokens:
            return True, None
        cmd, args = tokens[0].lower(), tokens[1:]

        try:
            if cmd == "add":
                return self._handle_add(args)
            if cmd == "edit":
                return self._handle_edit(args)
            if cmd == "save":
                return self._handle_save(args)
            if cmd == "cancel":
                self.engine.close_edit()
                return True, None
            if cmd == "done":
                return self._handle_row_action(args, "done")
            if cmd == "rm":
                return self._handle_row_action(args, "rm")
            if cmd == "restore":
                return self._handle_restore(args)
            if cmd == "search":
                self.engine.set_search_query(" ".join(args))
                return True, None
            if cmd == "list":
                return await self._handle_list(args)
            if cmd == "finished":
                self.engine.select_list(FINISHED)
                return True, None
            if cmd == "bg":
                return await self._handle_background(args)
            if cmd == "color":
                return self._handle_color(args)
            if cmd == "theme":
                return self._handle_theme(args)
            if cmd == "lock":
                self.engine.toggle_theme_lock()
                state = "locked" if self.engine.state.theme_locked else "automatic"
                return True, f"Theme is {state}"
            if cmd in ("help", "?"):
                self.help_visible = not self.help_visible
                return True, None
            if cmd in ("quit", "exit", "q"):
                return True, "quit"
        except ValidationRejection as err:
            logger.info(f"Rejected {cmd!r}: {err}")
            return True, f"Error: {err}"

        return False, f"Error: Unknown command '{cmd}'. Type help for commands"

    # Task handlers

    def _visible_rows(self) -> list[TaskRow]:
        return self.engine.render_tree().task_rows

    def _row_at(self, raw: str) -> TaskRow | None:
        position = _parse_position(raw)
        rows = self._visible_rows()
        if position is None or position > len(rows):
            return None
        return rows[position - 1]

    def _canonical_index(self, row: TaskRow) -> int | None:
        return self.engine.index_of(self.engine.state.active_list, row.uid)

    def _handle_add(self, args: list[str]) -> tuple[bool, str | None]:
        if self.engine.state.active_list == FINISHED:
            return True, "Error: Switch to a list before adding tasks"
        text, priority, due = _parse_task_args(args)
        self.engine.add_task(text, priority or Priority.MEDIUM, due or None)
        return True, None

    def _handle_edit(self, args: list[str]) -> tuple[bool, str | None]:
        if len(args) != 1:
            return True, "Error: Usage: edit N"
        row = self._row_at(args[0])
        if row is None:
            return True, f"Error: No task #{args[0]}"
        index = self._canonical_index(row)
        if index is not None:
            self.engine.begin_edit(self.engine.state.active_list, index)
        return True, "Editing: save <text> [!priority] [@date|@none], or cancel"

    def _handle_save(self, args: list[str]) -> tuple[bool, str | None]:
        target = self.engine.view.editing
        if target is None:
            return True, "Error: Nothing is being edited"
        text, priority, due = _parse_task_args(args)
        self.engine.edit_task(
            target.list_name,
            target.index,
            text,
            priority if priority is not None else KEEP,
            KEEP if due is None else (due or None),
        )
        return True, None

    def _handle_row_action(self, args: list[str], action: str) -> tuple[bool, str | None]:
        if len(args) != 1:
            return True, f"Error: Usage: {action} N"
        row = self._row_at(args[0])
        if row is None:
            return True, f"Error: No task #{args[0]}"
        index = self._canonical_index(row)
        if index is None:
            return True, f"Error: No task #{args[0]}"
        list_name = self.engine.state.active_list
        if action == "done":
            self.engine.complete_task(list_name, index)
        else:
            self.engine.delete_task(list_name, index)
        return True, None

    def _handle_restore(self, args: list[str]) -> tuple[bool, str | None]:
        position = _parse_position(args[0]) if len(args) == 1 else None
        if position is None or position > len(self.engine.state.finished):
            return True, "Error: Usage: restore N (see the Finished tab)"
        entry = self.engine.state.finished[position - 1]
        self.engine.restore_task(position - 1)
        return True, f"Restored to {entry.original_list}"

    # List handlers

    async def _handle_list(self, args: list[str]) -> tuple[bool, str | None]:
        if not args:
            return True, "Error: Usage: list <name> | list new <name> | list rm <name>"
        sub = args[0].lower()
        if sub == "new" and len(args) > 1:
            self.engine.create_list(" ".join(args[1:]))
            return True, None
        if sub == "rm" and len(args) > 1:
            name = " ".join(args[1:])
            if name not in self.engine.state.lists:
                return True, f"Error: No list named '{name}'"
            question = (
                f'Are you sure you want to delete "{name}"? '
                "This will remove all tasks in this list."
            )
            if not await self.confirm(question):
                return True, "Delete cancelled"
            self.engine.delete_list(name)
            return True, f"Deleted list {name}"
        name = " ".join(args)
        if name != FINISHED and name not in self.engine.state.lists:
            return True, f"Error: No list named '{name}'"
        self.engine.select_list(name)
        return True, None

    # Appearance handlers

    async def _handle_background(self, args: list[str]) -> tuple[bool, str | None]:
        if not args:
            self.backgrounds_visible = not self.backgrounds_visible
            return True, None
        sub = args[0].lower()
        if sub == "add":
            if len(args) != 2:
                return True, "Error: Usage: bg add <url>"
            await self.engine.add_custom_background(args[1])
            return True, "Background added"
        if sub == "rm":
            position = _parse_position(args[1]) if len(args) == 2 else None
            if position is None:
                return True, "Error: Usage: bg rm N"
            if position <= len(self.engine.default_backgrounds):
                return True, "Error: Default backgrounds cannot be deleted"
            self.engine.delete_custom_background(position - 1)
            return True, None
        position = _parse_position(sub)
        if position is None or position > len(self.engine.catalog):
            return True, f"Error: No background #{sub}"
        await self.engine.select_background(position - 1)
        self.backgrounds_visible = False
        return True, None

    def _handle_color(self, args: list[str]) -> tuple[bool, str | None]:
        palette = list(self.engine.config.color_palette)
        position = _parse_position(args[0]) if len(args) == 1 else None
        if position is None or position > len(palette):
            return True, f"Error: Usage: color N (1-{len(palette)})"
        self.engine.select_color(palette[position - 1])
        self.backgrounds_visible = False
        return True, None

    def _handle_theme(self, args: list[str]) -> tuple[bool, str | None]:
        if not args:
            self.engine.cycle_theme()
        else:
            name = args[0].lower()
            theme = THEME_ALIASES.get(name) or Theme.parse(name)
            if theme is None:
                choices = ", ".join(THEME_ALIASES)
                return True, f"Error: Unknown theme '{args[0]}' (choose {choices})"
            self.engine.set_theme(theme)
        return True, f"Theme {self.engine.state.current_theme.value} (locked)"
