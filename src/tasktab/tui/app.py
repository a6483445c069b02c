"""Main TUI application loop and layout.

This module orchestrates the terminal front end: it subscribes to the
StateEngine, re-projects the render tree after every change and draws the
view components, then reads one command line at a time.
"""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console, Group
from rich.markup import escape
from rich.text import Text

from ..config import Config
from ..core.engine import StateEngine
from ..core.projection import RenderTree
from .commands import CommandHandler
from .tui_utils import get_terminal_size
from .views.background_panel import render_background_panel
from .views.footer_bar import render_footer_bar
from .views.help_panel import render_help_panel
from .views.tab_bar import render_tab_bar
from .views.task_list_panel import render_task_list_panel

logger = logging.getLogger(__name__)

PROMPT = "[bold cyan]›[/bold cyan] "


class TaskTabApp:
    """Main TUI application orchestrating all components."""

    def __init__(self, config: Config, engine: StateEngine, console: Console | None = None):
        """Initialize TUI application.

        Args:
            config: Runtime configuration
            engine: Ready state engine
            console: Console to draw on (a new one by default)
        """
        self.config = config
        self.engine = engine
        self.console = console or Console()
        self.should_quit = False
        self.current_error: str | None = None
        self.current_message: str | None = None

        self.command_handler = CommandHandler(engine, self._confirm)
        self.tree: RenderTree = engine.render_tree()
        engine.subscribe(self._on_change)

    def _on_change(self) -> None:
        self.tree = self.engine.render_tree()

    async def _confirm(self, question: str) -> bool:
        answer = await asyncio.to_thread(
            self.console.input, f"[yellow]{escape(question)} (y/n): [/yellow]"
        )
        return answer.strip().lower() in ("y", "yes")

    def _build_view(self) -> Group:
        """Build the full screen from the current render tree.

        Returns:
            Rich Group with tab bar, body, optional panels and footer
        """
        tree = self.tree
        width, _ = get_terminal_size()
        parts = [
            render_tab_bar(tree.tabs, tree.theme, tree.lock_label, tree.theme_locked),
            render_task_list_panel(tree),
        ]
        if self.command_handler.backgrounds_visible:
            parts.append(render_background_panel(tree, url_width=max(20, width - 40)))
        if self.command_handler.help_visible:
            parts.append(render_help_panel())
        if self.current_message:
            parts.append(Text(self.current_message, style="green"))
        parts.append(
            render_footer_bar(
                open_task_count=tree.total_tasks,
                finished_count=tree.finished_count,
                error_message=self.current_error,
                terminal_width=width,
            )
        )
        return Group(*parts)

    def _draw(self) -> None:
        self.console.clear()
        self.console.print(self._build_view())

    async def handle_line(self, line: str) -> None:
        """Run one command and record its feedback.

        Args:
            line: Raw command line
        """
        handled, message = await self.command_handler.handle(line)
        if not handled:
            logger.debug(f"Unrecognized command: {line!r}")
        self.current_error = None
        self.current_message = None
        if message == "quit":
            self.should_quit = True
        elif message and message.startswith("Error:"):
            self.current_error = message
        elif message:
            self.current_message = message

    async def run(self) -> int:
        """Run the main TUI loop.

        Returns:
            Exit code (0 for success, 130 when interrupted)
        """
        logger.info("TUI main loop started")
        exit_code = 0
        try:
            while not self.should_quit:
                self._draw()
                try:
                    line = await asyncio.to_thread(self.console.input, PROMPT)
                except EOFError:
                    break
                await self.handle_line(line)
        except KeyboardInterrupt:
            logger.info("TUI interrupted by user")
            exit_code = 130
        finally:
            await self.shutdown()
        return exit_code

    async def shutdown(self) -> None:
        """Wait for outstanding saves before exiting."""
        if self.engine.persister.has_pending:
            logger.info("Flushing pending saves")
        await self.engine.persister.flush()
        logger.info("TUI shutdown complete")
