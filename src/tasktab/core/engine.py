"""State engine: the only writer of the application state.

Every mutating operation updates the in-memory state, requests a save
(fire-and-forget) and then notifies render listeners. Invalid user input
raises ValidationRejection before anything changes; requests that do not
apply in the current state (deleting from the archive view, an index that
no longer exists, a default background) are silent no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Any

from ..config import NEUTRAL_BACKGROUND_COLOR, Config
from .catalog import build_catalog, resized_image_url, thumbnail_url
from .classification import parse_hex_color
from .exceptions import ValidationRejection
from .migration import migrate
from .models import (
    DEFAULT_LIST,
    FINISHED,
    AppState,
    Background,
    EditTarget,
    FinishedEntry,
    Priority,
    Task,
    Theme,
    ViewState,
)
from .projection import RenderTree, project

if TYPE_CHECKING:
    from .classification import ImageClassifier
    from .persistence import StatePersister

logger = logging.getLogger(__name__)


class _Keep:
    def __repr__(self) -> str:
        return "KEEP"


KEEP: Any = _Keep()
"""Marker for edit_task fields that keep their current value."""


def _parse_priority(value: Priority | str) -> Priority:
    if isinstance(value, Priority):
        return value
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        raise ValidationRejection(f"Unknown priority: {value!r}") from None


def _parse_due_date(value: date | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ValidationRejection(f"Invalid due date: {value!r} (expected YYYY-MM-DD)") from None


class StateEngine:
    """Owns AppState and the transient ViewState."""

    def __init__(
        self,
        state: AppState,
        persister: StatePersister,
        classifier: ImageClassifier,
        config: Config,
    ):
        """Initialize engine around an already migrated state.

        Prefer ``await StateEngine.create(...)``, which loads the state first.

        Args:
            state: Canonical state
            persister: Receives a save request after each mutation
            classifier: Theme classifier for backgrounds
            config: Runtime configuration (background pool, URL prefix)
        """
        self.state = state
        self.view = ViewState()
        self.persister = persister
        self.classifier = classifier
        self.config = config
        self.default_backgrounds: tuple[Background, ...] = tuple(config.default_backgrounds)
        self._selection_token = 0
        self._listeners: list[Callable[[], None]] = []

        if not 0 <= state.background_image_index < len(self.catalog):
            state.background_image_index = 0

    @classmethod
    async def create(
        cls,
        persister: StatePersister,
        classifier: ImageClassifier,
        config: Config,
    ) -> StateEngine:
        """Load and migrate the stored state, then build a ready engine."""
        raw = await persister.load()
        state = migrate(raw)
        logger.info(
            f"State ready: {len(state.lists)} list(s), {len(state.finished)} finished task(s)"
        )
        return cls(state, persister, classifier, config)

    # Queries

    @property
    def catalog(self) -> list[Background]:
        return build_catalog(self.default_backgrounds, self.state.custom_backgrounds)

    @property
    def active_background(self) -> Background | None:
        catalog = self.catalog
        index = self.state.background_image_index
        return catalog[index] if 0 <= index < len(catalog) else None

    def render_tree(self, today: date | None = None) -> RenderTree:
        """Project the current state and view into a render tree."""
        return project(
            self.state,
            self.view,
            self.default_backgrounds,
            palette=self.config.color_palette,
            today=today,
        )

    def index_of(self, list_name: str, uid: str) -> int | None:
        """Return the canonical position of the task with this identity."""
        for index, task in enumerate(self.state.lists.get(list_name, [])):
            if task.uid == uid:
                return index
        return None

    def _task_at(self, list_name: str, index: int) -> Task | None:
        tasks = self.state.lists.get(list_name)
        if tasks is None or not 0 <= index < len(tasks):
            return None
        return tasks[index]

    # Lifecycle

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a render callback, called after every state or view change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    def _commit(self) -> None:
        """Close any open edit form, request a save, then re-render."""
        self.view.editing = None
        self.persister.schedule_save(self.state.to_dict())
        self._notify()

    # List management

    def create_list(self, name: str) -> None:
        if not name or not name.strip():
            raise ValidationRejection("List name cannot be empty.")
        if name in self.state.lists or name == FINISHED:
            raise ValidationRejection("A list with this name already exists.")
        self.state.lists[name] = []
        self.state.active_list = name
        logger.info(f"Created list {name!r}")
        self._commit()

    def delete_list(self, name: str) -> None:
        """Delete a list and its tasks; confirmation is the caller's job."""
        if name not in self.state.lists:
            logger.debug(f"Ignoring delete of unknown list {name!r}")
            return
        del self.state.lists[name]
        if not self.state.lists:
            self.state.lists[DEFAULT_LIST] = []
        if self.state.active_list == name:
            self.state.active_list = next(iter(self.state.lists))
        logger.info(f"Deleted list {name!r}")
        self._commit()

    def select_list(self, name: str) -> None:
        """Activate a list, or the archive view when name is "Finished"."""
        if name != FINISHED and name not in self.state.lists:
            logger.debug(f"Ignoring selection of unknown list {name!r}")
            return
        self.state.active_list = name
        self._commit()

    # Task operations

    def add_task(
        self,
        text: str,
        priority: Priority | str = Priority.MEDIUM,
        due_date: date | str | None = None,
    ) -> None:
        text = text.strip()
        if not text:
            raise ValidationRejection("Task text cannot be empty.")
        if self.state.finished_active:
            logger.debug("Ignoring add_task while the Finished view is active")
            return
        task = Task(
            text=text,
            priority=_parse_priority(priority),
            due_date=_parse_due_date(due_date),
        )
        self.state.lists.setdefault(self.state.active_list, []).append(task)
        self._commit()

    def edit_task(
        self,
        list_name: str,
        index: int,
        text: str,
        priority: Priority | str = KEEP,
        due_date: date | str | None = KEEP,
    ) -> None:
        """Replace a task's fields in place; omitted fields keep their values.

        Raises:
            ValidationRejection: If text is empty; the edit form is closed
                and the task is left as it was
        """
        task = self._task_at(list_name, index)
        if task is None:
            logger.debug(f"Ignoring edit of missing task {list_name!r}[{index}]")
            return
        text = text.strip()
        if not text:
            self.close_edit()
            raise ValidationRejection("Task text cannot be empty.")
        new_priority = task.priority if priority is KEEP else _parse_priority(priority)
        new_due = task.due_date if due_date is KEEP else _parse_due_date(due_date)
        task.text = text
        task.priority = new_priority
        task.due_date = new_due
        self._commit()

    def delete_task(self, list_name: str, index: int) -> None:
        if self.state.finished_active:
            logger.debug("Ignoring delete_task while the Finished view is active")
            return
        if self._task_at(list_name, index) is None:
            logger.debug(f"Ignoring delete of missing task {list_name!r}[{index}]")
            return
        del self.state.lists[list_name][index]
        self._commit()

    def complete_task(self, list_name: str, index: int) -> None:
        """Archive the task at a canonical (unfiltered) index, newest first."""
        task = self._task_at(list_name, index)
        if task is None:
            logger.debug(f"Ignoring completion of missing task {list_name!r}[{index}]")
            return
        del self.state.lists[list_name][index]
        self.state.finished.insert(0, FinishedEntry(task=task, original_list=list_name))
        self._commit()

    def restore_task(self, finished_index: int) -> None:
        """Move an archived task back to the end of its original list."""
        if not 0 <= finished_index < len(self.state.finished):
            logger.debug(f"Ignoring restore of missing finished entry {finished_index}")
            return
        entry = self.state.finished.pop(finished_index)
        if entry.original_list not in self.state.lists:
            logger.info(f"Recreating list {entry.original_list!r} for restored task")
        self.state.lists.setdefault(entry.original_list, []).append(entry.task)
        self._commit()

    # Transient view state

    def set_search_query(self, query: str) -> None:
        self.view.search_query = query
        self.view.editing = None
        self._notify()

    def begin_edit(self, list_name: str, index: int) -> None:
        if self._task_at(list_name, index) is None:
            return
        self.view.editing = EditTarget(list_name=list_name, index=index)
        self._notify()

    def close_edit(self) -> None:
        if self.view.editing is not None:
            self.view.editing = None
            self._notify()

    # Backgrounds

    async def select_background(self, catalog_index: int) -> None:
        """Show a catalog image and, unless the theme is locked, classify it.

        A classification that finishes after a newer selection is dropped.
        """
        catalog = self.catalog
        if not 0 <= catalog_index < len(catalog):
            logger.debug(f"Ignoring selection of missing background {catalog_index}")
            return
        self.state.background_image_index = catalog_index
        self.view.background_color = None
        self._selection_token += 1
        token = self._selection_token
        self._commit()

        if self.state.theme_locked:
            return
        theme = await self.classifier.classify_url(thumbnail_url(catalog[catalog_index].url))
        if token != self._selection_token or self.state.theme_locked:
            logger.debug(f"Dropping superseded classification for background {catalog_index}")
            return
        self.state.current_theme = theme
        self._commit()

    async def add_custom_background(self, url: str) -> None:
        """Add a trusted image to the custom pool with its classified theme."""
        url = url.strip()
        prefix = self.config.trusted_background_prefix
        if not url.startswith(prefix):
            raise ValidationRejection(
                f"Invalid URL. Please use a valid image URL starting with {prefix}"
            )
        resized = resized_image_url(url)
        theme = await self.classifier.classify_url(thumbnail_url(resized))
        self.state.custom_backgrounds.append(Background(url=resized, theme=theme))
        logger.info(f"Added custom background ({theme.value})")
        self._commit()

    def delete_custom_background(self, catalog_index: int) -> None:
        default_count = len(self.default_backgrounds)
        if not default_count <= catalog_index < len(self.catalog):
            logger.debug(f"Ignoring delete of background {catalog_index}")
            return
        del self.state.custom_backgrounds[catalog_index - default_count]

        active = self.state.background_image_index
        if active == catalog_index:
            self.state.background_image_index = 0
            self._selection_token += 1
            fallback = self.active_background
            if fallback is not None:
                self.view.background_color = None
                if not self.state.theme_locked and fallback.theme is not None:
                    self.state.current_theme = fallback.theme
            else:
                self.view.background_color = NEUTRAL_BACKGROUND_COLOR
                if not self.state.theme_locked:
                    self.state.current_theme = Theme.WHITE
        elif active > catalog_index:
            self.state.background_image_index = active - 1
        self._commit()

    def select_color(self, color: str) -> None:
        """Show a flat color instead of the image; classify it unless locked."""
        try:
            parse_hex_color(color)
        except ValueError:
            raise ValidationRejection(f"Invalid color: {color!r}") from None
        self.view.background_color = color
        self._selection_token += 1
        if self.state.theme_locked:
            self._notify()
            return
        self.state.current_theme = self.classifier.classify_color(color)
        self._commit()

    # Themes

    def set_theme(self, theme: Theme | str) -> None:
        """Apply a theme chosen by the user; this always locks it."""
        parsed = Theme.parse(theme)
        if parsed is None:
            raise ValidationRejection(f"Unknown theme: {theme!r}")
        self.state.current_theme = parsed
        self.state.theme_locked = True
        self._commit()

    def cycle_theme(self) -> None:
        self.set_theme(self.state.current_theme.next())

    def toggle_theme_lock(self) -> None:
        self.state.theme_locked = not self.state.theme_locked
        self._commit()
