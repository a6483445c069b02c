"""State data models for tasktab.

The persisted document uses the camelCase keys of the browser extension
storage format (``dueDate``, ``originalList``, ``activeList`` ...); the
dataclasses expose snake_case attributes and convert at the boundary with
``to_dict`` / ``from_dict``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_LIST = "To-Do"
FINISHED = "Finished"
ARCHIVED_LIST = "Archived"
STATE_KEY = "appState"


class Priority(Enum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def coerce(cls, value: Any) -> Priority:
        """Return the matching priority, falling back to MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.MEDIUM


class Theme(Enum):
    """Visual theme; enumeration order is the cycle order."""

    WHITE = "theme-white"  # light text, for dark backgrounds
    BLACK = "theme-black"  # dark text, for light backgrounds
    SKYBLUE = "theme-skyblue"
    SEPIA = "theme-sepia"

    @classmethod
    def default(cls) -> Theme:
        return next(iter(cls))

    @classmethod
    def parse(cls, value: Any) -> Theme | None:
        """Return the theme for a stored value, or None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    def next(self) -> Theme:
        members = list(type(self))
        return members[(members.index(self) + 1) % len(members)]


def _new_uid() -> str:
    return uuid.uuid4().hex


@dataclass
class Task:
    """A single task.

    ``uid`` is an in-memory identity used to map displayed rows back to
    canonical list positions; it is not persisted and not compared.
    """

    text: str
    priority: Priority = Priority.MEDIUM
    due_date: str | None = None
    uid: str = field(default_factory=_new_uid, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "priority": self.priority.value,
            "dueDate": self.due_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        due = data.get("dueDate")
        return cls(
            text=str(data.get("text", "")),
            priority=Priority.coerce(data.get("priority")),
            due_date=str(due) if due else None,
        )


@dataclass
class FinishedEntry:
    """An archived task with the name of the list it was completed from."""

    task: Task
    original_list: str

    def to_dict(self) -> dict[str, Any]:
        return {"task": self.task.to_dict(), "originalList": self.original_list}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FinishedEntry:
        return cls(
            task=Task.from_dict(data.get("task") or {}),
            original_list=str(data.get("originalList") or ARCHIVED_LIST),
        )


@dataclass
class Background:
    """A background image and, once classified, the theme that suits it."""

    url: str
    theme: Theme | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url}
        if self.theme is not None:
            data["theme"] = self.theme.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Background:
        return cls(url=str(data["url"]), theme=Theme.parse(data.get("theme")))


def _default_lists() -> dict[str, list[Task]]:
    return {DEFAULT_LIST: []}


@dataclass
class AppState:
    """Canonical, persisted application state."""

    lists: dict[str, list[Task]] = field(default_factory=_default_lists)
    finished: list[FinishedEntry] = field(default_factory=list)
    active_list: str = DEFAULT_LIST
    background_image_index: int = 0
    custom_backgrounds: list[Background] = field(default_factory=list)
    current_theme: Theme = field(default_factory=Theme.default)
    theme_locked: bool = False

    @property
    def finished_active(self) -> bool:
        return self.active_list == FINISHED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON document stored under ``appState``."""
        return {
            "lists": {
                name: [task.to_dict() for task in tasks] for name, tasks in self.lists.items()
            },
            "finished": [entry.to_dict() for entry in self.finished],
            "activeList": self.active_list,
            "backgroundImageIndex": self.background_image_index,
            "customBackgrounds": [bg.to_dict() for bg in self.custom_backgrounds],
            "currentTheme": self.current_theme.value,
            "themeLocked": self.theme_locked,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppState:
        """Build state from a canonical document (see ``migration.migrate``)."""
        return cls(
            lists={
                str(name): [Task.from_dict(task) for task in tasks]
                for name, tasks in data["lists"].items()
            },
            finished=[FinishedEntry.from_dict(entry) for entry in data["finished"]],
            active_list=str(data["activeList"]),
            background_image_index=int(data["backgroundImageIndex"]),
            custom_backgrounds=[Background.from_dict(bg) for bg in data["customBackgrounds"]],
            current_theme=Theme.parse(data["currentTheme"]) or Theme.default(),
            theme_locked=bool(data["themeLocked"]),
        )


@dataclass(frozen=True)
class EditTarget:
    """The task whose inline edit form is open."""

    list_name: str
    index: int


@dataclass
class ViewState:
    """Transient UI state; never persisted."""

    search_query: str = ""
    editing: EditTarget | None = None
    background_color: str | None = None
