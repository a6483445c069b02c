"""View projection: a pure function from state to a render tree.

The UI layer paints the returned ``RenderTree`` and reports user actions
back to the engine using the identifiers carried by each row (canonical
task index plus task uid, finished index, catalog index).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from .catalog import build_catalog, resized_image_url, thumbnail_url
from .models import FINISHED, AppState, Background, Priority, Task, Theme, ViewState

SHORT_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

LOCKED_LABEL = "Locked"
UNLOCKED_LABEL = "Auto"


@dataclass(frozen=True)
class TabView:
    name: str
    active: bool
    closable: bool


@dataclass(frozen=True)
class DueBadge:
    text: str
    css_class: str  # "overdue", "today" or ""


@dataclass(frozen=True)
class TaskRow:
    index: int  # position in the unfiltered list
    uid: str
    text: str
    priority: Priority
    due: DueBadge | None
    editing: bool = False
    due_date: str | None = None


@dataclass(frozen=True)
class FinishedRow:
    index: int
    text: str
    origin_label: str


@dataclass(frozen=True)
class ChooserTile:
    kind: str  # "image", "add-image" or "custom-color"
    index: int | None = None
    url: str | None = None
    thumbnail: str | None = None
    deletable: bool = False
    active: bool = False
    theme: Theme | None = None


@dataclass(frozen=True)
class BackgroundView:
    image_url: str | None
    color: str | None


@dataclass(frozen=True)
class RenderTree:
    tabs: list[TabView]
    title: str
    inputs_visible: bool
    task_rows: list[TaskRow]
    finished_rows: list[FinishedRow]
    search_query: str
    background: BackgroundView
    chooser: list[ChooserTile]
    palette: list[str]
    theme: Theme
    theme_locked: bool
    lock_label: str
    total_tasks: int = 0
    finished_count: int = 0


def short_date(day: date) -> str:
    return f"{SHORT_MONTHS[day.month - 1]} {day.day}"


def format_due_date(due_date: str | None, today: date) -> DueBadge | None:
    """Derive the due-date badge for a ``YYYY-MM-DD`` date relative to today.

    Args:
        due_date: Stored due date, or None
        today: Current local day

    Returns:
        DueBadge, or None when there is no (parseable) date

    Examples:
        >>> format_due_date("2024-06-14", date(2024, 6, 15)).text
        'Overdue (Jun 14)'
        >>> format_due_date("2024-06-16", date(2024, 6, 15)).text
        'Tomorrow'
    """
    if not due_date:
        return None
    try:
        day = date.fromisoformat(due_date)
    except ValueError:
        return None
    if day < today:
        return DueBadge(f"Overdue ({short_date(day)})", "overdue")
    if day == today:
        return DueBadge("Today", "today")
    if day == today + timedelta(days=1):
        return DueBadge("Tomorrow", "")
    return DueBadge(short_date(day), "")


def filter_tasks(tasks: Sequence[Task], query: str) -> list[tuple[int, Task]]:
    """Return (canonical index, task) pairs matching a search query.

    Matching is a case-insensitive substring test; a blank query matches
    everything.
    """
    indexed = list(enumerate(tasks))
    if not query.strip():
        return indexed
    needle = query.lower()
    return [(i, task) for i, task in indexed if needle in task.text.lower()]


def _task_rows(state: AppState, view: ViewState, today: date) -> list[TaskRow]:
    tasks = state.lists.get(state.active_list, [])
    editing = view.editing
    rows = []
    for index, task in filter_tasks(tasks, view.search_query):
        rows.append(
            TaskRow(
                index=index,
                uid=task.uid,
                text=task.text,
                priority=task.priority,
                due=format_due_date(task.due_date, today),
                editing=(
                    editing is not None
                    and editing.list_name == state.active_list
                    and editing.index == index
                ),
                due_date=task.due_date,
            )
        )
    return rows


def _chooser(catalog: Sequence[Background], default_count: int, active: int) -> list[ChooserTile]:
    tiles = [
        ChooserTile(
            kind="image",
            index=index,
            url=background.url,
            thumbnail=thumbnail_url(background.url),
            deletable=index >= default_count,
            active=index == active,
            theme=background.theme,
        )
        for index, background in enumerate(catalog)
    ]
    tiles.append(ChooserTile(kind="add-image"))
    tiles.append(ChooserTile(kind="custom-color"))
    return tiles


def project(
    state: AppState,
    view: ViewState,
    default_backgrounds: Sequence[Background],
    palette: Sequence[str] = (),
    today: date | None = None,
) -> RenderTree:
    """Build the render tree for the current state.

    Args:
        state: Canonical application state
        view: Transient UI state (search query, edit target, flat color)
        default_backgrounds: Fixed default background pool
        palette: Flat colors offered by the custom-color tile
        today: Local day used for due-date badges (defaults to today)

    Returns:
        RenderTree ready for the UI layer
    """
    today = today or date.today()
    finished_active = state.active_list == FINISHED

    tabs = [
        TabView(name=name, active=name == state.active_list, closable=True)
        for name in state.lists
    ]
    tabs.append(TabView(name=FINISHED, active=finished_active, closable=False))

    if finished_active:
        task_rows: list[TaskRow] = []
        finished_rows = [
            FinishedRow(index=i, text=entry.task.text, origin_label=f"from: {entry.original_list}")
            for i, entry in enumerate(state.finished)
        ]
    else:
        task_rows = _task_rows(state, view, today)
        finished_rows = []

    catalog = build_catalog(default_backgrounds, state.custom_backgrounds)
    active_index = state.background_image_index
    if view.background_color is not None or not 0 <= active_index < len(catalog):
        background = BackgroundView(image_url=None, color=view.background_color)
    else:
        background = BackgroundView(
            image_url=resized_image_url(catalog[active_index].url), color=None
        )

    return RenderTree(
        tabs=tabs,
        title=state.active_list,
        inputs_visible=not finished_active,
        task_rows=task_rows,
        finished_rows=finished_rows,
        search_query=view.search_query,
        background=background,
        chooser=_chooser(catalog, len(default_backgrounds), active_index),
        palette=list(palette),
        theme=state.current_theme,
        theme_locked=state.theme_locked,
        lock_label=LOCKED_LABEL if state.theme_locked else UNLOCKED_LABEL,
        total_tasks=len(state.lists.get(state.active_list, [])),
        finished_count=len(state.finished),
    )
