"""Migration of persisted state documents to the current shape.

Stored documents carry no schema version. Three generations exist in the
wild and are told apart purely by structure:

- string tasks: list entries and finished entries are bare strings;
- flat finished entries: finished entries are task objects without the
  ``task``/``originalList`` wrapper, and background/theme fields are absent;
- current: the shape produced by ``AppState.to_dict``.

Each guard below normalizes one shape and leaves already-current data
untouched, so ``migrate_document`` is idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .models import (
    ARCHIVED_LIST,
    DEFAULT_LIST,
    FINISHED,
    AppState,
    Priority,
    Theme,
)

logger = logging.getLogger(__name__)


def _wrap_text(text: str) -> dict[str, Any]:
    return {"text": text, "priority": Priority.MEDIUM.value, "dueDate": None}


def _migrate_task(raw: Any) -> dict[str, Any] | None:
    """Normalize one task entry; None means the entry is unusable."""
    if isinstance(raw, str):
        return _wrap_text(raw)
    if isinstance(raw, Mapping) and isinstance(raw.get("text"), str):
        due = raw.get("dueDate")
        return {
            "text": raw["text"],
            "priority": Priority.coerce(raw.get("priority")).value,
            "dueDate": due if isinstance(due, str) and due else None,
        }
    return None


def _migrate_tasks(raw_tasks: Any, list_name: str) -> list[dict[str, Any]]:
    if not isinstance(raw_tasks, list):
        return []
    tasks = []
    for raw in raw_tasks:
        task = _migrate_task(raw)
        if task is None:
            logger.warning(f"Dropping unreadable task in list {list_name!r}: {raw!r}")
            continue
        tasks.append(task)
    return tasks


def _migrate_finished_entry(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, str):
        return {"task": _wrap_text(raw), "originalList": ARCHIVED_LIST}
    if not isinstance(raw, Mapping):
        return None
    if "task" not in raw and "text" in raw:
        # Flat generation: the entry is the task itself.
        task = _migrate_task(raw)
        return {"task": task, "originalList": ARCHIVED_LIST} if task else None
    task = _migrate_task(raw.get("task"))
    if task is None:
        return None
    original = raw.get("originalList")
    return {
        "task": task,
        "originalList": original if isinstance(original, str) and original else ARCHIVED_LIST,
    }


def _migrate_background(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, str):
        return {"url": raw}
    if isinstance(raw, Mapping) and isinstance(raw.get("url"), str):
        background: dict[str, Any] = {"url": raw["url"]}
        theme = Theme.parse(raw.get("theme"))
        if theme is not None:
            background["theme"] = theme.value
        return background
    return None


def migrate_document(raw: Any) -> dict[str, Any]:
    """Upgrade any stored document to the canonical JSON shape.

    Never raises; unusable fragments are replaced by defaults or dropped.

    Args:
        raw: Whatever was read from storage (possibly None or garbage)

    Returns:
        Canonical document accepted by ``AppState.from_dict``
    """
    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    raw_lists = source.get("lists")
    if not isinstance(raw_lists, Mapping):
        raw_lists = {DEFAULT_LIST: []}
    lists: dict[str, list[dict[str, Any]]] = {}
    stray_finished: list[dict[str, Any]] = []
    for name, raw_tasks in raw_lists.items():
        name = str(name)
        tasks = _migrate_tasks(raw_tasks, name)
        if not name:
            logger.warning("Dropping list with empty name")
            continue
        if name == FINISHED:
            # "Finished" is the archive view, never a stored list.
            stray_finished.extend({"task": t, "originalList": ARCHIVED_LIST} for t in tasks)
            continue
        lists[name] = tasks
    if not lists:
        lists = {DEFAULT_LIST: []}

    raw_finished = source.get("finished")
    finished: list[dict[str, Any]] = []
    if isinstance(raw_finished, list):
        for raw_entry in raw_finished:
            entry = _migrate_finished_entry(raw_entry)
            if entry is None:
                logger.warning(f"Dropping unreadable finished entry: {raw_entry!r}")
                continue
            finished.append(entry)
    finished.extend(stray_finished)

    raw_backgrounds = source.get("customBackgrounds")
    custom_backgrounds = []
    if isinstance(raw_backgrounds, list):
        for raw_bg in raw_backgrounds:
            background = _migrate_background(raw_bg)
            if background is not None:
                custom_backgrounds.append(background)

    theme = Theme.parse(source.get("currentTheme")) or Theme.default()

    theme_locked = source.get("themeLocked")
    theme_locked = False if theme_locked is None else bool(theme_locked)

    active_list = source.get("activeList")
    if active_list != FINISHED and active_list not in lists:
        active_list = next(iter(lists))

    index = source.get("backgroundImageIndex")
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        index = 0

    return {
        "lists": lists,
        "finished": finished,
        "activeList": active_list,
        "backgroundImageIndex": index,
        "customBackgrounds": custom_backgrounds,
        "currentTheme": theme.value,
        "themeLocked": theme_locked,
    }


def migrate(raw: Any) -> AppState:
    """Upgrade a stored document and build the in-memory state from it."""
    return AppState.from_dict(migrate_document(raw))
