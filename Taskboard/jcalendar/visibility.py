"""Visibility predicates for the calendar grids.

The grid builder only asks ``is_visible(task)``; these helpers build the
predicates the dashboard uses (privacy, project selection, search) and
combine them.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .grid import Predicate, TaskRef


def hide_foreign_private(viewer_id: Optional[str]) -> Predicate:
    """Private tasks are shown to their owner only."""
    viewer = None if viewer_id is None else str(viewer_id)

    def predicate(task: TaskRef) -> bool:
        if not task.is_private:
            return True
        return viewer is not None and task.owner_id == viewer

    return predicate


def only_projects(project_ids: Optional[Iterable[str]]) -> Predicate:
    """Keep tasks of the selected projects; tasks without a project always pass.

    ``None`` means no project filter at all.
    """
    if project_ids is None:
        return lambda task: True
    selected = {str(p) for p in project_ids}

    def predicate(task: TaskRef) -> bool:
        return task.project_id is None or task.project_id in selected

    return predicate


def matches_search(text: Optional[str]) -> Predicate:
    needle = (text or '').strip().casefold()
    if not needle:
        return lambda task: True
    return lambda task: needle in (task.title or '').casefold()


def all_of(*predicates: Predicate) -> Predicate:
    checks = [p for p in predicates if p is not None]
    return lambda task: all(check(task) for check in checks)
