"""Task eligibility and priority resolution."""

import math
from collections.abc import Sequence
from datetime import date

from next_tasks.tasks.dates import DateOrder, compare_ymd, resolve_expr
from next_tasks.tasks.decorations import find_priority
from next_tasks.tasks.models import Task, SelectionMode


def is_eligible(task: Task, today: date) -> bool:
    """Return True if the task is open and its start date has arrived.

    An unparseable start imposes no constraint.
    """
    if task.done:
        return False
    start = resolve_expr(task.start, today)
    return start is None or compare_ymd(start, today) is not DateOrder.AFTER


def select_eligible(tasks: Sequence[Task], today: date) -> list[Task]:
    """Return every eligible task in document order."""
    return [task for task in tasks if is_eligible(task, today)]


def select_for_mode(tasks: Sequence[Task], today: date, mode: SelectionMode) -> list[Task]:
    """Apply a document's selection mode to its tasks."""
    eligible = select_eligible(tasks, today)
    if mode is SelectionMode.SINGLE_NEXT:
        return eligible[:1]
    return eligible


def default_priority(priority_tags: Sequence[str]) -> int:
    """Middle rank of the configured tags (4 of 7)."""
    return max(1, math.ceil(len(priority_tags) / 2))


def document_priority(content: str, priority_tags: Sequence[str]) -> int | None:
    """Rank of the first priority tag anywhere in a document."""
    return find_priority(content, priority_tags)


def resolve_priority(
    task: Task, fallback_priority: int | None, priority_tags: Sequence[str]
) -> int:
    """Resolve a task's rank: own tag, then fallback, then the middle rank.

    The result always lies in ``[1, len(priority_tags)]``.
    """
    upper = max(1, len(priority_tags))
    for candidate in (task.priority, fallback_priority):
        if candidate is not None and 1 <= candidate <= upper:
            return candidate
    return default_priority(priority_tags)
