"""Parse checkbox task lines out of Markdown text."""

from collections.abc import Sequence

from next_tasks.tasks.decorations import (
    CHECKBOX_PATTERN,
    find_due,
    find_priority,
    find_recur,
    find_start,
)
from next_tasks.tasks.models import DEFAULT_PRIORITY_TAGS, Task


def parse_line(
    line: str, line_index: int, priority_tags: Sequence[str] = DEFAULT_PRIORITY_TAGS
) -> Task | None:
    """Parse a single line, returning None if it is not a checkbox task."""
    # CRLF documents leave a trailing \r once split on \n
    match = CHECKBOX_PATTERN.match(line.rstrip("\r"))
    if not match:
        return None

    text = (match.group(3) or "").strip()
    return Task(
        text=text,
        line_index=line_index,
        done=match.group(2).lower() == "x",
        priority=find_priority(text, priority_tags),
        start=find_start(text),
        due=find_due(text),
        recur=find_recur(text),
    )


def parse_tasks(
    content: str, priority_tags: Sequence[str] = DEFAULT_PRIORITY_TAGS
) -> list[Task]:
    """Parse every checkbox task in document order.

    Non-task lines are skipped but still counted, so each Task's line_index
    points at its original line.
    """
    tasks: list[Task] = []
    for line_index, line in enumerate(content.split("\n")):
        task = parse_line(line, line_index, priority_tags)
        if task is not None:
            tasks.append(task)
    return tasks
