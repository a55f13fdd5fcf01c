"""Completion and undo transitions for task lines.

A non-recurring task moves between open and done. A recurring task never
finishes: completing it resets the checkbox and rolls ``@start`` forward to
the next occurrence.
"""

import logging
from dataclasses import dataclass
from datetime import date

from next_tasks.tasks.dates import resolve_expr
from next_tasks.tasks.decorations import CHECKBOX_PATTERN, START_PATTERN, find_recur, find_start
from next_tasks.tasks.models import CompletionAction
from next_tasks.tasks.parser import parse_tasks
from next_tasks.tasks.recurrence import next_occurrence, parse_rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineTransition:
    """Outcome of applying an action to one line."""

    line: str
    next_start: date | None = None  # Set when a recurring task rolled forward

    def changed_from(self, original: str) -> bool:
        return self.line != original


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of applying an action to a document."""

    text: str
    line_index: int | None  # None if no task matched
    next_start: date | None = None

    @property
    def changed(self) -> bool:
        return self.line_index is not None


def _with_marker(body: str, start: int, end: int, marker: str) -> str:
    return body[:start] + marker + body[end:]


def apply_transition(line: str, action: CompletionAction, today: date) -> LineTransition:
    """Apply an action to a single line, leaving non-task lines untouched."""
    body, ending = (line[:-1], "\r") if line.endswith("\r") else (line, "")
    match = CHECKBOX_PATTERN.match(body)
    if not match:
        return LineTransition(line)

    done = match.group(2).lower() == "x"
    marker_start, marker_end = match.span(2)

    if action is CompletionAction.UNDO:
        if not done:
            return LineTransition(line)
        return LineTransition(_with_marker(body, marker_start, marker_end, " ") + ending)

    text = match.group(3) or ""
    rule = parse_rule(find_recur(text))
    next_start = None
    if rule is not None:
        anchor = resolve_expr(find_start(text), today) or today
        next_start = next_occurrence(rule, anchor, today)

    if next_start is None:
        if done:
            return LineTransition(line)
        return LineTransition(_with_marker(body, marker_start, marker_end, "x") + ending)

    rolled = _with_marker(body, marker_start, marker_end, " ")
    stamp = f"@start({next_start.isoformat()})"
    if START_PATTERN.search(rolled):
        rolled = START_PATTERN.sub(lambda _: stamp, rolled, count=1)
    else:
        rolled = f"{rolled.rstrip()} {stamp}"
    logger.debug(f"[Completion] Rolled recurring task forward to {next_start.isoformat()}")
    return LineTransition(rolled + ending, next_start=next_start)


def transition_line(line: str, action: CompletionAction, today: date) -> str:
    """Return the line after applying an action."""
    return apply_transition(line, action, today).line


def apply_completion_at(
    document_text: str, line_index: int, action: CompletionAction, today: date
) -> CompletionResult:
    """Rewrite exactly one line in place; the line count never changes."""
    lines = document_text.split("\n")
    if not 0 <= line_index < len(lines):
        return CompletionResult(document_text, None)

    transition = apply_transition(lines[line_index], action, today)
    if not transition.changed_from(lines[line_index]):
        return CompletionResult(document_text, None)

    lines[line_index] = transition.line
    return CompletionResult("\n".join(lines), line_index, transition.next_start)


def find_target_line(
    document_text: str, target_task_text: str, action: CompletionAction
) -> int | None:
    """Locate the line a completion or undo should act on.

    Completion prefers the first open task with matching text, then any
    matching task (a recurring task already ticked still rolls forward).
    Undo only targets done tasks.
    """
    target = target_task_text.strip()
    matches = [task for task in parse_tasks(document_text) if task.text == target]
    if action is CompletionAction.UNDO:
        done = [task for task in matches if task.done]
        return done[0].line_index if done else None

    open_tasks = [task for task in matches if not task.done]
    if open_tasks:
        return open_tasks[0].line_index
    return matches[0].line_index if matches else None


def complete_task(
    document_text: str, target_task_text: str, action: CompletionAction, today: date
) -> CompletionResult:
    """Apply an action to the task whose text matches ``target_task_text``."""
    line_index = find_target_line(document_text, target_task_text, action)
    if line_index is None:
        logger.debug(f"[Completion] No task matching {target_task_text!r} for {action.value}")
        return CompletionResult(document_text, None)
    return apply_completion_at(document_text, line_index, action, today)


def apply_completion(
    document_text: str, target_task_text: str, action: CompletionAction, today: date
) -> str:
    """Return the document text after completing or undoing a task."""
    return complete_task(document_text, target_task_text, action, today).text
