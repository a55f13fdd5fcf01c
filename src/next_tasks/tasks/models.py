"""Core records for decorated Markdown tasks."""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_PRIORITY_TAGS: tuple[str, ...] = ("p1", "p2", "p3", "p4", "p5", "p6", "p7")


@dataclass(frozen=True)
class Task:
    """One parsed checkbox line."""

    text: str  # Content after the checkbox marker, trimmed
    line_index: int  # Zero-based line in the source document
    done: bool  # [x]/[X] -> True, [ ] -> False
    priority: int | None = None  # 1-based rank of the first priority tag
    start: str | None = None  # Raw @start(...) payload
    due: str | None = None  # Raw @due(...) payload, informational only
    recur: str | None = None  # Raw @recur(...) payload


@dataclass(frozen=True)
class TaskSettings:
    """Options recognized by the next-action engine."""

    project_tag: str = "projects"
    individual_task_tag: str = "individualtasks"
    priority_tags: tuple[str, ...] = field(default=DEFAULT_PRIORITY_TAGS)


@dataclass(frozen=True)
class Document:
    """A document's identity and current text."""

    name: str
    text: str


@dataclass(frozen=True)
class NextAction:
    """A task surfaced for the next-actions view."""

    document: str
    task_text: str
    priority: int
    is_aggregate_view: bool
    line_index: int


class SelectionMode(Enum):
    """How many eligible tasks a document contributes."""

    SINGLE_NEXT = "single_next"
    ALL_ELIGIBLE = "all_eligible"


class CompletionAction(str, Enum):
    """External action applied to a task line."""

    COMPLETE = "complete"
    UNDO = "undo"
