"""Aggregate next actions across documents."""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Protocol

from next_tasks.tasks.classification import classify_document
from next_tasks.tasks.eligibility import document_priority, resolve_priority, select_for_mode
from next_tasks.tasks.models import Document, NextAction, SelectionMode, TaskSettings
from next_tasks.tasks.parser import parse_tasks

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    """Protocol for listing and reading documents."""

    def list_documents(self) -> list[str]:
        """List document names."""
        ...

    def read_text(self, name: str) -> str:
        """Read a document's text."""
        ...


def load_documents(source: DocumentSource) -> list[Document]:
    """Read every document from a source, skipping ones that fail to read."""
    documents: list[Document] = []
    for name in source.list_documents():
        try:
            documents.append(Document(name=name, text=source.read_text(name)))
        except OSError as e:
            logger.warning(f"[NextActions] Failed to read {name}: {e}")
    return documents


def next_actions_for_document(
    document: Document, settings: TaskSettings, today: date
) -> list[NextAction]:
    """Return the next actions one document contributes, in document order."""
    mode = classify_document(document.text, settings)
    if mode is None:
        return []

    tags = settings.priority_tags
    fallback = document_priority(document.text, tags)
    return [
        NextAction(
            document=document.name,
            task_text=task.text,
            priority=resolve_priority(task, fallback, tags),
            is_aggregate_view=mode is SelectionMode.ALL_ELIGIBLE,
            line_index=task.line_index,
        )
        for task in select_for_mode(parse_tasks(document.text, tags), today, mode)
    ]


def compute_next_actions(
    documents: Iterable[Document], settings: TaskSettings, today: date
) -> list[NextAction]:
    """Compute the ordered next actions across all documents.

    Each (document, task text) pair appears once. Results are sorted by rank
    ascending; equal ranks keep discovery order.
    """
    seen: set[tuple[str, str]] = set()
    actions: list[NextAction] = []
    for document in documents:
        for action in next_actions_for_document(document, settings, today):
            key = (action.document, action.task_text)
            if key in seen:
                continue
            seen.add(key)
            actions.append(action)

    return sorted(actions, key=lambda action: action.priority)
