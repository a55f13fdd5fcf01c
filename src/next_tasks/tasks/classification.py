"""Decide how a document contributes next actions."""

import logging
import re
from typing import Any

import yaml

from next_tasks.tasks.models import SelectionMode, TaskSettings

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---", re.DOTALL)


def normalize_tag(tag: str) -> str:
    """Strip whitespace and a leading '#' from a configured tag."""
    return tag.strip().lstrip("#").strip()


def _extract_frontmatter(content: str) -> dict[str, Any]:
    """Extract YAML frontmatter from markdown content."""
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}

    try:
        data = yaml.safe_load(match.group(1))
        return data if isinstance(data, dict) else {}
    except yaml.YAMLError:
        logger.debug("[Classification] Ignoring invalid YAML frontmatter")
        return {}


def _frontmatter_tags(content: str) -> set[str]:
    raw = _extract_frontmatter(content).get("tags")
    if isinstance(raw, str):
        values = re.split(r"[,\s]+", raw)
    elif isinstance(raw, list):
        values = [str(value) for value in raw if value is not None]
    else:
        return set()
    return {normalize_tag(value).lower() for value in values if normalize_tag(value)}


def has_tag(content: str, tag: str) -> bool:
    """Return True if the document carries ``#tag`` inline or in frontmatter tags.

    Inline tags must stand alone: ``#projects`` matches, ``#projectsX`` and
    nested ``#projects/sub`` do not.
    """
    tag = normalize_tag(tag)
    if not tag:
        return False
    inline = re.compile(rf"(?<![\w#])#{re.escape(tag)}(?![\w/-])", re.IGNORECASE)
    if inline.search(content):
        return True
    return tag.lower() in _frontmatter_tags(content)


def classify_document(content: str, settings: TaskSettings) -> SelectionMode | None:
    """Map a document to its selection mode, or None if it is not tracked.

    The individual-task tag wins when both tags are present.
    """
    if has_tag(content, settings.individual_task_tag):
        return SelectionMode.ALL_ELIGIBLE
    if has_tag(content, settings.project_tag):
        return SelectionMode.SINGLE_NEXT
    return None
