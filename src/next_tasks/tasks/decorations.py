"""Inline decoration grammar for task text.

Each matcher is independent and total: it returns the first match or None,
never raises. All matching is case-insensitive.
"""

import re
from collections.abc import Sequence
from functools import lru_cache

# Payload runs up to the first closing paren; no closing paren means no decoration
START_PATTERN = re.compile(r"@start\(([^)]*)\)", re.IGNORECASE)
DUE_PATTERN = re.compile(r"@due\(([^)]*)\)", re.IGNORECASE)
RECUR_PATTERN = re.compile(r"@recur\(([^)]*)\)", re.IGNORECASE)

# Only binary done/not-done checkboxes are tasks; [-] and friends are skipped
CHECKBOX_PATTERN = re.compile(r"^(\s*[-*]\s+\[)([ xX])\](?:\s+(.*))?$")


def _payload(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    payload = match.group(1).strip()
    return payload or None


def find_start(text: str) -> str | None:
    """Return the first @start(...) payload."""
    return _payload(START_PATTERN, text)


def find_due(text: str) -> str | None:
    """Return the first @due(...) payload."""
    return _payload(DUE_PATTERN, text)


def find_recur(text: str) -> str | None:
    """Return the first @recur(...) payload."""
    return _payload(RECUR_PATTERN, text)


@lru_cache(maxsize=32)
def _priority_pattern(priority_tags: tuple[str, ...]) -> re.Pattern[str] | None:
    tags = [tag for tag in priority_tags if tag]
    if not tags:
        return None
    # Longest first so overlapping tags (p1 / p10) prefer the full token
    alternation = "|".join(re.escape(tag) for tag in sorted(tags, key=len, reverse=True))
    return re.compile(rf"(?<!\w)({alternation})(?!\w)", re.IGNORECASE)


def find_priority(text: str, priority_tags: Sequence[str]) -> int | None:
    """Return the 1-based rank of the earliest priority tag in text.

    Tags match as whole words, so "#p2" and "p2" both count but "p23" does not.
    """
    pattern = _priority_pattern(tuple(priority_tags))
    if pattern is None:
        return None
    match = pattern.search(text)
    if not match:
        return None
    found = match.group(1).lower()
    for rank, tag in enumerate(priority_tags, start=1):
        if tag.lower() == found:
            return rank
    return None


def priority_tag_for(rank: int, priority_tags: Sequence[str]) -> str | None:
    """Return the configured tag for a rank, if any."""
    if 1 <= rank <= len(priority_tags):
        return priority_tags[rank - 1]
    return None
