"""Test fixtures for Next Tasks."""

from datetime import date
from pathlib import Path

import pytest


class FixedClock:
    """Clock pinned to a single calendar day."""

    def __init__(self, today: date) -> None:
        self._today = today

    def today(self) -> date:
        return self._today


@pytest.fixture
def tmp_vault(tmp_path: Path) -> Path:
    """Create temporary Obsidian vault structure."""
    vault = tmp_path / "vault"
    (vault / "Projects").mkdir(parents=True)
    (vault / ".obsidian").mkdir()
    (vault / ".obsidian" / "workspace.md").write_text("- [ ] not a note\n")
    return vault


@pytest.fixture
def sample_documents(tmp_vault: Path) -> Path:
    """Create project, individual-task and untracked notes."""
    (tmp_vault / "Projects" / "Website.md").write_text(
        """#projects #p2

- [x] Pick a domain
- [ ] Draft landing page
- [ ] Publish site
"""
    )
    (tmp_vault / "Projects" / "Garden.md").write_text(
        """---
tags: [projects]
---
- [ ] Order seeds @start(2024-03-01)
- [ ] Build raised bed #p1
"""
    )
    (tmp_vault / "Chores.md").write_text(
        """#individualtasks

- [ ] Pay rent #p2 @recur(1m) @start(2024-01-31)
- [ ] Take out bins @recur(mon,thu)
- [ ] Call plumber #p1
"""
    )
    (tmp_vault / "Inbox.md").write_text("- [ ] Untracked task\n")
    return tmp_vault


@pytest.fixture
def reset_factory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear factory singletons so each test builds its own."""
    monkeypatch.setattr("next_tasks.factory._config", None)
    monkeypatch.setattr("next_tasks.factory._clock", None)
    monkeypatch.setattr("next_tasks.factory._write_guard", None)
    monkeypatch.setattr("next_tasks.factory._next_action_cache", None)
    monkeypatch.setattr("next_tasks.factory._connection_manager", None)


@pytest.fixture
def fixed_clock() -> type[FixedClock]:
    """Clock class pinned to a given day."""
    return FixedClock
