"""In-memory cache of computed next actions per vault."""

import logging
import threading
from dataclasses import dataclass
from datetime import date

from next_tasks.obsidian.vault import ObsidianVault
from next_tasks.tasks.models import NextAction, TaskSettings
from next_tasks.tasks.next_actions import compute_next_actions, load_documents

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    computed_for: date
    actions: list[NextAction]


class NextActionCache:
    """Caches next actions per vault until a document changes or the day rolls over."""

    def __init__(self, settings: TaskSettings) -> None:
        """Initialize empty cache."""
        self._settings = settings
        self._vaults: dict[str, ObsidianVault] = {}
        self._cache: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def register_vault(self, vault: ObsidianVault) -> None:
        """Make a vault known to the cache."""
        self._vaults[vault.name] = vault

    def load_vault(self, vault_name: str, today: date) -> list[NextAction]:
        """Load/reload next actions for a vault.

        Idempotent - safe to call multiple times.

        Raises:
            KeyError: If the vault was never registered
        """
        vault = self._vaults[vault_name]
        actions = compute_next_actions(load_documents(vault), self._settings, today)

        # Atomic replacement (overwrites previous entry)
        with self._lock:
            self._cache[vault_name] = _Entry(computed_for=today, actions=actions)
        logger.info(f"[NextActionCache] Loaded {len(actions)} next actions for vault '{vault_name}'")
        return actions

    def get(self, vault_name: str, today: date) -> list[NextAction]:
        """Return cached next actions, recomputing if stale."""
        with self._lock:
            entry = self._cache.get(vault_name)
        if entry is not None and entry.computed_for == today:
            return list(entry.actions)
        return self.load_vault(vault_name, today)

    def count(self, vault_name: str) -> int:
        """Number of cached actions for a vault (0 if not loaded)."""
        with self._lock:
            entry = self._cache.get(vault_name)
        return len(entry.actions) if entry else 0

    def invalidate(self, vault_name: str) -> None:
        """Drop a vault's entry so the next read recomputes it.

        Called by the file watcher and after the API rewrites a document.
        """
        with self._lock:
            removed = self._cache.pop(vault_name, None)
        if removed is not None:
            logger.debug(f"[NextActionCache] Invalidated vault '{vault_name}'")
