"""File system watcher for vault documents."""

import logging
from collections.abc import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from next_tasks.obsidian.vault import ObsidianVault
from next_tasks.obsidian.write_guard import WriteGuard

logger = logging.getLogger(__name__)

# Callback(event_type, document_name, vault_name)
ChangeCallback = Callable[[str, str, str], None]


class VaultWatcher:
    """Watches a vault for markdown changes made outside the application."""

    def __init__(self, vault: ObsidianVault, guard: WriteGuard):
        """Initialize watcher for a vault.

        Args:
            vault: Vault whose root directory is watched
            guard: Write guard consulted to drop events from our own rewrites
        """
        self.vault = vault
        self._guard = guard
        self._observer: BaseObserver | None = None
        self._callback: ChangeCallback | None = None

    def set_callback(self, callback: ChangeCallback) -> None:
        """Set callback for document changes.

        Args:
            callback: Function(event_type, document_name, vault_name) called on events
        """
        self._callback = callback

    def start(self) -> None:
        """Start watching the vault in the observer's background thread."""
        handler = _VaultEventHandler(self.vault, self._guard, self._callback)
        self._observer = Observer()
        self._observer.daemon = True
        self._observer.schedule(handler, str(self.vault.root), recursive=True)
        logger.info(f"[VaultWatcher] Watching {self.vault.root} (vault: {self.vault.name})")
        self._observer.start()

    def stop(self) -> None:
        """Stop watching and clean up resources."""
        if self._observer:
            logger.info(f"[VaultWatcher] Stopping watcher for {self.vault.name}")
            self._observer.stop()
            self._observer.join()
            self._observer = None


class _VaultEventHandler(FileSystemEventHandler):
    """Internal handler translating file events into document changes."""

    def __init__(
        self, vault: ObsidianVault, guard: WriteGuard, callback: ChangeCallback | None
    ):
        self.vault = vault
        self.guard = guard
        self.callback = callback

    def _handle_event(self, event_type: str, event: FileSystemEvent) -> None:
        """Handle file system event and trigger callback.

        Args:
            event_type: Type of event (modified, created, deleted, moved)
            event: File system event
        """
        if event.is_directory:
            return

        # Convert bytes to str if needed
        src_path = event.src_path
        if isinstance(src_path, bytes):
            src_path = src_path.decode("utf-8")

        document = self.vault.document_name(src_path)
        if not document:
            return

        vault_name = self.vault.name
        if self.guard.is_own_write(vault_name, document):
            logger.debug(f"[VaultEventHandler] Ignoring own rewrite of {document}")
            return

        logger.debug(f"[VaultEventHandler] {event_type}: {document} (vault: {vault_name})")

        if self.callback:
            try:
                self.callback(event_type, document, vault_name)
            except Exception as e:
                logger.error(f"[VaultEventHandler] Callback error: {e}", exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        self._handle_event("modified", event)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        self._handle_event("created", event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file deletion events."""
        self._handle_event("deleted", event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events."""
        self._handle_event("moved", event)
