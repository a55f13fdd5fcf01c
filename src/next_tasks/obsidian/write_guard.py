"""Completion tokens that keep programmatic rewrites from being re-observed."""

import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionToken:
    """Proof that the holder is rewriting ``document`` in ``vault``."""

    vault: str
    document: str
    token_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class WriteGuard:
    """Tracks documents currently being rewritten by the application.

    A watcher event for a document is suppressed while a token for it is held
    and for ``settle_seconds`` after release, because file system
    notifications arrive after the write returns.
    """

    def __init__(
        self, settle_seconds: float = 1.0, clock: Callable[[], float] = time.monotonic
    ) -> None:
        """Initialize guard with no held tokens."""
        self._settle_seconds = settle_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._held: dict[tuple[str, str], CompletionToken] = {}
        self._released_at: dict[tuple[str, str], float] = {}

    def acquire(self, vault: str, document: str) -> CompletionToken:
        """Take the token for a document.

        Raises:
            RuntimeError: If another rewrite of the document is in progress
        """
        key = (vault, document)
        with self._lock:
            if key in self._held:
                raise RuntimeError(f"Rewrite already in progress: {vault}/{document}")
            token = CompletionToken(vault=vault, document=document)
            self._held[key] = token
        logger.debug(f"[WriteGuard] Acquired {vault}/{document}")
        return token

    def release(self, token: CompletionToken) -> None:
        """Release a token; a stale or foreign token is ignored."""
        key = (token.vault, token.document)
        with self._lock:
            if self._held.get(key) != token:
                logger.warning(f"[WriteGuard] Ignoring stale token for {token.vault}/{token.document}")
                return
            del self._held[key]
            self._released_at[key] = self._clock()
        logger.debug(f"[WriteGuard] Released {token.vault}/{token.document}")

    @contextmanager
    def hold(self, vault: str, document: str) -> Iterator[CompletionToken]:
        """Hold a token around a write-and-react cycle."""
        token = self.acquire(vault, document)
        try:
            yield token
        finally:
            self.release(token)

    def is_own_write(self, vault: str, document: str) -> bool:
        """Return True if a change to the document came from our own rewrite."""
        key = (vault, document)
        with self._lock:
            if key in self._held:
                return True
            released_at = self._released_at.get(key)
            if released_at is None:
                return False
            if self._clock() - released_at <= self._settle_seconds:
                return True
            del self._released_at[key]
            return False
