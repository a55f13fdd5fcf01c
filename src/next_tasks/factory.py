"""Dependency injection factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from next_tasks.api.models import VaultChangedEvent
from next_tasks.clock import Clock, SystemClock
from next_tasks.config import Config
from next_tasks.next_action_cache import NextActionCache
from next_tasks.obsidian.vault import ObsidianVault
from next_tasks.obsidian.vault_watcher import ChangeCallback, VaultWatcher
from next_tasks.obsidian.write_guard import WriteGuard
from next_tasks.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

# Global instances for dependency injection
_config: Config | None = None
_clock: Clock | None = None
_write_guard: WriteGuard | None = None
_next_action_cache: NextActionCache | None = None
_connection_manager: ConnectionManager | None = None
_watchers: dict[str, VaultWatcher] = {}


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_clock() -> Clock:
    """Get or create the calendar clock."""
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def get_vault(vault_name: str) -> ObsidianVault:
    """Create document store for a configured vault.

    Raises:
        ValueError: If the vault is not configured
    """
    vault = get_config().get_vault(vault_name)
    if not vault:
        raise ValueError(f"Unknown vault: {vault_name}")
    return ObsidianVault(vault.vault_path, vault.name)


def get_write_guard() -> WriteGuard:
    """Get or create WriteGuard singleton."""
    global _write_guard
    if _write_guard is None:
        _write_guard = WriteGuard(settle_seconds=get_config().write_settle_seconds)
    return _write_guard


def get_next_action_cache() -> NextActionCache:
    """Get or create NextActionCache singleton with every configured vault."""
    global _next_action_cache
    if _next_action_cache is None:
        config = get_config()
        cache = NextActionCache(config.task_settings())
        for vault in config.vaults:
            cache.register_vault(get_vault(vault.name))
        _next_action_cache = cache
    return _next_action_cache


def get_connection_manager() -> ConnectionManager:
    """Get or create ConnectionManager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def _make_change_callback(loop: asyncio.AbstractEventLoop) -> ChangeCallback:
    """Build the watcher callback: invalidate the cache, then notify clients."""
    cache = get_next_action_cache()
    connection_manager = get_connection_manager()

    def callback(event_type: str, document: str, vault_name: str) -> None:
        cache.invalidate(vault_name)
        event = VaultChangedEvent(type=event_type, vault=vault_name, document=document)
        # Watchdog runs callbacks on its own thread
        asyncio.run_coroutine_threadsafe(connection_manager.broadcast(event), loop)

    return callback


def start_vault_watchers() -> None:
    """Start file watchers for all configured vaults."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.error("[Factory] No running event loop found")
        return

    guard = get_write_guard()
    callback = _make_change_callback(loop)

    for vault_config in get_config().vaults:
        vault = get_vault(vault_config.name)
        if not vault.root.exists():
            logger.warning(f"[Factory] Vault not found: {vault.root}")
            continue

        try:
            watcher = VaultWatcher(vault, guard)
            watcher.set_callback(callback)
            watcher.start()
            _watchers[vault.name] = watcher
        except Exception as e:
            logger.error(
                f"[Factory] Failed to start watcher for {vault.name}: {e}", exc_info=True
            )


def stop_vault_watchers() -> None:
    """Stop all running file watchers."""
    for vault_name, watcher in _watchers.items():
        try:
            watcher.stop()
            logger.info(f"[Factory] Stopped watcher for vault: {vault_name}")
        except Exception as e:
            logger.error(f"[Factory] Failed to stop watcher for {vault_name}: {e}")
    _watchers.clear()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    logger.info("[Lifespan] Loading next-action cache...")
    cache = get_next_action_cache()
    today = get_clock().today()
    for vault in get_config().vaults:
        cache.load_vault(vault.name, today)

    logger.info("[Lifespan] Starting vault watchers...")
    start_vault_watchers()
    try:
        yield
    finally:
        logger.info("[Lifespan] Stopping vault watchers...")
        stop_vault_watchers()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from next_tasks.api.next_actions import router as next_actions_router
    from next_tasks.api.websocket import router as ws_router

    app = FastAPI(
        title="Next Tasks",
        description="Next actions and recurring tasks from Obsidian project notes",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(next_actions_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    return app
