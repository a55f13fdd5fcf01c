"""Next-action API endpoints."""

import logging
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query

from next_tasks.api.models import (
    CompleteTaskRequest,
    CompletionResponse,
    NextActionResponse,
    VaultChangedEvent,
    VaultResponse,
)
from next_tasks.config import VaultConfig
from next_tasks.factory import (
    get_clock,
    get_config,
    get_connection_manager,
    get_next_action_cache,
    get_vault,
    get_write_guard,
)
from next_tasks.tasks.completion import complete_task
from next_tasks.tasks.decorations import priority_tag_for
from next_tasks.tasks.models import CompletionAction, NextAction

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/vaults", response_model=list[VaultResponse])
async def list_vaults() -> list[VaultResponse]:
    """List all configured vaults."""
    return [
        VaultResponse(name=vault.name, vault_path=vault.vault_path, vault_name=vault.vault_name)
        for vault in get_config().vaults
    ]


@router.get("/next-actions", response_model=list[NextActionResponse])
async def list_next_actions(
    vault: Annotated[list[str] | None, Query()] = None,
) -> list[NextActionResponse]:
    """List next actions across vault(s), highest priority first.

    Args:
        vault: Vault name(s) to read from. If empty/None, reads from all vaults.

    Returns:
        Next actions ordered by priority rank; equal ranks keep vault order
    """
    config = get_config()
    vault_names = [v.name for v in config.vaults] if not vault else vault

    cache = get_next_action_cache()
    today = get_clock().today()

    responses: list[NextActionResponse] = []
    for vault_name in vault_names:
        vault_config = config.get_vault(vault_name)
        if not vault_config:
            # Skip invalid vaults
            continue
        actions = cache.get(vault_name, today)
        responses.extend(_action_to_response(action, vault_config) for action in actions)

    return sorted(responses, key=lambda response: response.priority)


@router.post("/next-actions/complete", response_model=CompletionResponse)
async def complete_next_action(request: CompleteTaskRequest) -> CompletionResponse:
    """Complete or undo a task in a vault document.

    Recurring tasks roll their @start forward instead of being ticked off.

    Raises:
        HTTPException: 404 for unknown vault/document, 400 for an invalid
            document name, 409 if the document is already being rewritten
    """
    try:
        vault = get_vault(request.vault)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    guard = get_write_guard()
    today = get_clock().today()

    try:
        with guard.hold(vault.name, request.document) as token:
            text = vault.read_text(request.document)
            result = complete_task(text, request.task_text, request.action, today)
            if result.changed:
                vault.write_text(request.document, result.text, token)
                get_next_action_cache().invalidate(vault.name)
                event_type = "completed" if request.action is CompletionAction.COMPLETE else "undone"
                await get_connection_manager().broadcast(
                    VaultChangedEvent(type=event_type, vault=vault.name, document=request.document)
                )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Error applying {request.action.value} to {request.document}: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    if result.changed:
        logger.info(
            f"{request.action.value} {request.task_text!r} in {vault.name}/{request.document}"
        )
    else:
        logger.info(f"No matching task for {request.action.value}: {request.task_text!r}")

    return CompletionResponse(
        status="updated" if result.changed else "unchanged",
        vault=vault.name,
        document=request.document,
        action=request.action,
        line_index=result.line_index,
        next_start=result.next_start,
    )


@router.post("/cache/reload")
async def reload_cache(vault: str | None = None) -> dict[str, list[str] | dict[str, int]]:
    """Force cache reload for debugging/recovery.

    Args:
        vault: Optional vault name to reload. If None, reloads all vaults.

    Returns:
        {"reloaded": ["Personal"], "counts": {"Personal": 12}}

    Raises:
        HTTPException: If vault not found
    """
    config = get_config()
    cache = get_next_action_cache()
    today = get_clock().today()

    if vault:
        if not config.get_vault(vault):
            raise HTTPException(status_code=404, detail=f"Unknown vault: {vault}")
        names = [vault]
    else:
        names = [v.name for v in config.vaults]

    for name in names:
        cache.load_vault(name, today)
    counts = {name: cache.count(name) for name in names}
    return {"reloaded": names, "counts": counts}


def _action_to_response(action: NextAction, vault_config: VaultConfig) -> NextActionResponse:
    """Convert NextAction to NextActionResponse."""
    # Format: obsidian://open?vault=VaultName&file=Path/To/File.md
    file_path = f"{action.document}.md"
    obsidian_url = f"obsidian://open?vault={quote(vault_config.vault_name)}&file={quote(file_path)}"

    return NextActionResponse(
        vault=vault_config.name,
        document=action.document,
        task_text=action.task_text,
        priority=action.priority,
        priority_tag=priority_tag_for(action.priority, get_config().priority_tags),
        is_aggregate_view=action.is_aggregate_view,
        line_index=action.line_index,
        obsidian_url=obsidian_url,
    )
