"""API models for Next Tasks."""

from datetime import date
from typing import Literal

from pydantic import BaseModel

from next_tasks.tasks.models import CompletionAction


class VaultResponse(BaseModel):
    """API response model for vault."""

    name: str
    vault_path: str
    vault_name: str


class NextActionResponse(BaseModel):
    """API response model for a next action."""

    vault: str
    document: str
    task_text: str
    priority: int
    priority_tag: str | None
    is_aggregate_view: bool
    line_index: int
    obsidian_url: str


class CompleteTaskRequest(BaseModel):
    """Request model for completing or undoing a task."""

    vault: str
    document: str
    task_text: str
    action: CompletionAction = CompletionAction.COMPLETE


class CompletionResponse(BaseModel):
    """API response model for a completion."""

    status: Literal["updated", "unchanged"]
    vault: str
    document: str
    action: CompletionAction
    line_index: int | None
    next_start: date | None  # New @start when a recurring task rolled forward


class VaultChangedEvent(BaseModel):
    """WebSocket message sent when a vault document changes."""

    type: str  # modified, created, deleted, moved, completed, undone
    vault: str
    document: str
