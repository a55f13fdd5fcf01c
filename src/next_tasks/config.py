"""Configuration for Next Tasks."""

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from next_tasks.tasks.classification import normalize_tag
from next_tasks.tasks.models import DEFAULT_PRIORITY_TAGS, TaskSettings


@dataclass
class VaultConfig:
    """Configuration for a single Obsidian vault."""

    name: str
    vault_path: str
    vault_name: str  # For obsidian:// URLs


class Config(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(env_prefix="NEXT_TASKS_")

    vaults: list[VaultConfig] = Field(
        default_factory=lambda: [
            VaultConfig(
                name="Personal",
                vault_path="~/Documents/Obsidian/Personal",
                vault_name="Personal",
            ),
        ]
    )
    project_tag: str = Field(default="projects")
    individual_task_tag: str = Field(default="individualtasks")
    # Ordered highest to lowest; also accepts "p1,p2,p3" from the environment
    priority_tags: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_TAGS)
    )
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    # Watcher events for a document just written by the API are ignored this long
    write_settle_seconds: float = Field(default=1.0, ge=0)

    @field_validator("project_tag", "individual_task_tag")
    @classmethod
    def _strip_hash(cls, value: str) -> str:
        return normalize_tag(value)

    @field_validator("priority_tags", mode="before")
    @classmethod
    def _split_priority_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            tags = [normalize_tag(str(tag)) for tag in value]
            tags = [tag for tag in tags if tag]
            return tags or list(DEFAULT_PRIORITY_TAGS)
        return value

    def get_vault(self, name: str) -> VaultConfig | None:
        """Get vault config by name."""
        for vault in self.vaults:
            if vault.name == name:
                return vault
        return None

    def task_settings(self) -> TaskSettings:
        """Options consumed by the next-action engine."""
        return TaskSettings(
            project_tag=self.project_tag,
            individual_task_tag=self.individual_task_tag,
            priority_tags=tuple(self.priority_tags),
        )
