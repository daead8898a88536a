"""Configuration management for chronicle."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("chronicle.yaml")


class ChronicleSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    config_path: Path = Field(default=DEFAULT_CONFIG_PATH, validation_alias="CHRONICLE_CONFIG")
    log_level: str = Field(default="WARNING", validation_alias="CHRONICLE_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "CHRONICLE_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized


class Limits(BaseModel):
    """Caps applied while collecting and rendering."""

    max_commits: int = Field(default=50, description="Commits walked per branch.")
    max_changed_files: int = Field(default=80, description="Changed files listed per branch.")
    max_note_files: int = Field(default=30, description="Notes kept across all directories.")
    max_chars_per_item: int = Field(default=2000, description="Excerpt length for notes.")

    @field_validator("max_commits", "max_changed_files", "max_note_files", "max_chars_per_item")
    @classmethod
    def _ensure_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("limits must be >= 1")
        return value


class Display(BaseModel):
    """Rendering switches."""

    show_authors: bool = Field(
        default=True,
        description="Show commit authors (useful for teams, noise for solo work).",
    )


class ChronicleConfig(BaseModel):
    """Contents of chronicle.yaml."""

    output_dir: Path = Field(default=Path("./chronicles"))
    state_file: Path = Field(default=Path("./.chronicle-state.json"))
    repos: list[Path] = Field(default_factory=lambda: [Path(".")])
    todo_files: list[Path] = Field(default_factory=list)
    notes_dirs: list[Path] = Field(default_factory=list)
    limits: Limits = Field(default_factory=Limits)
    display: Display = Field(default_factory=Display)

    @field_validator("repos", "todo_files", "notes_dirs", mode="before")
    @classmethod
    def _ensure_list(cls, value):
        if value is None:
            return []
        if isinstance(value, (str, Path)):
            return [value]
        return value


def load_config(path: Path) -> ChronicleConfig:
    """Read and validate a YAML configuration file."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            f"Cannot read config from '{path}': {exc}. "
            "Run 'chronicle config init' to create one."
        ) from exc

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML in {path}: {exc}") from exc

    try:
        return ChronicleConfig.model_validate(document or {})
    except ValidationError as exc:
        raise ConfigError(f"Config validation error in {path}: {exc}") from exc


def save_config(config: ChronicleConfig, path: Path) -> None:
    """Write the configuration as YAML, creating parent directories."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json")
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> ChronicleSettings:
    """Return cached settings instance."""

    try:
        return ChronicleSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid environment settings: {exc}") from exc


__all__ = [
    "ChronicleConfig",
    "ChronicleSettings",
    "DEFAULT_CONFIG_PATH",
    "Display",
    "Limits",
    "get_settings",
    "load_config",
    "save_config",
]
