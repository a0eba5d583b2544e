"""Configuration system for nsimports using Pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IndexSettings(BaseModel):
    """What the indexer treats as project configs, sources and dependencies."""

    config_filename: str = "tsconfig.json"
    source_extensions: list[str] = Field(default_factory=lambda: [".ts", ".tsx"])
    dependency_dirs: list[str] = Field(default_factory=lambda: ["node_modules"])
    config_read_workers: int = 8

    @property
    def include_globs(self) -> list[str]:
        """One glob per source extension, e.g. ``**/*.ts`` and ``**/*.tsx``."""
        return [f"**/*{ext}" for ext in self.source_extensions]

    @property
    def dependency_exclude_globs(self) -> list[str]:
        return [f"**/{name}/**" for name in self.dependency_dirs]

    def is_source_file(self, path: str) -> bool:
        return any(path.endswith(ext) for ext in self.source_extensions)


class NsImportsConfig(BaseModel):
    """Root configuration model."""

    index: IndexSettings = Field(default_factory=IndexSettings)
    log_level: str = "INFO"


class EnvSettings(BaseSettings):
    """Environment variable overrides."""

    model_config = SettingsConfigDict(
        env_prefix="NSIMPORTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_filename: str | None = None
    log_level: str | None = None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, override wins on conflicts."""
    result = {**base}
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, return empty dict if not found."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_config(project_dir: Path | None = None) -> NsImportsConfig:
    """Load configuration with layered precedence.

    Order (later overrides earlier):
    1. Built-in defaults (Pydantic defaults)
    2. ~/.nsimports/config.yaml (global user config)
    3. <project_dir>/.nsimports/config.yaml (project-level config)
    4. Environment variables (NSIMPORTS_*)
    """
    global_config_dir = Path.home() / ".nsimports"
    project_config_dir = (project_dir or Path.cwd()) / ".nsimports"

    merged: dict[str, Any] = {}
    for config_path in [
        global_config_dir / "config.yaml",
        project_config_dir / "config.yaml",
    ]:
        layer = load_yaml_config(config_path)
        merged = _deep_merge(merged, layer)

    config = NsImportsConfig(**merged)

    env = EnvSettings()
    if env.config_filename:
        config = config.model_copy(
            update={"index": config.index.model_copy(update={"config_filename": env.config_filename})}
        )
    if env.log_level:
        config = config.model_copy(update={"log_level": env.log_level})

    return config
