"""Configuration management for rustydocs."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

RUSTYDOCS_DIR = ".rustydocs"
CONFIG_FILE = "config.json"
LANCEDB_DIR = "lancedb"
SNAPSHOT_FILE = "snapshot.json"


class LLMConfig(BaseModel):
    """Language model provider configuration."""

    provider: str = "openai"
    model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-small"
    api_key_env: str = ""
    base_url: str | None = None
    seed: int = 42
    top_p: float = 0.05

    @property
    def api_key(self) -> str | None:
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        env_map = {
            "openai": "OPENAI_API_KEY",
        }
        env_var = env_map.get(self.provider, "")
        return os.environ.get(env_var)


class VectorStoreConfig(BaseModel):
    """Vector store configuration."""

    uri: str = ""  # empty = <project>/.rustydocs/lancedb
    table_name: str = "code_elements"
    vector_size: int = 1536
    max_concurrent_tasks: int | None = 20
    search_limit: int = 3


class IndexerConfig(BaseModel):
    """Indexer configuration."""

    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "target",
            ".git",
            ".rustydocs",
            "node_modules",
            "*.rs.bk",
        ]
    )
    # Modules whose lower-cased name contains this are skipped entirely
    test_module_pattern: str = "test"


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    llm: LLMConfig = Field(default_factory=LLMConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    indexer: IndexerConfig = Field(default_factory=IndexerConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .rustydocs directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / RUSTYDOCS_DIR).is_dir():
            return current
        current = current.parent
    if (current / RUSTYDOCS_DIR).is_dir():
        return current
    return None


def get_rustydocs_dir(root: Path) -> Path:
    """Get the .rustydocs directory for a project root."""
    return root / RUSTYDOCS_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .rustydocs/config.json."""
    config_path = get_rustydocs_dir(root) / CONFIG_FILE
    if config_path.exists():
        data = json.loads(config_path.read_text())
        return ProjectConfig(**data)
    return ProjectConfig(name=root.name, root_path=str(root))


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .rustydocs/config.json."""
    rd_dir = get_rustydocs_dir(root)
    rd_dir.mkdir(parents=True, exist_ok=True)
    config_path = rd_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'llm.model')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    return ProjectConfig(**data)


def lancedb_uri(root: Path, config: ProjectConfig) -> str:
    """Resolve where the LanceDB tables live for a project."""
    if config.vector_store.uri:
        return config.vector_store.uri
    return str(get_rustydocs_dir(root) / LANCEDB_DIR)
