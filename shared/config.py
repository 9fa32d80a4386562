"""Configuration management for the memory index."""

import logging
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_BRAIN_DIR = "~/.agents/brain"
DEFAULT_INDEX_FILE = "memory-index.json"


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    brain_dir: str = Field(
        default=DEFAULT_BRAIN_DIR,
        description="Root directory holding the markdown memory notes",
    )
    index_file: str = Field(
        default=DEFAULT_INDEX_FILE,
        description="Index file location; relative paths resolve inside brain_dir",
    )


class SearchConfig(BaseModel):
    """Configuration for semantic search."""

    threshold: float = Field(default=0.3, description="Minimum similarity score")
    max_results: int = Field(default=5, description="Maximum number of results")
    description_preview_length: int = Field(
        default=100, description="Characters of description shown per result"
    )


class RelevanceConfig(BaseModel):
    """Configuration for tag/keyword relevance matching."""

    min_overlap: int = Field(
        default=2, description="Shared tags or keywords needed to qualify"
    )
    tag_weight: int = Field(default=2, description="Score weight of a shared tag")
    keyword_weight: int = Field(
        default=1, description="Score weight of a shared keyword"
    )
    max_results: int = Field(default=5, description="Maximum number of matches")


class EmbeddingModelConfig(BaseModel):
    """Configuration for embedding models."""

    provider: str = Field(
        default="sentence_transformers",
        description="Embedding provider: sentence_transformers or openai_endpoint",
    )
    model_name: str = Field(
        default="all-MiniLM-L6-v2", description="Model name or identifier"
    )
    dimension: int = Field(default=384, description="Length of embedding vectors")
    endpoint_url: Optional[str] = Field(
        default=None, description="API endpoint URL for openai_endpoint provider"
    )
    api_key: Optional[str] = Field(
        default=None, description="API key for openai_endpoint provider"
    )


class WatcherConfig(BaseModel):
    """Configuration for file watching."""

    enabled: bool = Field(default=True, description="Enable file watching")
    embed: bool = Field(
        default=False, description="Generate embeddings for changed notes"
    )
    debounce_seconds: float = Field(
        default=2, description="Debounce time for file changes"
    )


class ServerConfig(BaseModel):
    """Configuration for the servers."""

    host: str = Field(default="127.0.0.1", description="Server host")
    api_port: int = Field(default=8000, description="Standard API port")
    mcp_port: int = Field(default=8001, description="MCP server port")


class Config(BaseModel):
    """Main configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    relevance: RelevanceConfig = Field(default_factory=RelevanceConfig)
    embedding_model: EmbeddingModelConfig = Field(default_factory=EmbeddingModelConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from a TOML file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, "r") as f:
            config_data = toml.load(f)

        return cls(**config_data)

    def get_brain_path(self) -> Path:
        """Get the brain directory as a Path object."""
        return Path(self.paths.brain_dir).expanduser().resolve()

    def get_index_path(self) -> Path:
        """Get the index file location, resolving relative paths in the brain."""
        index_path = Path(self.paths.index_file).expanduser()
        if not index_path.is_absolute():
            index_path = self.get_brain_path() / index_path
        return index_path


def load_config(
    config_dir: Optional[str] = None,
    app_config_path: Optional[str] = None,
) -> Config:
    """Load the application config, handling CLI overrides.

    An explicitly requested file must exist. When falling back to the default
    location, a missing file yields the built-in defaults.
    """
    explicit = bool(app_config_path or config_dir)
    base_dir = Path(config_dir) if config_dir else Path("config")
    app_path = Path(app_config_path) if app_config_path else base_dir / "app.toml"

    try:
        logger.info(f"Loading app config from: {app_path}")
        with open(app_path, "r") as f:
            app_data = toml.load(f)
    except FileNotFoundError:
        if explicit:
            logger.error(f"Application config file not found at {app_path}. Aborting.")
            raise
        logger.warning(
            f"Application config file not found at {app_path}. Using defaults."
        )
        app_data = {}

    return Config(**app_data)
