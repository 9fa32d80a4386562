"""Test fixtures and configuration."""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest
from components.memory_service import MemoryService
from shared.config import (
    Config,
    EmbeddingModelConfig,
    PathsConfig,
    ServerConfig,
    WatcherConfig,
)

# Each dimension counts one concept; a text scores on every term it contains.
CONCEPTS: Dict[str, List[str]] = {
    "containers": ["kubernetes", "k8s", "pod", "pods", "docker", "container"],
    "debugging": ["debugging", "debug", "restart", "crash", "error"],
    "cooking": ["pasta", "recipe", "recipes", "cooking", "sauce", "cuisine"],
    "memory": ["memory", "index", "session", "sessions", "discovery"],
}


# --- This function enables logging visibility during tests ---
def pytest_configure(config):
    """Configure logging to be visible for all tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stdout,
    )


# -----------------------------------------------------------


def concept_embedding(text: str) -> List[float]:
    """Deterministic stand-in for a sentence embedding model."""
    words = [word.strip(".,!?;:").lower() for word in text.split()]
    return [
        float(sum(words.count(term) for term in terms)) for terms in CONCEPTS.values()
    ]


def write_note(
    brain_dir: Path,
    group: str,
    name: str,
    tags: Optional[List[str]] = None,
    description: Optional[str] = None,
    body: str = "Session notes.",
) -> Path:
    """Write a memory note; without tags and description it has no frontmatter."""
    folder = brain_dir / group
    folder.mkdir(parents=True, exist_ok=True)
    note = folder / name
    if tags is None and description is None:
        note.write_text(f"# {name}\n\n{body}\n")
        return note

    lines = ["---"]
    if tags is not None:
        lines.append(f"tags: [{', '.join(tags)}]")
    if description is not None:
        lines.append(f'description: "{description}"')
    lines += ["---", "", body, ""]
    note.write_text("\n".join(lines))
    return note


@pytest.fixture
def brain_dir(tmp_path: Path) -> Path:
    """Create a temporary brain directory."""
    directory = tmp_path / "brain"
    directory.mkdir()
    return directory


@pytest.fixture
def sample_notes(brain_dir: Path) -> Dict[str, Path]:
    """Create sample memory notes for testing."""
    return {
        "k8s": write_note(
            brain_dir,
            "k8s-project",
            "memory-20260210.md",
            tags=["kubernetes", "docker", "debugging"],
            description="Kubernetes pod restart debugging after a crash",
        ),
        "k8s_followup": write_note(
            brain_dir,
            "k8s-project",
            "memory-20260211.md",
            tags=["kubernetes", "docker"],
            description="Docker image cleanup for the cluster",
        ),
        "food": write_note(
            brain_dir,
            "food",
            "memory-20260101.md",
            tags=["cooking"],
            description="Pasta recipes and sauce experiments",
        ),
        "memory": write_note(
            brain_dir,
            "agents",
            "memory-20260301.md",
            tags=["python", "tooling"],
            description="Implemented memory index system for fast session discovery",
        ),
        "draft": write_note(brain_dir, "scratch", "draft.md"),
    }


@pytest.fixture
def test_config(brain_dir: Path) -> Config:
    """Create a test configuration."""
    return Config(
        paths=PathsConfig(brain_dir=str(brain_dir)),
        embedding_model=EmbeddingModelConfig(dimension=len(CONCEPTS)),
        watcher=WatcherConfig(enabled=False),  # Disable for tests
        server=ServerConfig(host="127.0.0.1", api_port=8000, mcp_port=8001),
    )


@pytest.fixture
def fake_embedding_model() -> Mock:
    """An embedding model that needs no download."""
    model = Mock()
    model.get_text_embedding.side_effect = concept_embedding
    return model


@pytest.fixture
def memory_service(test_config: Config, fake_embedding_model: Mock) -> MemoryService:
    return MemoryService(config=test_config, embedding_model=fake_embedding_model)
