"""Tests for MemoryService main functionality."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from components.document_processing import NoteDirectoryError
from components.embedding_system import EmbeddingError

# Use an absolute import to ensure patch targets are correct.
from components.memory_service.main import MemoryService, NoteNotFoundError
from shared.config import (
    Config,
    EmbeddingModelConfig,
    PathsConfig,
    RelevanceConfig,
    SearchConfig,
)

VOCABULARY = ["kubernetes", "debugging", "pasta", "recipes"]


def bag_of_words(text: str):
    words = text.lower().split()
    return [float(words.count(term)) for term in VOCABULARY]


def write_note(brain: Path, group: str, name: str, tags, description) -> Path:
    folder = brain / group
    folder.mkdir(parents=True, exist_ok=True)
    note = folder / name
    note.write_text(
        f"---\ntags: [{', '.join(tags)}]\ndescription: {description}\n---\n\nBody.\n"
    )
    return note


@pytest.fixture
def brain(tmp_path):
    brain_dir = tmp_path / "brain"
    brain_dir.mkdir()
    return brain_dir


@pytest.fixture
def test_config(brain):
    """Create a test configuration."""
    return Config(
        paths=PathsConfig(brain_dir=str(brain)),
        embedding_model=EmbeddingModelConfig(dimension=len(VOCABULARY)),
    )


@pytest.fixture
def mock_model():
    model = Mock()
    model.get_text_embedding.side_effect = bag_of_words
    return model


@pytest.fixture
def memory_service(test_config, mock_model):
    """Create a MemoryService instance for testing."""
    return MemoryService(config=test_config, embedding_model=mock_model)


@pytest.fixture
def populated_brain(brain):
    write_note(
        brain, "k8s-project", "memory-1.md", ["kubernetes", "docker"],
        "kubernetes pod restart debugging",
    )  # fmt: skip
    write_note(
        brain, "k8s-project", "memory-2.md", ["kubernetes", "docker", "helm"],
        "helm chart notes",
    )  # fmt: skip
    write_note(brain, "food", "pasta.md", ["cooking"], "pasta recipes")
    (brain / "food" / "draft.md").write_text("# no frontmatter\n")
    return brain


class TestMemoryService:
    """Test the MemoryService class."""

    def test_initialization(self, test_config, brain):
        service = MemoryService(config=test_config)

        assert service.config is test_config
        assert service.index_path == brain.resolve() / "memory-index.json"
        assert service.list_indexed_files() == []

    def test_embedding_model_is_created_lazily_once(self, test_config):
        service = MemoryService(config=test_config)

        with patch(
            "components.memory_service.main.create_embedding_model"
        ) as mock_factory:
            mock_factory.return_value = Mock()
            first = service.get_embedding_model()
            second = service.get_embedding_model()

        assert first is second
        mock_factory.assert_called_once_with(test_config.embedding_model)

    def test_rebuild_without_embeddings_never_loads_model(
        self, test_config, populated_brain
    ):
        service = MemoryService(config=test_config)

        with patch(
            "components.memory_service.main.create_embedding_model"
        ) as mock_factory:
            summary = service.rebuild_index(embed=False)

        mock_factory.assert_not_called()
        assert summary.accepted_count == 3
        assert summary.skipped_count == 1
        assert summary.embedded_count == 0
        assert service.index_path.exists()

    def test_rebuild_with_embeddings(self, memory_service, populated_brain):
        summary = memory_service.rebuild_index(embed=True)

        assert summary.embedded_count == 3
        index = memory_service.load_index()
        assert all(entry.has_embedding for entry in index.entries.values())

    def test_rebuild_missing_brain_dir(self, tmp_path, mock_model):
        config = Config(paths=PathsConfig(brain_dir=str(tmp_path / "missing")))
        service = MemoryService(config=config, embedding_model=mock_model)

        with pytest.raises(NoteDirectoryError):
            service.rebuild_index()

    def test_update_file_adds_entry(self, memory_service, brain):
        note = write_note(brain, "misc", "new.md", ["python"], "pasta recipes")

        assert memory_service.update_file(note, embed=True)

        index = memory_service.load_index()
        entry = index.entries[str(note.resolve())]
        assert entry.tags == ["python"]
        assert entry.embedding == [0.0, 0.0, 1.0, 1.0]
        assert entry.group_name == "misc"

    def test_update_file_without_embed_drops_old_vector(
        self, memory_service, populated_brain
    ):
        memory_service.rebuild_index(embed=True)
        note = populated_brain / "food" / "pasta.md"

        assert memory_service.update_file(note)

        entry = memory_service.load_index().entries[str(note.resolve())]
        assert entry.embedding is None

    def test_update_file_missing(self, memory_service, brain):
        with pytest.raises(NoteNotFoundError, match="File not found"):
            memory_service.update_file(brain / "nope.md")

    def test_update_file_requires_markdown(self, memory_service, brain):
        text_file = brain / "notes.txt"
        text_file.write_text("---\ntags: [a]\n---\n")

        with pytest.raises(ValueError, match=r"\.md"):
            memory_service.update_file(text_file)

    def test_update_file_without_frontmatter(self, memory_service, populated_brain):
        assert not memory_service.update_file(populated_brain / "food" / "draft.md")
        assert memory_service.load_index() is None

    def test_update_file_embedding_failure_still_indexes(
        self, memory_service, mock_model, brain
    ):
        mock_model.get_text_embedding.side_effect = RuntimeError("offline")
        note = write_note(brain, "misc", "a.md", ["x"], "kubernetes")

        assert memory_service.update_file(note, embed=True)

        entry = memory_service.load_index().entries[str(note.resolve())]
        assert entry.embedding is None

    def test_search_uses_configured_defaults(
        self, test_config, mock_model, populated_brain
    ):
        test_config.search = SearchConfig(threshold=0.5, max_results=1)
        service = MemoryService(config=test_config, embedding_model=mock_model)
        service.rebuild_index(embed=True)

        response = service.search("kubernetes debugging")

        assert response.index_found
        assert [r.file_name for r in response.results] == ["memory-1.md"]
        assert response.results[0].score == pytest.approx(1.0)

    def test_search_overrides(self, memory_service, populated_brain):
        memory_service.rebuild_index(embed=True)

        response = memory_service.search("pasta", threshold=0.0, max_results=10)

        assert [r.file_name for r in response.results][0] == "pasta.md"

    def test_search_without_index(self, memory_service, mock_model):
        response = memory_service.search("anything")

        assert not response.index_found
        mock_model.get_text_embedding.assert_not_called()

    def test_search_embedding_failure_raises(
        self, memory_service, mock_model, populated_brain
    ):
        memory_service.rebuild_index()
        mock_model.get_text_embedding.side_effect = RuntimeError("offline")

        with pytest.raises(EmbeddingError):
            memory_service.search("kubernetes")

    def test_find_related_by_note_excludes_itself(
        self, memory_service, populated_brain
    ):
        memory_service.rebuild_index()
        reference = populated_brain / "k8s-project" / "memory-1.md"

        matches = memory_service.find_related(reference)

        assert [m.entry.file_name for m in matches] == ["memory-2.md"]
        assert matches[0].shared_tags == ["kubernetes", "docker"]

    def test_find_related_by_terms(self, memory_service, populated_brain):
        memory_service.rebuild_index()

        matches = memory_service.find_related(
            tags=["kubernetes", "docker", "performance"]
        )

        assert len(matches) == 2
        assert all(m.score >= 4 for m in matches)

    def test_find_related_uses_relevance_config(
        self, test_config, populated_brain
    ):
        test_config.relevance = RelevanceConfig(min_overlap=1, max_results=1)
        service = MemoryService(config=test_config)
        service.rebuild_index()

        matches = service.find_related(tags=["kubernetes"])

        assert len(matches) == 1

    def test_find_related_without_index(self, memory_service):
        assert memory_service.find_related(tags=["a", "b"]) == []

    def test_find_related_note_without_frontmatter(
        self, memory_service, populated_brain
    ):
        with pytest.raises(ValueError, match="No valid frontmatter"):
            memory_service.find_related(populated_brain / "food" / "draft.md")

    def test_prune_missing(self, memory_service, populated_brain):
        memory_service.rebuild_index()
        gone = populated_brain / "food" / "pasta.md"
        gone.unlink()

        removed = memory_service.prune_missing()

        assert removed == [str(gone.resolve())]
        assert str(gone.resolve()) not in memory_service.list_indexed_files()

    def test_get_stats(self, memory_service, populated_brain):
        assert memory_service.get_stats()["index_found"] is False

        memory_service.rebuild_index(embed=True)
        stats = memory_service.get_stats()

        assert stats["index_found"] is True
        assert stats["total_files"] == 3
        assert stats["embedded_files"] == 3
        assert stats["version"] == 1

    def test_index_file_written_with_camel_case_keys(
        self, memory_service, populated_brain
    ):
        memory_service.rebuild_index()

        data = json.loads(memory_service.index_path.read_text())

        assert set(data) == {"version", "lastFullScanAt", "entries", "stats"}
        assert data["stats"]["totalFiles"] == 3
        entry = next(iter(data["entries"].values()))
        assert {"tags", "descriptionKeywords", "mtime", "basename"} <= set(entry)
