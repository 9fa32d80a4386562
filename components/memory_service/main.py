"""
This service encapsulates all the business logic for interacting with the
memory index. It is completely decoupled from any web framework (like FastAPI)
and the command line, and serves as the single entry point for all index
operations.

Responsibilities:
- Rebuilding the index from every note in the brain directory.
- Updating the index after a single note changes.
- Semantic search over note descriptions.
- Discovering related notes by shared tags and keywords.
- Pruning entries for notes that no longer exist.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from components.document_processing import (
    NoteMetadata,
    find_markdown_files,
    is_note_file,
    parse_frontmatter,
)
from components.embedding_system import create_embedding_model, embed_text
from components.index_store import (
    IndexRepository,
    IndexStore,
    JsonFileIndexRepository,
    MemoryIndex,
    RebuildSummary,
    normalize_note_path,
)
from components.keyword_extraction import extract_keywords
from components.relevance import RelatedMatch, match_related
from components.search_engine import SearchEngine, SearchResponse
from llama_index.core.embeddings import BaseEmbedding
from shared.config import Config

logger = logging.getLogger(__name__)


class NoteNotFoundError(FileNotFoundError):
    """Raised when a requested note does not exist."""


class MemoryService:
    """The central service for all memory-index business logic."""

    def __init__(
        self,
        config: Config,
        repository: Optional[IndexRepository] = None,
        embedding_model: Optional[BaseEmbedding] = None,
    ):
        """
        Initializes the MemoryService with its required dependencies.

        Args:
            config: The application's configuration object.
            repository: Persistence for the index; a JSON file at the
                configured index path when omitted.
            embedding_model: A preloaded embedding model. When omitted the
                configured model is created on first use.
        """
        self.config = config
        self.repository = repository or JsonFileIndexRepository(
            config.get_index_path()
        )
        self.store = IndexStore(
            self.repository,
            metadata_reader=parse_frontmatter,
            embedding_dimension=config.embedding_model.dimension,
        )
        self._embedding_model = embedding_model
        self._model_lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def index_path(self) -> Path:
        return self.config.get_index_path()

    def get_embedding_model(self) -> BaseEmbedding:
        """Return the embedding model, loading it once on first use."""
        with self._model_lock:
            if self._embedding_model is None:
                logger.info(
                    "Loading embedding model "
                    f"{self.config.embedding_model.provider}/"
                    f"{self.config.embedding_model.model_name}..."
                )
                self._embedding_model = create_embedding_model(
                    self.config.embedding_model
                )
            return self._embedding_model

    def embed(self, text: str) -> List[float]:
        """Embed text with the configured model.

        Raises:
            EmbeddingError: If the model fails or returns a malformed vector.
        """
        return embed_text(
            self.get_embedding_model(),
            text,
            dimension=self.config.embedding_model.dimension,
        )

    def rebuild_index(self, embed: bool = False) -> RebuildSummary:
        """
        Rebuilds the whole index from every note under the brain directory.

        Args:
            embed: Generate description embeddings for every note.

        Raises:
            NoteDirectoryError: If the brain directory does not exist.
        """
        brain_path = self.config.get_brain_path()
        logger.info(f"Building memory index from {brain_path}...")
        note_paths = find_markdown_files(brain_path)

        embed_fn = None
        if embed:
            self.get_embedding_model()
            embed_fn = self.embed

        with self._write_lock:
            return self.store.rebuild(note_paths, embed_fn=embed_fn)

    def update_file(
        self,
        file_path: Union[str, Path],
        embed: bool = False,
        embedding: Optional[Sequence[float]] = None,
    ) -> bool:
        """
        Updates or adds a single note's entry in the index.

        Args:
            file_path: Path to the markdown note.
            embed: Generate an embedding for the note's description.
            embedding: A precomputed embedding; takes precedence over ``embed``.

        Returns:
            True when the entry was written, False when the note has no valid
            frontmatter.

        Raises:
            NoteNotFoundError: If the file does not exist.
            ValueError: If the file is not a markdown note.
        """
        note_path = Path(file_path).expanduser()
        if not note_path.is_file():
            raise NoteNotFoundError(f"File not found: {note_path}")
        if not is_note_file(note_path):
            raise ValueError(f"File must be a markdown file (.md): {note_path}")

        metadata: Optional[NoteMetadata] = None
        if embedding is None and embed:
            metadata = parse_frontmatter(note_path)
            if metadata is not None and metadata.description:
                try:
                    embedding = self.embed(metadata.description)
                except Exception as e:
                    logger.warning(f"Failed to embed {note_path.name}: {e}")

        with self._write_lock:
            return self.store.upsert(note_path, embedding=embedding, metadata=metadata)

    def search(
        self,
        query: str,
        threshold: Optional[float] = None,
        max_results: Optional[int] = None,
    ) -> SearchResponse:
        """
        Performs a semantic search over note descriptions.

        Args:
            query: The natural-language search query.
            threshold: Minimum similarity; the configured default when None.
            max_results: Result cap; the configured default when None.

        Raises:
            EmbeddingError: If the query cannot be embedded.
        """
        final_threshold = (
            threshold if threshold is not None else self.config.search.threshold
        )
        final_limit = (
            max_results if max_results is not None else self.config.search.max_results
        )
        engine = SearchEngine(self.repository, self.embed)
        logger.info(f"Searching memories for: '{query}'")
        return engine.search(query, threshold=final_threshold, max_results=final_limit)

    def find_related(
        self,
        file_path: Optional[Union[str, Path]] = None,
        tags: Optional[Sequence[str]] = None,
        keywords: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[RelatedMatch]:
        """
        Finds indexed notes sharing tags or keywords with a reference.

        The reference is either a note on disk (its frontmatter supplies the
        tags and keywords and the note itself is excluded from the results)
        or explicit tag and keyword lists.

        Raises:
            NoteNotFoundError: If ``file_path`` does not exist.
            ValueError: If ``file_path`` has no valid frontmatter.
        """
        exclude_path = None
        reference_tags = list(tags or [])
        reference_keywords = list(keywords or [])

        if file_path is not None:
            note_path = Path(file_path).expanduser()
            if not note_path.is_file():
                raise NoteNotFoundError(f"File not found: {note_path}")
            metadata = parse_frontmatter(note_path)
            if metadata is None:
                raise ValueError(f"No valid frontmatter found in {note_path}")
            reference_tags = reference_tags or metadata.tags
            reference_keywords = reference_keywords or extract_keywords(
                metadata.description
            )
            exclude_path = normalize_note_path(note_path)

        index = self.repository.load()
        if index is None:
            logger.warning("No memory index available for related-note lookup")
            return []

        relevance = self.config.relevance
        return match_related(
            reference_tags,
            reference_keywords,
            index.entries.values(),
            min_overlap=relevance.min_overlap,
            tag_weight=relevance.tag_weight,
            keyword_weight=relevance.keyword_weight,
            exclude_path=exclude_path,
            limit=limit if limit is not None else relevance.max_results,
        )

    def prune_missing(self) -> List[str]:
        """Removes entries whose note no longer exists; returns their paths."""
        with self._write_lock:
            return self.store.prune_missing()

    def load_index(self) -> Optional[MemoryIndex]:
        return self.repository.load()

    def list_indexed_files(self) -> List[str]:
        """
        Retrieves the paths of all notes currently in the index.

        Returns:
            A sorted list of note paths, empty when no index exists.
        """
        index = self.repository.load()
        if index is None:
            return []
        return sorted(index.entries)

    def get_stats(self) -> Dict[str, Any]:
        """Summarises the current index for reporting."""
        index = self.repository.load()
        if index is None:
            return {"index_found": False, "index_path": str(self.index_path)}

        return {
            "index_found": True,
            "index_path": str(self.index_path),
            "version": index.version,
            "last_full_scan_at": index.last_full_scan_at,
            "total_files": index.stats.total_files,
            "last_scan_duration_ms": index.stats.last_scan_duration_ms,
            "embedded_files": sum(
                1 for entry in index.entries.values() if entry.has_embedding
            ),
        }
