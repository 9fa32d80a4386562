"""
The IndexStore owns the collection of indexed memory notes.

It supports two write paths:
- a full rebuild, which discards any prior state and re-reads every note, and
- a single-note upsert, which loads the persisted index, fully replaces one
  entry and writes the whole index back.

Notes without valid frontmatter are never indexed. Per-note failures during a
rebuild are recorded in the returned summary and never abort the batch.
"""

import logging
import math
import os
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from components.document_processing import NoteMetadata, parse_frontmatter
from components.keyword_extraction import extract_keywords
from components.similarity import is_valid_embedding

from .models import (
    IndexEntry,
    MemoryIndex,
    NoteOutcome,
    NoteStatus,
    RebuildSummary,
)
from .repository import IndexRepository

logger = logging.getLogger(__name__)

MetadataReader = Callable[[str], Optional[NoteMetadata]]
EmbedFn = Callable[[str], Sequence[float]]


def normalize_note_path(note_path: Union[str, Path]) -> str:
    """Absolute, symlink-resolved form of a note path used as the index key."""
    return str(Path(note_path).expanduser().resolve())


class IndexStore:
    """Maintains the persisted metadata index over memory notes."""

    def __init__(
        self,
        repository: IndexRepository,
        metadata_reader: MetadataReader = parse_frontmatter,
        embedding_dimension: Optional[int] = 384,
    ):
        """
        Args:
            repository: Load/save boundary for the persisted index.
            metadata_reader: Extracts a note's tags and description, returning
                None when the note has no valid frontmatter.
            embedding_dimension: Required embedding length, or None to accept
                any non-empty vector.
        """
        self.repository = repository
        self.metadata_reader = metadata_reader
        self.embedding_dimension = embedding_dimension

    def load(self) -> Optional[MemoryIndex]:
        """Load the persisted index, or None if none usable exists."""
        return self.repository.load()

    def load_or_create(self) -> MemoryIndex:
        """Load the persisted index, substituting an empty one when unusable."""
        index = self.repository.load()
        if index is None:
            logger.warning("Index not found or invalid, creating new index structure")
            index = MemoryIndex()
        return index

    def build_entry(self, note_path: str, metadata: NoteMetadata) -> IndexEntry:
        """Derive a complete index entry for a note from its metadata.

        Raises:
            OSError: If the note's modification time cannot be read.
        """
        path = Path(note_path)
        return IndexEntry(
            path=note_path,
            tags=list(metadata.tags),
            description_keywords=extract_keywords(metadata.description),
            description=metadata.description,
            modified_at=math.floor(os.stat(note_path).st_mtime),
            group_name=path.parent.name,
            file_name=path.name,
        )

    def _checked_embedding(self, embedding: Sequence[float]) -> Optional[List[float]]:
        if not is_valid_embedding(embedding, self.embedding_dimension):
            return None
        return [float(value) for value in embedding]

    def rebuild(
        self,
        note_paths: Iterable[Union[str, Path]],
        embed_fn: Optional[EmbedFn] = None,
        persist: bool = True,
    ) -> RebuildSummary:
        """
        Build a fresh index from the given notes, replacing any prior state.

        Args:
            note_paths: Paths of all notes to index.
            embed_fn: Optional text-to-vector function. When given, every note
                with a non-empty description gets an embedding attempt.
            persist: Save the new index through the repository.

        Returns:
            The new index together with one outcome per note.
        """
        start_time = time.perf_counter()
        index = MemoryIndex()
        outcomes: List[NoteOutcome] = []

        for raw_path in note_paths:
            note_path = normalize_note_path(raw_path)
            try:
                metadata = self.metadata_reader(note_path)
                if metadata is None:
                    logger.debug(f"Skipping {note_path}: no valid frontmatter")
                    outcomes.append(
                        NoteOutcome(
                            path=note_path,
                            status=NoteStatus.SKIPPED,
                            reason="no_frontmatter",
                        )
                    )
                    continue

                entry = self.build_entry(note_path, metadata)
            except Exception as e:
                logger.warning(f"Skipping {note_path}: {e}")
                outcomes.append(
                    NoteOutcome(
                        path=note_path,
                        status=NoteStatus.SKIPPED,
                        reason=f"error: {e}",
                    )
                )
                continue

            outcome = NoteOutcome(path=note_path, status=NoteStatus.ACCEPTED)
            if embed_fn is not None and entry.description:
                try:
                    embedding = self._checked_embedding(embed_fn(entry.description))
                    if embedding is None:
                        raise ValueError("embedding is malformed")
                    entry.embedding = embedding
                    outcome.embedded = True
                except Exception as e:
                    logger.warning(f"Failed to embed {entry.file_name}: {e}")
                    outcome.embedding_failed = True

            index.entries[note_path] = entry
            outcomes.append(outcome)

        index.refresh_stats()
        index.stats.last_scan_duration_ms = int(
            (time.perf_counter() - start_time) * 1000
        )
        index.touch()

        if persist:
            with self.repository.lock():
                self.repository.save(index)

        summary = RebuildSummary(index=index, outcomes=outcomes)
        logger.info(
            f"Rebuilt index: {summary.accepted_count} notes indexed, "
            f"{summary.skipped_count} skipped, {summary.embedded_count} embedded "
            f"in {index.stats.last_scan_duration_ms}ms"
        )
        return summary

    def upsert(
        self,
        note_path: Union[str, Path],
        embedding: Optional[Sequence[float]] = None,
        metadata: Optional[NoteMetadata] = None,
    ) -> bool:
        """
        Insert or fully replace the index entry for a single note.

        Args:
            note_path: Path of the note that changed.
            embedding: Optional precomputed description embedding. Malformed
                vectors are discarded with a warning.
            metadata: Optional already-extracted metadata; read from the note
                when omitted.

        Returns:
            True when the entry was written, False when the note has no valid
            frontmatter or cannot be read. The index is untouched on failure.
        """
        key = normalize_note_path(note_path)

        with self.repository.lock():
            index = self.load_or_create()

            try:
                if metadata is None:
                    metadata = self.metadata_reader(key)
                if metadata is None:
                    logger.warning(f"No valid frontmatter found in {key}")
                    return False
                entry = self.build_entry(key, metadata)
            except (OSError, ValueError) as e:
                logger.error(f"Error updating index for {key}: {e}")
                return False

            if embedding is not None:
                checked = self._checked_embedding(embedding)
                if checked is None:
                    logger.warning(
                        f"Ignoring malformed embedding for {entry.file_name}"
                    )
                entry.embedding = checked

            index.put(entry)
            index.touch()
            self.repository.save(index)

        logger.info(f"Updated index for: {entry.file_name}")
        return True

    def prune_missing(self) -> List[str]:
        """
        Remove entries whose note no longer exists on disk.

        Returns:
            The removed paths, empty when nothing was stale.
        """
        with self.repository.lock():
            index = self.repository.load()
            if index is None:
                return []

            removed = [path for path in index.entries if not os.path.exists(path)]
            if not removed:
                return []

            for path in removed:
                del index.entries[path]
            index.refresh_stats()
            index.touch()
            self.repository.save(index)

        logger.info(f"Pruned {len(removed)} stale entries from the index")
        return removed
