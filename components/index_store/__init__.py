"""Index store component.

Owns the persisted collection of memory index entries and its consistency
rules: full rebuild, single-note upsert and stale-entry pruning.
"""

from .index_store import IndexStore, normalize_note_path
from .models import (
    INDEX_VERSION,
    IndexEntry,
    IndexStats,
    MemoryIndex,
    NoteOutcome,
    NoteStatus,
    RebuildSummary,
    utc_now_iso,
)
from .repository import (
    IndexRepository,
    IndexStoreError,
    InMemoryIndexRepository,
    JsonFileIndexRepository,
    parse_index,
)

__all__ = [
    # Store
    "IndexStore",
    "normalize_note_path",
    # Models
    "INDEX_VERSION",
    "IndexEntry",
    "IndexStats",
    "MemoryIndex",
    "NoteOutcome",
    "NoteStatus",
    "RebuildSummary",
    "utc_now_iso",
    # Persistence
    "IndexRepository",
    "IndexStoreError",
    "InMemoryIndexRepository",
    "JsonFileIndexRepository",
    "parse_index",
]
