"""Data models for the memory index."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

INDEX_VERSION = 1


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


class IndexEntry(BaseModel):
    """Indexed metadata for a single memory note."""

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(
        default="",
        exclude=True,
        description="Absolute path of the note; the key of the index entry",
    )
    tags: List[str] = Field(default_factory=list, description="Declared tags")
    description_keywords: List[str] = Field(
        default_factory=list,
        alias="descriptionKeywords",
        description="Up to ten keywords derived from the description",
    )
    description: str = Field(default="", description="Raw description text")
    modified_at: int = Field(
        default=0, alias="mtime", description="Last-modified time, Unix seconds"
    )
    group_name: str = Field(
        default="", alias="basename", description="Name of the containing folder"
    )
    file_name: str = Field(default="", alias="filename", description="File name")
    embedding: Optional[List[float]] = Field(
        default=None, description="Description embedding, when one was generated"
    )

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


class IndexStats(BaseModel):
    """Summary statistics kept alongside the entries."""

    model_config = ConfigDict(populate_by_name=True)

    total_files: int = Field(default=0, alias="totalFiles")
    last_scan_duration_ms: int = Field(default=0, alias="lastScanDurationMs")


class MemoryIndex(BaseModel):
    """The full persisted index."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = Field(default=INDEX_VERSION, description="Schema version")
    last_full_scan_at: str = Field(
        default_factory=utc_now_iso,
        alias="lastFullScanAt",
        description="Time of the latest full rebuild or incremental update",
    )
    entries: Dict[str, IndexEntry] = Field(default_factory=dict)
    stats: IndexStats = Field(default_factory=IndexStats)

    @model_validator(mode="after")
    def _attach_entry_paths(self) -> "MemoryIndex":
        for path, entry in self.entries.items():
            entry.path = path
        return self

    def put(self, entry: IndexEntry) -> None:
        """Insert or fully replace the entry keyed by its path."""
        self.entries[entry.path] = entry
        self.refresh_stats()

    def refresh_stats(self) -> None:
        self.stats.total_files = len(self.entries)

    def touch(self) -> None:
        self.last_full_scan_at = utc_now_iso()

    def to_json(self) -> str:
        """Serialize using the on-disk field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class NoteStatus(str, Enum):
    ACCEPTED = "accepted"
    SKIPPED = "skipped"


class NoteOutcome(BaseModel):
    """What happened to one note during a full rebuild."""

    path: str
    status: NoteStatus
    reason: Optional[str] = None
    embedded: bool = False
    embedding_failed: bool = False


class RebuildSummary(BaseModel):
    """Result of a full rebuild: the new index plus per-note outcomes."""

    index: MemoryIndex
    outcomes: List[NoteOutcome] = Field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == NoteStatus.ACCEPTED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == NoteStatus.SKIPPED)

    @property
    def embedded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.embedded)

    @property
    def embedding_failure_count(self) -> int:
        return sum(1 for o in self.outcomes if o.embedding_failed)

    @property
    def skipped(self) -> List[NoteOutcome]:
        return [o for o in self.outcomes if o.status == NoteStatus.SKIPPED]
