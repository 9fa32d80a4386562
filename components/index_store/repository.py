"""
Persistence boundary for the memory index.

The index is a single JSON document that is loaded whole, mutated in memory
and written back whole. ``JsonFileIndexRepository`` writes through a temporary
file and an atomic rename so readers never observe a half-written index, and
serialises read-modify-write cycles with an advisory lock file.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import ContextManager, Iterator, Optional, Protocol, Union

from pydantic import ValidationError

from .models import INDEX_VERSION, MemoryIndex

try:
    import fcntl  # Unix only
except ImportError:  # pragma: no cover
    fcntl = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class IndexStoreError(Exception):
    """Raised when the index cannot be persisted."""


class IndexRepository(Protocol):
    """Load/save boundary for the persisted index."""

    def exists(self) -> bool:
        """Whether any persisted index is present."""
        ...

    def load(self) -> Optional[MemoryIndex]:
        """Load the index; None when it is missing, unreadable or outdated."""
        ...

    def save(self, index: MemoryIndex) -> None:
        """Replace the persisted index."""
        ...

    def lock(self) -> ContextManager[None]:
        """Hold exclusive access for a read-modify-write cycle."""
        ...


def parse_index(raw: str, source: str = "index") -> Optional[MemoryIndex]:
    """Parse a serialized index, rejecting bad JSON and other schema versions."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {source}: {e}")
        return None

    if not isinstance(data, dict) or data.get("version") != INDEX_VERSION:
        version = data.get("version") if isinstance(data, dict) else None
        logger.warning(
            f"Index version mismatch in {source}: found {version!r}, "
            f"expected {INDEX_VERSION}"
        )
        return None

    try:
        return MemoryIndex.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid index structure in {source}: {e}")
        return None


class JsonFileIndexRepository:
    """Stores the index as a pretty-printed JSON file."""

    def __init__(self, index_path: Union[str, Path]):
        self.index_path = Path(index_path)
        self.lock_path = self.index_path.with_name(self.index_path.name + ".lock")

    def exists(self) -> bool:
        return self.index_path.is_file()

    def load(self) -> Optional[MemoryIndex]:
        if not self.index_path.exists():
            logger.warning(f"Index file not found at {self.index_path}.")
            return None

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            logger.error(f"Failed to read index file at {self.index_path}: {e}")
            return None

        index = parse_index(raw, source=str(self.index_path))
        if index is not None:
            logger.debug(
                f"Loaded index with {len(index.entries)} entries from {self.index_path}"
            )
        return index

    def save(self, index: MemoryIndex) -> None:
        self.index_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.index_path.parent),
            prefix=f".{self.index_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(index.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.index_path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise IndexStoreError(
                f"Failed to write index to {self.index_path}: {e}"
            ) from e

        logger.info(
            f"Saved index with {index.stats.total_files} entries to {self.index_path}"
        )

    @contextmanager
    def lock(self) -> Iterator[None]:
        if fcntl is None:
            yield
            return

        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


class InMemoryIndexRepository:
    """Keeps the serialized index in memory. Used by tests and embedders."""

    def __init__(self, raw: Optional[str] = None):
        self.raw = raw
        self.save_count = 0

    def exists(self) -> bool:
        return self.raw is not None

    def load(self) -> Optional[MemoryIndex]:
        if self.raw is None:
            return None
        return parse_index(self.raw, source="in-memory index")

    def save(self, index: MemoryIndex) -> None:
        self.raw = index.to_json()
        self.save_count += 1

    def lock(self) -> ContextManager[None]:
        return nullcontext()
