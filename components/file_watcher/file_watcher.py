"""File watcher for live memory index synchronization."""

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict

from components.document_processing import is_note_file
from components.memory_service import MemoryService, NoteNotFoundError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class MemoryEventHandler(FileSystemEventHandler):
    """Handles file system events for the brain directory."""

    def __init__(
        self,
        service: MemoryService,
        debounce_seconds: float = 2,
        embed: bool = False,
    ):
        super().__init__()
        self.service = service
        self.debounce_seconds = debounce_seconds
        self.embed = embed

        # Track pending file operations to debounce rapid changes
        self._pending_operations: Dict[str, float] = {}
        self._operation_lock = threading.Lock()

        # Start debounce worker thread
        self._stop_debounce = threading.Event()
        self._debounce_thread = threading.Thread(
            target=self._debounce_worker, daemon=True
        )
        self._debounce_thread.start()

    def on_created(self, event: Any) -> None:
        """Handle file creation events."""
        if not event.is_directory and is_note_file(event.src_path):
            self._schedule_operation(event.src_path, "created")

    def on_modified(self, event: Any) -> None:
        """Handle file modification events."""
        if not event.is_directory and is_note_file(event.src_path):
            self._schedule_operation(event.src_path, "modified")

    def on_deleted(self, event: Any) -> None:
        """Handle file deletion events."""
        if not event.is_directory and is_note_file(event.src_path):
            self._schedule_operation(event.src_path, "deleted")

    def on_moved(self, event: Any) -> None:
        """Handle renames as a deletion of the old path and a new note."""
        if event.is_directory:
            return
        if is_note_file(event.src_path):
            self._schedule_operation(event.src_path, "deleted")
        if is_note_file(event.dest_path):
            self._schedule_operation(event.dest_path, "created")

    def _schedule_operation(self, file_path: str, operation: str) -> None:
        """Schedule a file operation with debouncing."""
        key = f"{file_path}:{operation}"

        with self._operation_lock:
            self._pending_operations[key] = time.time()

    def pending_operations(self) -> Dict[str, float]:
        with self._operation_lock:
            return dict(self._pending_operations)

    def _debounce_worker(self) -> None:
        """Worker thread that processes debounced operations."""
        while not self._stop_debounce.is_set():
            try:
                current_time = time.time()
                operations_to_process = []

                with self._operation_lock:
                    # Find operations that have been pending long enough
                    for key, timestamp in list(self._pending_operations.items()):
                        if current_time - timestamp >= self.debounce_seconds:
                            operations_to_process.append(key)
                            del self._pending_operations[key]

                # Process the operations outside the lock
                for key in operations_to_process:
                    file_path, operation = key.rsplit(":", 1)
                    self._process_file_operation(file_path, operation)

                self._stop_debounce.wait(0.5)

            except Exception as e:
                logger.error(f"Error in debounce worker: {e}")

    def _process_file_operation(self, file_path: str, operation: str) -> None:
        """Process a single file operation."""
        try:
            file_path_obj = Path(file_path)

            if operation == "deleted":
                # Stale entries are left for prune or a full rebuild
                logger.info(
                    f"Note deleted: {file_path}. Run 'memory-index prune' to drop "
                    f"its index entry."
                )
                return

            if not file_path_obj.exists():
                logger.debug(f"File {file_path} no longer exists, skipping {operation}")
                return

            logger.info(f"Processing {operation} operation for {file_path}")
            if self.service.update_file(file_path_obj, embed=self.embed):
                logger.info(f"Updated index for {operation} note: {file_path}")
            else:
                logger.warning(f"Note {file_path} was not indexed")

        except NoteNotFoundError:
            logger.debug(f"File {file_path} disappeared before it could be indexed")
        except Exception as e:
            logger.error(f"Error processing {operation} for {file_path}: {e}")

    def stop(self) -> None:
        """Stop the debounce worker thread."""
        self._stop_debounce.set()
        if self._debounce_thread.is_alive():
            self._debounce_thread.join(timeout=5)


class MemoryWatcher:
    """Watches the brain directory for note changes and updates the index."""

    def __init__(self, service: MemoryService):
        self.service = service
        self.config = service.config

        self.observer: Any = None
        self.event_handler: MemoryEventHandler | None = None

    def start(self) -> None:
        """Start watching the brain directory for changes."""
        if not self.config.watcher.enabled:
            logger.info("File watching is disabled in configuration")
            return

        brain_path = self.config.get_brain_path()
        if not brain_path.exists():
            logger.warning(f"Brain directory does not exist: {brain_path}")
            return

        logger.info(f"Starting file watcher for brain directory: {brain_path}")

        # Create event handler
        self.event_handler = MemoryEventHandler(
            self.service,
            debounce_seconds=self.config.watcher.debounce_seconds,
            embed=self.config.watcher.embed,
        )

        # Create and start observer
        self.observer = Observer()
        self.observer.schedule(self.event_handler, str(brain_path), recursive=True)
        self.observer.start()

        logger.info("File watcher started successfully")

    def stop(self) -> None:
        """Stop watching the brain directory."""
        if self.observer:
            logger.info("Stopping file watcher")
            self.observer.stop()
            self.observer.join()
            self.observer = None

        if self.event_handler:
            self.event_handler.stop()
            self.event_handler = None

        logger.info("File watcher stopped")

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        return self.observer is not None and self.observer.is_alive()
