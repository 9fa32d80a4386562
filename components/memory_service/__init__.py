from .main import MemoryService, NoteNotFoundError

__all__ = ["MemoryService", "NoteNotFoundError"]
