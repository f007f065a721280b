"""Storage backends for the persisted state blob (memory, file, etc.)."""

from .base import StorageBackend
from .file import FileBackend
from .memory import MemoryBackend

__all__ = ["StorageBackend", "FileBackend", "MemoryBackend"]
