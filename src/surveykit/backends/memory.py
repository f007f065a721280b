"""In-memory storage backend, for tests and embedding."""

from typing import Dict, Optional

from .base import StorageBackend


class MemoryBackend(StorageBackend):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.save_count = 0

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, blob: str) -> None:
        self.data[key] = blob
        self.save_count += 1
