"""
Storage backend contract.

A backend is a key-value collaborator holding the serialized state blob.
The store calls `load` once at startup and `save` after every command;
each save replaces the whole value stored under the key.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageBackend(ABC):

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the blob stored under `key`, or None if there is none."""

    @abstractmethod
    def save(self, key: str, blob: str) -> None:
        """Replace the blob stored under `key`."""
