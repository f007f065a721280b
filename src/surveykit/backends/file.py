"""
File storage backend.

Stores each key as one file under a directory. Saves write a temporary
file next to the target and swap it in with `Path.replace`, so a reader
sees either the previous blob or the new one, never a partial write.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from surveykit.errors import StorageError

from .base import StorageBackend


logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileBackend(StorageBackend):

    def __init__(self, directory, suffix: str = ".json"):
        self.directory = Path(directory)
        self.suffix = suffix

    def path_for(self, key: str) -> Path:
        """File path used for `key`. Characters unsafe in file names become '_'."""
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}{self.suffix}"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def save(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        temp_path = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(blob, encoding="utf-8")
            temp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to save {path}: {e}") from e
        logger.debug("Saved %d bytes to %s", len(blob), path)
