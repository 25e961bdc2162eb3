"""
services/storage.py

Durable key-value slots holding the serialized snapshot as text.

Contract: get(key) -> str | None, set(key, text), delete(key).
Failures raise StorageUnavailableError; the caller decides whether they matter.
"""

import logging
import os
import re
from typing import Dict, Optional

from timed_quiz.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class MemoryStorage:
    """Process-local slot. Lost on restart; handy for tests and untimed demos."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """One UTF-8 text file per key inside ``directory``."""

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, _UNSAFE_KEY_CHARS.sub("_", key) + ".json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path + ".tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise StorageUnavailableError(f"Cannot write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailableError(f"Cannot delete {path}: {e}") from e
