"""Key-value persistence for lesson state.

WHY: The last imported folder and each lesson's played sections must
survive restarts. The rest of the package only needs get/set on string
keys, so persistence is a small injectable interface rather than a
process-wide default store.

HOW: KeyValueStore is an ABC. MemoryStore keeps a dict (tests, one-shot
CLI runs). JsonFileStore loads a JSON object from disk on construction
and rewrites the whole file on every set(), via a temp file and an
atomic replace.

RULES:
- get() returns None for missing keys, never raises KeyError
- Values must be JSON-serialisable
- A corrupt or unreadable store file is logged and treated as empty
- All mutations acquire self._lock
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Minimal persistence interface: get(key) and set(key, value)."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""


class MemoryStore(KeyValueStore):
    """Dict-backed store. Counts writes so callers can verify persistence."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()
        self.writes = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self.writes += 1


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is not an object", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._write()

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
