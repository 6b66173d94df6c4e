"""Played-section tracking per lesson.

WHY: The section list shows which parts of a lesson the listener has
already heard, across restarts.

HOW: The tracker loads the persisted list of section start times for its
lesson on construction, keeps it as a set, and writes the whole sorted
list back whenever a new start is added.

RULES:
- Sections are identified by their start time (Segment.id)
- Absent key → empty set
- mark_played() persists only when the start was not already present
- The key is Settings.played_key(lesson_id); lesson_id is the transcript's
  base filename
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, Set

from goodear.config import Settings
from goodear.core.ir import Section
from goodear.library.store import KeyValueStore

logger = logging.getLogger(__name__)


def lesson_id_for(path: str | Path) -> str:
    """Lesson identifier: the file's base name without extension."""
    return Path(path).stem


class ProgressTracker:
    """Played set for one lesson, backed by a key-value store."""

    def __init__(self, store: KeyValueStore, lesson_id: str, settings: Settings) -> None:
        self._store = store
        self.lesson_id = lesson_id
        self._key = settings.played_key(lesson_id)
        self._played: Set[float] = self._load()

    def _load(self) -> Set[float]:
        stored = self._store.get(self._key)
        if not stored:
            return set()
        try:
            return {float(v) for v in stored}
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed played list for %s", self.lesson_id)
            return set()

    def _save(self) -> None:
        self._store.set(self._key, sorted(self._played))

    @property
    def played(self) -> FrozenSet[float]:
        return frozenset(self._played)

    def is_played(self, section: Section) -> bool:
        return section.id in self._played

    def mark_played(self, section: Section) -> bool:
        """Mark section as heard; returns True if it was newly added."""
        if section.id in self._played:
            return False
        self._played.add(section.id)
        self._save()
        logger.debug("Marked section at %.3fs played in %s", section.id, self.lesson_id)
        return True

    def reset(self) -> None:
        self._played.clear()
        self._save()
