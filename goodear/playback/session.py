"""One listening session: engine plus progress tracking.

WHY: Whoever opens a lesson for playback also wants finished sections
recorded as played, and wants both torn down together when the player
closes. Wiring that by hand at every call site is easy to get wrong.

HOW: PlaybackSession builds a PlaybackEngine for a loaded lesson,
subscribes a listener that forwards SECTION_FINISHED events to the
ProgressTracker, and on close() unsubscribes before closing the engine.

RULES:
- A lesson with no sections cannot be played (ValueError)
- Only SECTION_FINISHED marks a section played
- close() is idempotent; the session is a context manager
"""

from __future__ import annotations

import logging
from typing import Optional

from goodear.config import DEFAULT_TICK_INTERVAL_S
from goodear.library.lessons import Lesson
from goodear.library.progress import ProgressTracker
from goodear.playback.dispatch import Dispatcher
from goodear.playback.engine import PlaybackEngine, PlaybackEvent, PlaybackEventKind
from goodear.playback.transport import AudioTransport

logger = logging.getLogger(__name__)


class PlaybackSession:
    def __init__(
        self,
        lesson: Lesson,
        transport: AudioTransport,
        tracker: ProgressTracker,
        dispatcher: Optional[Dispatcher] = None,
        initial_index: int = 0,
        autoplay: bool = False,
        tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
    ) -> None:
        if lesson.is_empty:
            raise ValueError("Lesson {} has no sections to play".format(lesson.lesson_id))

        self.lesson = lesson
        self.tracker = tracker
        self.dispatcher = dispatcher or Dispatcher()
        self.engine = PlaybackEngine(
            sections=lesson.sections,
            transport=transport,
            dispatcher=self.dispatcher,
            sentences=lesson.sentences,
            initial_index=initial_index,
            autoplay=autoplay,
            tick_interval_s=tick_interval_s,
        )
        self._unsubscribe = self.engine.subscribe(self._on_event)
        logger.info("Opened %s at section %d", lesson.lesson_id, initial_index + 1)

    def _on_event(self, event: PlaybackEvent) -> None:
        if event.kind is PlaybackEventKind.SECTION_FINISHED:
            self.tracker.mark_played(event.section)

    def pump(self) -> int:
        """Run pending transport callbacks on the calling (owner) thread."""
        return self.dispatcher.drain()

    def close(self) -> None:
        if self.engine.closed:
            return
        self._unsubscribe()
        self.engine.close()
        logger.info("Closed %s", self.lesson.lesson_id)

    def __enter__(self) -> "PlaybackSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
