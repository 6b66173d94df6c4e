"""Single-thread callback dispatcher.

WHY: Transport notifications may arrive on any thread, but playback
state must only be mutated on one logical thread. Rather than guarding
engine state with locks, every notification is posted to a queue and run
by the owner thread. This is the pattern a GUI main loop uses when it polls
a status queue.

HOW: post() puts a callable on a thread-safe queue.Queue and may be
called from any thread. drain() runs everything queued so far on the
owner thread; UI loops call it on a timer, tests call it directly.

RULES:
- The queue is the ONLY channel from transport threads to the engine
- drain() must be called from the thread that created the dispatcher
- A failing callback is logged and does not stop the drain
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Dispatcher:
    """Queue of callbacks executed on the owner thread."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[Callable[..., Any], Tuple[Any, ...]]]" = queue.Queue()
        self._owner = threading.get_ident()

    def post(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule fn(*args) to run on the owner thread."""
        self._queue.put((fn, args))

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, max_items: Optional[int] = None) -> int:
        """Run queued callbacks; returns how many ran.

        Callbacks posted while draining are run in the same call, up to
        max_items in total when given.
        """
        if threading.get_ident() != self._owner:
            raise RuntimeError("Dispatcher.drain() called off the owner thread")

        ran = 0
        while max_items is None or ran < max_items:
            try:
                fn, args = self._queue.get_nowait()
            except queue.Empty:
                break
            try:
                fn(*args)
            except Exception:
                logger.exception("Dispatched callback failed")
            ran += 1
        return ran
