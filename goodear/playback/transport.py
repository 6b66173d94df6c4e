"""Audio transport interface and a simulated, caller-driven implementation.

WHY: Decoding and outputting audio is an external collaborator. The
playback engine only needs play/pause/seek, the true elapsed media time,
and two kinds of timing notifications. Keeping those behind an abstract
base class lets the engine run against any player, and lets tests and
dry runs drive time deterministically.

HOW: AudioTransport is an ABC. Observer registration returns an
ObserverToken that is later passed to remove_observer(). Callbacks
receive the media time (seconds) they fired at. SimulatedTransport keeps
a media clock that only moves when advance() is called, firing boundary
and periodic callbacks for every time crossed, in time order.

RULES:
- Transport commands are fire-and-forget; no completion is awaited
- Callbacks may be invoked from any thread; consumers must redispatch
  them (see goodear.playback.dispatch) before touching state
- remove_observer() is idempotent; release() drops every observer
- Seeking never fires boundary callbacks, only playback does
"""

from __future__ import annotations

import itertools
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TimeCallback = Callable[[float], None]

_EPSILON = 1e-9


@dataclass(frozen=True)
class ObserverToken:
    """Cancellation handle returned by an observer registration."""

    id: int
    kind: str  # "periodic" or "boundary"


class AudioTransport(ABC):
    """Abstract audio player driven by the playback engine.

    To plug in a real player:
    1. Subclass AudioTransport
    2. Map play/pause/seek/current_time onto the player
    3. Deliver periodic and boundary notifications to the registered
       callbacks and honour remove_observer()
    """

    @abstractmethod
    def play(self) -> None:
        """Start or resume playback."""

    @abstractmethod
    def pause(self) -> None:
        """Pause playback, keeping the position."""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Move the playhead to an absolute media time."""

    @abstractmethod
    def current_time(self) -> float:
        """The true elapsed media time in seconds."""

    @abstractmethod
    def add_periodic_observer(self, interval_s: float, callback: TimeCallback) -> ObserverToken:
        """Invoke callback every interval_s of media time while playing."""

    @abstractmethod
    def add_boundary_observer(self, times: Sequence[float], callback: TimeCallback) -> ObserverToken:
        """Invoke callback whenever playback reaches one of times."""

    @abstractmethod
    def remove_observer(self, token: ObserverToken) -> None:
        """Cancel a registration. Unknown tokens are ignored."""

    def release(self) -> None:
        """Free the underlying player. Default: nothing to free."""


class SimulatedTransport(AudioTransport):
    """An in-memory transport whose clock is advanced explicitly.

    WHY: Tests and the CLI's simulate command need a transport that
    behaves like a media player (boundary and periodic notifications
    included) without any audio hardware.

    RULES:
    - The clock moves only in advance(dt), and only while playing
    - Reaching duration (if given) stops playback at duration
    - Every command is recorded in self.calls for inspection
    - Commands after release() raise RuntimeError
    """

    def __init__(self, duration: Optional[float] = None) -> None:
        self.duration = duration
        self.calls: List[Tuple[str, Tuple]] = []
        self._time = 0.0
        self._playing = False
        self._released = False
        self._ids = itertools.count(1)
        self._periodic: Dict[int, Tuple[float, TimeCallback]] = {}
        self._boundary: Dict[int, Tuple[List[float], TimeCallback]] = {}

    # -- state ---------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def released(self) -> bool:
        return self._released

    @property
    def observer_count(self) -> int:
        return len(self._periodic) + len(self._boundary)

    def _check_alive(self, name: str) -> None:
        if self._released:
            raise RuntimeError("{}() called on a released transport".format(name))
        self.calls.append((name, ()))

    # -- commands ------------------------------------------------------

    def play(self) -> None:
        self._check_alive("play")
        self._playing = True

    def pause(self) -> None:
        self._check_alive("pause")
        self._playing = False

    def seek(self, seconds: float) -> None:
        if self._released:
            raise RuntimeError("seek() called on a released transport")
        self.calls.append(("seek", (seconds,)))
        self._time = seconds

    def current_time(self) -> float:
        return self._time

    def add_periodic_observer(self, interval_s: float, callback: TimeCallback) -> ObserverToken:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        token = ObserverToken(id=next(self._ids), kind="periodic")
        self._periodic[token.id] = (interval_s, callback)
        return token

    def add_boundary_observer(self, times: Sequence[float], callback: TimeCallback) -> ObserverToken:
        token = ObserverToken(id=next(self._ids), kind="boundary")
        self._boundary[token.id] = (sorted(times), callback)
        return token

    def remove_observer(self, token: ObserverToken) -> None:
        self.calls.append(("remove_observer", (token,)))
        self._periodic.pop(token.id, None)
        self._boundary.pop(token.id, None)

    def release(self) -> None:
        self.calls.append(("release", ()))
        self._periodic.clear()
        self._boundary.clear()
        self._playing = False
        self._released = True

    # -- clock ---------------------------------------------------------

    def advance(self, dt: float) -> None:
        """Move the media clock forward by dt seconds of playback."""
        if self._released or not self._playing or dt <= 0:
            return

        t0 = self._time
        t1 = t0 + dt
        if self.duration is not None and t1 >= self.duration:
            t1 = self.duration

        events: List[Tuple[float, int, TimeCallback]] = []
        for order, (times, callback) in enumerate(self._boundary.values()):
            for t in times:
                if t0 < t <= t1 + _EPSILON:
                    events.append((t, order, callback))
        for order, (interval, callback) in enumerate(self._periodic.values()):
            k = math.floor(t0 / interval + _EPSILON) + 1
            while k * interval <= t1 + _EPSILON:
                events.append((k * interval, len(self._boundary) + order, callback))
                k += 1
        events.sort(key=lambda e: (e[0], e[1]))

        for t, _order, callback in events:
            self._time = t
            callback(t)

        self._time = t1
        if self.duration is not None and t1 >= self.duration:
            self._playing = False
            logger.debug("Simulated transport reached end of media at %.3fs", t1)
