"""Playback state machine synchronized with transcript sections.

WHY: Listening to a lesson means moving between sections, stepping
sentence by sentence, skipping a few seconds back or forward, and
optionally rolling into the next section when one ends. All of that has
to stay consistent with a transport that plays on its own clock.

HOW: PlaybackEngine owns a PlaybackState and the section/sentence lists.
Public operations mutate the state and issue transport commands
synchronously. On creation it registers a boundary observer at every
section end and a periodic observer for position refresh. Observer
callbacks hold only a weak reference to the engine and post their
handler to the Dispatcher, so state is never touched from a transport
thread and a late callback after close() does nothing. State changes are
published as PlaybackEvent messages to subscribed listeners.

RULES:
- Stopped/Playing/Paused is the is_playing flag; there is always a
  current section and a position
- next()/prev()/sentence moves preserve is_playing
- rewind()/fast_forward() pause around the seek and clamp into
  [section.start, section.end]
- Boundary reached while playing: autoplay → finish, advance and keep
  playing (pause on the last section); otherwise finish and pause
- Boundaries before the current section's end are stale and ignored; a
  boundary at or past it finishes the section that ends there
- fast_forward() that lands on section.end while playing finishes the
  section at once (the transport never fires a boundary it was seeked to)
- Position ticks read the transport's own clock (no wall-clock integration)
- close() removes both observers before releasing the transport
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
import weakref
from typing import Callable, List, Optional, Sequence

from goodear.config import DEFAULT_FAST_FORWARD_S, DEFAULT_REWIND_S, DEFAULT_TICK_INTERVAL_S
from goodear.core.highlight import HighlightView, resolve_highlight, units_in_section
from goodear.core.ir import PlaybackState, Section, Segment
from goodear.errors import SessionClosedError
from goodear.playback.dispatch import Dispatcher
from goodear.playback.transport import AudioTransport, ObserverToken

logger = logging.getLogger(__name__)

_BOUNDARY_TOL_S = 1e-6


class PlaybackEventKind(str, enum.Enum):
    """Kinds of state-change messages sent to listeners."""

    POSITION = "position"
    SECTION_CHANGED = "section_changed"
    PLAY_STATE = "play_state"
    SECTION_FINISHED = "section_finished"
    CLOSED = "closed"


@dataclasses.dataclass(frozen=True)
class PlaybackEvent:
    kind: PlaybackEventKind
    state: PlaybackState
    section: Section


Listener = Callable[[PlaybackEvent], None]


class PlaybackEngine:
    """Section-aware playback controller for one session.

    Args:
        sections: Chunked sections, in order. Must not be empty.
        transport: The audio transport to drive.
        dispatcher: Queue onto which transport callbacks are redispatched.
        sentences: Sentence units for sentence navigation and highlighting.
        initial_index: Section selected when the session starts.
        autoplay: Whether a finished section rolls into the next one.
        tick_interval_s: Period of the position refresh.
    """

    def __init__(
        self,
        sections: Sequence[Section],
        transport: AudioTransport,
        dispatcher: Dispatcher,
        sentences: Sequence[Segment] = (),
        initial_index: int = 0,
        autoplay: bool = False,
        tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
    ) -> None:
        if not sections:
            raise ValueError("PlaybackEngine needs at least one section")
        if not 0 <= initial_index < len(sections):
            raise IndexError("initial_index {} out of range".format(initial_index))

        self._sections = tuple(sections)
        self._sentences = tuple(sentences)
        self._transport = transport
        self._dispatcher = dispatcher
        self._listeners: List[Listener] = []
        self._closed = False

        initial = self._sections[initial_index]
        self._state = PlaybackState(
            current_section_index=initial_index,
            position_s=initial.start,
            is_playing=False,
            autoplay_enabled=autoplay,
        )
        self._transport.seek(initial.start)

        self._boundary_token: Optional[ObserverToken] = transport.add_boundary_observer(
            [s.end for s in self._sections],
            self._make_callback(PlaybackEngine._on_boundary),
        )
        self._periodic_token: Optional[ObserverToken] = transport.add_periodic_observer(
            tick_interval_s,
            self._make_callback(PlaybackEngine._on_tick),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """A snapshot copy of the current state."""
        return dataclasses.replace(self._state)

    @property
    def sections(self) -> Sequence[Section]:
        return self._sections

    @property
    def current_index(self) -> int:
        return self._state.current_section_index

    @property
    def current_section(self) -> Section:
        return self._sections[self._state.current_section_index]

    @property
    def position(self) -> float:
        return self._state.position_s

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def elapsed_s(self) -> float:
        return self._state.position_s - self.current_section.start

    @property
    def duration_s(self) -> float:
        return self.current_section.duration

    @property
    def progress(self) -> float:
        """Fraction of the current section played, clamped to 0.0–1.0."""
        section = self.current_section
        if section.end <= section.start:
            return 0.0
        fraction = (self._state.position_s - section.start) / (section.end - section.start)
        return min(max(fraction, 0.0), 1.0)

    def highlight(self) -> HighlightView:
        return resolve_highlight(self._state.position_s, self.current_section, self._sentences)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: PlaybackEventKind, section: Optional[Section] = None) -> None:
        event = PlaybackEvent(kind=kind, state=self.state, section=section or self.current_section)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Playback listener failed on %s", kind.value)

    # ------------------------------------------------------------------
    # Transport controls
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Playback session is closed")

    def play(self) -> None:
        self._check_open()
        self._transport.play()
        if not self._state.is_playing:
            self._state.is_playing = True
            self._emit(PlaybackEventKind.PLAY_STATE)

    def pause(self) -> None:
        self._check_open()
        self._transport.pause()
        if self._state.is_playing:
            self._state.is_playing = False
            self._emit(PlaybackEventKind.PLAY_STATE)

    def toggle(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, to_s: float) -> None:
        """Seek to an absolute time. Callers pass valid bounds."""
        self._check_open()
        self._transport.seek(to_s)
        self._state.position_s = to_s
        self._emit(PlaybackEventKind.POSITION)

    def set_autoplay(self, enabled: bool) -> None:
        self._check_open()
        self._state.autoplay_enabled = enabled

    # ------------------------------------------------------------------
    # Section navigation
    # ------------------------------------------------------------------

    def _move_to(self, index: int, target_s: Optional[float] = None) -> None:
        section = self._sections[index]
        changed = index != self._state.current_section_index
        self._state.current_section_index = index
        if target_s is None:
            target_s = section.start
        self.seek(max(target_s, section.start))
        if changed:
            self._emit(PlaybackEventKind.SECTION_CHANGED)
        if self._state.is_playing:
            self._transport.play()

    def next(self) -> bool:
        """Advance one section; returns False at the last section."""
        self._check_open()
        index = self._state.current_section_index
        if index + 1 >= len(self._sections):
            return False
        self._move_to(index + 1)
        return True

    def prev(self) -> bool:
        """Go back one section; returns False at the first section."""
        self._check_open()
        index = self._state.current_section_index
        if index <= 0:
            return False
        self._move_to(index - 1)
        return True

    def go_to(self, index: int) -> None:
        self._check_open()
        if not 0 <= index < len(self._sections):
            raise IndexError("section index {} out of range".format(index))
        self._move_to(index)

    def restart(self) -> None:
        self._check_open()
        self.seek(self.current_section.start)
        if self._state.is_playing:
            self.play()

    def rewind(self, by_s: float = DEFAULT_REWIND_S) -> None:
        self._skip(-by_s)

    def fast_forward(self, by_s: float = DEFAULT_FAST_FORWARD_S) -> None:
        self._skip(by_s)

    def _skip(self, delta_s: float) -> None:
        self._check_open()
        was_playing = self._state.is_playing
        self.pause()
        section = self.current_section
        target = min(max(self._state.position_s + delta_s, section.start), section.end)
        self.seek(target)
        if was_playing and target >= section.end:
            self._finish(self._state.current_section_index)
        elif was_playing:
            self.play()

    # ------------------------------------------------------------------
    # Sentence navigation
    # ------------------------------------------------------------------

    def _unit_starts(self, index: int) -> List[float]:
        """Seek targets of the sentence units overlapping section index."""
        section = self._sections[index]
        return [max(u.start, section.start) for u in units_in_section(section, self._sentences)]

    def prev_sentence(self) -> bool:
        """Seek to the previous sentence start, crossing into the previous section."""
        self._check_open()
        index = self._state.current_section_index
        earlier = [t for t in self._unit_starts(index) if t < self._state.position_s]
        if earlier:
            self._move_to(index, earlier[-1])
            return True
        if index == 0:
            return False
        starts = self._unit_starts(index - 1)
        self._move_to(index - 1, starts[-1] if starts else None)
        return True

    def next_sentence(self) -> bool:
        """Seek to the next sentence start, crossing into the next section."""
        self._check_open()
        index = self._state.current_section_index
        later = [t for t in self._unit_starts(index) if t > self._state.position_s]
        if later:
            self._move_to(index, later[0])
            return True
        if index + 1 >= len(self._sections):
            return False
        starts = self._unit_starts(index + 1)
        self._move_to(index + 1, starts[0] if starts else None)
        return True

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def _make_callback(self, handler: Callable[["PlaybackEngine", float], None]) -> Callable[[float], None]:
        ref = weakref.ref(self)
        dispatcher = self._dispatcher

        def run(time_s: float) -> None:
            engine = ref()
            if engine is None or engine._closed:
                return
            handler(engine, time_s)

        def callback(time_s: float) -> None:
            dispatcher.post(run, time_s)

        return callback

    def _index_ending_at(self, time_s: float) -> int:
        """First section from the current one whose end is time_s."""
        current = self._state.current_section_index
        for index in range(current, len(self._sections)):
            if math.isclose(self._sections[index].end, time_s, abs_tol=_BOUNDARY_TOL_S):
                return index
        return current

    def _finish(self, index: int) -> None:
        """Section index has played to its end: advance or pause there."""
        if index != self._state.current_section_index:
            self._state.current_section_index = index
            self._emit(PlaybackEventKind.SECTION_CHANGED)
        self._emit(PlaybackEventKind.SECTION_FINISHED, self._sections[index])
        if self._state.autoplay_enabled and self.next():
            self.play()
        else:
            self.pause()

    def _on_boundary(self, time_s: float) -> None:
        if time_s < self.current_section.end - _BOUNDARY_TOL_S:
            logger.debug("Ignoring stale boundary %.3fs", time_s)
            return
        if not self._state.is_playing:
            return
        self._state.position_s = time_s
        self._finish(self._index_ending_at(time_s))

    def _on_tick(self, time_s: float) -> None:
        self._state.position_s = self._transport.current_time()
        self._emit(PlaybackEventKind.POSITION)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self, release_transport: bool = True) -> None:
        """Deregister timer observers, notify listeners, release the transport."""
        if self._closed:
            return
        for token in (self._boundary_token, self._periodic_token):
            if token is not None:
                self._transport.remove_observer(token)
        self._boundary_token = None
        self._periodic_token = None
        self._closed = True

        self._emit(PlaybackEventKind.CLOSED)
        self._listeners.clear()

        if release_transport:
            self._transport.release()
        logger.debug("Playback engine closed")

    def __enter__(self) -> "PlaybackEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
