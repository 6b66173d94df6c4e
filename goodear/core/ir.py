"""Intermediate representation dataclasses for transcripts and playback.

WHY: SRT blocks, Whisper JSON records, assembled sentences and playback
sections are all "some text between two timestamps". Using one Segment
type for every stage lets the parsers, the assembler, the chunkers and
the highlight resolver compose freely.

HOW: Three dataclasses:
  Segment       — start/end seconds plus text; frozen, identity is start
  ParseResult   — parsed segments paired with an explicit error signal
  PlaybackState — the playback engine's mutable state (snapshotted out)

RULES:
- All times are float seconds
- Segment.id is start: callers treat start as a stable key within one
  transcript (two segments with equal start collide)
- Sections and sentence units are Segments; the aliases only document intent
- ParseResult.ok is False whenever error is set; an empty but ok result
  is a legitimate empty transcript
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from goodear.errors import TranscriptError


@dataclass(frozen=True)
class Segment:
    """A time-stamped span of transcript text.

    RULES:
    - start: seconds, >= 0
    - end: seconds, expected > start (source files are trusted as given)
    - text: fragment, sentence or section text
    """

    start: float
    end: float
    text: str

    @property
    def id(self) -> float:
        return self.start

    @property
    def duration(self) -> float:
        return self.end - self.start


# A playback-granularity unit built by the chunkers.
Section = Segment

# Fragment(s) merged up to a terminal "." or "?".
SentenceUnit = Segment


def join_segments(group: List[Segment]) -> Segment:
    """Merge a non-empty run of segments into one covering segment.

    start is the first member's start, end the last member's end, and the
    text is the members' texts joined with a single space.
    """
    return Segment(
        start=group[0].start,
        end=group[-1].end,
        text=" ".join(s.text for s in group),
    )


@dataclass
class ParseResult:
    """Parsed segments plus an explicit success/failure signal.

    WHY: An empty list on its own cannot distinguish "empty file" from
    "decode failure". Pairing it with the error makes both cases explicit.
    """

    segments: List[Segment] = field(default_factory=list)
    error: Optional[TranscriptError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return not self.segments


@dataclass
class PlaybackState:
    """State owned exclusively by one PlaybackEngine.

    The engine only ever hands out copies, so a snapshot held by a
    listener never changes underneath it.
    """

    current_section_index: int
    position_s: float
    is_playing: bool = False
    autoplay_enabled: bool = False
