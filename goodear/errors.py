"""Exception hierarchy for transcript loading and playback.

WHY: Callers need to tell "the file could not be read" apart from "the
file is not valid JSON" and from "the transcript is simply empty". The
parsers report these through ParseResult rather than raising, so the
types below double as the error signal carried in that result.

RULES:
- GoodEarError is the root of everything raised by this package
- MalformedBlock is internal to the SRT parser: recovered, never surfaced
- An empty transcript is not an error (ParseResult.is_empty, ok=True)
- SessionClosedError guards operations on a closed playback engine
"""

from __future__ import annotations


class GoodEarError(Exception):
    """Base class for all GoodEar errors."""


class TranscriptError(GoodEarError):
    """A transcript could not be turned into segments."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class FileReadError(TranscriptError):
    """The transcript (or lesson folder) is missing or unreadable."""


class DecodeError(TranscriptError):
    """The JSON transcript is malformed or does not match the schema."""


class MalformedBlock(TranscriptError):
    """A single SRT block has a bad structure. Skipped by the parser."""


class SessionClosedError(GoodEarError):
    """An operation was attempted on a closed playback engine."""
