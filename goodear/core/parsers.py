"""SRT and Whisper-JSON fragment parsers.

WHY: Lessons ship with either SubRip subtitles or the JSON segment list
Whisper writes. Both must become the same ordered Segment list before
sentence assembly and chunking can run.

HOW: parse_srt() splits the text on blank lines and decodes each block
independently; a broken block is skipped and the rest of the file is
kept. parse_json() decodes the whole document, validates it with
jsonschema and converts every record; any failure rejects the file.
load_segments() reads a file and picks the parser by extension.

RULES:
- Parsers never raise: failures come back as ParseResult.error
- SRT recovery is per block; JSON is all-or-nothing (no partial recovery)
- JSON times must be finite with end > start (NaN and Infinity rejected)
- ".srt" (any case) selects the SRT parser, everything else is JSON
- SRT block: index line (ignored), "HH:MM:SS,mmm --> HH:MM:SS,mmm", then
  text lines joined with a single space
- Timecode value: H*3600 + M*60 + S + ms/1000; unparseable hours or
  minutes count as 0, but the seconds and milliseconds must be numeric
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, List, Optional

import jsonschema

from goodear.core.ir import ParseResult, Segment
from goodear.errors import DecodeError, FileReadError, MalformedBlock

logger = logging.getLogger(__name__)

_ARROW = " --> "

_RECORD_SCHEMA = {
    "type": "object",
    "required": ["start", "end", "text"],
    "properties": {
        "start": {"type": "number", "minimum": 0},
        "end": {"type": "number", "minimum": 0},
        "text": {"type": "string"},
    },
}

JSON_TRANSCRIPT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "oneOf": [
        {"type": "array", "items": _RECORD_SCHEMA},
        {
            "type": "object",
            "required": ["segments"],
            "properties": {
                "segments": {"type": "array", "items": _RECORD_SCHEMA},
            },
        },
    ],
}
"""Accepted JSON shapes: a bare record array or Whisper's {"segments": [...]}."""


# ---------------------------------------------------------------------------
# SRT
# ---------------------------------------------------------------------------

def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_timecode(value: str) -> Optional[float]:
    """Convert "HH:MM:SS,mmm" into seconds, or None if it is malformed.

    RULES:
    - Exactly three non-empty colon-separated parts
    - Hours/minutes that are not numeric count as 0
    - The last part must be "<seconds>,<milliseconds>", both numeric
    """
    parts = [p for p in value.split(":") if p]
    if len(parts) != 3:
        return None
    hours = _parse_number(parts[0]) or 0.0
    minutes = _parse_number(parts[1]) or 0.0

    sec_parts = [p for p in parts[2].split(",") if p]
    if len(sec_parts) != 2:
        return None
    seconds = _parse_number(sec_parts[0])
    millis = _parse_number(sec_parts[1])
    if seconds is None or millis is None:
        return None
    return hours * 3600 + minutes * 60 + seconds + millis / 1000


def _parse_block(block: str) -> Segment:
    """Decode one SRT block or raise MalformedBlock."""
    lines = [line for line in block.split("\n") if line]
    if len(lines) < 2:
        raise MalformedBlock("block has fewer than 2 lines")

    times = lines[1].split(_ARROW)
    if len(times) != 2:
        raise MalformedBlock("bad timecode line: {!r}".format(lines[1]))
    start = parse_timecode(times[0])
    end = parse_timecode(times[1])
    if start is None or end is None:
        raise MalformedBlock("bad timecode line: {!r}".format(lines[1]))

    return Segment(start=start, end=end, text=" ".join(lines[2:]))


def parse_srt(text: str) -> ParseResult:
    """Parse SubRip text into segments, skipping malformed blocks."""
    normalized = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")

    segments: List[Segment] = []
    skipped = 0
    for block in normalized.split("\n\n"):
        if not block.strip():
            continue
        try:
            segments.append(_parse_block(block))
        except MalformedBlock as e:
            skipped += 1
            logger.debug("Skipping SRT block: %s", e)

    if skipped:
        logger.info("Skipped %d malformed SRT block(s)", skipped)
    return ParseResult(segments=segments)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def parse_json(text: str) -> ParseResult:
    """Decode a Whisper-style JSON transcript; all-or-nothing."""
    try:
        data: Any = json.loads(text)
        jsonschema.validate(instance=data, schema=JSON_TRANSCRIPT_SCHEMA)
    except json.JSONDecodeError as e:
        return ParseResult(error=DecodeError("Invalid JSON: {}".format(e)))
    except jsonschema.ValidationError as e:
        return ParseResult(
            error=DecodeError("Unexpected transcript structure: {}".format(e.message))
        )

    records = data["segments"] if isinstance(data, dict) else data
    segments: List[Segment] = []
    for i, r in enumerate(records):
        start, end = float(r["start"]), float(r["end"])
        if not (math.isfinite(start) and math.isfinite(end)) or end <= start:
            return ParseResult(
                error=DecodeError(
                    "Record {}: end must be after start, got {!r}..{!r}".format(
                        i, r["start"], r["end"]
                    )
                )
            )
        segments.append(Segment(start=start, end=end, text=r["text"]))
    return ParseResult(segments=segments)


# ---------------------------------------------------------------------------
# File dispatch
# ---------------------------------------------------------------------------

def load_segments(path: str | Path) -> ParseResult:
    """Read a transcript file and parse it according to its extension.

    RULES:
    - Missing or unreadable file → empty result with FileReadError
    - ".srt" → parse_srt(), anything else → parse_json()
    - Errors carry the file path for reporting
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read transcript %s: %s", path, e)
        return ParseResult(error=FileReadError(str(e), path=str(path)))

    if path.suffix.lower() == ".srt":
        result = parse_srt(text)
    else:
        result = parse_json(text)

    if result.error is not None:
        result.error.path = str(path)
        logger.warning("Failed to parse %s: %s", path.name, result.error)
    else:
        logger.info("Parsed %d fragment(s) from %s", len(result.segments), path.name)
    return result
