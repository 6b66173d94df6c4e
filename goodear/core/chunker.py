"""Duration-bounded chunking of fragments and sentences into sections.

WHY: A lesson is listened to in chunks of a few tens of seconds. Two
chunking policies exist and call sites depend on exactly which unit ends
up in which section, so they are kept as two separate functions rather
than one parameterised loop.

HOW:
  chunk_fragments — flush-before-adding. The elapsed time from the
      current group's start to the candidate fragment's end is computed;
      if it exceeds the target the group is flushed first and the
      candidate starts the next group.
  chunk_sentences — flush-after-adding. The unit is appended, then the
      group is flushed (including that unit) once its span reaches the
      target.

RULES:
- Both policies flush a non-empty trailing group as the final section
- Sections are contiguous in source order and partition the input
- chunk_fragments: no section except possibly the last exceeds the target
  unless it holds a single over-long fragment
- chunk_sentences: every section but the last spans >= the target
"""

from __future__ import annotations

import enum
import logging
from typing import List, Optional, Sequence

from goodear.config import DEFAULT_FRAGMENT_TARGET_S, DEFAULT_SENTENCE_TARGET_S
from goodear.core.ir import Section, Segment, join_segments

logger = logging.getLogger(__name__)


class ChunkPolicy(str, enum.Enum):
    """Which chunker a call site uses. Values match the config strings."""

    SENTENCES = "sentences"
    FRAGMENTS = "fragments"


def chunk_fragments(
    fragments: Sequence[Segment],
    target_s: float = DEFAULT_FRAGMENT_TARGET_S,
) -> List[Section]:
    """Group raw fragments into sections, flushing before an overflow."""
    sections: List[Section] = []
    group: List[Segment] = []
    group_start = 0.0

    for fragment in fragments:
        if not group:
            group_start = fragment.start
            group.append(fragment)
            continue

        accumulated = fragment.end - group_start
        if accumulated <= target_s:
            group.append(fragment)
        else:
            sections.append(join_segments(group))
            group_start = fragment.start
            group = [fragment]

    if group:
        sections.append(join_segments(group))

    logger.debug("Chunked %d fragment(s) into %d section(s)", len(fragments), len(sections))
    return sections


def chunk_sentences(
    units: Sequence[Segment],
    target_s: float = DEFAULT_SENTENCE_TARGET_S,
) -> List[Section]:
    """Group sentence units into sections, flushing after the threshold."""
    sections: List[Section] = []
    group: List[Segment] = []

    for unit in units:
        group.append(unit)
        if group[-1].end - group[0].start >= target_s:
            sections.append(join_segments(group))
            group = []

    if group:
        sections.append(join_segments(group))

    logger.debug("Chunked %d sentence(s) into %d section(s)", len(units), len(sections))
    return sections


def chunk(
    units: Sequence[Segment],
    policy: ChunkPolicy | str = ChunkPolicy.SENTENCES,
    target_s: Optional[float] = None,
) -> List[Section]:
    """Dispatch to the chunker named by policy, with its own default target."""
    policy = ChunkPolicy(policy)
    if policy is ChunkPolicy.FRAGMENTS:
        if target_s is None:
            return chunk_fragments(units)
        return chunk_fragments(units, target_s)
    if target_s is None:
        return chunk_sentences(units)
    return chunk_sentences(units, target_s)
