"""Sentence assembly from raw transcript fragments.

WHY: Subtitle blocks and Whisper segments break wherever the recogniser
paused, often mid-sentence. Sentence-level navigation and highlighting
need units that end where a sentence ends.

HOW: Fragments accumulate into a group. After each fragment is added its
text is right-stripped and checked for a terminal "." or "?"; if found
the group is flushed as one unit. Whatever remains at the end of input
is flushed as a final unit even without terminal punctuation.

RULES:
- Every fragment lands in exactly one unit, in order
- len(output) <= len(input); output is empty iff input is empty
- Unit text is the fragments' original texts joined with one space
- "!" is not a sentence terminator here
"""

from __future__ import annotations

from typing import List, Sequence

from goodear.core.ir import Segment, SentenceUnit, join_segments

_TERMINATORS = (".", "?")


def ends_sentence(text: str) -> bool:
    """True if text, ignoring trailing whitespace, ends with "." or "?"."""
    return text.rstrip().endswith(_TERMINATORS)


def assemble_sentences(fragments: Sequence[Segment]) -> List[SentenceUnit]:
    """Merge consecutive fragments into sentence units."""
    units: List[SentenceUnit] = []
    group: List[Segment] = []

    for fragment in fragments:
        group.append(fragment)
        if ends_sentence(fragment.text):
            units.append(join_segments(group))
            group = []

    if group:
        units.append(join_segments(group))

    return units
