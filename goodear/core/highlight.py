"""Active sentence lookup for live text highlighting.

WHY: While a section plays, the presentation layer shows its sentences
and emphasises the one being spoken. Which sentence that is depends only
on the playback position and the sentence units, so it is computed here
rather than in any view.

HOW: units_in_section() keeps the units overlapping the section;
resolve_highlight() tags each as active when the position falls inside
its half-open [start, end) interval. With no overlapping units the view
falls back to the section's own text without highlighting.

RULES:
- Overlap test: unit.end > section.start and unit.start < section.end
- Active test: unit.start <= position < unit.end (half-open)
- At most one span is active for non-overlapping units; zero is valid
- Span text is stripped of surrounding whitespace
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from goodear.core.ir import Section, Segment


@dataclass(frozen=True)
class HighlightSpan:
    text: str
    start: float
    end: float
    active: bool = False


@dataclass
class HighlightView:
    """What the presentation layer renders for one section at one position."""

    spans: List[HighlightSpan] = field(default_factory=list)
    fallback_text: str = ""

    @property
    def active(self) -> Optional[HighlightSpan]:
        for span in self.spans:
            if span.active:
                return span
        return None

    @property
    def text(self) -> str:
        """Plain rendering: one span per line, or the fallback text."""
        if not self.spans:
            return self.fallback_text
        return "\n".join(span.text for span in self.spans)


def units_in_section(section: Section, units: Sequence[Segment]) -> List[Segment]:
    """Units whose interval overlaps the section's interval."""
    return [u for u in units if u.end > section.start and u.start < section.end]


def is_active(position: float, unit: Segment) -> bool:
    return unit.start <= position < unit.end


def active_unit(position: float, units: Sequence[Segment]) -> Optional[Segment]:
    """The unit containing position, or None when position falls between units."""
    for unit in units:
        if is_active(position, unit):
            return unit
    return None


def resolve_highlight(
    position: float,
    section: Section,
    units: Sequence[Segment],
) -> HighlightView:
    """Build the highlight view for section at the given position."""
    in_section = units_in_section(section, units)
    if not in_section:
        return HighlightView(fallback_text=section.text)

    spans = [
        HighlightSpan(
            text=unit.text.strip(),
            start=unit.start,
            end=unit.end,
            active=is_active(position, unit),
        )
        for unit in in_section
    ]
    return HighlightView(spans=spans, fallback_text=section.text)
