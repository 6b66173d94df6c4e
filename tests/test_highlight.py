"""Tests for active-sentence highlighting."""

from __future__ import annotations

from goodear.core.highlight import (
    HighlightView,
    active_unit,
    resolve_highlight,
    units_in_section,
)
from goodear.core.ir import Segment

UNITS = [
    Segment(0.0, 2.0, "A."),
    Segment(2.0, 5.0, " B. "),
    Segment(5.0, 8.0, "C."),
]
SECTION = Segment(0.0, 8.0, "A. B. C.")


class TestUnitsInSection:
    def test_overlap_is_strict(self):
        section = Segment(2.0, 5.0, "B.")
        assert units_in_section(section, UNITS) == [UNITS[1]]

    def test_partial_overlap_included(self):
        section = Segment(4.0, 6.0, "x")
        assert units_in_section(section, UNITS) == [UNITS[1], UNITS[2]]


class TestResolveHighlight:
    def test_two_units_half_open(self):
        units = [Segment(0.0, 2.0, "A"), Segment(2.0, 4.0, "B")]
        section = Segment(0.0, 4.0, "A B")
        assert resolve_highlight(2.5, section, units).active.text == "B"
        assert resolve_highlight(2.0, section, units).active.text == "B"
        assert resolve_highlight(1.99, section, units).active.text == "A"

    def test_position_inside_unit(self):
        view = resolve_highlight(2.5, SECTION, UNITS)
        assert view.active.text == "B."
        assert [s.active for s in view.spans] == [False, True, False]

    def test_start_is_inclusive(self):
        assert resolve_highlight(2.0, SECTION, UNITS).active.text == "B."

    def test_end_is_exclusive(self):
        assert resolve_highlight(8.0, SECTION, UNITS).active is None

    def test_span_text_stripped(self):
        view = resolve_highlight(0.0, SECTION, UNITS)
        assert [s.text for s in view.spans] == ["A.", "B.", "C."]
        assert view.text == "A.\nB.\nC."

    def test_at_most_one_active(self):
        for pos in (0.0, 1.9, 2.0, 4.99, 5.0, 7.5):
            view = resolve_highlight(pos, SECTION, UNITS)
            assert sum(1 for s in view.spans if s.active) == 1

    def test_fallback_when_no_units(self):
        section = Segment(100.0, 110.0, "Orphan text")
        view = resolve_highlight(105.0, section, UNITS)
        assert view.spans == []
        assert view.active is None
        assert view.text == "Orphan text"

    def test_empty_view(self):
        assert HighlightView().text == ""


class TestActiveUnit:
    def test_gap_between_units(self):
        units = [Segment(0, 1, "a"), Segment(2, 3, "b")]
        assert active_unit(1.5, units) is None
        assert active_unit(2.0, units) == units[1]
