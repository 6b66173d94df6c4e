"""Tests for sentence assembly and section chunking.

WHY: The two chunkers differ only in when they flush, and call sites
rely on exactly which unit lands in which section. These tests pin the
boundary behaviour of each policy and the partition guarantees both share.

HOW: Inputs are built from literal Segments and the make_sentences
fixture; outputs are compared field by field.

RULES:
- Sentence terminators are "." and "?" only
- chunk_fragments flushes BEFORE adding an overflowing fragment
- chunk_sentences flushes AFTER adding the unit that reaches the target
"""

from __future__ import annotations

import pytest

from goodear.core.chunker import ChunkPolicy, chunk, chunk_fragments, chunk_sentences
from goodear.core.ir import Segment
from goodear.core.sentences import assemble_sentences, ends_sentence


def _covers_in_order(sections, units):
    """Each section's text is its members' texts joined, in order."""
    joined = " ".join(u.text for u in units)
    return " ".join(s.text for s in sections) == joined


class TestEndsSentence:
    """Tests for terminal punctuation detection."""

    def test_period_and_question_mark(self):
        assert ends_sentence("Done.")
        assert ends_sentence("Really?")

    def test_trailing_whitespace_ignored(self):
        assert ends_sentence("Done.  \n")

    def test_exclamation_is_not_terminal(self):
        assert not ends_sentence("Wow!")

    def test_no_punctuation(self):
        assert not ends_sentence("and then")
        assert not ends_sentence("")


class TestAssembleSentences:
    """Tests for merging fragments into sentence units."""

    def test_example_lesson(self, sample_fragments):
        units = assemble_sentences(sample_fragments)
        assert units == [
            Segment(0.0, 2.0, "Hello there."),
            Segment(2.0, 6.0, "How are you?"),
            Segment(6.0, 8.0, "Fine"),
        ]

    def test_remainder_after_sentence(self):
        fragments = [Segment(0, 1, "Hello"), Segment(1, 2, "world."), Segment(2, 3, "Next")]
        assert assemble_sentences(fragments) == [
            Segment(0, 2, "Hello world."),
            Segment(2, 3, "Next"),
        ]

    def test_empty_input(self):
        assert assemble_sentences([]) == []

    def test_never_more_units_than_fragments(self, sample_fragments):
        assert len(assemble_sentences(sample_fragments)) <= len(sample_fragments)

    def test_original_text_preserved(self):
        fragments = [Segment(0, 1, " leading"), Segment(1, 2, "trailing. ")]
        units = assemble_sentences(fragments)
        assert units == [Segment(0, 2, " leading trailing. ")]

    def test_remainder_without_punctuation_flushed(self):
        units = assemble_sentences([Segment(0, 1, "no"), Segment(1, 2, "end")])
        assert units == [Segment(0, 2, "no end")]


class TestChunkFragments:
    """Tests for the flush-before-adding fragment chunker."""

    def test_flushes_before_overflow(self):
        fragments = [Segment(0, 10, "a"), Segment(10, 20, "b"), Segment(20, 30, "c")]
        sections = chunk_fragments(fragments, target_s=25.0)
        assert sections == [Segment(0, 20, "a b"), Segment(20, 30, "c")]

    def test_exact_target_stays_in_group(self):
        fragments = [Segment(0, 10, "a"), Segment(10, 25, "b")]
        assert chunk_fragments(fragments, target_s=25.0) == [Segment(0, 25, "a b")]

    def test_single_long_fragment_is_its_own_section(self):
        fragments = [Segment(0, 5, "a"), Segment(5, 60, "long"), Segment(60, 62, "b")]
        sections = chunk_fragments(fragments, target_s=25.0)
        assert sections == [Segment(0, 5, "a"), Segment(5, 60, "long"), Segment(60, 62, "b")]

    def test_no_section_exceeds_target_unless_single(self):
        fragments = [Segment(i * 3.0, i * 3.0 + 3.0, str(i)) for i in range(40)]
        for section in chunk_fragments(fragments, target_s=25.0):
            assert section.duration <= 25.0

    def test_partition_preserves_order(self):
        fragments = [Segment(i * 4.0, i * 4.0 + 4.0, "f{}".format(i)) for i in range(20)]
        sections = chunk_fragments(fragments)
        assert _covers_in_order(sections, fragments)
        assert sections[0].start == 0.0
        assert sections[-1].end == 80.0

    def test_default_target_is_25_seconds(self):
        fragments = [Segment(0, 20, "a"), Segment(20, 26, "b")]
        assert len(chunk_fragments(fragments)) == 2

    def test_empty(self):
        assert chunk_fragments([]) == []


class TestChunkSentences:
    """Tests for the flush-after-adding sentence chunker."""

    def test_flushes_after_reaching_target(self, make_sentences):
        sections = chunk_sentences(make_sentences(7), target_s=30.0)
        assert [(s.start, s.end) for s in sections] == [(0, 30), (30, 60), (60, 70)]

    def test_unit_that_crosses_target_is_included(self):
        units = [Segment(0, 20, "a."), Segment(20, 45, "b."), Segment(45, 50, "c.")]
        sections = chunk_sentences(units, target_s=30.0)
        assert sections == [Segment(0, 45, "a. b."), Segment(45, 50, "c.")]

    def test_every_section_but_last_reaches_target(self):
        units = [Segment(i * 7.0, i * 7.0 + 7.0, "s.") for i in range(15)]
        sections = chunk_sentences(units, target_s=30.0)
        for section in sections[:-1]:
            assert section.duration >= 30.0

    def test_long_single_unit(self):
        sections = chunk_sentences([Segment(0, 90, "long."), Segment(90, 95, "x.")])
        assert sections == [Segment(0, 90, "long."), Segment(90, 95, "x.")]

    def test_default_target_is_30_seconds(self, make_sentences):
        assert len(chunk_sentences(make_sentences(3))) == 1
        assert len(chunk_sentences(make_sentences(4))) == 2

    def test_partition_preserves_order(self, make_sentences):
        units = make_sentences(11, length=4.0)
        assert _covers_in_order(chunk_sentences(units), units)


class TestChunkDispatch:
    """Tests for the policy dispatcher."""

    def test_policy_strings(self, make_sentences):
        units = make_sentences(4)
        assert chunk(units, "sentences") == chunk_sentences(units)
        assert chunk(units, "fragments") == chunk_fragments(units)

    def test_explicit_target(self, make_sentences):
        units = make_sentences(4)
        assert chunk(units, ChunkPolicy.SENTENCES, target_s=10.0) == chunk_sentences(units, 10.0)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            chunk([], "paragraphs")

    def test_empty_input_gives_no_sections(self):
        assert chunk([], ChunkPolicy.FRAGMENTS) == []
