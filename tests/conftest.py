"""Shared test fixtures for the goodear test suite.

WHY: Parser, chunker, highlight, engine and library tests all need the
same small lessons: a handful of fragments that break mid-sentence, the
SRT text they came from, and isolated settings/storage so nothing
touches the real home directory.

HOW: Module-level constants hold the sample data; fixtures hand out
fresh copies, a MemoryStore, tmp_path-based Settings, and a lesson
folder with audio/transcript pairs on disk.

RULES:
- Sample fragments are the ones the sentence and highlight examples use
- Settings always point into tmp_path
- Audio files are empty placeholders; nothing decodes them
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List

import pytest

from goodear.config import Settings
from goodear.core.ir import Segment
from goodear.library.store import MemoryStore


# ---------------------------------------------------------------------------
# Sample transcript data
# ---------------------------------------------------------------------------

SAMPLE_FRAGMENTS: List[Segment] = [
    Segment(0.0, 2.0, "Hello there."),
    Segment(2.0, 4.0, "How are"),
    Segment(4.0, 6.0, "you?"),
    Segment(6.0, 8.0, "Fine"),
]

SAMPLE_SRT = """1
00:00:00,000 --> 00:00:02,000
Hello there.

2
00:00:02,000 --> 00:00:04,000
How are

3
00:00:04,000 --> 00:00:06,000
you?

4
00:00:06,000 --> 00:00:08,000
Fine
"""

SAMPLE_JSON_RECORDS = [
    {"start": 0.0, "end": 2.0, "text": "Hello there."},
    {"start": 2.0, "end": 4.0, "text": "How are"},
    {"start": 4.0, "end": 6.0, "text": "you?"},
    {"start": 6.0, "end": 8.0, "text": "Fine"},
]


def _make_sentences(count: int, length: float = 10.0, start: float = 0.0) -> List[Segment]:
    """Back-to-back sentence units of equal length."""
    return [
        Segment(start + i * length, start + (i + 1) * length, "Sentence {}.".format(i + 1))
        for i in range(count)
    ]


@pytest.fixture
def sample_fragments():
    return list(SAMPLE_FRAGMENTS)


@pytest.fixture
def sample_srt_text():
    return SAMPLE_SRT


@pytest.fixture
def sample_json_records():
    return [dict(r) for r in SAMPLE_JSON_RECORDS]


@pytest.fixture
def make_sentences():
    """Factory for back-to-back sentence units: make_sentences(count, length=10.0)."""
    return _make_sentences


# ---------------------------------------------------------------------------
# Storage and settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temp dir, with default targets and policy."""
    storage = tmp_path / "storage"
    return Settings(storage_dir=storage, store_path=storage / "store.json")


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def lesson_folder(tmp_path) -> Path:
    """A folder with two complete lessons and some unpaired files.

    lesson_a.mp3 + lesson_a.srt
    lesson_b.m4a + lesson_b.json
    orphan.wav (no transcript), notes.txt (not audio)
    """
    folder = tmp_path / "Spanish"
    folder.mkdir()
    (folder / "lesson_a.mp3").write_bytes(b"")
    (folder / "lesson_a.srt").write_text(SAMPLE_SRT, encoding="utf-8")
    (folder / "lesson_b.m4a").write_bytes(b"")
    (folder / "lesson_b.json").write_text(json.dumps(SAMPLE_JSON_RECORDS), encoding="utf-8")
    (folder / "orphan.wav").write_bytes(b"")
    (folder / "notes.txt").write_text("not a lesson", encoding="utf-8")
    return folder


@pytest.fixture(autouse=True)
def _clean_goodear_env(monkeypatch):
    """Keep a developer's GOODEAR_* variables (or .env) out of the tests."""
    for name in list(os.environ):
        if name.startswith("GOODEAR_"):
            monkeypatch.delenv(name, raising=False)
