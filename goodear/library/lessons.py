"""Lesson discovery, folder import, and lesson loading.

WHY: A lesson is an audio file with a same-named transcript next to it.
Users pick a folder once; the app copies it into its own storage so the
lessons stay available, remembers which folder that was, and turns each
transcript into sections on demand.

HOW: scan_folder() pairs audio files with transcripts by base name.
copy_folder_to_storage() replaces <storage>/ImportedLessons with a fresh
copy of the chosen folder. LessonLibrary ties both to the key-value
store (last imported folder). load_lesson() runs the full segmentation
pipeline: parse → assemble sentences → chunk into sections.

RULES:
- Audio extensions: .mp3, .wav, .m4a (case-insensitive)
- Transcript pairing prefers <base>.srt, then <base>.json
- Pairs are returned sorted by base name
- Importing replaces any previously imported folder
- Segmentation is recomputed on every load (no caching)
- An empty lesson is legitimate; its parse error (if any) is kept
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from goodear.config import AUDIO_EXTENSIONS, TRANSCRIPT_EXTENSIONS, Settings
from goodear.core.chunker import ChunkPolicy, chunk
from goodear.core.ir import Section, Segment, SentenceUnit
from goodear.core.parsers import load_segments
from goodear.core.sentences import assemble_sentences
from goodear.errors import FileReadError, TranscriptError
from goodear.library.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilePair:
    """An audio file and its same-basename transcript."""

    base_name: str
    audio_path: Path
    transcript_path: Path


@dataclass
class Lesson:
    """A loaded lesson: raw fragments, sentence units and sections."""

    pair: FilePair
    fragments: List[Segment] = field(default_factory=list)
    sentences: List[SentenceUnit] = field(default_factory=list)
    sections: List[Section] = field(default_factory=list)
    error: Optional[TranscriptError] = None

    @property
    def lesson_id(self) -> str:
        return self.pair.base_name

    @property
    def is_empty(self) -> bool:
        return not self.sections


def _find_transcript(folder: Path, base: str) -> Optional[Path]:
    for ext in TRANSCRIPT_EXTENSIONS:
        candidate = folder / "{}{}".format(base, ext)
        if candidate.is_file():
            return candidate
    return None


def scan_folder(folder: str | Path) -> List[FilePair]:
    """Find audio/transcript pairs directly inside folder."""
    folder = Path(folder)
    try:
        items = list(folder.iterdir())
    except OSError as e:
        logger.error("Cannot list folder %s: %s", folder, e)
        return []

    pairs: List[FilePair] = []
    for item in items:
        if not item.is_file() or item.suffix.lower() not in AUDIO_EXTENSIONS:
            continue
        transcript = _find_transcript(folder, item.stem)
        if transcript is None:
            logger.debug("No transcript for %s", item.name)
            continue
        pairs.append(FilePair(base_name=item.stem, audio_path=item, transcript_path=transcript))

    pairs.sort(key=lambda p: p.base_name)
    logger.info("Found %d lesson(s) in %s", len(pairs), folder)
    return pairs


def copy_folder_to_storage(src: str | Path, imported_root: str | Path) -> Path:
    """Copy src into imported_root, replacing whatever was imported before.

    Returns the path of the copied folder (imported_root / src.name).
    Raises FileReadError if src is not a directory or the copy fails.
    """
    src = Path(src)
    root = Path(imported_root)
    if not src.is_dir():
        raise FileReadError("Not a folder: {}".format(src), path=str(src))

    try:
        if root.exists():
            logger.info("Removing previously imported lessons at %s", root)
            shutil.rmtree(root)
        root.mkdir(parents=True)
        dest = root / src.name
        shutil.copytree(src, dest)
    except OSError as e:
        raise FileReadError("Failed to import {}: {}".format(src, e), path=str(src)) from e

    logger.info("Imported %s to %s", src, dest)
    return dest


def load_lesson(
    pair: FilePair,
    policy: ChunkPolicy | str = ChunkPolicy.SENTENCES,
    target_s: Optional[float] = None,
) -> Lesson:
    """Parse a lesson's transcript and build its sentences and sections.

    The sentences policy chunks assembled sentence units; the fragments
    policy chunks the raw fragments directly.
    """
    result = load_segments(pair.transcript_path)
    sentences = assemble_sentences(result.segments)
    if ChunkPolicy(policy) is ChunkPolicy.FRAGMENTS:
        sections = chunk(result.segments, ChunkPolicy.FRAGMENTS, target_s)
    else:
        sections = chunk(sentences, ChunkPolicy.SENTENCES, target_s)

    logger.info(
        "Lesson %s: %d fragment(s), %d sentence(s), %d section(s)",
        pair.base_name, len(result.segments), len(sentences), len(sections),
    )
    return Lesson(
        pair=pair,
        fragments=result.segments,
        sentences=sentences,
        sections=sections,
        error=result.error,
    )


class LessonLibrary:
    """Imported lesson folder, remembered across runs."""

    def __init__(self, store: KeyValueStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings
        self.pairs: List[FilePair] = []

    @property
    def folder(self) -> Optional[Path]:
        name = self._store.get(self._settings.last_folder_key)
        if not name:
            return None
        return self._settings.imported_root / name

    def import_folder(self, src: str | Path) -> List[FilePair]:
        """Copy src into storage, scan it, and remember it."""
        local = copy_folder_to_storage(src, self._settings.imported_root)
        self.pairs = scan_folder(local)
        self._store.set(self._settings.last_folder_key, local.name)
        return self.pairs

    def restore(self) -> List[FilePair]:
        """Rescan the previously imported folder, if any."""
        folder = self.folder
        self.pairs = scan_folder(folder) if folder is not None else []
        return self.pairs

    def find(self, base_name: str) -> Optional[FilePair]:
        for pair in self.pairs:
            if pair.base_name == base_name:
                return pair
        return None

    def load(self, pair: FilePair) -> Lesson:
        policy = self._settings.chunk_policy
        return load_lesson(pair, policy, self._settings.target_for(policy))
