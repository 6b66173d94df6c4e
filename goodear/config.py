"""Configuration constants, file-type sets, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Chunk targets, timer intervals, supported file
extensions and persistence keys are plain data, not buried in logic,
so the parsers, the playback engine and the library all read the same
numbers.

HOW: python-dotenv loads the .env file on import. Defaults are defined
as module-level constants, each overridable through a GOODEAR_* environment
variable. load_settings() bundles them into a Settings object that is
passed explicitly to the components that need it (progress tracker,
lesson library, CLI, HTTP API) instead of a process-wide default store.

RULES:
- Every GOODEAR_* variable has a working default; nothing is required
- Invalid numeric or policy values raise ValueError naming the variable
- Persistence keys are built only through Settings.played_key() and
  Settings.last_folder_key
- configure_logging() is called by entry points, never on import
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported file extensions
# ---------------------------------------------------------------------------

AUDIO_EXTENSIONS: set[str] = {".mp3", ".wav", ".m4a"}
"""Audio file extensions recognised when scanning a lesson folder."""

TRANSCRIPT_EXTENSIONS: tuple[str, ...] = (".srt", ".json")
"""Transcript extensions, in pairing preference order."""

# ---------------------------------------------------------------------------
# Segmentation and playback defaults
# ---------------------------------------------------------------------------

CHUNK_POLICIES: tuple[str, ...] = ("sentences", "fragments")

DEFAULT_FRAGMENT_TARGET_S = 25.0
"""Raw-fragment chunker target (flush-before-adding)."""

DEFAULT_SENTENCE_TARGET_S = 30.0
"""Sentence chunker target (flush-after-adding)."""

DEFAULT_TICK_INTERVAL_S = 0.5
DEFAULT_REWIND_S = 5.0
DEFAULT_FAST_FORWARD_S = 10.0

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

IMPORTED_FOLDER_NAME = "ImportedLessons"
LAST_FOLDER_KEY = "SavedImportedFolderName"
PLAYED_KEY_PREFIX = "playedSegments_"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw))
    if value <= 0:
        raise ValueError("{} must be positive, got {!r}".format(name, raw))
    return value


def _env_policy(name: str, default: str) -> str:
    value = os.getenv(name, default).strip().lower() or default
    if value not in CHUNK_POLICIES:
        raise ValueError(
            "{} must be one of: {}. Got {!r}".format(
                name, ", ".join(CHUNK_POLICIES), value
            )
        )
    return value


@dataclass
class Settings:
    """Runtime configuration passed explicitly into library components.

    WHY: The progress tracker and the lesson library both need storage
    locations and key names. Injecting one Settings object keeps those
    decisions in a single place and makes tests trivially isolated.

    RULES:
    - storage_dir: root under which ImportedLessons/ is created
    - store_path: JSON file backing the key-value store
    - chunk_policy: "sentences" (default) or "fragments"
    - played_key_prefix + lesson id forms the played-set key
    """

    storage_dir: Path
    store_path: Path
    chunk_policy: str = "sentences"
    fragment_target_s: float = DEFAULT_FRAGMENT_TARGET_S
    sentence_target_s: float = DEFAULT_SENTENCE_TARGET_S
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    played_key_prefix: str = PLAYED_KEY_PREFIX
    last_folder_key: str = LAST_FOLDER_KEY

    @property
    def imported_root(self) -> Path:
        return self.storage_dir / IMPORTED_FOLDER_NAME

    def played_key(self, lesson_id: str) -> str:
        """Persistence key for a lesson's played-section set."""
        return "{}{}".format(self.played_key_prefix, lesson_id)

    def target_for(self, policy: str) -> float:
        if policy == "fragments":
            return self.fragment_target_s
        return self.sentence_target_s


def load_settings(storage_dir: str | Path | None = None) -> Settings:
    """Build Settings from the environment (populated by python-dotenv).

    RULES:
    - storage_dir argument wins over GOODEAR_STORAGE_DIR
    - Default storage dir is ~/.goodear
    - Default store path is <storage_dir>/store.json
    - Raises ValueError for invalid numbers or an unknown chunk policy
    """
    if storage_dir is None:
        storage_dir = os.getenv("GOODEAR_STORAGE_DIR", "").strip() or Path.home() / ".goodear"
    storage = Path(storage_dir).expanduser()

    store_path_env = os.getenv("GOODEAR_STORE_PATH", "").strip()
    store_path = Path(store_path_env).expanduser() if store_path_env else storage / "store.json"

    return Settings(
        storage_dir=storage,
        store_path=store_path,
        chunk_policy=_env_policy("GOODEAR_CHUNK_POLICY", "sentences"),
        fragment_target_s=_env_float("GOODEAR_FRAGMENT_TARGET_S", DEFAULT_FRAGMENT_TARGET_S),
        sentence_target_s=_env_float("GOODEAR_SENTENCE_TARGET_S", DEFAULT_SENTENCE_TARGET_S),
        tick_interval_s=_env_float("GOODEAR_TICK_INTERVAL_S", DEFAULT_TICK_INTERVAL_S),
    )


def env_log_level(default: str) -> str:
    """GOODEAR_LOG_LEVEL, upper-cased, or default when unset or blank.

    The CLI and the API pass different defaults (WARNING and INFO).
    """
    return os.getenv("GOODEAR_LOG_LEVEL", "").strip().upper() or default


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for CLI and server entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
