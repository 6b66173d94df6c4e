"""Command-line interface for GoodEar.

WHY: Users (and scripts) need to import lesson folders, inspect how a
transcript is split into sections, and try the playback behaviour without
a GUI. The CLI wires the library, the segmentation pipeline and the
playback engine behind a handful of subcommands.

HOW: argparse subcommands:
  scan FOLDER        list audio/transcript pairs in a folder
  import FOLDER      copy a folder into storage and list its lessons
  lessons            list lessons of the previously imported folder
  sections FILE      print the sections of a transcript (with played marks)
  simulate FILE      play a transcript on a simulated transport, printing
                     section changes and the active sentence
Status messages go to stderr; listings go to stdout.

RULES:
- Exit code 0 on success, 1 on errors (bad config, unreadable input)
- An empty transcript prints "No sections found" and exits 0
- Settings come from load_settings(); --storage-dir overrides the env
- simulate records finished sections in the played store
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from goodear.config import CHUNK_POLICIES, configure_logging, env_log_level, load_settings
from goodear.core.highlight import HighlightView
from goodear.errors import GoodEarError
from goodear.library.lessons import FilePair, LessonLibrary, load_lesson, scan_folder
from goodear.library.progress import ProgressTracker
from goodear.library.store import JsonFileStore
from goodear.playback.engine import PlaybackEvent, PlaybackEventKind
from goodear.playback.session import PlaybackSession
from goodear.playback.transport import SimulatedTransport


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def format_clock(seconds: float) -> str:
    """Format seconds as MM:SS (truncated)."""
    total = int(max(seconds, 0))
    return "{:02d}:{:02d}".format(total // 60, total % 60)


def _print_pairs(pairs: List[FilePair]) -> None:
    if not pairs:
        _status("No lessons found.")
        return
    for pair in pairs:
        print("{}\t{}\t{}".format(pair.base_name, pair.audio_path.name, pair.transcript_path.name))


def _pair_for_transcript(path: Path) -> FilePair:
    return FilePair(base_name=path.stem, audio_path=path, transcript_path=path)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def _cmd_scan(args: argparse.Namespace) -> int:
    _print_pairs(scan_folder(args.folder))
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    settings = load_settings(args.storage_dir)
    library = LessonLibrary(JsonFileStore(settings.store_path), settings)
    _status("Importing {}...".format(args.folder))
    pairs = library.import_folder(args.folder)
    _status("  Imported to {}".format(library.folder))
    _print_pairs(pairs)
    return 0


def _cmd_lessons(args: argparse.Namespace) -> int:
    settings = load_settings(args.storage_dir)
    library = LessonLibrary(JsonFileStore(settings.store_path), settings)
    if library.folder is None:
        _status("No folder imported yet. Run 'goodear import FOLDER' first.")
        return 0
    _print_pairs(library.restore())
    return 0


def _cmd_sections(args: argparse.Namespace) -> int:
    settings = load_settings(args.storage_dir)
    policy = args.policy or settings.chunk_policy
    if args.target is not None and args.target <= 0:
        _status("Error: --target must be positive, got {:g}".format(args.target))
        return 1
    target = args.target if args.target is not None else settings.target_for(policy)

    lesson = load_lesson(_pair_for_transcript(Path(args.transcript)), policy, target)
    if lesson.error is not None:
        _status("Error: {}".format(lesson.error))
        return 1
    if lesson.is_empty:
        _status("No sections found.")
        return 0

    tracker = ProgressTracker(JsonFileStore(settings.store_path), lesson.lesson_id, settings)
    _status("{} fragment(s), {} sentence(s), {} section(s) [{} policy, {:g}s target]".format(
        len(lesson.fragments), len(lesson.sentences), len(lesson.sections), policy, target,
    ))
    for i, section in enumerate(lesson.sections, start=1):
        mark = "*" if tracker.is_played(section) else " "
        print("{}{:03d}  {}-{}  {}".format(
            mark, i, format_clock(section.start), format_clock(section.end), section.text,
        ))
    return 0


def _render_active(view: HighlightView) -> str:
    active = view.active
    return active.text if active is not None else ""


def _cmd_simulate(args: argparse.Namespace) -> int:
    if args.step <= 0:
        _status("Error: --step must be positive, got {:g}".format(args.step))
        return 1
    settings = load_settings(args.storage_dir)
    policy = args.policy or settings.chunk_policy
    lesson = load_lesson(
        _pair_for_transcript(Path(args.transcript)), policy, settings.target_for(policy)
    )
    if lesson.error is not None:
        _status("Error: {}".format(lesson.error))
        return 1
    if lesson.is_empty:
        _status("No sections found.")
        return 0
    if not 1 <= args.start <= len(lesson.sections):
        _status("Error: --start must be between 1 and {}".format(len(lesson.sections)))
        return 1

    tracker = ProgressTracker(JsonFileStore(settings.store_path), lesson.lesson_id, settings)
    transport = SimulatedTransport(duration=lesson.sections[-1].end)
    last_line = {"text": None}

    def on_event(event: PlaybackEvent) -> None:
        index = event.state.current_section_index + 1
        if event.kind is PlaybackEventKind.SECTION_CHANGED:
            print("== Section {:03d} ({})".format(index, format_clock(event.section.start)))
        elif event.kind is PlaybackEventKind.SECTION_FINISHED:
            print("-- Finished section {:03d}".format(index))
        elif event.kind is PlaybackEventKind.POSITION:
            line = _render_active(session.engine.highlight())
            if line and line != last_line["text"]:
                last_line["text"] = line
                print("   [{}] {}".format(format_clock(event.state.position_s), line))

    with PlaybackSession(
        lesson,
        transport,
        tracker,
        initial_index=args.start - 1,
        autoplay=args.autoplay,
        tick_interval_s=settings.tick_interval_s,
    ) as session:
        session.engine.subscribe(on_event)
        print("== Section {:03d} ({})".format(args.start, format_clock(session.engine.current_section.start)))
        session.engine.play()
        while session.engine.is_playing:
            transport.advance(args.step)
            session.pump()
            if not transport.is_playing and session.engine.is_playing:
                session.engine.pause()

    _status("Played {} of {} section(s).".format(len(tracker.played), len(lesson.sections)))
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests inspect the parsed namespace without running a command.
    """
    parser = argparse.ArgumentParser(
        prog="goodear",
        description="Split lesson transcripts into playback sections and "
                    "play them in sync with the audio.",
    )
    parser.add_argument(
        "--storage-dir",
        default=None,
        help="Where imported lessons and the played store live "
             "(default: $GOODEAR_STORAGE_DIR or ~/.goodear).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $GOODEAR_LOG_LEVEL or WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("scan", help="List audio/transcript pairs in a folder.")
    p.add_argument("folder")
    p.set_defaults(func=_cmd_scan)

    p = sub.add_parser("import", help="Copy a lesson folder into storage.")
    p.add_argument("folder")
    p.set_defaults(func=_cmd_import)

    p = sub.add_parser("lessons", help="List lessons of the imported folder.")
    p.set_defaults(func=_cmd_lessons)

    p = sub.add_parser("sections", help="Print the sections of a transcript.")
    p.add_argument("transcript", help="Path to a .srt or .json transcript.")
    p.add_argument("--policy", choices=CHUNK_POLICIES, default=None,
                   help="Chunking policy (default: $GOODEAR_CHUNK_POLICY or sentences).")
    p.add_argument("--target", type=float, default=None,
                   help="Target section length in seconds.")
    p.set_defaults(func=_cmd_sections)

    p = sub.add_parser("simulate", help="Play a transcript on a simulated clock.")
    p.add_argument("transcript", help="Path to a .srt or .json transcript.")
    p.add_argument("--policy", choices=CHUNK_POLICIES, default=None)
    p.add_argument("--start", type=int, default=1, help="1-based section to start at.")
    p.add_argument("--autoplay", action=argparse.BooleanOptionalAction, default=True,
                   help="Roll into the next section when one ends (default: %(default)s).")
    p.add_argument("--step", type=float, default=0.5,
                   help="Simulated seconds per clock step (default: %(default)s).")
    p.set_defaults(func=_cmd_simulate)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or env_log_level("WARNING"))

    try:
        code = args.func(args)
    except (GoodEarError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
