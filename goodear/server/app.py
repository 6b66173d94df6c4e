"""FastAPI application exposing the lesson library.

WHY: Companion front ends (a web player, a phone shortcut, scripts)
need the imported lessons, their sections with played marks, and the
highlight view for a position, without reimplementing segmentation.

HOW: create_app() builds a FastAPI app around one LessonLibrary and one
key-value store. The lifespan handler restores the previously imported
folder on startup. Lessons are re-segmented on every request; nothing is
cached between loads.

RULES:
- Unknown lessons and out-of-range section indexes → 404
- A transcript that fails to parse is reported in the payload, not as 5xx
- Import failures (not a folder, copy failed) → 400
- The module-level app uses load_settings() and a JsonFileStore
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from goodear import __version__
from goodear.config import Settings, configure_logging, env_log_level, load_settings
from goodear.core.highlight import resolve_highlight
from goodear.errors import FileReadError
from goodear.library.lessons import FilePair, Lesson, LessonLibrary
from goodear.library.progress import ProgressTracker
from goodear.library.store import JsonFileStore, KeyValueStore
from goodear.server.models import (
    ErrorResponse,
    HealthResponse,
    HighlightResponse,
    HighlightSpanModel,
    ImportRequest,
    LessonInfo,
    LessonListResponse,
    PlayedResponse,
    SectionInfo,
    SectionListResponse,
)

logger = logging.getLogger(__name__)


def _lesson_info(pair: FilePair) -> LessonInfo:
    return LessonInfo(
        base_name=pair.base_name,
        audio_file=pair.audio_path.name,
        transcript_file=pair.transcript_path.name,
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> FastAPI:
    """Build the API around an explicit settings object and store."""
    settings = settings or load_settings()
    store = store or JsonFileStore(settings.store_path)
    library = LessonLibrary(store, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pairs = library.restore()
        logger.info("Restored %d lesson(s) from %s", len(pairs), library.folder)
        yield

    app = FastAPI(
        lifespan=lifespan,
        title="GoodEar Lesson API",
        description=(
            "Browse imported lessons, their playback sections and played "
            "markers, and compute the sentence highlight for a position."
        ),
        version=__version__,
    )
    app.state.library = library
    app.state.store = store
    app.state.settings = settings

    def _load(base_name: str) -> Lesson:
        pair = library.find(base_name)
        if pair is None:
            raise HTTPException(status_code=404, detail="Unknown lesson '{}'".format(base_name))
        return library.load(pair)

    def _section_index(lesson: Lesson, index: int) -> int:
        if not 0 <= index < len(lesson.sections):
            raise HTTPException(
                status_code=404,
                detail="Lesson '{}' has no section {}".format(lesson.lesson_id, index),
            )
        return index

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get("/lessons", response_model=LessonListResponse, tags=["lessons"])
    async def list_lessons() -> LessonListResponse:
        folder = library.folder
        return LessonListResponse(
            folder=folder.name if folder is not None else None,
            lessons=[_lesson_info(p) for p in library.pairs],
        )

    @app.post(
        "/lessons/import",
        response_model=LessonListResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["lessons"],
    )
    async def import_lessons(request: ImportRequest) -> LessonListResponse:
        try:
            pairs = library.import_folder(request.folder)
        except FileReadError as e:
            raise HTTPException(status_code=400, detail=str(e))
        folder = library.folder
        return LessonListResponse(
            folder=folder.name if folder is not None else None,
            lessons=[_lesson_info(p) for p in pairs],
        )

    @app.get(
        "/lessons/{base_name}/sections",
        response_model=SectionListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["sections"],
    )
    async def list_sections(base_name: str) -> SectionListResponse:
        lesson = _load(base_name)
        tracker = ProgressTracker(store, lesson.lesson_id, settings)
        return SectionListResponse(
            lesson=lesson.lesson_id,
            sections=[
                SectionInfo(
                    index=i,
                    start=s.start,
                    end=s.end,
                    text=s.text,
                    played=tracker.is_played(s),
                )
                for i, s in enumerate(lesson.sections)
            ],
            error=str(lesson.error) if lesson.error is not None else None,
        )

    @app.get(
        "/lessons/{base_name}/sections/{index}/highlight",
        response_model=HighlightResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["sections"],
    )
    async def section_highlight(
        base_name: str,
        index: int,
        position: float = Query(..., ge=0, description="Playback position in seconds."),
    ) -> HighlightResponse:
        lesson = _load(base_name)
        section = lesson.sections[_section_index(lesson, index)]
        view = resolve_highlight(position, section, lesson.sentences)
        return HighlightResponse(
            position=position,
            spans=[
                HighlightSpanModel(text=s.text, start=s.start, end=s.end, active=s.active)
                for s in view.spans
            ],
            fallback_text=view.fallback_text,
        )

    @app.post(
        "/lessons/{base_name}/sections/{index}/played",
        response_model=PlayedResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["sections"],
    )
    async def mark_played(base_name: str, index: int) -> PlayedResponse:
        lesson = _load(base_name)
        section = lesson.sections[_section_index(lesson, index)]
        tracker = ProgressTracker(store, lesson.lesson_id, settings)
        newly = tracker.mark_played(section)
        return PlayedResponse(index=index, start=section.start, newly_marked=newly)

    return app


app = create_app()


def run_api():
    """Entry point for the goodear-api console script."""
    import uvicorn
    configure_logging(env_log_level("INFO"))
    uvicorn.run(app, host=os.getenv("GOODEAR_API_HOST", "127.0.0.1"), port=8000)
