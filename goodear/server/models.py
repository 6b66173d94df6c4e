"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One model per payload. Section and highlight models mirror the core
dataclasses field for field; the API never exposes file system paths
beyond file names.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Times are float seconds
- Section index is 0-based in the API
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' when the service is up.")
    version: str = Field(description="GoodEar package version.")


class ErrorResponse(BaseModel):
    detail: str = Field(description="Human-readable error message.")


class ImportRequest(BaseModel):
    folder: str = Field(description="Local folder holding audio files and transcripts.")


class LessonInfo(BaseModel):
    base_name: str = Field(description="Lesson identifier (shared file base name).")
    audio_file: str = Field(description="Audio file name.")
    transcript_file: str = Field(description="Transcript file name (.srt or .json).")


class LessonListResponse(BaseModel):
    folder: Optional[str] = Field(default=None, description="Imported folder name, if any.")
    lessons: List[LessonInfo] = Field(default_factory=list)


class SectionInfo(BaseModel):
    index: int = Field(description="0-based section index.")
    start: float = Field(description="Section start in seconds (its identity).")
    end: float = Field(description="Section end in seconds.")
    text: str = Field(description="Space-joined text of the section.")
    played: bool = Field(description="Whether the listener has finished this section.")


class SectionListResponse(BaseModel):
    lesson: str = Field(description="Lesson identifier.")
    sections: List[SectionInfo] = Field(default_factory=list)
    error: Optional[str] = Field(
        default=None,
        description="Transcript read/decode error; sections is empty when set.",
    )


class HighlightSpanModel(BaseModel):
    text: str
    start: float
    end: float
    active: bool


class HighlightResponse(BaseModel):
    position: float = Field(description="Playback position the view was computed for.")
    spans: List[HighlightSpanModel] = Field(
        default_factory=list,
        description="Sentence units overlapping the section; at most one active.",
    )
    fallback_text: str = Field(description="Section text, shown when spans is empty.")


class PlayedResponse(BaseModel):
    index: int
    start: float
    newly_marked: bool = Field(description="False if the section was already played.")
