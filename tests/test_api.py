"""Tests for the FastAPI lesson API.

WHY: Validates every endpoint: happy paths, 404s for unknown lessons and
sections, 400 for bad imports, and parse errors reported in the payload.

HOW: Each test builds a fresh app with create_app() around tmp_path
settings and a MemoryStore, and talks to it through the FastAPI
TestClient. Entering the client as a context manager runs the lifespan,
which restores the previously imported folder.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test gets its own store and storage dir; no shared state
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from goodear import __version__
from goodear.library.lessons import LessonLibrary
from goodear.server.app import create_app


@pytest.fixture
def client(settings, memory_store):
    app = create_app(settings=settings, store=memory_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def imported_client(lesson_folder, settings, memory_store):
    """Client whose lifespan restores an already imported folder."""
    LessonLibrary(memory_store, settings).import_folder(lesson_folder)
    app = create_app(settings=settings, store=memory_store)
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


class TestLessons:
    """Tests for GET /lessons and POST /lessons/import."""

    def test_no_import_yet(self, client):
        resp = client.get("/lessons")
        assert resp.status_code == 200
        assert resp.json() == {"folder": None, "lessons": []}

    def test_import(self, client, lesson_folder):
        resp = client.post("/lessons/import", json={"folder": str(lesson_folder)})
        assert resp.status_code == 200
        body = resp.json()
        assert body["folder"] == "Spanish"
        assert [l["base_name"] for l in body["lessons"]] == ["lesson_a", "lesson_b"]
        assert client.get("/lessons").json() == body

    def test_import_missing_folder(self, client, tmp_path):
        resp = client.post("/lessons/import", json={"folder": str(tmp_path / "nope")})
        assert resp.status_code == 400

    def test_restored_on_startup(self, imported_client):
        lessons = imported_client.get("/lessons").json()["lessons"]
        assert lessons[1] == {
            "base_name": "lesson_b",
            "audio_file": "lesson_b.m4a",
            "transcript_file": "lesson_b.json",
        }


class TestSections:
    """Tests for section listing and played markers."""

    def test_list_sections(self, imported_client):
        resp = imported_client.get("/lessons/lesson_a/sections")
        assert resp.status_code == 200
        body = resp.json()
        assert body["lesson"] == "lesson_a"
        assert body["error"] is None
        assert body["sections"] == [{
            "index": 0,
            "start": 0.0,
            "end": 8.0,
            "text": "Hello there. How are you? Fine",
            "played": False,
        }]

    def test_unknown_lesson(self, imported_client):
        assert imported_client.get("/lessons/nope/sections").status_code == 404

    def test_mark_played(self, imported_client):
        first = imported_client.post("/lessons/lesson_a/sections/0/played")
        assert first.status_code == 200
        assert first.json() == {"index": 0, "start": 0.0, "newly_marked": True}

        again = imported_client.post("/lessons/lesson_a/sections/0/played")
        assert again.json()["newly_marked"] is False

        sections = imported_client.get("/lessons/lesson_a/sections").json()["sections"]
        assert sections[0]["played"] is True

    def test_mark_played_out_of_range(self, imported_client):
        assert imported_client.post("/lessons/lesson_a/sections/3/played").status_code == 404

    def test_parse_error_reported(self, tmp_path, settings, memory_store):
        folder = tmp_path / "Broken"
        folder.mkdir()
        (folder / "bad.mp3").write_bytes(b"")
        (folder / "bad.json").write_text("{", encoding="utf-8")
        LessonLibrary(memory_store, settings).import_folder(folder)

        with TestClient(create_app(settings=settings, store=memory_store)) as client:
            body = client.get("/lessons/bad/sections").json()
        assert body["sections"] == []
        assert body["error"].startswith("Invalid JSON")


class TestHighlight:
    """Tests for the highlight endpoint."""

    def test_active_sentence(self, imported_client):
        resp = imported_client.get("/lessons/lesson_a/sections/0/highlight", params={"position": 2.5})
        assert resp.status_code == 200
        body = resp.json()
        assert [s["text"] for s in body["spans"]] == ["Hello there.", "How are you?", "Fine"]
        assert [s["active"] for s in body["spans"]] == [False, True, False]
        assert body["fallback_text"] == "Hello there. How are you? Fine"

    def test_position_past_end_has_no_active(self, imported_client):
        body = imported_client.get(
            "/lessons/lesson_a/sections/0/highlight", params={"position": 8.0}
        ).json()
        assert not any(s["active"] for s in body["spans"])

    def test_position_required(self, imported_client):
        resp = imported_client.get("/lessons/lesson_a/sections/0/highlight")
        assert resp.status_code == 422

    def test_section_out_of_range(self, imported_client):
        resp = imported_client.get("/lessons/lesson_a/sections/1/highlight", params={"position": 0})
        assert resp.status_code == 404
