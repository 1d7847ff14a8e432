"""
Songbook - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- In-memory stand-ins for the repository, responder and clock used by
  the song workflow
- A temporary SQLite database
- A FastAPI TestClient bound to that database
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

import pytest
from starlette.responses import RedirectResponse, Response

from songbook import config
from songbook.csrf import CsrfTokenManager
from songbook.models import Song

TEST_SECRET = "test-secret-key"
T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeRepository:
    """Dict-backed repository that records every save / remove call."""

    def __init__(self, songs: Optional[List[Song]] = None):
        self.songs: Dict[int, Song] = {}
        self.saved: List[Song] = []
        self.removed: List[Song] = []
        self.flushes = 0
        self._next_id = 1
        for song in songs or []:
            self.songs[song.id] = song
            self._next_id = max(self._next_id, song.id + 1)

    async def find_all(self) -> List[Song]:
        return [self.songs[k] for k in sorted(self.songs)]

    async def find_by_id(self, song_id: int) -> Optional[Song]:
        return self.songs.get(song_id)

    async def save(self, song: Song, flush: bool = True) -> Song:
        if song.id is None:
            song.id = self._next_id
            self._next_id += 1
        self.songs[song.id] = song
        self.saved.append(song)
        if flush:
            await self.flush()
        return song

    async def remove(self, song: Song, flush: bool = True) -> bool:
        deleted = self.songs.pop(song.id, None) is not None
        self.removed.append(song)
        if flush:
            await self.flush()
        return deleted

    async def flush(self) -> None:
        self.flushes += 1


class FakeResponder:
    """Responder that records flashes, redirects and rendered views."""

    def __init__(self):
        self.flashes: List[Dict[str, str]] = []
        self.redirected_to: Optional[str] = None
        self.rendered: Optional[str] = None
        self.context: Dict[str, Any] = {}

    def add_flash(self, kind: str, message: str) -> None:
        self.flashes.append({"kind": kind, "message": message})

    def redirect_to(self, route_name: str, **path_params: Any) -> Response:
        self.redirected_to = route_name
        return RedirectResponse(url=f"/{route_name}", status_code=303)

    def render(
        self,
        view_name: str,
        context: Mapping[str, Any],
        status_code: int = 200,
    ) -> Response:
        self.rendered = view_name
        self.context = dict(context)
        return Response(content=view_name, status_code=status_code)


class FakeClock:
    """Clock returning a fixed instant that tests can move forward."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Workflow fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def existing_song() -> Song:
    """A persisted song created one day before T0."""
    created = T0 - timedelta(days=1)
    return Song(
        id=42,
        title="Blue in Green",
        score=8.5,
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def repository(existing_song: Song) -> FakeRepository:
    others = [
        Song(id=7, title="So What", score=9.0, created_at=T0, updated_at=T0),
        Song(id=99, title="Freddie Freeloader", score=7.5, created_at=T0, updated_at=T0),
    ]
    return FakeRepository([existing_song] + others)


@pytest.fixture
def responder() -> FakeResponder:
    return FakeResponder()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def csrf() -> CsrfTokenManager:
    return CsrfTokenManager(secret=TEST_SECRET)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the application at a fresh SQLite file for this test."""
    path = tmp_path / "data" / "songbook.db"
    monkeypatch.setattr(config, "DATA_DIR", path.parent)
    monkeypatch.setattr(config, "DB_PATH", path)
    return path


@pytest.fixture
def client(db_path):
    """TestClient with the lifespan run (database initialized)."""
    from fastapi.testclient import TestClient

    from songbook.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
