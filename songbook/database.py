"""
Songbook - SQLite Database

Embedded SQLite storage for the song catalog.  Uses aiosqlite for async
operations within FastAPI and plain sqlite3 for the schema bootstrap.

``SongRepository`` wraps a single connection for the lifetime of a request.
``save`` / ``remove`` commit immediately unless ``flush=False`` is passed,
in which case the change stays pending until ``flush()``.
"""

import sqlite3
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

import aiosqlite
from loguru import logger

from songbook import config
from songbook.models import Song

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    score REAL NOT NULL,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------
def init_db() -> None:
    """Initialize the SQLite database and create the songs table."""
    config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(str(config.DB_PATH))
        try:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        finally:
            conn.close()
        logger.success(f"✅ Database initialized at {config.DB_PATH}")
    except Exception as e:
        logger.critical(f"❌ Failed to initialize database: {e}")
        raise


# ---------------------------------------------------------------------------
# Async context manager (for use in FastAPI routes)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def get_async_connection():
    """Async context manager for an aiosqlite connection with row factory."""
    db = await aiosqlite.connect(str(config.DB_PATH))
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


# ---------------------------------------------------------------------------
# Row <-> Song conversion
# ---------------------------------------------------------------------------
def _to_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_timestamp(raw) -> Optional[datetime]:
    if raw is None:
        return None
    value = datetime.fromisoformat(str(raw))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def row_to_song(row) -> Song:
    """Convert a database row to a ``Song``."""
    return Song(
        id=row["id"],
        title=row["title"],
        score=row["score"],
        created_at=_from_timestamp(row["created_at"]),
        updated_at=_from_timestamp(row["updated_at"]),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------
class SongRepository:
    """Song gateway bound to one aiosqlite connection."""

    def __init__(self, db: aiosqlite.Connection):
        self._db = db

    async def find_all(self) -> List[Song]:
        cursor = await self._db.execute("SELECT * FROM songs ORDER BY id")
        rows = await cursor.fetchall()
        return [row_to_song(r) for r in rows]

    async def find_by_id(self, song_id: int) -> Optional[Song]:
        cursor = await self._db.execute("SELECT * FROM songs WHERE id = ?", (song_id,))
        row = await cursor.fetchone()
        return row_to_song(row) if row else None

    async def save(self, song: Song, flush: bool = True) -> Song:
        """Insert a new song or update an existing one.

        A song without an ``id`` is inserted and receives the id generated
        by SQLite; otherwise the row with that id is updated in place.
        """
        if song.created_at is None or song.updated_at is None:
            raise ValueError("Song timestamps must be set before saving")

        values = (
            song.title,
            song.score,
            _to_timestamp(song.created_at),
            _to_timestamp(song.updated_at),
        )

        if song.id is None:
            cursor = await self._db.execute(
                """
                INSERT INTO songs (title, score, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                """,
                values,
            )
            song.id = cursor.lastrowid
            logger.success(f"✅ Song added (id={song.id}): {song.title}")
        else:
            await self._db.execute(
                """
                UPDATE songs
                SET title = ?, score = ?, created_at = ?, updated_at = ?
                WHERE id = ?
                """,
                values + (song.id,),
            )
            logger.info(f"✏️ Song id={song.id} updated: {song.title}")

        if flush:
            await self.flush()
        return song

    async def remove(self, song: Song, flush: bool = True) -> bool:
        """Delete a song. Returns True if a row was deleted."""
        cursor = await self._db.execute("DELETE FROM songs WHERE id = ?", (song.id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"🗑️ Song id={song.id} deleted from database")
        else:
            logger.warning(f"⚠️ Song id={song.id} not found for deletion")

        if flush:
            await self.flush()
        return deleted

    async def flush(self) -> None:
        await self._db.commit()


async def get_repository() -> AsyncIterator[SongRepository]:
    """FastAPI dependency yielding a request-scoped repository."""
    async with get_async_connection() as db:
        yield SongRepository(db)
