"""
Songbook - Page Routes

Browser-facing song pages: the listing, the create and edit forms and the
CSRF-protected delete action.  Each handler builds a request-scoped
``SongWorkflow`` and hands it the submitted form.
"""

import time

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from fastapi.responses import HTMLResponse
from loguru import logger

from songbook import config
from songbook.csrf import CsrfTokenManager
from songbook.database import SongRepository, get_repository
from songbook.models import Song
from songbook.responder import HtmlResponder
from songbook.workflow import SongWorkflow

router = APIRouter(tags=["Songs"])

# Track startup time for health check
_START_TIME = time.time()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_workflow(
    request: Request,
    repository: SongRepository = Depends(get_repository),
) -> SongWorkflow:
    return SongWorkflow(
        repository=repository,
        responder=HtmlResponder(request),
        csrf=CsrfTokenManager(),
    )


async def get_song(
    song_id: int = Path(..., ge=0),
    repository: SongRepository = Depends(get_repository),
) -> Song:
    """Resolve the ``song_id`` path parameter or answer 404."""
    song = await repository.find_by_id(song_id)
    if song is None:
        logger.warning(f"⚠️ Song id={song_id} not found")
        raise HTTPException(status_code=404, detail="Song not found")
    return song


async def _form_data(request: Request):
    if request.method != "POST":
        return None
    return await request.form()


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------
@router.get("/", name="song.index", response_class=HTMLResponse)
async def index(workflow: SongWorkflow = Depends(get_workflow)):
    """List every song."""
    return await workflow.index()


# ---------------------------------------------------------------------------
# Create / Edit
# ---------------------------------------------------------------------------
@router.api_route(
    "/create", methods=["GET", "POST"], name="song.create", response_class=HTMLResponse
)
async def create(request: Request, workflow: SongWorkflow = Depends(get_workflow)):
    """Show the create form, or add the submitted song."""
    data = await _form_data(request)
    return await workflow.create(request.method, data)


@router.api_route(
    "/edit/{song_id}",
    methods=["GET", "POST"],
    name="song.edit",
    response_class=HTMLResponse,
)
async def edit(
    request: Request,
    song: Song = Depends(get_song),
    workflow: SongWorkflow = Depends(get_workflow),
):
    """Show the edit form, or update the song with the submitted values."""
    data = await _form_data(request)
    return await workflow.edit(song, request.method, data)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------
@router.post("/delate/{song_id}", name="song.delate")
async def delate(
    request: Request,
    song: Song = Depends(get_song),
    workflow: SongWorkflow = Depends(get_workflow),
):
    """Delete a song when the submitted CSRF token matches it."""
    data = await request.form()
    return await workflow.delete(song, data)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@router.get("/health", name="health")
async def health_check():
    """Health check endpoint for the service."""
    uptime = round(time.time() - _START_TIME, 2)
    db_ok = config.DB_PATH.exists()

    return {
        "status": "ok" if db_ok else "degraded",
        "database": "ok" if db_ok else "missing",
        "uptime_seconds": uptime,
        "version": config.APP_VERSION,
    }
