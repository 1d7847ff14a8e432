"""
Songbook - Song workflow

Create / edit / delete / list orchestration.  The workflow binds the form,
applies the post-validation changes the form does not cover (score
rounding and timestamps), persists through the repository and answers with
a flash message and a redirect.  It depends only on the protocols in
``songbook.interfaces``.
"""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from loguru import logger
from starlette.responses import Response

from songbook.forms import SongForm
from songbook.interfaces import CsrfValidator, Responder, SongGateway
from songbook.models import Song

INDEX_ROUTE = "song.index"
SCORE_STEP = Decimal("0.1")
# wide enough to quantize any finite float
_SCORE_CONTEXT = Context(prec=400)


class FormState(str, Enum):
    AWAITING_SUBMISSION = "awaiting_submission"
    SUBMITTED_INVALID = "submitted_invalid"
    SUBMITTED_VALID = "submitted_valid"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def round_score(raw: Any) -> float:
    """Round a submitted score to one decimal place, ties away from zero.

    The submitted text is rounded as a decimal so ``8.05`` gives ``8.1``
    regardless of its binary float representation.
    """
    text = str(raw).strip().replace(",", ".")
    try:
        value = Decimal(text)
        if not value.is_finite():
            raise ValueError(f"Invalid score: {raw!r}")
        return float(
            value.quantize(SCORE_STEP, rounding=ROUND_HALF_UP, context=_SCORE_CONTEXT)
        )
    except InvalidOperation:
        raise ValueError(f"Invalid score: {raw!r}") from None


def form_state(form: SongForm) -> FormState:
    if not form.is_submitted():
        return FormState.AWAITING_SUBMISSION
    if not form.is_valid():
        return FormState.SUBMITTED_INVALID
    return FormState.SUBMITTED_VALID


class SongWorkflow:
    """Request handlers for the song pages."""

    def __init__(
        self,
        repository: SongGateway,
        responder: Responder,
        csrf: CsrfValidator,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.responder = responder
        self.csrf = csrf
        self.clock = clock

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------
    async def index(self) -> Response:
        """Render the listing of every song."""
        songs = await self.repository.find_all()
        return self.responder.render("song/index.html", {"songs": songs})

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    async def create(self, method: str, data: Optional[Mapping[str, Any]]) -> Response:
        """Show the create form, or persist a valid submission and redirect."""
        song = Song()
        form = SongForm(song)
        form.handle_request(method, data)

        state = form_state(form)
        if state is not FormState.SUBMITTED_VALID:
            return self._render_form("song/create.html", form, state)

        song.score = round_score(form.raw_value("score"))
        now = self.clock()
        song.created_at = now
        song.updated_at = now

        await self.repository.save(song, flush=True)

        self.responder.add_flash("success", "The song was added successfully.")
        return self.responder.redirect_to(INDEX_ROUTE)

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------
    async def edit(
        self, song: Song, method: str, data: Optional[Mapping[str, Any]]
    ) -> Response:
        """Show the edit form for *song*, or save a valid submission and redirect."""
        song_title = song.title
        form = SongForm(song)
        form.handle_request(method, data)

        state = form_state(form)
        if state is not FormState.SUBMITTED_VALID:
            return self._render_form(
                "song/edit.html", form, state, song=song, song_title=song_title
            )

        song.score = round_score(form.raw_value("score"))
        song.updated_at = self._next_update(song.updated_at)

        await self.repository.save(song, flush=True)

        self.responder.add_flash("success", f"{song.title} was updated successfully!")
        return self.responder.redirect_to(INDEX_ROUTE)

    def _next_update(self, previous: Optional[datetime]) -> datetime:
        now = self.clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    async def delete(self, song: Song, data: Optional[Mapping[str, Any]]) -> Response:
        """Remove *song* when the CSRF token matches, then redirect."""
        token = data.get("_csrf_token") if data is not None else None

        if self.csrf.is_valid(f"song_{song.id}", token):
            await self.repository.remove(song, flush=True)
            self.responder.add_flash("success", "The song was deleted successfully!")
        else:
            logger.warning("🔒 Invalid CSRF token, song id={} not deleted", song.id)
            self.responder.add_flash(
                "danger", "Invalid security token, the song was not deleted."
            )

        return self.responder.redirect_to(INDEX_ROUTE)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _render_form(
        self, view: str, form: SongForm, state: FormState, **extra: Any
    ) -> Response:
        status_code = 422 if state is FormState.SUBMITTED_INVALID else 200
        context = {"form": form.create_view(), **extra}
        return self.responder.render(view, context, status_code=status_code)
