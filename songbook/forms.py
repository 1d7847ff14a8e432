"""
Songbook - Song form

Binds a submitted form onto a ``Song`` and validates it with the
``SongFormData`` pydantic model.

Usage:
    form = SongForm(song)
    form.handle_request(request.method, await request.form())
    if form.is_submitted() and form.is_valid():
        ...
    context = {"form": form.create_view()}
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from songbook.config import TITLE_MAX_LENGTH
from songbook.models import Song

FIELDS = ("title", "score")

# Friendlier wording for the pydantic error types the form can produce
_MESSAGES = {
    ("title", "string_too_short"): "Please enter a title.",
    ("title", "string_too_long"): (
        f"The title cannot be longer than {TITLE_MAX_LENGTH} characters."
    ),
    ("score", "float_parsing"): "The score must be a number.",
    ("score", "float_type"): "The score must be a number.",
    ("score", "finite_number"): "The score must be a number.",
}


class SongFormData(BaseModel):
    """User-editable fields of the song form."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    score: float = Field(allow_inf_nan=False)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("score", mode="before")
    @classmethod
    def normalize_score(cls, value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("score_missing", "Please enter a score.")
        if isinstance(value, str):
            value = value.strip().replace(",", ".")
            if not value:
                raise PydanticCustomError("score_missing", "Please enter a score.")
        return value


class SongForm:
    """Form bound to a single ``Song`` instance."""

    def __init__(self, song: Song):
        self.song = song
        self.errors: Dict[str, List[str]] = {name: [] for name in FIELDS}
        self.data: Optional[SongFormData] = None
        self._raw: Dict[str, str] = {}
        self._submitted = False

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------
    def handle_request(self, method: str, data: Optional[Mapping[str, Any]]) -> None:
        """Bind and validate *data* when the request is a form submission.

        The title is bound even when validation fails and the raw input is
        kept, so the form can be redisplayed with what the user typed.  The
        score is only bound once it validates.
        """
        if method.upper() != "POST" or data is None:
            return

        self._submitted = True
        self._raw = {name: str(data.get(name) or "") for name in FIELDS}
        self.song.title = self._raw["title"].strip()

        try:
            self.data = SongFormData.model_validate(self._raw)
        except ValidationError as e:
            for error in e.errors():
                name = str(error["loc"][0])
                message = _MESSAGES.get((name, error["type"]), error["msg"])
                self.errors.setdefault(name, []).append(message)
            return

        self.song.title = self.data.title
        self.song.score = self.data.score

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def is_submitted(self) -> bool:
        return self._submitted

    def is_valid(self) -> bool:
        return self._submitted and not any(self.errors.values())

    def raw_value(self, name: str) -> Optional[str]:
        """Return the submitted string for field *name*, or None before submission."""
        return self._raw.get(name)

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def create_view(self) -> Dict[str, Any]:
        """Build the template context for the form.

        Submitted forms redisplay the raw input; unsubmitted forms are
        pre-populated from the song.
        """
        if self._submitted:
            values = dict(self._raw)
        else:
            values = {
                "title": self.song.title or "",
                "score": "" if self.song.score is None else f"{self.song.score:g}",
            }

        return {
            "values": values,
            "errors": {name: list(msgs) for name, msgs in self.errors.items()},
            "submitted": self._submitted,
            "valid": self.is_valid(),
        }
