"""
Songbook - Collaborator contracts

The song workflow only talks to storage, response building and CSRF
checking through these protocols.  ``songbook.database``,
``songbook.responder`` and ``songbook.csrf`` provide the real
implementations; the tests provide in-memory ones.
"""

from typing import Any, Mapping, Optional, Protocol, Sequence

from starlette.responses import Response

from songbook.models import Song


class SongGateway(Protocol):
    async def find_all(self) -> Sequence[Song]: ...

    async def find_by_id(self, song_id: int) -> Optional[Song]: ...

    async def save(self, song: Song, flush: bool = True) -> Song: ...

    async def remove(self, song: Song, flush: bool = True) -> bool: ...

    async def flush(self) -> None: ...


class Responder(Protocol):
    def add_flash(self, kind: str, message: str) -> None: ...

    def redirect_to(self, route_name: str, **path_params: Any) -> Response: ...

    def render(
        self,
        view_name: str,
        context: Mapping[str, Any],
        status_code: int = 200,
    ) -> Response: ...


class CsrfValidator(Protocol):
    def is_valid(self, token_id: str, token: Optional[str]) -> bool: ...
