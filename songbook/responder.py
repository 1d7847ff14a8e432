"""
Songbook - HTML responder

Builds the responses of the song pages: Jinja2 views, redirects to named
routes, and the flash messages attached to them.
"""

from typing import Any, Dict, List, Mapping

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from songbook.config import FLASH_COOKIE_NAME
from songbook.csrf import generate_token
from songbook.flash import clear_flash_cookie, get_flashes, set_flash_cookie


class HtmlResponder:
    """Request-scoped responder backed by ``app.state.templates``."""

    def __init__(self, request: Request):
        self.request = request
        self._pending: List[Dict[str, str]] = []

    def add_flash(self, kind: str, message: str) -> None:
        self._pending.append({"kind": kind, "message": message})

    def redirect_to(self, route_name: str, **path_params: Any) -> Response:
        url = self.request.url_for(route_name, **path_params)
        response = RedirectResponse(url=str(url), status_code=303)
        if self._pending:
            set_flash_cookie(response, self._pending)
            self._pending = []
        return response

    def render(
        self,
        view_name: str,
        context: Mapping[str, Any],
        status_code: int = 200,
    ) -> Response:
        flashes = get_flashes(self.request) + self._pending
        self._pending = []

        full_context = {
            "flashes": flashes,
            "csrf_token": generate_token,
            **context,
        }
        response = self.request.app.state.templates.TemplateResponse(
            self.request, view_name, full_context, status_code=status_code
        )
        if FLASH_COOKIE_NAME in self.request.cookies:
            clear_flash_cookie(response)
        return response
