"""
Songbook - Flash messages

One-time messages carried across a redirect in a signed cookie.  The
redirect response writes the cookie; the next rendered page reads the
messages and clears it.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, List

from starlette.requests import Request
from starlette.responses import Response

from songbook import config

# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def _sign(payload: str) -> str:
    """Create an HMAC-SHA256 signature for a payload string."""
    return hmac.new(
        config.SECRET_KEY.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def encode_flashes(messages: List[Dict[str, str]]) -> str:
    """Create a signed cookie value holding *messages*."""
    data = json.dumps({"messages": messages, "ts": int(time.time())})
    encoded = base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii")
    return f"{encoded}|{_sign(encoded)}"


def decode_flashes(cookie_value: str) -> List[Dict[str, str]]:
    """Parse and verify a flash cookie.  Returns [] when missing, tampered or stale."""
    if not cookie_value or "|" not in cookie_value:
        return []

    try:
        encoded, sig = cookie_value.rsplit("|", 1)
        if not hmac.compare_digest(sig, _sign(encoded)):
            return []

        payload: Dict[str, Any] = json.loads(base64.urlsafe_b64decode(encoded))
        if time.time() - float(payload.get("ts", 0)) > config.FLASH_MAX_AGE:
            return []
    except (ValueError, TypeError, AttributeError):
        return []

    return [
        {"kind": str(m.get("kind", "info")), "message": str(m.get("message", ""))}
        for m in payload.get("messages", [])
        if isinstance(m, dict)
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def set_flash_cookie(response: Response, messages: List[Dict[str, str]]) -> None:
    """Attach *messages* to a response."""
    response.set_cookie(
        key=config.FLASH_COOKIE_NAME,
        value=encode_flashes(messages),
        max_age=config.FLASH_MAX_AGE,
        httponly=True,
        samesite="lax",
        path="/",
    )


def clear_flash_cookie(response: Response) -> None:
    response.delete_cookie(key=config.FLASH_COOKIE_NAME, path="/")


def get_flashes(request: Request) -> List[Dict[str, str]]:
    """Return the messages carried by the request (does not clear them)."""
    return decode_flashes(request.cookies.get(config.FLASH_COOKIE_NAME, ""))
