"""
Songbook - CSRF tokens

Stateless per-resource tokens: a token is the HMAC-SHA256 of its token id
(e.g. ``song_42``) under ``SECRET_KEY``.  Templates embed
``csrf_token("song_" ~ song.id)`` in the delete form and the delete route
checks it with ``CsrfTokenManager.is_valid``.
"""

import hashlib
import hmac
from typing import Optional

from songbook import config


def _sign(payload: str, secret: str) -> str:
    """Create an HMAC-SHA256 signature for a payload string."""
    return hmac.new(
        secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def generate_token(token_id: str, secret: Optional[str] = None) -> str:
    """Return the token a form must submit for *token_id*."""
    return _sign(f"csrf:{token_id}", secret or config.SECRET_KEY)


class CsrfTokenManager:
    """Validates submitted tokens against their token id."""

    def __init__(self, secret: Optional[str] = None):
        self._secret = secret or config.SECRET_KEY

    def generate(self, token_id: str) -> str:
        return generate_token(token_id, self._secret)

    def is_valid(self, token_id: str, token: Optional[str]) -> bool:
        if not token:
            return False
        return hmac.compare_digest(
            str(token).encode("utf-8"),
            self.generate(token_id).encode("utf-8"),
        )
