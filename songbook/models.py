"""
Songbook - Song record.

``Song`` is a plain record: the workflow decides how its fields change
(score rounding, timestamps) and the repository assigns its ``id``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Song:
    """One song of the catalog."""

    id: Optional[int] = None
    title: str = ""
    score: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
