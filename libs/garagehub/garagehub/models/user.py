"""User model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from garagehub.models.common import utcnow


@dataclass
class User:
    id: str
    name: str
    email: str
    password_hash: str
    type: str
    created_at: datetime = field(default_factory=utcnow)
