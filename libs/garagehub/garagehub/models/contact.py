"""Contact form submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from garagehub.models.common import utcnow


@dataclass
class Contact:
    id: str
    name: str
    mobile_number: str
    message: str
    program: str | None = None
    created_at: datetime = field(default_factory=utcnow)
