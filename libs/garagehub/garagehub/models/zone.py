"""Zone model (a named service area with a cover image)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from garagehub.models.common import utcnow


@dataclass
class Zone:
    id: str
    zone_name: str
    zone_image: str
    uploaded_by: str = ""
    created_at: datetime = field(default_factory=utcnow)
