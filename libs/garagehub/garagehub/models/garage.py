"""Garage model with its owned service sub-records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from garagehub.models.common import utcnow


@dataclass
class Service:
    name: str
    price: float
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "price": float(self.price), "image": self.image}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Service":
        image = data.get("image")
        return cls(
            name=str(data.get("name") or ""),
            price=float(data.get("price") or 0.0),
            image=str(image) if image else None,
        )


@dataclass
class Garage:
    id: str
    zone: str
    name: str
    location: str
    main_image: str | None = None
    gallery_images: list[str] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    def blob_refs(self) -> list[str]:
        """Every image ref this garage holds: main, gallery, then service images."""
        refs: list[str] = []
        if self.main_image:
            refs.append(self.main_image)
        refs.extend(ref for ref in self.gallery_images if ref)
        refs.extend(s.image for s in self.services if s.image)
        return refs
