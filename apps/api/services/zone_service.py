"""Zone CRUD; each zone owns one cover image."""

from __future__ import annotations

import logging

from psycopg_pool import AsyncConnectionPool

from garagehub.config import Settings
from garagehub.exceptions import NotFoundError, ValidationError
from garagehub.models import Upload, Zone, new_id, utcnow
from garagehub.repositories import ZoneRepository
from garagehub.services import BlobStore

logger = logging.getLogger(__name__)

ZONE_IMAGE_FIELD = "zoneImage"


class ZoneService:
    def __init__(self, settings: Settings, pool: AsyncConnectionPool, blobs: BlobStore | None = None):
        self.settings = settings
        self.blobs = blobs or BlobStore(settings)
        self.zone_repo = ZoneRepository(pool)

    async def create_zone(
        self, *, zone_name: str | None, uploaded_by: str | None, image: Upload | None
    ) -> Zone:
        name = str(zone_name or "").strip()
        uploader = str(uploaded_by or "").strip()
        if not name or image is None:
            raise ValidationError("Zone name and image are required")
        if not uploader:
            raise ValidationError("uploadedBy is required")
        ref = await self.blobs.store(image.content, image.filename, field=ZONE_IMAGE_FIELD)
        zone = Zone(
            id=new_id("zone"),
            zone_name=name,
            zone_image=ref,
            uploaded_by=uploader,
            created_at=utcnow(),
        )
        try:
            return await self.zone_repo.create(zone)
        except Exception:
            # The record was never written, so the image has no owner.
            await self.blobs.delete(ref)
            raise

    async def list_zones(self) -> list[Zone]:
        return await self.zone_repo.list()

    async def get_zone(self, zone_id: str) -> Zone:
        zone = await self.zone_repo.get(zone_id)
        if zone is None:
            raise NotFoundError("Zone", zone_id)
        return zone

    async def update_zone(
        self,
        zone_id: str,
        *,
        zone_name: str | None,
        uploaded_by: str | None,
        image: Upload | None,
    ) -> tuple[Zone, list[str]]:
        """Return the updated zone and the refs to delete once it is saved."""
        zone = await self.get_zone(zone_id)
        orphans: list[str] = []
        name = str(zone_name or "").strip()
        if name:
            zone.zone_name = name
        if uploaded_by and uploaded_by.strip():
            zone.uploaded_by = uploaded_by.strip()
        if image is not None:
            ref = await self.blobs.store(image.content, image.filename, field=ZONE_IMAGE_FIELD)
            if zone.zone_image:
                orphans.append(zone.zone_image)
            zone.zone_image = ref
        saved = await self.zone_repo.update(zone)
        if saved is None:
            raise NotFoundError("Zone", zone_id)
        return saved, orphans

    async def delete_zone(self, zone_id: str) -> list[str]:
        zone = await self.get_zone(zone_id)
        if not await self.zone_repo.delete(zone_id):
            raise NotFoundError("Zone", zone_id)
        logger.info("zone deleted (id=%s)", zone_id)
        return [zone.zone_image] if zone.zone_image else []
