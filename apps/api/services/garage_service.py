"""Garage CRUD backed by PostgreSQL, with images kept on local disk."""

from __future__ import annotations

from collections.abc import Sequence

from psycopg_pool import AsyncConnectionPool

from garagehub.config import Settings
from garagehub.exceptions import NotFoundError
from garagehub.models import Garage, Upload
from garagehub.repositories import GarageRepository
from garagehub.services import BlobStore, GarageSynchronizer, Reconciliation


class GarageService:
    def __init__(self, settings: Settings, pool: AsyncConnectionPool, blobs: BlobStore | None = None):
        self.settings = settings
        self.blobs = blobs or BlobStore(settings)
        self.garage_repo = GarageRepository(pool)
        self.sync = GarageSynchronizer(self.garage_repo, self.blobs)

    async def list_garages(self, *, zone: str | None = None) -> list[Garage]:
        return await self.garage_repo.list(zone=zone)

    async def list_by_zone(self, zone: str) -> list[Garage]:
        garages = await self.garage_repo.list(zone=zone)
        if not garages:
            raise NotFoundError("Garage", message="No garages found for this zone")
        return garages

    async def get_garage(self, garage_id: str) -> Garage:
        garage = await self.garage_repo.get(garage_id)
        if garage is None:
            raise NotFoundError("Garage", garage_id)
        return garage

    async def create_garage(
        self,
        *,
        zone: str | None,
        name: str | None,
        location: str | None,
        main_image: Upload | None,
        gallery_images: Sequence[Upload],
        services_raw: str | None,
        service_images: Sequence[Upload],
    ) -> Garage:
        return await self.sync.create(
            zone=zone,
            name=name,
            location=location,
            main_image=main_image,
            gallery_images=gallery_images,
            services_raw=services_raw,
            service_images=service_images,
        )

    async def update_garage(
        self,
        garage_id: str,
        *,
        zone: str | None,
        name: str | None,
        location: str | None,
        main_image: Upload | None,
        gallery_images: Sequence[Upload],
        services_raw: str | None,
        service_images: Sequence[Upload],
    ) -> Reconciliation:
        return await self.sync.update(
            garage_id,
            zone=zone,
            name=name,
            location=location,
            main_image=main_image,
            gallery_images=gallery_images,
            services_raw=services_raw,
            service_images=service_images,
        )

    async def delete_garage(self, garage_id: str) -> list[str]:
        return await self.sync.delete(garage_id)
