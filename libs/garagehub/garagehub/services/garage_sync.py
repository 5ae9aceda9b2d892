"""Garage lifecycle: keep stored image files in sync with the garage record.

The reconciliation helpers are pure: they take the stored garage plus the
already-stored refs of the new uploads and return the next record state and
the refs that are no longer reachable from it. `GarageSynchronizer` does the
I/O around them (storing uploads, persisting the record) and hands the orphan
refs back to the caller, which deletes them after the write has succeeded.

Service images are correlated with service descriptors by position only:
the i-th uploaded service image belongs to the i-th descriptor. Reordering
services between requests therefore moves images with the positions, not with
the service names.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Protocol, TypeVar

from garagehub.exceptions import NotFoundError, ValidationError
from garagehub.models import Garage, Service, Upload, new_id, utcnow
from garagehub.services.blob_store import BlobStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAIN_IMAGE_FIELD = "GarageMainImage"
GALLERY_IMAGE_FIELD = "GarageImage"
SERVICE_IMAGE_FIELD = "ServiceImages"

_NAME_KEYS = ("name", "ServiceName")
_PRICE_KEYS = ("price", "ServicePrice")
_IMAGE_KEYS = ("image", "ServiceImage")


@dataclass(frozen=True)
class ServiceDescriptor:
    """A service as described by the client, before image resolution."""

    name: str
    price: float
    image: str | None = None


@dataclass
class GaragePatch:
    """Incoming update with every new upload already stored."""

    zone: str | None = None
    name: str | None = None
    location: str | None = None
    main_image: str | None = None
    gallery_images: list[str] = field(default_factory=list)
    services: list[ServiceDescriptor] | None = None
    service_image_refs: list[str | None] = field(default_factory=list)


@dataclass
class Reconciliation:
    garage: Garage
    orphans: list[str] = field(default_factory=list)


class GarageRepositoryLike(Protocol):
    async def create(self, garage: Garage) -> Garage: ...

    async def get(self, garage_id: str) -> Garage | None: ...

    async def update(self, garage: Garage) -> Garage | None: ...

    async def delete(self, garage_id: str) -> bool: ...


def _first(obj: dict[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in obj:
            return obj[key]
    return None


def _parse_price(value: Any, *, index: int) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"GarageServices[{index}]: price is required")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ValidationError(f"GarageServices[{index}]: price must be a number") from exc
    if not isinstance(value, (int, float)):
        raise ValidationError(f"GarageServices[{index}]: price must be a number")
    try:
        price = float(value)
    except OverflowError as exc:
        raise ValidationError(f"GarageServices[{index}]: price must be a finite number") from exc
    if not math.isfinite(price) or price < 0:
        raise ValidationError(f"GarageServices[{index}]: price must be a non-negative number")
    return price


def parse_service_descriptors(raw: str | None) -> list[ServiceDescriptor] | None:
    """Parse the JSON-encoded service list; None when the field was not supplied."""
    if raw is None or not str(raw).strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"GarageServices is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, list):
        raise ValidationError("GarageServices must be a JSON array")

    out: list[ServiceDescriptor] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValidationError(f"GarageServices[{i}] must be an object")
        name = _first(item, _NAME_KEYS)
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"GarageServices[{i}]: name is required")
        price = _parse_price(_first(item, _PRICE_KEYS), index=i)
        image = _first(item, _IMAGE_KEYS)
        out.append(
            ServiceDescriptor(
                name=name.strip(),
                price=price,
                image=image.strip() if isinstance(image, str) and image.strip() else None,
            )
        )
    return out


def pair_service_uploads(
    descriptors: Sequence[ServiceDescriptor], uploads: Sequence[T]
) -> list[tuple[ServiceDescriptor, T | None]]:
    """Zip descriptors with uploads by index; extra uploads are dropped."""
    return [
        (desc, uploads[i] if i < len(uploads) else None) for i, desc in enumerate(descriptors)
    ]


def reconcile_services(
    old_services: Sequence[Service],
    descriptors: Sequence[ServiceDescriptor],
    new_image_refs: Sequence[str | None],
) -> tuple[list[Service], list[str]]:
    """Replace the service list, carrying images forward by position.

    Old images at positions past the end of the new list are dropped from the
    record without being reported as orphans.
    """
    services: list[Service] = []
    orphans: list[str] = []
    for i, desc in enumerate(descriptors):
        old_image = old_services[i].image if i < len(old_services) else None
        new_ref = new_image_refs[i] if i < len(new_image_refs) else None
        if new_ref:
            if old_image and old_image != new_ref:
                orphans.append(old_image)
            image = new_ref
        else:
            image = old_image
        services.append(Service(name=desc.name, price=desc.price, image=image))
    return services, orphans


def reconcile_update(existing: Garage, patch: GaragePatch) -> Reconciliation:
    orphans: list[str] = []

    main_image = existing.main_image
    if patch.main_image:
        if existing.main_image and existing.main_image != patch.main_image:
            orphans.append(existing.main_image)
        main_image = patch.main_image

    services = [replace(s) for s in existing.services]
    if patch.services is not None:
        services, service_orphans = reconcile_services(
            existing.services, patch.services, patch.service_image_refs
        )
        orphans.extend(service_orphans)

    garage = Garage(
        id=existing.id,
        zone=patch.zone or existing.zone,
        name=patch.name or existing.name,
        location=patch.location or existing.location,
        main_image=main_image,
        gallery_images=[*existing.gallery_images, *patch.gallery_images],
        services=services,
        created_at=existing.created_at,
    )
    return Reconciliation(garage=garage, orphans=orphans)


def _clean(value: str | None) -> str | None:
    text = str(value or "").strip()
    return text or None


class GarageSynchronizer:
    def __init__(self, repo: GarageRepositoryLike, blobs: BlobStore) -> None:
        self.repo = repo
        self.blobs = blobs

    async def _store_service_images(
        self, pairs: Sequence[tuple[ServiceDescriptor, Upload | None]]
    ) -> list[str | None]:
        refs: list[str | None] = []
        for _desc, upload in pairs:
            if upload is None:
                refs.append(None)
                continue
            refs.append(
                await self.blobs.store(upload.content, upload.filename, field=SERVICE_IMAGE_FIELD)
            )
        return refs

    async def _store_gallery(self, uploads: Sequence[Upload]) -> list[str]:
        return [
            await self.blobs.store(u.content, u.filename, field=GALLERY_IMAGE_FIELD) for u in uploads
        ]

    async def create(
        self,
        *,
        zone: str | None,
        name: str | None,
        location: str | None,
        main_image: Upload | None = None,
        gallery_images: Sequence[Upload] = (),
        services_raw: str | None = None,
        service_images: Sequence[Upload] = (),
    ) -> Garage:
        zone, name, location = _clean(zone), _clean(name), _clean(location)
        missing = [
            label
            for label, value in (("zone", zone), ("GarageName", name), ("GarageLocation", location))
            if not value
        ]
        if missing:
            raise ValidationError(f"missing required fields: {', '.join(missing)}")
        descriptors = parse_service_descriptors(services_raw) or []

        # Uploads that fail mid-sequence leave earlier blobs of this request on disk.
        pairs = pair_service_uploads(descriptors, list(service_images))
        new_refs = await self._store_service_images(pairs)
        services: list[Service] = []
        for (desc, _upload), ref in zip(pairs, new_refs):
            image = ref
            if image is None and desc.image and await self.blobs.exists(desc.image):
                image = desc.image
            services.append(Service(name=desc.name, price=desc.price, image=image))

        main_ref = None
        if main_image is not None:
            main_ref = await self.blobs.store(
                main_image.content, main_image.filename, field=MAIN_IMAGE_FIELD
            )
        gallery_refs = await self._store_gallery(gallery_images)

        garage = Garage(
            id=new_id("garage"),
            zone=str(zone),
            name=str(name),
            location=str(location),
            main_image=main_ref,
            gallery_images=gallery_refs,
            services=services,
            created_at=utcnow(),
        )
        created = await self.repo.create(garage)
        logger.info(
            "garage created (id=%s, services=%d, gallery=%d)",
            created.id,
            len(created.services),
            len(created.gallery_images),
        )
        return created

    async def update(
        self,
        garage_id: str,
        *,
        zone: str | None = None,
        name: str | None = None,
        location: str | None = None,
        main_image: Upload | None = None,
        gallery_images: Sequence[Upload] = (),
        services_raw: str | None = None,
        service_images: Sequence[Upload] = (),
    ) -> Reconciliation:
        existing = await self.repo.get(garage_id)
        if existing is None:
            raise NotFoundError("Garage", garage_id)
        descriptors = parse_service_descriptors(services_raw)

        patch = GaragePatch(zone=_clean(zone), name=_clean(name), location=_clean(location))
        if main_image is not None:
            patch.main_image = await self.blobs.store(
                main_image.content, main_image.filename, field=MAIN_IMAGE_FIELD
            )
        patch.gallery_images = await self._store_gallery(gallery_images)
        if descriptors is not None:
            patch.services = descriptors
            pairs = pair_service_uploads(descriptors, list(service_images))
            patch.service_image_refs = await self._store_service_images(pairs)

        result = reconcile_update(existing, patch)
        saved = await self.repo.update(result.garage)
        if saved is None:
            raise NotFoundError("Garage", garage_id)
        logger.info("garage updated (id=%s, orphans=%d)", garage_id, len(result.orphans))
        return Reconciliation(garage=saved, orphans=result.orphans)

    async def delete(self, garage_id: str) -> list[str]:
        existing = await self.repo.get(garage_id)
        if existing is None:
            raise NotFoundError("Garage", garage_id)
        if not await self.repo.delete(garage_id):
            raise NotFoundError("Garage", garage_id)
        refs = existing.blob_refs()
        logger.info("garage deleted (id=%s, blobs=%d)", garage_id, len(refs))
        return refs
