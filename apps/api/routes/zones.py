"""Zone routes."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, File, Form, Request, UploadFile

from garagehub.models import Zone
from garagehub.services import BlobStore
from services.zone_service import ZoneService

from ._deps import blob_store, pool, read_upload, schedule_blob_cleanup, settings
from .schemas import MessageResponse, ZoneResponse

router = APIRouter(prefix="/zones", tags=["zones"])


def service(request: Request, blobs: BlobStore) -> ZoneService:
    return ZoneService(settings(request), pool(request), blobs)


def to_response(zone: Zone, blobs: BlobStore) -> ZoneResponse:
    return ZoneResponse(
        id=zone.id,
        zone_name=zone.zone_name,
        zone_image=zone.zone_image,
        zone_image_url=blobs.url_for(zone.zone_image),
        uploaded_by=zone.uploaded_by,
        created_at=zone.created_at,
    )


@router.get("", response_model=list[ZoneResponse])
async def list_zones(request: Request) -> list[ZoneResponse]:
    blobs = blob_store(request)
    return [to_response(z, blobs) for z in await service(request, blobs).list_zones()]


@router.get("/{zone_id}", response_model=ZoneResponse)
async def get_zone(request: Request, zone_id: str) -> ZoneResponse:
    blobs = blob_store(request)
    return to_response(await service(request, blobs).get_zone(zone_id), blobs)


@router.post("", response_model=ZoneResponse, status_code=201)
async def create_zone(
    request: Request,
    zone_name: str | None = Form(default=None, alias="zoneName"),
    uploaded_by: str | None = Form(default=None, alias="uploadedBy"),
    zone_image: UploadFile | None = File(default=None, alias="zoneImage"),
) -> ZoneResponse:
    blobs = blob_store(request)
    zone = await service(request, blobs).create_zone(
        zone_name=zone_name,
        uploaded_by=uploaded_by,
        image=await read_upload(zone_image, max_bytes=blobs.max_bytes),
    )
    return to_response(zone, blobs)


@router.put("/{zone_id}", response_model=ZoneResponse)
async def update_zone(
    request: Request,
    zone_id: str,
    background_tasks: BackgroundTasks,
    zone_name: str | None = Form(default=None, alias="zoneName"),
    uploaded_by: str | None = Form(default=None, alias="uploadedBy"),
    zone_image: UploadFile | None = File(default=None, alias="zoneImage"),
) -> ZoneResponse:
    blobs = blob_store(request)
    zone, orphans = await service(request, blobs).update_zone(
        zone_id,
        zone_name=zone_name,
        uploaded_by=uploaded_by,
        image=await read_upload(zone_image, max_bytes=blobs.max_bytes),
    )
    schedule_blob_cleanup(background_tasks, blobs, orphans)
    return to_response(zone, blobs)


@router.delete("/{zone_id}", response_model=MessageResponse)
async def delete_zone(
    request: Request, zone_id: str, background_tasks: BackgroundTasks
) -> MessageResponse:
    blobs = blob_store(request)
    refs = await service(request, blobs).delete_zone(zone_id)
    schedule_blob_cleanup(background_tasks, blobs, refs)
    return MessageResponse(message="Zone deleted successfully")
