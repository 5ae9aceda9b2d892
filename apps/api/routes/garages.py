"""Garage routes (multipart forms with images)."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, File, Form, Query, Request, UploadFile

from garagehub.models import Garage
from garagehub.services import BlobStore
from services.garage_service import GarageService

from ._deps import blob_store, pool, read_upload, read_uploads, schedule_blob_cleanup, settings
from .schemas import GarageResponse, MessageResponse, ServiceResponse

router = APIRouter(prefix="/garages", tags=["garages"])

MAX_GALLERY_IMAGES = 10
MAX_SERVICE_IMAGES = 20


def service(request: Request, blobs: BlobStore) -> GarageService:
    return GarageService(settings(request), pool(request), blobs)


def to_response(garage: Garage, blobs: BlobStore) -> GarageResponse:
    return GarageResponse(
        id=garage.id,
        zone=garage.zone,
        name=garage.name,
        location=garage.location,
        main_image=garage.main_image,
        main_image_url=blobs.url_for(garage.main_image) if garage.main_image else None,
        gallery_images=list(garage.gallery_images),
        gallery_image_urls=[blobs.url_for(r) for r in garage.gallery_images],
        services=[
            ServiceResponse(
                name=s.name,
                price=s.price,
                image=s.image,
                image_url=blobs.url_for(s.image) if s.image else None,
            )
            for s in garage.services
        ],
        created_at=garage.created_at,
    )


@router.get("", response_model=list[GarageResponse])
async def list_garages(request: Request, zone: str | None = Query(default=None)) -> list[GarageResponse]:
    blobs = blob_store(request)
    garages = await service(request, blobs).list_garages(zone=zone)
    return [to_response(g, blobs) for g in garages]


@router.get("/zone/{zone}", response_model=list[GarageResponse])
async def list_garages_by_zone(request: Request, zone: str) -> list[GarageResponse]:
    blobs = blob_store(request)
    garages = await service(request, blobs).list_by_zone(zone)
    return [to_response(g, blobs) for g in garages]


@router.get("/{garage_id}", response_model=GarageResponse)
async def get_garage(request: Request, garage_id: str) -> GarageResponse:
    blobs = blob_store(request)
    garage = await service(request, blobs).get_garage(garage_id)
    return to_response(garage, blobs)


@router.post("", response_model=GarageResponse, status_code=201)
async def create_garage(
    request: Request,
    zone: str | None = Form(default=None),
    garage_name: str | None = Form(default=None, alias="GarageName"),
    garage_location: str | None = Form(default=None, alias="GarageLocation"),
    garage_services: str | None = Form(default=None, alias="GarageServices"),
    main_image: UploadFile | None = File(default=None, alias="GarageMainImage"),
    gallery_images: list[UploadFile] | None = File(default=None, alias="GarageImage"),
    service_images: list[UploadFile] | None = File(default=None, alias="ServiceImages"),
) -> GarageResponse:
    blobs = blob_store(request)
    garage = await service(request, blobs).create_garage(
        zone=zone,
        name=garage_name,
        location=garage_location,
        main_image=await read_upload(main_image, max_bytes=blobs.max_bytes),
        gallery_images=await read_uploads(
            gallery_images, max_bytes=blobs.max_bytes, max_count=MAX_GALLERY_IMAGES
        ),
        services_raw=garage_services,
        service_images=await read_uploads(
            service_images, max_bytes=blobs.max_bytes, max_count=MAX_SERVICE_IMAGES
        ),
    )
    return to_response(garage, blobs)


@router.put("/{garage_id}", response_model=GarageResponse)
async def update_garage(
    request: Request,
    garage_id: str,
    background_tasks: BackgroundTasks,
    zone: str | None = Form(default=None),
    garage_name: str | None = Form(default=None, alias="GarageName"),
    garage_location: str | None = Form(default=None, alias="GarageLocation"),
    garage_services: str | None = Form(default=None, alias="GarageServices"),
    main_image: UploadFile | None = File(default=None, alias="GarageMainImage"),
    gallery_images: list[UploadFile] | None = File(default=None, alias="GarageImage"),
    service_images: list[UploadFile] | None = File(default=None, alias="ServiceImages"),
) -> GarageResponse:
    blobs = blob_store(request)
    result = await service(request, blobs).update_garage(
        garage_id,
        zone=zone,
        name=garage_name,
        location=garage_location,
        main_image=await read_upload(main_image, max_bytes=blobs.max_bytes),
        gallery_images=await read_uploads(
            gallery_images, max_bytes=blobs.max_bytes, max_count=MAX_GALLERY_IMAGES
        ),
        services_raw=garage_services,
        service_images=await read_uploads(
            service_images, max_bytes=blobs.max_bytes, max_count=MAX_SERVICE_IMAGES
        ),
    )
    schedule_blob_cleanup(background_tasks, blobs, result.orphans)
    return to_response(result.garage, blobs)


@router.delete("/{garage_id}", response_model=MessageResponse)
async def delete_garage(
    request: Request, garage_id: str, background_tasks: BackgroundTasks
) -> MessageResponse:
    blobs = blob_store(request)
    refs = await service(request, blobs).delete_garage(garage_id)
    schedule_blob_cleanup(background_tasks, blobs, refs)
    return MessageResponse(message="Garage deleted")
