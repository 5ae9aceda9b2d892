"""Payment routes; mounted under both /payments and /payment."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, File, Form, Request, UploadFile

from garagehub.models import Payment
from garagehub.services import BlobStore
from services.payment_service import PaymentService

from ._deps import blob_store, pool, read_upload, schedule_blob_cleanup, settings
from .schemas import MessageResponse, PaymentResponse

router = APIRouter(tags=["payments"])


def service(request: Request, blobs: BlobStore) -> PaymentService:
    return PaymentService(settings(request), pool(request), blobs)


def to_response(payment: Payment, blobs: BlobStore) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        name=payment.name,
        email=payment.email,
        car_model=payment.car_model,
        garage=payment.garage,
        garage_id=payment.garage_id,
        service=payment.service,
        price=payment.price,
        transaction_id=payment.transaction_id,
        qr_code_image=payment.qr_code_image,
        qr_code_image_url=blobs.url_for(payment.qr_code_image),
        status=payment.status,
        created_at=payment.created_at,
        updated_at=payment.updated_at,
    )


@router.get("", response_model=list[PaymentResponse])
async def list_payments(request: Request) -> list[PaymentResponse]:
    blobs = blob_store(request)
    return [to_response(p, blobs) for p in await service(request, blobs).list_payments()]


@router.get("/email/{email}", response_model=list[PaymentResponse])
async def list_payments_by_email(request: Request, email: str) -> list[PaymentResponse]:
    blobs = blob_store(request)
    return [to_response(p, blobs) for p in await service(request, blobs).list_by_email(email)]


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(request: Request, payment_id: str) -> PaymentResponse:
    blobs = blob_store(request)
    return to_response(await service(request, blobs).get_payment(payment_id), blobs)


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(
    request: Request,
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    car_model: str | None = Form(default=None, alias="carModel"),
    garage: str | None = Form(default=None),
    garage_id: str | None = Form(default=None, alias="garageId"),
    service_name: str | None = Form(default=None, alias="service"),
    price: str | None = Form(default=None),
    transaction_id: str | None = Form(default=None, alias="transactionId"),
    qr_code_image: UploadFile | None = File(default=None, alias="qrCodeImage"),
) -> PaymentResponse:
    blobs = blob_store(request)
    payment = await service(request, blobs).create_payment(
        fields={
            "name": name,
            "email": email,
            "car_model": car_model,
            "garage": garage,
            "garage_id": garage_id,
            "service": service_name,
            "price": price,
            "transaction_id": transaction_id,
        },
        qr_code=await read_upload(qr_code_image, max_bytes=blobs.max_bytes),
    )
    return to_response(payment, blobs)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    request: Request,
    payment_id: str,
    background_tasks: BackgroundTasks,
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    car_model: str | None = Form(default=None, alias="carModel"),
    garage: str | None = Form(default=None),
    garage_id: str | None = Form(default=None, alias="garageId"),
    service_name: str | None = Form(default=None, alias="service"),
    price: str | None = Form(default=None),
    transaction_id: str | None = Form(default=None, alias="transactionId"),
    status: str | None = Form(default=None),
    qr_code_image: UploadFile | None = File(default=None, alias="qrCodeImage"),
) -> PaymentResponse:
    blobs = blob_store(request)
    payment, orphans = await service(request, blobs).update_payment(
        payment_id,
        fields={
            "name": name,
            "email": email,
            "car_model": car_model,
            "garage": garage,
            "garage_id": garage_id,
            "service": service_name,
            "price": price,
            "transaction_id": transaction_id,
            "status": status,
        },
        qr_code=await read_upload(qr_code_image, max_bytes=blobs.max_bytes),
    )
    schedule_blob_cleanup(background_tasks, blobs, orphans)
    return to_response(payment, blobs)


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    request: Request, payment_id: str, background_tasks: BackgroundTasks
) -> MessageResponse:
    blobs = blob_store(request)
    refs = await service(request, blobs).delete_payment(payment_id)
    schedule_blob_cleanup(background_tasks, blobs, refs)
    return MessageResponse(message="Payment deleted successfully")
