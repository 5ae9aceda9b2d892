"""Contact form routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from garagehub.models import Contact
from services.contact_service import ContactService

from ._deps import pool
from .schemas import ContactRequest, ContactResponse, MessageResponse

router = APIRouter(prefix="/contacts", tags=["contacts"])


def service(request: Request) -> ContactService:
    return ContactService(pool(request))


def to_response(contact: Contact) -> ContactResponse:
    return ContactResponse(
        id=contact.id,
        name=contact.name,
        mobile_number=contact.mobile_number,
        message=contact.message,
        program=contact.program,
        created_at=contact.created_at,
    )


@router.get("", response_model=list[ContactResponse])
async def list_contacts(request: Request) -> list[ContactResponse]:
    return [to_response(c) for c in await service(request).list_contacts()]


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(request: Request, contact_id: str) -> ContactResponse:
    return to_response(await service(request).get_contact(contact_id))


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(request: Request, payload: ContactRequest) -> ContactResponse:
    contact = await service(request).create_contact(
        name=payload.name,
        mobile_number=payload.mobile_number,
        message=payload.message,
        program=payload.program,
    )
    return to_response(contact)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    request: Request, contact_id: str, payload: ContactRequest
) -> ContactResponse:
    contact = await service(request).update_contact(
        contact_id,
        name=payload.name,
        mobile_number=payload.mobile_number,
        message=payload.message,
        program=payload.program,
    )
    return to_response(contact)


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(request: Request, contact_id: str) -> MessageResponse:
    await service(request).delete_contact(contact_id)
    return MessageResponse(message="Contact deleted successfully")
