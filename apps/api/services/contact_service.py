"""Contact form submissions."""

from __future__ import annotations

from psycopg_pool import AsyncConnectionPool

from garagehub.exceptions import NotFoundError, ValidationError
from garagehub.models import Contact, new_id, utcnow
from garagehub.repositories import ContactRepository


def _clean(value: str | None) -> str:
    return str(value or "").strip()


class ContactService:
    def __init__(self, pool: AsyncConnectionPool):
        self.contact_repo = ContactRepository(pool)

    async def create_contact(
        self,
        *,
        name: str | None,
        mobile_number: str | None,
        message: str | None,
        program: str | None = None,
    ) -> Contact:
        name, mobile_number, message = _clean(name), _clean(mobile_number), _clean(message)
        if not name or not mobile_number or not message:
            raise ValidationError("Name, Mobile Number, and Message are required")
        contact = Contact(
            id=new_id("contact"),
            name=name,
            mobile_number=mobile_number,
            message=message,
            program=_clean(program) or None,
            created_at=utcnow(),
        )
        return await self.contact_repo.create(contact)

    async def list_contacts(self) -> list[Contact]:
        return await self.contact_repo.list()

    async def get_contact(self, contact_id: str) -> Contact:
        contact = await self.contact_repo.get(contact_id)
        if contact is None:
            raise NotFoundError("Contact", contact_id)
        return contact

    async def update_contact(
        self,
        contact_id: str,
        *,
        name: str | None = None,
        mobile_number: str | None = None,
        message: str | None = None,
        program: str | None = None,
    ) -> Contact:
        contact = await self.get_contact(contact_id)
        if _clean(name):
            contact.name = _clean(name)
        if _clean(mobile_number):
            contact.mobile_number = _clean(mobile_number)
        if _clean(message):
            contact.message = _clean(message)
        if program is not None:
            contact.program = _clean(program) or None
        saved = await self.contact_repo.update(contact)
        if saved is None:
            raise NotFoundError("Contact", contact_id)
        return saved

    async def delete_contact(self, contact_id: str) -> None:
        if not await self.contact_repo.delete(contact_id):
            raise NotFoundError("Contact", contact_id)
