"""
Command and query handlers for contacts.

Handlers assume their request already passed the registered validators
and only perform checks that need the database.
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.auth.passwords import PasswordHasher
from contactbook.categories.repository import (
    CategoryRepository,
    CategoryRepositoryProtocol,
    SubcategoryRepository,
    SubcategoryRepositoryProtocol,
)
from contactbook.contacts.commands import (
    CreateContactCommand,
    DeleteContactCommand,
    UpdateContactCommand,
)
from contactbook.contacts.models import Contact
from contactbook.contacts.queries import GetAllContactsQuery, GetContactByIdQuery
from contactbook.contacts.repository import (
    ContactDetails,
    ContactRepository,
    ContactRepositoryProtocol,
)
from contactbook.contacts.schemas import ContactResponse, ContactSummaryResponse
from contactbook.contacts.validators import (
    CreateContactValidator,
    DeleteContactValidator,
    GetAllContactsValidator,
    GetContactByIdValidator,
    UpdateContactValidator,
)
from contactbook.shared.exceptions import DuplicateEmailError, NotFoundError
from contactbook.shared.logging import get_logger
from contactbook.shared.pagination import PagedResult
from contactbook.shared.pipeline import Mediator

logger = get_logger(__name__)


async def _ensure_category_refs(
    categories: CategoryRepositoryProtocol,
    subcategories: SubcategoryRepositoryProtocol,
    category_id: int,
    subcategory_id: int | None,
) -> None:
    if not await categories.exists(category_id):
        logger.warning("Unknown category", extra={"category_id": category_id})
        raise NotFoundError("CategoryId", category_id)

    if subcategory_id is not None and not await subcategories.exists_for_category(
        subcategory_id, category_id
    ):
        logger.warning(
            "Unknown subcategory for category",
            extra={"category_id": category_id, "subcategory_id": subcategory_id},
        )
        raise NotFoundError("SubcategoryId", subcategory_id)


def _to_response(details: ContactDetails) -> ContactResponse:
    contact = details.contact
    return ContactResponse(
        id=contact.id,
        name=contact.name,
        surname=contact.surname,
        email=contact.email,
        phone_number=contact.phone_number,
        birth_date=contact.birth_date,
        category_id=contact.category_id,
        category_name=details.category_name,
        subcategory_id=contact.subcategory_id,
        subcategory_name=details.subcategory_name,
        custom_subcategory=contact.custom_subcategory,
    )


def _to_summary(details: ContactDetails) -> ContactSummaryResponse:
    contact = details.contact
    return ContactSummaryResponse(
        id=contact.id,
        name=contact.name,
        surname=contact.surname,
        email=contact.email,
        phone_number=contact.phone_number,
        category=details.category_name,
    )


class CreateContactHandler:
    """Creates a contact after checking email and category references."""

    def __init__(
        self,
        contacts: ContactRepositoryProtocol,
        categories: CategoryRepositoryProtocol,
        subcategories: SubcategoryRepositoryProtocol,
        password_hasher: PasswordHasher,
    ) -> None:
        self._contacts = contacts
        self._categories = categories
        self._subcategories = subcategories
        self._password_hasher = password_hasher

    async def handle(self, command: CreateContactCommand) -> int:
        """Create a contact.

        Returns:
            Generated contact ID.

        Raises:
            DuplicateEmailError: If the email is already used.
            NotFoundError: If the category or subcategory does not exist.
        """
        logger.info("Creating contact", extra={"category_id": command.category_id})

        if await self._contacts.email_exists(command.email):
            logger.warning("Duplicate contact email on create")
            raise DuplicateEmailError(command.email)

        await _ensure_category_refs(
            self._categories,
            self._subcategories,
            command.category_id,
            command.subcategory_id,
        )

        # Key derivation is CPU-bound; keep it off the event loop.
        password_hash = await asyncio.to_thread(self._password_hasher.hash, command.password)

        contact = Contact(
            name=command.name,
            surname=command.surname,
            email=command.email,
            password_hash=password_hash,
            phone_number=command.phone_number,
            birth_date=command.birth_date,
            category_id=command.category_id,
            subcategory_id=command.subcategory_id,
            custom_subcategory=command.custom_subcategory,
        )
        contact_id = await self._contacts.create(contact)

        logger.info("Contact created", extra={"contact_id": contact_id})
        return contact_id


class UpdateContactHandler:
    """Replaces the editable fields of an existing contact."""

    def __init__(
        self,
        contacts: ContactRepositoryProtocol,
        categories: CategoryRepositoryProtocol,
        subcategories: SubcategoryRepositoryProtocol,
        password_hasher: PasswordHasher,
    ) -> None:
        self._contacts = contacts
        self._categories = categories
        self._subcategories = subcategories
        self._password_hasher = password_hasher

    async def handle(self, command: UpdateContactCommand) -> None:
        """Update a contact.

        A blank or missing password keeps the stored hash.

        Raises:
            NotFoundError: If the contact, category or subcategory does not exist.
            DuplicateEmailError: If the new email belongs to another contact.
        """
        logger.info("Updating contact", extra={"contact_id": command.id})

        contact = await self._contacts.get_by_id(command.id)
        if contact is None:
            logger.warning("Contact not found", extra={"contact_id": command.id})
            raise NotFoundError("Contact", command.id)

        if contact.email.lower() != command.email.lower() and await self._contacts.email_exists(
            command.email
        ):
            logger.warning("Duplicate contact email on update", extra={"contact_id": command.id})
            raise DuplicateEmailError(command.email)

        await _ensure_category_refs(
            self._categories,
            self._subcategories,
            command.category_id,
            command.subcategory_id,
        )

        contact.name = command.name
        contact.surname = command.surname
        contact.email = command.email
        contact.phone_number = command.phone_number
        contact.birth_date = command.birth_date
        contact.category_id = command.category_id
        contact.subcategory_id = command.subcategory_id
        contact.custom_subcategory = command.custom_subcategory

        if command.password is not None and command.password.strip():
            contact.password_hash = await asyncio.to_thread(
                self._password_hasher.hash, command.password
            )

        await self._contacts.save_changes(contact)
        logger.info("Contact updated", extra={"contact_id": command.id})


class DeleteContactHandler:
    def __init__(self, contacts: ContactRepositoryProtocol) -> None:
        self._contacts = contacts

    async def handle(self, command: DeleteContactCommand) -> None:
        contact = await self._contacts.get_by_id(command.id)
        if contact is None:
            logger.warning("Contact not found", extra={"contact_id": command.id})
            raise NotFoundError("Contact", command.id)

        await self._contacts.delete(contact)
        logger.info("Contact deleted", extra={"contact_id": command.id})


class GetContactByIdHandler:
    def __init__(self, contacts: ContactRepositoryProtocol) -> None:
        self._contacts = contacts

    async def handle(self, query: GetContactByIdQuery) -> ContactResponse:
        details = await self._contacts.get_details_by_id(query.id)
        if details is None:
            logger.warning("Contact not found", extra={"contact_id": query.id})
            raise NotFoundError("Contact", query.id)
        return _to_response(details)


class GetAllContactsHandler:
    """Searches, sorts and pages contacts."""

    def __init__(self, contacts: ContactRepositoryProtocol) -> None:
        self._contacts = contacts

    async def handle(self, query: GetAllContactsQuery) -> PagedResult[ContactSummaryResponse]:
        rows, total = await self._contacts.get_all_matching(
            query.search_phrase,
            query.page_size,
            query.page_number,
            query.sort_by,
            query.sort_direction,
        )
        logger.info(
            "Contacts listed",
            extra={
                "page_number": query.page_number,
                "page_size": query.page_size,
                "total": total,
            },
        )
        return PagedResult[ContactSummaryResponse].create(
            [_to_summary(row) for row in rows],
            total,
            query.page_size,
            query.page_number,
        )


def build_mediator(session: AsyncSession, password_hasher: PasswordHasher) -> Mediator:
    """Wire contact handlers and validators for one database session."""
    contacts = ContactRepository(session)
    categories = CategoryRepository(session)
    subcategories = SubcategoryRepository(session)

    mediator = Mediator()
    mediator.register(
        CreateContactCommand,
        lambda: CreateContactHandler(contacts, categories, subcategories, password_hasher),
        [CreateContactValidator()],
    )
    mediator.register(
        UpdateContactCommand,
        lambda: UpdateContactHandler(contacts, categories, subcategories, password_hasher),
        [UpdateContactValidator()],
    )
    mediator.register(
        DeleteContactCommand,
        lambda: DeleteContactHandler(contacts),
        [DeleteContactValidator()],
    )
    mediator.register(
        GetContactByIdQuery,
        lambda: GetContactByIdHandler(contacts),
        [GetContactByIdValidator()],
    )
    mediator.register(
        GetAllContactsQuery,
        lambda: GetAllContactsHandler(contacts),
        [GetAllContactsValidator()],
    )
    return mediator
