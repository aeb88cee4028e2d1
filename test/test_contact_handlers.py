"""
Tests for contact command and query handlers dispatched through the mediator.
"""

import threading
from dataclasses import replace

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.auth.passwords import ScryptPasswordHasher
from contactbook.contacts.commands import (
    CreateContactCommand,
    DeleteContactCommand,
    UpdateContactCommand,
)
from contactbook.contacts.handlers import build_mediator
from contactbook.contacts.models import Contact
from contactbook.contacts.queries import GetAllContactsQuery, GetContactByIdQuery
from contactbook.shared.exceptions import DuplicateEmailError, NotFoundError, ValidationError
from contactbook.shared.pagination import SortDirection
from contactbook.shared.pipeline import Mediator
from contactbook.shared.validation import years_ago


@pytest.fixture
def mediator(db_session: AsyncSession, password_hasher: ScryptPasswordHasher) -> Mediator:
    return build_mediator(db_session, password_hasher)


@pytest.fixture
def create_command() -> CreateContactCommand:
    return CreateContactCommand(
        name="Jan",
        surname="Kowalski",
        email="jan@example.com",
        password="SecureP@ss1",
        phone_number="+48123456789",
        birth_date=years_ago(30),
        category_id=1,
        subcategory_id=2,
    )


def update_from(create: CreateContactCommand, contact_id: int, **overrides) -> UpdateContactCommand:
    values = {
        "id": contact_id,
        "name": create.name,
        "surname": create.surname,
        "email": create.email,
        "password": None,
        "phone_number": create.phone_number,
        "birth_date": create.birth_date,
        "category_id": create.category_id,
        "subcategory_id": create.subcategory_id,
        "custom_subcategory": create.custom_subcategory,
    }
    values.update(overrides)
    return UpdateContactCommand(**values)


async def count_contacts(session: AsyncSession) -> int:
    return (await session.execute(select(func.count(Contact.id)))).scalar_one()


class TestCreateContactHandler:
    """Tests for creating contacts."""

    async def test_create_returns_id_and_hashes_password(
        self,
        mediator: Mediator,
        db_session: AsyncSession,
        password_hasher: ScryptPasswordHasher,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        contact = await db_session.get(Contact, contact_id)
        assert contact is not None
        assert contact.password_hash != "SecureP@ss1"
        assert password_hasher.verify("SecureP@ss1", contact.password_hash)

    async def test_created_contact_reads_back(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        dto = await mediator.send(GetContactByIdQuery(id=contact_id))

        assert dto.id == contact_id
        assert dto.name == "Jan"
        assert dto.surname == "Kowalski"
        assert dto.email == "jan@example.com"
        assert dto.phone_number == "+48123456789"
        assert dto.birth_date == create_command.birth_date
        assert dto.category_id == 1
        assert dto.category_name == "Służbowy"
        assert dto.subcategory_id == 2
        assert dto.subcategory_name == "współpracownik"
        assert dto.custom_subcategory is None
        assert "password" not in dto.model_dump()
        assert "password_hash" not in dto.model_dump()

    async def test_duplicate_email_rejected_without_insert(
        self,
        mediator: Mediator,
        db_session: AsyncSession,
        create_command: CreateContactCommand,
    ) -> None:
        await mediator.send(create_command)

        with pytest.raises(DuplicateEmailError):
            await mediator.send(replace(create_command, email="JAN@EXAMPLE.COM"))

        assert await count_contacts(db_session) == 1

    async def test_unknown_category(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await mediator.send(replace(create_command, category_id=999, subcategory_id=None))

        assert exc_info.value.message == "CategoryId with id: 999 doesn't exist"

    async def test_subcategory_must_belong_to_category(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await mediator.send(replace(create_command, category_id=2, subcategory_id=1))

        assert exc_info.value.resource_type == "SubcategoryId"
        assert exc_info.value.resource_id == "1"

    async def test_email_checked_before_category(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        await mediator.send(create_command)

        with pytest.raises(DuplicateEmailError):
            await mediator.send(replace(create_command, category_id=999))

    async def test_invalid_command_has_no_side_effects(
        self,
        mediator: Mediator,
        db_session: AsyncSession,
        create_command: CreateContactCommand,
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await mediator.send(replace(create_command, email="bad", password="short"))

        assert set(exc_info.value.errors) == {"email", "password"}
        assert await count_contacts(db_session) == 0

    async def test_custom_subcategory_stored(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(
            replace(create_command, category_id=3, subcategory_id=None, custom_subcategory="sąsiad")
        )

        dto = await mediator.send(GetContactByIdQuery(id=contact_id))

        assert dto.category_name == "Inny"
        assert dto.subcategory_name is None
        assert dto.custom_subcategory == "sąsiad"


class TestUpdateContactHandler:
    """Tests for updating contacts."""

    async def test_missing_contact(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await mediator.send(update_from(create_command, 999))

        assert exc_info.value.message == "Contact with id: 999 doesn't exist"

    @pytest.mark.parametrize("password", [None, ""])
    async def test_blank_password_keeps_hash(
        self,
        mediator: Mediator,
        db_session: AsyncSession,
        create_command: CreateContactCommand,
        password: str | None,
    ) -> None:
        contact_id = await mediator.send(create_command)
        contact = await db_session.get(Contact, contact_id)
        original_hash = contact.password_hash

        await mediator.send(
            update_from(create_command, contact_id, name="Janusz", password=password)
        )

        assert contact.name == "Janusz"
        assert contact.password_hash == original_hash

    async def test_new_password_rehashed(
        self,
        mediator: Mediator,
        db_session: AsyncSession,
        password_hasher: ScryptPasswordHasher,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)
        contact = await db_session.get(Contact, contact_id)
        original_hash = contact.password_hash

        await mediator.send(update_from(create_command, contact_id, password="N3w!Password"))

        assert contact.password_hash != original_hash
        assert password_hasher.verify("N3w!Password", contact.password_hash)

    async def test_same_email_with_different_case_allowed(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        await mediator.send(update_from(create_command, contact_id, email="Jan@Example.com"))

        dto = await mediator.send(GetContactByIdQuery(id=contact_id))
        assert dto.email == "Jan@Example.com"

    async def test_email_of_other_contact_rejected(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        await mediator.send(replace(create_command, email="taken@example.com"))
        contact_id = await mediator.send(create_command)

        with pytest.raises(DuplicateEmailError):
            await mediator.send(update_from(create_command, contact_id, email="taken@example.com"))

    async def test_unknown_category(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        with pytest.raises(NotFoundError) as exc_info:
            await mediator.send(
                update_from(create_command, contact_id, category_id=999, subcategory_id=None)
            )

        assert exc_info.value.resource_type == "CategoryId"
        assert exc_info.value.resource_id == "999"

    async def test_switch_to_custom_subcategory(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        await mediator.send(
            update_from(
                create_command,
                contact_id,
                category_id=3,
                subcategory_id=None,
                custom_subcategory="trener",
            )
        )

        dto = await mediator.send(GetContactByIdQuery(id=contact_id))
        assert (dto.category_id, dto.subcategory_id, dto.custom_subcategory) == (3, None, "trener")


class RecordingHasher:
    def __init__(self, inner: ScryptPasswordHasher) -> None:
        self._inner = inner
        self.threads: list[int] = []

    def hash(self, password: str) -> str:
        self.threads.append(threading.get_ident())
        return self._inner.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        return self._inner.verify(password, hashed)


class TestPasswordHashingThread:
    """Hashing runs in a worker thread so the event loop keeps serving requests."""

    async def test_create_and_update_hash_off_loop(
        self,
        db_session: AsyncSession,
        password_hasher: ScryptPasswordHasher,
        create_command: CreateContactCommand,
    ) -> None:
        hasher = RecordingHasher(password_hasher)
        mediator = build_mediator(db_session, hasher)

        contact_id = await mediator.send(create_command)
        await mediator.send(update_from(create_command, contact_id, password="N3w!Password"))

        assert len(hasher.threads) == 2
        assert threading.get_ident() not in hasher.threads


class TestDeleteContactHandler:
    async def test_round_trip_delete(
        self,
        mediator: Mediator,
        create_command: CreateContactCommand,
    ) -> None:
        contact_id = await mediator.send(create_command)

        await mediator.send(DeleteContactCommand(id=contact_id))

        with pytest.raises(NotFoundError):
            await mediator.send(GetContactByIdQuery(id=contact_id))

    async def test_missing_contact(self, mediator: Mediator) -> None:
        with pytest.raises(NotFoundError):
            await mediator.send(DeleteContactCommand(id=42))

    async def test_non_positive_id_rejected(self, mediator: Mediator) -> None:
        with pytest.raises(ValidationError):
            await mediator.send(DeleteContactCommand(id=0))


@pytest.fixture
async def seeded(mediator: Mediator, create_command: CreateContactCommand) -> None:
    for i in range(25):
        await mediator.send(
            replace(create_command, email=f"person{i:02d}@example.com", surname=f"S{i:02d}")
        )


class TestGetAllContactsHandler:
    """Tests for listing contacts."""

    async def test_second_page(self, mediator: Mediator, seeded: None) -> None:
        result = await mediator.send(GetAllContactsQuery(page_number=2, page_size=10))

        assert result.total_items_count == 25
        assert result.total_pages == 3
        assert result.items_from == 11
        assert result.items_to == 20
        assert [item.surname for item in result.items] == [f"S{i:02d}" for i in range(10, 20)]

    async def test_last_page_is_partial(self, mediator: Mediator, seeded: None) -> None:
        result = await mediator.send(GetAllContactsQuery(page_number=3, page_size=10))

        assert len(result.items) == 5
        assert result.items_from == 21
        assert result.items_to == 30

    async def test_summary_carries_category_name(self, mediator: Mediator, seeded: None) -> None:
        result = await mediator.send(
            GetAllContactsQuery(
                search_phrase="person07",
                page_size=5,
                sort_by="Surname",
                sort_direction=SortDirection.DESCENDING,
            )
        )

        assert len(result.items) == 1
        item = result.items[0]
        assert item.email == "person07@example.com"
        assert item.category == "Służbowy"

    async def test_invalid_page_size(self, mediator: Mediator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await mediator.send(GetAllContactsQuery(page_size=7))

        assert list(exc_info.value.errors) == ["pageSize"]
