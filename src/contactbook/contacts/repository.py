"""
Contact repository for database operations.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import Select, exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.categories.models import Category, Subcategory
from contactbook.contacts.models import Contact
from contactbook.shared.database import id_in_range
from contactbook.shared.exceptions import DuplicateEmailError
from contactbook.shared.pagination import SortDirection

SORTABLE_COLUMNS = {
    "Name": Contact.name,
    "Surname": Contact.surname,
    "Category": Category.name,
}


@dataclass(frozen=True)
class ContactDetails:
    """A contact row together with its joined reference names."""

    contact: Contact
    category_name: str | None
    subcategory_name: str | None


class ContactRepositoryProtocol(Protocol):
    """Protocol for contact repository operations."""

    async def create(self, contact: Contact) -> int: ...

    async def get_by_id(self, contact_id: int) -> Contact | None: ...

    async def get_details_by_id(self, contact_id: int) -> ContactDetails | None: ...

    async def email_exists(self, email: str) -> bool: ...

    async def delete(self, contact: Contact) -> None: ...

    async def save_changes(self, contact: Contact) -> None: ...

    async def get_all_matching(
        self,
        search_phrase: str | None,
        page_size: int,
        page_number: int,
        sort_by: str | None = None,
        sort_direction: SortDirection = SortDirection.ASCENDING,
    ) -> tuple[list[ContactDetails], int]: ...


class ContactRepository:
    """Repository for contact database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def create(self, contact: Contact) -> int:
        """Create a single contact.

        Args:
            contact: Contact to create.

        Returns:
            Generated contact ID.

        Raises:
            DuplicateEmailError: If the store rejects the email as taken.
        """
        self._session.add(contact)
        await self._flush(contact.email)
        return contact.id

    async def get_by_id(self, contact_id: int) -> Contact | None:
        """Get a contact by ID.

        Args:
            contact_id: Contact ID.

        Returns:
            Contact if found, None otherwise.
        """
        if not id_in_range(contact_id):
            return None
        stmt = select(Contact).where(Contact.id == contact_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_details_by_id(self, contact_id: int) -> ContactDetails | None:
        """Get a contact by ID with category and subcategory names."""
        if not id_in_range(contact_id):
            return None
        stmt = self._details_query().where(Contact.id == contact_id)
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return ContactDetails(*row)

    async def get_by_email(self, email: str) -> Contact | None:
        """Get a contact by email, ignoring case."""
        stmt = select(Contact).where(func.lower(Contact.email) == email.lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        """Check whether any contact uses this email, ignoring case."""
        stmt = select(exists().where(func.lower(Contact.email) == email.lower()))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def delete(self, contact: Contact) -> None:
        """Delete a contact."""
        await self._session.delete(contact)
        await self._session.flush()

    async def save_changes(self, contact: Contact) -> None:
        """Flush pending changes of a loaded contact.

        Raises:
            DuplicateEmailError: If the store rejects the email as taken.
        """
        await self._flush(contact.email)

    async def get_all_matching(
        self,
        search_phrase: str | None,
        page_size: int,
        page_number: int,
        sort_by: str | None = None,
        sort_direction: SortDirection = SortDirection.ASCENDING,
    ) -> tuple[list[ContactDetails], int]:
        """Get one page of contacts matching a search phrase.

        Args:
            search_phrase: Case-insensitive substring matched against name,
                surname or email. None or blank matches everything.
            page_size: Number of items per page.
            page_number: Page number (1-indexed).
            sort_by: One of SORTABLE_COLUMNS, or None for ID order.
            sort_direction: Direction applied to sort_by.

        Returns:
            Tuple of (contacts on the page, total matching count).
        """
        conditions = []
        if search_phrase is not None and search_phrase.strip():
            phrase = search_phrase.strip()
            conditions.append(
                or_(
                    Contact.name.icontains(phrase, autoescape=True),
                    Contact.surname.icontains(phrase, autoescape=True),
                    Contact.email.icontains(phrase, autoescape=True),
                )
            )

        count_stmt = select(func.count(Contact.id)).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar() or 0

        stmt = self._details_query().where(*conditions)
        if sort_by is not None:
            column = SORTABLE_COLUMNS[sort_by]
            stmt = stmt.order_by(
                column.desc() if sort_direction == SortDirection.DESCENDING else column.asc()
            )
        stmt = stmt.order_by(Contact.id.asc())

        stmt = stmt.offset(page_size * (page_number - 1)).limit(page_size)
        rows = (await self._session.execute(stmt)).all()

        return [ContactDetails(*row) for row in rows], total

    @staticmethod
    def _details_query() -> Select:
        return (
            select(Contact, Category.name, Subcategory.name)
            .outerjoin(Category, Category.id == Contact.category_id)
            .outerjoin(Subcategory, Subcategory.id == Contact.subcategory_id)
        )

    async def _flush(self, email: str) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            if "email" in str(e.orig).lower():
                raise DuplicateEmailError(email) from e
            raise
