"""
Read-side requests for contacts.
"""

from dataclasses import dataclass

from contactbook.shared.pagination import SortDirection

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class GetContactByIdQuery:
    id: int


@dataclass(frozen=True)
class GetAllContactsQuery:
    search_phrase: str | None = None
    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = None
    sort_direction: SortDirection = SortDirection.ASCENDING
