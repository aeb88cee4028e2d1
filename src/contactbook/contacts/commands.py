"""
Write-side requests for contacts.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CreateContactCommand:
    name: str | None
    surname: str | None
    email: str | None
    password: str | None
    phone_number: str | None
    birth_date: date | None
    category_id: int | None
    subcategory_id: int | None = None
    custom_subcategory: str | None = None


@dataclass(frozen=True)
class UpdateContactCommand:
    id: int
    name: str | None
    surname: str | None
    email: str | None
    phone_number: str | None
    birth_date: date | None
    category_id: int | None
    password: str | None = None
    subcategory_id: int | None = None
    custom_subcategory: str | None = None


@dataclass(frozen=True)
class DeleteContactCommand:
    id: int
