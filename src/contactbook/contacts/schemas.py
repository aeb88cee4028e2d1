"""
Pydantic schemas for contact management.

Request bodies are deliberately permissive: field rules live in the
validators run by the mediator, so every problem is reported in one
response under the field's camelCase name.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContactBase(BaseModel):
    """Base contact schema with common fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(default=None, description="First name")
    surname: str | None = Field(default=None, description="Last name")
    email: str | None = Field(default=None, description="Unique email address")
    phone_number: str | None = Field(default=None, description="Phone number")
    birth_date: date | None = Field(default=None, description="Date of birth")
    category_id: int | None = Field(default=None, description="Category ID")
    subcategory_id: int | None = Field(
        default=None,
        description="Dictionary subcategory ID (business category)",
    )
    custom_subcategory: str | None = Field(
        default=None,
        description="Free-text subcategory (other category)",
    )


class ContactCreate(ContactBase):
    """Schema for creating a contact."""

    password: str | None = Field(default=None, description="Plain-text password")


class ContactUpdate(ContactBase):
    """Schema for updating a contact.

    A missing or blank password leaves the stored hash unchanged.
    """

    password: str | None = Field(
        default=None,
        description="New password (omit to leave unchanged)",
    )


class ContactResponse(BaseModel):
    """Schema for a single contact with resolved category names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    surname: str
    email: str
    phone_number: str
    birth_date: date
    category_id: int
    category_name: str | None
    subcategory_id: int | None
    subcategory_name: str | None
    custom_subcategory: str | None


class ContactSummaryResponse(BaseModel):
    """Schema for a contact row in list results."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    surname: str
    email: str
    phone_number: str
    category: str | None


class ContactCreatedResponse(BaseModel):
    """Schema returned after a contact is created."""

    id: int
