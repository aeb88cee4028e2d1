"""
SQLAlchemy models for contacts.
"""

from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from contactbook.shared.database import Base


class Contact(Base):
    """Contact entry with credentials and category classification.

    Category and subcategory are plain foreign keys; their names are read
    with explicit joins in the repository.
    """

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    surname: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(500), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    subcategory_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("subcategories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    custom_subcategory: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, email={self.email}, category_id={self.category_id})>"


# Email uniqueness is case-insensitive.
EMAIL_UNIQUE_INDEX = "uq_contacts_email_lower"

Index(EMAIL_UNIQUE_INDEX, func.lower(Contact.email), unique=True)
