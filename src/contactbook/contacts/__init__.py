"""
Contact management module.

Provides CRUD, search and paging for contacts through commands and
queries dispatched by the mediator.
"""

from contactbook.contacts.models import Contact

__all__ = ["Contact"]
